"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from multisite.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from multisite.application.use_cases.catalog import CatalogUseCase
    from multisite.infrastructure.registry import SiteListCache
    from multisite.infrastructure.shortlinks import LinkDispatcher


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    http_client: httpx.AsyncClient
    site_registry: SiteListCache
    link_dispatcher: LinkDispatcher

    # Application Services
    catalog_uc: CatalogUseCase
