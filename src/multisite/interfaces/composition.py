"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from multisite.application.use_cases.catalog import CatalogUseCase
from multisite.domain.entities import SiteEndpoint
from multisite.infrastructure.common.constants import DEFAULT_USER_AGENT
from multisite.infrastructure.common.http import HttpFetcher
from multisite.infrastructure.config.schema import AppConfig
from multisite.infrastructure.extractors import ProbingExtractor
from multisite.infrastructure.providers import SiteProvider
from multisite.infrastructure.registry import HttpSiteSource, SiteListCache
from multisite.infrastructure.scraping import ProfileRegistry, default_profile_registry
from multisite.infrastructure.shortlinks import (
    ClickaResolver,
    LinkDispatcher,
    UprotResolver,
)
from multisite.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def _build_dispatcher(http_client: httpx.AsyncClient, config: AppConfig) -> LinkDispatcher:
    timeout = config.resolvers.timeout_seconds
    extractor = ProbingExtractor(http_client=http_client, timeout=timeout)
    return LinkDispatcher(
        resolvers=[
            UprotResolver(
                http_client,
                max_attempts=config.resolvers.max_redirect_attempts,
                timeout=timeout,
            ),
            ClickaResolver(http_client, timeout=timeout),
        ],
        extractor=extractor,
    )


def _provider_factory(
    fetcher: HttpFetcher,
    profiles: ProfileRegistry,
    dispatcher: LinkDispatcher,
):
    def _build(endpoint: SiteEndpoint) -> SiteProvider:
        return SiteProvider(
            endpoint=endpoint,
            profile=profiles.get(endpoint.name),
            fetcher=fetcher,
            dispatcher=dispatcher,
        )

    return _build


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. HTTP client (shared by everything below)
        2. Site registry cache
        3. Link dispatcher (short-link resolvers + generic extractor)
        4. Catalog use case (per-site providers built on demand)
    """
    state = cast(AppState, app.state)
    config = state.config

    # 1) HTTP client
    user_agent = config.http_user_agent or DEFAULT_USER_AGENT
    state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        headers={"User-Agent": user_agent},
        follow_redirects=True,
    )
    fetcher = HttpFetcher(
        state.http_client,
        timeout=config.http_timeout_seconds,
        user_agent=user_agent,
    )
    log.info("http_client_initialized", timeout=config.http_timeout_seconds)

    # 2) Site registry
    state.site_registry = SiteListCache(
        HttpSiteSource(
            state.http_client,
            config.registry.source_url,
            timeout=config.http_timeout_seconds,
        ),
        ttl_seconds=config.registry.ttl_seconds,
        retry_seconds=config.registry.retry_seconds,
        denylist=config.registry.denylist,
        language=config.registry.language,
    )
    log.info(
        "site_registry_initialized",
        source=config.registry.source_url,
        ttl_hours=config.registry.ttl_hours,
    )

    # 3) Link dispatcher
    state.link_dispatcher = _build_dispatcher(state.http_client, config)
    log.info(
        "link_dispatcher_initialized",
        resolvers=state.link_dispatcher.supported_resolvers,
    )

    # 4) Catalog use case
    profiles = default_profile_registry().with_threshold(
        config.scraping.min_plausible_items
    )
    state.catalog_uc = CatalogUseCase(
        registry=state.site_registry,
        provider_factory=_provider_factory(fetcher, profiles, state.link_dispatcher),
        max_concurrent_sites=config.scraping.max_concurrent_sites,
        site_timeout=config.scraping.site_timeout_seconds,
    )

    log.info("app_startup_complete")

    try:
        yield
    finally:
        await state.http_client.aclose()
        log.info("http_client_closed")

        log.info("app_shutdown_complete")
