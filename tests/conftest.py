"""Shared test fixtures for the multisite test suite."""

from __future__ import annotations

import pytest

from multisite.domain.entities import ListingRecord, SearchQuality, SiteEndpoint
from multisite.infrastructure.config import AppConfig

# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def site_endpoint() -> SiteEndpoint:
    """A registered site with the default language tag."""
    return SiteEndpoint(name="Alpha", base_url="https://alpha.example")


@pytest.fixture()
def listing_record(site_endpoint: SiteEndpoint) -> ListingRecord:
    """Minimal valid ListingRecord from the ``site_endpoint`` site."""
    return ListingRecord(
        title="Alpha",
        raw_title="Alpha [HD] (2020)",
        detail_url=f"{site_endpoint.base_url}/film/alpha/",
        quality=SearchQuality.HD,
        site=site_endpoint.name,
    )


# ---------------------------------------------------------------------------
# Configuration fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def app_config() -> AppConfig:
    """Validated test-environment configuration (no files, no env)."""
    return AppConfig(environment="test")
