"""Catalog use case.

Site registry -> per-site providers -> browse / search / load / resolve.
Cross-site search fans out under a semaphore with a per-site timeout;
a slow or failing site contributes nothing instead of failing the call.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

import structlog

from multisite.domain.entities import (
    DetailRecord,
    HomePage,
    ListingRecord,
    MainPageSection,
    MediaLink,
    SiteEndpoint,
    SubtitleFile,
)
from multisite.domain.exceptions import SiteNotFoundError, SiteRegistryUnavailableError
from multisite.domain.ports import MediaLinkSink, SubtitleSink

log = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Protocols: what this use case needs from its collaborators.
# ---------------------------------------------------------------------------


class _EndpointRegistry(Protocol):
    """Yields the current site endpoints (cached, refreshed on demand)."""

    async def get_or_refresh(self) -> Sequence[SiteEndpoint]: ...


class _SiteProvider(Protocol):
    """One scraped site."""

    @property
    def name(self) -> str: ...

    @property
    def sections(self) -> list[MainPageSection]: ...

    def section(self, name: str) -> MainPageSection | None: ...

    async def browse(self, section: MainPageSection, page: int = 1) -> HomePage: ...

    async def search(self, query: str) -> list[ListingRecord]: ...

    async def load(self, url: str) -> DetailRecord | None: ...

    async def load_links(
        self,
        payload: str | None,
        on_subtitle: SubtitleSink,
        on_media_link: MediaLinkSink,
    ) -> bool: ...


ProviderFactory = Callable[[SiteEndpoint], _SiteProvider]


@dataclass
class ResolvedLinks:
    """Everything emitted while resolving one playback payload."""

    found: bool = False
    links: list[MediaLink] = field(default_factory=list)
    subtitles: list[SubtitleFile] = field(default_factory=list)


class CatalogUseCase:
    """Entry point for every catalog operation across registered sites."""

    def __init__(
        self,
        registry: _EndpointRegistry,
        provider_factory: ProviderFactory,
        *,
        max_concurrent_sites: int = 3,
        site_timeout: float = 30.0,
    ) -> None:
        self._registry = registry
        self._provider_factory = provider_factory
        self._max_concurrent = max_concurrent_sites
        self._site_timeout = site_timeout

        self._endpoints: tuple[SiteEndpoint, ...] = ()
        self._providers: dict[str, _SiteProvider] = {}

    # ------------------------------------------------------------------
    # Providers
    # ------------------------------------------------------------------

    async def _current_providers(self) -> dict[str, _SiteProvider]:
        endpoints = tuple(await self._registry.get_or_refresh())
        if not endpoints:
            raise SiteRegistryUnavailableError("no sites registered")

        if endpoints != self._endpoints:
            providers: dict[str, _SiteProvider] = {}
            for endpoint in endpoints:
                key = endpoint.name.lower()
                if key in providers:
                    log.warning(
                        "site_name_collision", site=endpoint.name, url=endpoint.base_url
                    )
                    continue
                providers[key] = self._provider_factory(endpoint)
            self._endpoints = endpoints
            self._providers = providers
            log.info("site_providers_rebuilt", sites=len(providers))
        return self._providers

    async def _provider(self, site: str) -> _SiteProvider:
        providers = await self._current_providers()
        provider = providers.get(site.lower())
        if provider is None:
            raise SiteNotFoundError(site)
        return provider

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def sites(self) -> list[SiteEndpoint]:
        await self._current_providers()
        return list(self._endpoints)

    async def sections(self, site: str) -> list[MainPageSection]:
        provider = await self._provider(site)
        return provider.sections

    async def browse(self, site: str, section: str | None = None, page: int = 1) -> HomePage:
        """Browse one section of *site*; an unknown section falls back to the first."""
        provider = await self._provider(site)
        target = provider.section(section) if section else None
        if target is None:
            if not provider.sections:
                return HomePage(name=section or "")
            if section:
                log.debug("browse_unknown_section", site=site, section=section)
            target = provider.sections[0]
        return await provider.browse(target, max(page, 1))

    async def search(self, query: str, site: str | None = None) -> list[ListingRecord]:
        """Search one site or fan out across every registered site."""
        if site is not None:
            provider = await self._provider(site)
            return await self._search_one(provider, query)

        providers = list((await self._current_providers()).values())
        semaphore = asyncio.Semaphore(self._max_concurrent)

        async def _bounded(provider: _SiteProvider) -> list[ListingRecord]:
            async with semaphore:
                return await self._search_one(provider, query)

        per_site = await asyncio.gather(*(_bounded(p) for p in providers))

        merged: dict[str, ListingRecord] = {}
        for results in per_site:
            for record in results:
                merged.setdefault(record.detail_url, record)
        log.info(
            "catalog_search_complete",
            query=query,
            sites=len(providers),
            results=len(merged),
        )
        return list(merged.values())

    async def _search_one(
        self, provider: _SiteProvider, query: str
    ) -> list[ListingRecord]:
        try:
            return await asyncio.wait_for(
                provider.search(query), timeout=self._site_timeout
            )
        except TimeoutError:
            log.warning(
                "site_search_timeout", site=provider.name, timeout=self._site_timeout
            )
        except Exception:
            log.warning("site_search_failed", site=provider.name, exc_info=True)
        return []

    async def load(self, site: str, url: str) -> DetailRecord | None:
        provider = await self._provider(site)
        return await provider.load(url)

    async def resolve(self, site: str, payload: str | None) -> ResolvedLinks:
        """Resolve a playback payload, collecting every emitted link."""
        provider = await self._provider(site)
        resolved = ResolvedLinks()
        resolved.found = await provider.load_links(
            payload,
            resolved.subtitles.append,
            resolved.links.append,
        )
        log.info(
            "payload_resolved",
            site=provider.name,
            found=resolved.found,
            links=len(resolved.links),
            subtitles=len(resolved.subtitles),
        )
        return resolved
