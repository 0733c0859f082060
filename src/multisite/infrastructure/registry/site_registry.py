"""Site registry: the remote list of sites to scrape, cached with a TTL.

The list is a plain-text resource with one site URL per line.  It is
cached for ``ttl_seconds`` and refreshed on demand:

- concurrent refreshes collapse into a single in-flight fetch
- a failed refresh keeps serving the previous list
- only "no previous list and refresh failed" is an error
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable, Iterable

import httpx
import structlog

from multisite.domain.entities import SiteEndpoint
from multisite.domain.exceptions import SiteRegistryUnavailableError
from multisite.domain.ports import SiteSourcePort
from multisite.infrastructure.common.constants import (
    DEFAULT_PAGE_TIMEOUT,
    is_absolute_http,
)
from multisite.infrastructure.common.urls import (
    bare_host,
    normalize_base_url,
    site_name_from_url,
)

log = structlog.get_logger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60
DEFAULT_RETRY_SECONDS = 5 * 60

# Torrent indexes share the list but are not streaming sites.
DEFAULT_DENYLIST: tuple[str, ...] = ("1337x.to", "ilcorsaronero")


def parse_site_list(text: str, denylist: Iterable[str] = DEFAULT_DENYLIST) -> list[str]:
    """Parse the raw list: skip blanks, comments, non-http and denied lines.

    URLs are normalised (lowercase host, no trailing ``/``) before
    de-duplication, so ``https://a.example`` and ``https://A.example/``
    count once.
    """
    denied = tuple(denylist)
    sites: dict[str, None] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if not is_absolute_http(line):
            continue
        if any(token in line for token in denied):
            log.debug("site_denied", url=line)
            continue
        sites.setdefault(normalize_base_url(line), None)
    return list(sites)


def build_endpoints(urls: Iterable[str], language: str = "it") -> list[SiteEndpoint]:
    """Build endpoints with case-insensitively unique names.

    A name already taken falls back to the bare host (``cb01.tips``),
    then to a numbered suffix.
    """
    endpoints: list[SiteEndpoint] = []
    taken: set[str] = set()
    for url in urls:
        name = site_name_from_url(url)
        if name.lower() in taken:
            name = bare_host(url) or name
        base, n = name, 2
        while name.lower() in taken:
            name = f"{base}-{n}"
            n += 1
        taken.add(name.lower())
        endpoints.append(
            SiteEndpoint(name=name, base_url=url.rstrip("/"), language=language)
        )
    return endpoints


class HttpSiteSource:
    """Fetches the site list over HTTP."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        url: str,
        timeout: float = DEFAULT_PAGE_TIMEOUT,
    ) -> None:
        self._http = http_client
        self._url = url
        self._timeout = timeout

    async def fetch_site_list(self) -> str:
        resp = await self._http.get(
            self._url, follow_redirects=True, timeout=self._timeout
        )
        resp.raise_for_status()
        return resp.text


class SiteListCache:
    """TTL cache of ``SiteEndpoint``s with single-flight refresh.

    After a failed refresh the stale list is served without touching the
    source for ``retry_seconds``; only then is another refresh attempted.

    *clock* returns seconds; inject a fake for tests.
    """

    def __init__(
        self,
        source: SiteSourcePort,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        retry_seconds: float = DEFAULT_RETRY_SECONDS,
        denylist: Iterable[str] = DEFAULT_DENYLIST,
        language: str = "it",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._source = source
        self._ttl = ttl_seconds
        self._retry = retry_seconds
        self._denylist = tuple(denylist)
        self._language = language
        self._clock = clock

        self._endpoints: tuple[SiteEndpoint, ...] = ()
        self._fetched_at: float | None = None
        self._retry_at: float | None = None
        self._lock = asyncio.Lock()
        self._inflight: asyncio.Task[tuple[SiteEndpoint, ...]] | None = None

    @property
    def endpoints(self) -> tuple[SiteEndpoint, ...]:
        """Currently cached endpoints (may be stale or empty)."""
        return self._endpoints

    def is_fresh(self, now: float | None = None) -> bool:
        if self._fetched_at is None or not self._endpoints:
            return False
        now = self._clock() if now is None else now
        return (now - self._fetched_at) < self._ttl

    def _backing_off(self, now: float) -> bool:
        return (
            bool(self._endpoints)
            and self._retry_at is not None
            and now < self._retry_at
        )

    async def get_or_refresh(self, now: float | None = None) -> tuple[SiteEndpoint, ...]:
        """Return cached endpoints, refreshing them when stale.

        Raises ``SiteRegistryUnavailableError`` only when the refresh
        fails and nothing was cached before.
        """
        now = self._clock() if now is None else now
        if self.is_fresh(now) or self._backing_off(now):
            return self._endpoints

        async with self._lock:
            if self.is_fresh(now) or self._backing_off(now):
                return self._endpoints
            if self._inflight is None or self._inflight.done():
                self._inflight = asyncio.create_task(self._refresh(now))
            task = self._inflight

        return await asyncio.shield(task)

    async def _refresh(self, now: float) -> tuple[SiteEndpoint, ...]:
        try:
            text = await self._source.fetch_site_list()
        except httpx.HTTPError as exc:
            return self._keep_previous(str(exc), now)

        urls = parse_site_list(text, self._denylist)
        if not urls:
            return self._keep_previous("site list is empty", now)

        self._endpoints = tuple(build_endpoints(urls, self._language))
        self._fetched_at = now
        self._retry_at = None
        log.info("site_registry_refreshed", sites=len(self._endpoints))
        return self._endpoints

    def _keep_previous(self, reason: str, now: float) -> tuple[SiteEndpoint, ...]:
        if self._endpoints:
            self._retry_at = now + self._retry
            log.warning(
                "site_registry_refresh_failed_serving_stale",
                reason=reason,
                sites=len(self._endpoints),
                retry_in=self._retry,
            )
            return self._endpoints
        log.error("site_registry_unavailable", reason=reason)
        raise SiteRegistryUnavailableError(f"site list unavailable: {reason}")
