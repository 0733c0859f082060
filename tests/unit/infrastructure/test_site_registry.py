"""Tests for the site list parser and its TTL cache."""

from __future__ import annotations

import asyncio

import httpx
import pytest
import respx

from multisite.domain.exceptions import SiteRegistryUnavailableError
from multisite.infrastructure.registry.site_registry import (
    DEFAULT_TTL_SECONDS,
    HttpSiteSource,
    SiteListCache,
    build_endpoints,
    parse_site_list,
)

_RAW_LIST = """
# streaming sites

https://alpha.example
ftp://mirror.example
https://1337x.to
https://beta.example/
https://alpha.example
not a url
"""


class _FakeSource:
    """Site source returning queued results (text or exception)."""

    def __init__(self, *results: str | Exception) -> None:
        self._results = list(results)
        self.calls = 0
        self.gate: asyncio.Event | None = None

    async def fetch_site_list(self) -> str:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        result = self._results[min(self.calls, len(self._results)) - 1]
        if isinstance(result, Exception):
            raise result
        return result


class _Clock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestParseSiteList:
    def test_filters_and_dedups(self) -> None:
        assert parse_site_list(_RAW_LIST) == [
            "https://alpha.example",
            "https://beta.example",
        ]

    def test_custom_denylist(self) -> None:
        assert parse_site_list(_RAW_LIST, denylist=("beta",)) == [
            "https://alpha.example",
            "https://1337x.to",
        ]

    def test_empty(self) -> None:
        assert parse_site_list("\n# nothing\n") == []

    def test_dedups_on_normalized_url(self) -> None:
        text = "https://cb01.uno\nhttps://cb01.uno/\nhttps://CB01.uno\nhttps://cb01.tips\n"
        assert parse_site_list(text) == ["https://cb01.uno", "https://cb01.tips"]


class TestBuildEndpoints:
    def test_names_and_base_urls(self) -> None:
        endpoints = build_endpoints(["https://www.alpha.example/", "https://cb01.uno"])
        assert [e.name for e in endpoints] == ["Alpha", "Cb01"]
        assert endpoints[0].base_url == "https://www.alpha.example"
        assert endpoints[0].language == "it"

    def test_colliding_names_fall_back_to_host(self) -> None:
        endpoints = build_endpoints(
            ["https://cb01.uno", "https://www.cb01.tips", "https://cb01.tips/alt"]
        )
        assert [e.name for e in endpoints] == ["Cb01", "cb01.tips", "cb01.tips-2"]
        assert len({e.name.lower() for e in endpoints}) == 3


class TestSiteListCache:
    @pytest.mark.asyncio()
    async def test_fetches_once_within_ttl(self) -> None:
        source = _FakeSource("https://alpha.example\n")
        clock = _Clock()
        cache = SiteListCache(source, clock=clock)

        first = await cache.get_or_refresh()
        clock.now += DEFAULT_TTL_SECONDS - 1
        second = await cache.get_or_refresh()

        assert first == second
        assert [e.name for e in first] == ["Alpha"]
        assert source.calls == 1

    @pytest.mark.asyncio()
    async def test_refreshes_after_ttl(self) -> None:
        source = _FakeSource("https://alpha.example\n", "https://beta.example\n")
        clock = _Clock()
        cache = SiteListCache(source, ttl_seconds=60, clock=clock)

        await cache.get_or_refresh()
        clock.now += 61
        endpoints = await cache.get_or_refresh()

        assert [e.name for e in endpoints] == ["Beta"]
        assert source.calls == 2

    @pytest.mark.asyncio()
    async def test_explicit_now(self) -> None:
        source = _FakeSource("https://alpha.example\n", "https://beta.example\n")
        cache = SiteListCache(source, ttl_seconds=60)

        await cache.get_or_refresh(now=0)
        assert cache.is_fresh(now=59)
        assert not cache.is_fresh(now=60)

    @pytest.mark.asyncio()
    async def test_failed_refresh_serves_stale(self) -> None:
        source = _FakeSource("https://alpha.example\n", httpx.ConnectError("down"))
        clock = _Clock()
        cache = SiteListCache(source, ttl_seconds=60, clock=clock)

        await cache.get_or_refresh()
        clock.now += 120
        endpoints = await cache.get_or_refresh()

        assert [e.name for e in endpoints] == ["Alpha"]
        assert source.calls == 2

    @pytest.mark.asyncio()
    async def test_failed_refresh_backs_off(self) -> None:
        source = _FakeSource("https://alpha.example\n", httpx.ConnectError("down"))
        clock = _Clock()
        cache = SiteListCache(source, ttl_seconds=60, retry_seconds=30, clock=clock)

        await cache.get_or_refresh()
        clock.now += 120
        for _ in range(3):
            assert [e.name for e in await cache.get_or_refresh()] == ["Alpha"]
        assert source.calls == 2

        clock.now += 31
        assert [e.name for e in await cache.get_or_refresh()] == ["Alpha"]
        assert source.calls == 3

    @pytest.mark.asyncio()
    async def test_recovers_after_back_off(self) -> None:
        source = _FakeSource(
            "https://alpha.example\n",
            httpx.ConnectError("down"),
            "https://beta.example\n",
        )
        clock = _Clock()
        cache = SiteListCache(source, ttl_seconds=60, retry_seconds=30, clock=clock)

        await cache.get_or_refresh()
        clock.now += 120
        await cache.get_or_refresh()
        clock.now += 31
        assert [e.name for e in await cache.get_or_refresh()] == ["Beta"]

        # fresh again: no further fetches
        await cache.get_or_refresh()
        assert source.calls == 3

    @pytest.mark.asyncio()
    async def test_no_back_off_without_previous_list(self) -> None:
        source = _FakeSource(httpx.ConnectError("down"))
        cache = SiteListCache(source, clock=_Clock())

        for _ in range(2):
            with pytest.raises(SiteRegistryUnavailableError):
                await cache.get_or_refresh()
        assert source.calls == 2

    @pytest.mark.asyncio()
    async def test_empty_refresh_serves_stale(self) -> None:
        source = _FakeSource("https://alpha.example\n", "# empty\n")
        clock = _Clock()
        cache = SiteListCache(source, ttl_seconds=60, clock=clock)

        await cache.get_or_refresh()
        clock.now += 120
        assert [e.name for e in await cache.get_or_refresh()] == ["Alpha"]

    @pytest.mark.asyncio()
    async def test_unavailable_without_previous_list(self) -> None:
        cache = SiteListCache(_FakeSource(httpx.ConnectError("down")))
        with pytest.raises(SiteRegistryUnavailableError):
            await cache.get_or_refresh()

    @pytest.mark.asyncio()
    async def test_empty_without_previous_list(self) -> None:
        cache = SiteListCache(_FakeSource("\n"))
        with pytest.raises(SiteRegistryUnavailableError):
            await cache.get_or_refresh()

    @pytest.mark.asyncio()
    async def test_concurrent_callers_share_one_fetch(self) -> None:
        source = _FakeSource("https://alpha.example\n")
        source.gate = asyncio.Event()
        cache = SiteListCache(source, clock=_Clock())

        tasks = [asyncio.create_task(cache.get_or_refresh()) for _ in range(5)]
        await asyncio.sleep(0)
        source.gate.set()
        results = await asyncio.gather(*tasks)

        assert source.calls == 1
        assert all(result == results[0] for result in results)

    @pytest.mark.asyncio()
    async def test_denylist_applied(self) -> None:
        source = _FakeSource("https://alpha.example\nhttps://ilcorsaronero.example\n")
        cache = SiteListCache(source)
        assert [e.name for e in await cache.get_or_refresh()] == ["Alpha"]


class TestHttpSiteSource:
    @respx.mock
    @pytest.mark.asyncio()
    async def test_fetches_text(self) -> None:
        respx.get("https://paste.example/raw/list").respond(
            200, text="https://alpha.example\n"
        )

        async with httpx.AsyncClient() as client:
            text = await HttpSiteSource(client, "https://paste.example/raw/list").fetch_site_list()

        assert text == "https://alpha.example\n"

    @respx.mock
    @pytest.mark.asyncio()
    async def test_http_error_raises(self) -> None:
        respx.get("https://paste.example/raw/list").respond(503)

        async with httpx.AsyncClient() as client:
            with pytest.raises(httpx.HTTPStatusError):
                await HttpSiteSource(client, "https://paste.example/raw/list").fetch_site_list()
