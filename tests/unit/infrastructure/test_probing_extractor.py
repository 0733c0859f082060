"""Tests for ProbingExtractor."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import respx

from multisite.domain.entities import MediaLink
from multisite.infrastructure.extractors.probe import ProbingExtractor


class _FakeRecognizer:
    def __init__(self, link: MediaLink | None) -> None:
        self.resolve = AsyncMock(return_value=link)

    @property
    def name(self) -> str:
        return "mixdrop"

    @property
    def supported_domains(self) -> frozenset[str]:
        return frozenset({"mixdrop", "mixdrp"})


_LINK = MediaLink(source="mixdrop", name="Mixdrop", url="https://cdn.example/v.mp4")


class TestRegistration:
    def test_supported_hosters(self) -> None:
        extractor = ProbingExtractor(httpx.AsyncClient(), [_FakeRecognizer(_LINK)])
        assert extractor.supported_hosters == ["mixdrop"]


class TestTryExtract:
    @pytest.mark.asyncio()
    async def test_recognizer_by_domain(self) -> None:
        recognizer = _FakeRecognizer(_LINK)
        extractor = ProbingExtractor(httpx.AsyncClient(), [recognizer])
        emitted: list[MediaLink] = []

        ok = await extractor.try_extract(
            "https://mixdrop.co/e/abc", "https://site.example", MagicMock(), emitted.append
        )

        assert ok
        assert emitted == [_LINK]
        recognizer.resolve.assert_awaited_once_with(
            "https://mixdrop.co/e/abc", "https://site.example"
        )

    @pytest.mark.asyncio()
    async def test_recognizer_returns_nothing(self) -> None:
        extractor = ProbingExtractor(httpx.AsyncClient(), [_FakeRecognizer(None)])
        emitted: list[MediaLink] = []

        ok = await extractor.try_extract(
            "https://mixdrp.to/e/abc", "", MagicMock(), emitted.append
        )

        assert not ok
        assert emitted == []

    @respx.mock
    @pytest.mark.asyncio()
    async def test_redirect_to_known_hoster(self) -> None:
        respx.head("https://short.example/x").respond(
            302, headers={"Location": "https://mixdrop.co/e/abc"}
        )
        respx.head("https://mixdrop.co/e/abc").respond(200)
        recognizer = _FakeRecognizer(_LINK)

        async with httpx.AsyncClient() as client:
            extractor = ProbingExtractor(client, [recognizer])
            ok = await extractor.try_extract(
                "https://short.example/x", "", MagicMock(), MagicMock()
            )

        assert ok
        assert recognizer.resolve.await_args.args[0] == "https://mixdrop.co/e/abc"

    @respx.mock
    @pytest.mark.asyncio()
    async def test_direct_video(self) -> None:
        respx.head("https://cdn.example/v.mp4").respond(
            200, headers={"content-type": "video/mp4"}
        )
        emitted: list[MediaLink] = []

        async with httpx.AsyncClient() as client:
            ok = await ProbingExtractor(client).try_extract(
                "https://cdn.example/v.mp4", "https://ref.example", MagicMock(), emitted.append
            )

        assert ok
        assert emitted[0].url == "https://cdn.example/v.mp4"
        assert emitted[0].referer == "https://ref.example"
        assert not emitted[0].is_hls

    @respx.mock
    @pytest.mark.asyncio()
    async def test_hls_playlist(self) -> None:
        respx.head("https://cdn.example/master.m3u8").respond(
            200, headers={"content-type": "application/vnd.apple.mpegurl"}
        )
        emitted: list[MediaLink] = []

        async with httpx.AsyncClient() as client:
            ok = await ProbingExtractor(client).try_extract(
                "https://cdn.example/master.m3u8", "", MagicMock(), emitted.append
            )

        assert ok
        assert emitted[0].is_hls

    @respx.mock
    @pytest.mark.asyncio()
    async def test_html_page_not_playable(self) -> None:
        respx.head("https://unknown.example/page").respond(
            200, headers={"content-type": "text/html"}
        )

        async with httpx.AsyncClient() as client:
            ok = await ProbingExtractor(client).try_extract(
                "https://unknown.example/page", "", MagicMock(), MagicMock()
            )

        assert not ok

    @respx.mock
    @pytest.mark.asyncio()
    async def test_unreachable(self) -> None:
        respx.head("https://down.example/x").mock(side_effect=httpx.ConnectError("down"))

        async with httpx.AsyncClient() as client:
            ok = await ProbingExtractor(client).try_extract(
                "https://down.example/x", "", MagicMock(), MagicMock()
            )

        assert not ok

    @respx.mock
    @pytest.mark.asyncio()
    async def test_single_head_per_link(self) -> None:
        route = respx.head("https://cdn.example/v.mp4").respond(
            200, headers={"content-type": "video/mp4"}
        )

        async with httpx.AsyncClient() as client:
            ok = await ProbingExtractor(client).try_extract(
                "https://cdn.example/v.mp4", "", MagicMock(), MagicMock()
            )

        assert ok
        assert route.call_count == 1

    @respx.mock
    @pytest.mark.asyncio()
    async def test_redirect_to_direct_video_uses_final_url(self) -> None:
        short = respx.head("https://short.example/y").respond(
            302, headers={"Location": "https://cdn.example/final.mp4"}
        )
        final = respx.head("https://cdn.example/final.mp4").respond(
            200, headers={"content-type": "video/mp4"}
        )
        emitted: list[MediaLink] = []

        async with httpx.AsyncClient() as client:
            ok = await ProbingExtractor(client, [_FakeRecognizer(_LINK)]).try_extract(
                "https://short.example/y", "", MagicMock(), emitted.append
            )

        assert ok
        assert emitted[0].url == "https://cdn.example/final.mp4"
        assert short.call_count == 1
        assert final.call_count == 1
