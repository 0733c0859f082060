"""Dispatch candidate links to short-link resolvers or the generic extractor."""

from __future__ import annotations

import asyncio
import json
from typing import Iterable, Sequence

import structlog

from multisite.domain.entities import FailureReason, ResolutionResult
from multisite.domain.ports import (
    GenericExtractorPort,
    MediaLinkSink,
    ShortLinkResolverPort,
    SubtitleSink,
)
from multisite.infrastructure.common.constants import is_absolute_http
from multisite.infrastructure.common.urls import host_matches

log = structlog.get_logger(__name__)

# Payload values meaning "no links available"
EMPTY_PAYLOADS = frozenset({"null", "[]", ""})


def parse_link_payload(data: str | None) -> list[str] | None:
    """Decode a playback payload into candidate links.

    Returns ``None`` for the empty sentinels (without parsing) and for
    malformed payloads.
    """
    if data is None or data.strip() in EMPTY_PAYLOADS:
        return None
    try:
        decoded = json.loads(data)
    except ValueError:
        log.warning("link_payload_invalid_json", payload=data[:200])
        return None
    if not isinstance(decoded, list):
        log.warning("link_payload_not_a_list", payload=data[:200])
        return None
    return [item for item in decoded if isinstance(item, str) and item]


def encode_link_payload(links: Iterable[str]) -> str:
    items = list(links)
    return json.dumps(items) if items else "null"


class LinkDispatcher:
    """Routes each candidate link to the right resolver family.

    Resolvers are tried in registration order by host token; links no
    resolver claims go straight to the generic extractor.  A resolver's
    successful result is handed to the generic extractor as well, since
    resolvers only escape their own redirect wall.
    """

    def __init__(
        self,
        resolvers: Sequence[ShortLinkResolverPort] | None = None,
        extractor: GenericExtractorPort | None = None,
    ) -> None:
        self._resolvers: dict[str, ShortLinkResolverPort] = {}
        self._extractor = extractor
        for resolver in resolvers or []:
            self.register(resolver)

    def register(self, resolver: ShortLinkResolverPort) -> None:
        self._resolvers[resolver.name] = resolver
        log.debug(
            "shortlink_resolver_registered",
            resolver=resolver.name,
            domains=sorted(resolver.supported_domains),
        )

    @property
    def supported_resolvers(self) -> list[str]:
        return list(self._resolvers)

    def route(self, url: str) -> ShortLinkResolverPort | None:
        """Return the first resolver whose domain token matches the URL host."""
        for resolver in self._resolvers.values():
            if host_matches(url, resolver.supported_domains):
                return resolver
        return None

    async def _resolve_with(
        self, resolver: ShortLinkResolverPort, url: str, referer: str
    ) -> ResolutionResult:
        try:
            return await resolver.resolve(url, referer)
        except Exception as exc:
            log.exception("shortlink_resolver_error", resolver=resolver.name, url=url)
            return ResolutionResult.fail(FailureReason.PARSE_FAILURE, 0, str(exc))

    async def _extract(
        self,
        url: str,
        referer: str,
        on_subtitle: SubtitleSink,
        on_media_link: MediaLinkSink,
    ) -> bool:
        if self._extractor is None:
            return False
        try:
            return await self._extractor.try_extract(
                url, referer, on_subtitle, on_media_link
            )
        except Exception:
            log.exception("generic_extractor_error", url=url)
            return False

    async def dispatch(
        self,
        raw_link: str,
        referer: str,
        on_subtitle: SubtitleSink,
        on_media_link: MediaLinkSink,
    ) -> bool:
        """Resolve one candidate link. Returns True iff a media link was emitted."""
        if not is_absolute_http(raw_link):
            log.debug("dispatch_skipped_non_http", link=raw_link)
            return False

        target = raw_link
        resolver = self.route(raw_link)
        if resolver is not None:
            result = await self._resolve_with(resolver, raw_link, referer)
            if not result.ok:
                failure = result.failure
                log.warning(
                    "shortlink_resolve_failed",
                    resolver=resolver.name,
                    link=raw_link,
                    reason=failure.reason.value if failure else None,
                    attempts=failure.attempts_made if failure else 0,
                )
                return False
            target = result.final_url or raw_link
            log.info(
                "shortlink_resolved",
                resolver=resolver.name,
                link=raw_link,
                final_url=target,
            )

        extracted = await self._extract(target, referer, on_subtitle, on_media_link)
        if not extracted:
            log.info(
                "dispatch_no_route",
                link=raw_link,
                target=target,
                reason=FailureReason.NO_ROUTE.value,
            )
        return extracted

    async def dispatch_all(
        self,
        links: Sequence[str],
        referer: str,
        on_subtitle: SubtitleSink,
        on_media_link: MediaLinkSink,
    ) -> bool:
        """Process every candidate independently; True if any produced a link."""
        if not links:
            return False
        outcomes = await asyncio.gather(
            *(
                self.dispatch(link, referer, on_subtitle, on_media_link)
                for link in links
            )
        )
        extracted = sum(1 for ok in outcomes if ok)
        log.info("dispatch_summary", extracted=extracted, candidates=len(links))
        return extracted > 0

    async def load_links(
        self,
        payload: str | None,
        referer: str,
        on_subtitle: SubtitleSink,
        on_media_link: MediaLinkSink,
    ) -> bool:
        """Resolve every link of a playback payload."""
        links = parse_link_payload(payload)
        if not links:
            log.info("no_links_available", referer=referer)
            return False
        return await self.dispatch_all(links, referer, on_subtitle, on_media_link)
