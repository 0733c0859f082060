"""Per-site provider built from a ``SiteEndpoint`` and a ``SiteProfile``.

One instance serves browse, search, load and link resolution for one
site.  Every network step goes through ``HttpFetcher.safe_fetch`` so a
failing site degrades to empty pages instead of errors.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from urllib.parse import quote_plus, urlparse, urlunparse

import structlog
from bs4 import BeautifulSoup

from multisite.domain.entities import (
    DetailRecord,
    HomePage,
    ListingRecord,
    MainPageSection,
    MediaKind,
    SiteEndpoint,
)
from multisite.domain.ports import MediaLinkSink, SubtitleSink
from multisite.infrastructure.common.http import HttpFetcher
from multisite.infrastructure.scraping.detail_parser import parse_detail
from multisite.infrastructure.scraping.profiles import ListingStrategy, SiteProfile
from multisite.infrastructure.scraping.selector_engine import (
    extract_listing,
    extract_script_listing,
    find_items,
    has_next_page,
)
from multisite.infrastructure.scraping.title_normalizer import normalize_title
from multisite.infrastructure.shortlinks.dispatcher import LinkDispatcher


class SiteProvider:
    """Uniform query interface over one scraped site."""

    def __init__(
        self,
        endpoint: SiteEndpoint,
        profile: SiteProfile,
        fetcher: HttpFetcher,
        dispatcher: LinkDispatcher,
    ) -> None:
        self.endpoint = endpoint
        self.profile = profile
        self._fetcher = fetcher
        self._dispatcher = dispatcher
        self._log = structlog.get_logger(__name__).bind(site=endpoint.name)
        # Base URL after server-side redirects (sites hop between mirrors).
        self._resolved_base: str = ""

    @property
    def name(self) -> str:
        return self.endpoint.name

    @property
    def base_url(self) -> str:
        return self._resolved_base or self.endpoint.base_url

    # ------------------------------------------------------------------
    # Sections / URLs
    # ------------------------------------------------------------------

    @property
    def sections(self) -> list[MainPageSection]:
        base = self.endpoint.base_url
        return [
            MainPageSection(name=name, url=f"{base}{path}")
            for name, path in self.profile.section_paths
        ]

    def section(self, name: str) -> MainPageSection | None:
        for section in self.sections:
            if section.name.lower() == name.lower():
                return section
        return None

    def page_url(self, section_url: str, page: int) -> str:
        if page <= 1:
            return section_url
        return section_url.rstrip("/") + self.profile.page_path.format(page=page)

    def search_urls(self, query: str) -> list[str]:
        encoded = quote_plus(query.strip())
        return [
            f"{self.endpoint.base_url}{path.format(query=encoded)}"
            for path in self.profile.search_paths
        ]

    def _remember_base(self, final_url: str) -> None:
        if self._resolved_base:
            return
        parsed = urlparse(final_url)
        if parsed.scheme and parsed.netloc:
            self._resolved_base = f"{parsed.scheme}://{parsed.netloc}"
            if self._resolved_base != self.endpoint.base_url:
                self._log.info("site_mirror_detected", resolved=self._resolved_base)

    def _rebase(self, url: str) -> str:
        """Point *url* at the resolved mirror when the site has moved."""
        if not self._resolved_base:
            return url
        parsed = urlparse(url)
        original = urlparse(self.endpoint.base_url)
        if parsed.netloc != original.netloc:
            return url
        mirror = urlparse(self._resolved_base)
        return urlunparse(parsed._replace(scheme=mirror.scheme, netloc=mirror.netloc))

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    def _listings(
        self, document: BeautifulSoup, page_url: str, request_context: str
    ) -> list[ListingRecord]:
        items = find_items(
            document, self.profile.item_selectors, self.profile.min_plausible_items
        )
        extract = (
            extract_script_listing
            if self.profile.listing_strategy is ListingStrategy.SCRIPT_JSON
            else extract_listing
        )

        records: list[ListingRecord] = []
        for item in items:
            record = extract(
                item,
                base_url=page_url,
                request_context=request_context,
                series_path_tokens=self.profile.series_path_tokens,
                site=self.name,
            )
            if record is None:
                continue
            title = normalize_title(
                record.raw_title, is_movie=record.media_kind is MediaKind.MOVIE
            )
            records.append(replace(record, title=title))
        return records

    async def browse(self, section: MainPageSection, page: int = 1) -> HomePage:
        """Fetch one page of a section. Failures yield an empty page."""
        url = self.page_url(section.url, page)
        fetched = await self._fetcher.safe_fetch(url, context="browse")
        if fetched is None:
            return HomePage(name=section.name)

        self._remember_base(fetched.url)
        document = fetched.document()
        records = self._listings(document, fetched.url, section.url)
        self._log.debug("browse_page", section=section.name, page=page, items=len(records))
        return HomePage(
            name=section.name,
            items=tuple(records),
            has_next=has_next_page(document, page),
        )

    async def _search_branch(self, url: str, query: str) -> list[ListingRecord]:
        fetched = await self._fetcher.safe_fetch(url, context="search")
        if fetched is None:
            return []
        records = self._listings(fetched.document(), fetched.url, url)
        self._log.debug("search_branch", query=query, url=url, results=len(records))
        return records

    async def search(self, query: str) -> list[ListingRecord]:
        """Query every search path concurrently and merge the results.

        Order is branch-submission order; duplicates (by detail URL)
        keep the first occurrence.
        """
        if not query.strip():
            return []
        branches = await asyncio.gather(
            *(self._search_branch(url, query) for url in self.search_urls(query))
        )
        merged: dict[str, ListingRecord] = {}
        for branch in branches:
            for record in branch:
                merged.setdefault(record.detail_url, record)
        return list(merged.values())

    # ------------------------------------------------------------------
    # Detail / links
    # ------------------------------------------------------------------

    async def load(self, url: str) -> DetailRecord | None:
        """Load a detail page. ``None`` means the page could not be loaded."""
        target = self._rebase(url)
        fetched = await self._fetcher.safe_fetch(target, context="load")
        if fetched is None:
            self._log.warning("load_failed", url=target)
            return None
        self._remember_base(fetched.url)

        try:
            record = parse_detail(fetched.document(), fetched.url, self.profile)
        except ValueError as exc:
            self._log.warning("load_parse_failed", url=target, error=str(exc))
            return None

        self._log.info(
            "detail_loaded",
            url=fetched.url,
            kind=record.media_kind.value,
            links=len(record.links),
            episodes=len(record.episodes),
        )
        return record

    async def load_links(
        self,
        payload: str | None,
        on_subtitle: SubtitleSink,
        on_media_link: MediaLinkSink,
    ) -> bool:
        """Resolve a playback payload; True iff any playable link was found."""
        return await self._dispatcher.load_links(
            payload, self.base_url, on_subtitle, on_media_link
        )
