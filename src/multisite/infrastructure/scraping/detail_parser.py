"""Build a ``DetailRecord`` from a detail page."""

from __future__ import annotations

import re

import structlog
from bs4 import BeautifulSoup

from multisite.domain.entities import DetailRecord, MediaKind
from multisite.infrastructure.common.constants import is_absolute_http
from multisite.infrastructure.common.html_selectors import (
    absolute_url,
    extract_attr,
    extract_links,
    extract_text,
    select_first,
)

from .episode_grouper import extract_plot, find_episode_blocks, group_episodes
from .profiles import DetailStrategy, SiteProfile
from .selector_engine import is_series
from .title_normalizer import normalize_title

log = structlog.get_logger(__name__)

_YEAR_RE = re.compile(r"\b(?:19|20)\d{2}\b")
_FALLBACK_PLOT_MAX_CHARS = 300


def _extract_title(document: BeautifulSoup, profile: SiteProfile) -> str:
    title = extract_text(document, *profile.title_selectors)
    if title:
        return title
    return document.title.get_text(strip=True) if document.title else ""


def _extract_poster(
    document: BeautifulSoup, profile: SiteProfile, url: str
) -> str | None:
    for selector in profile.poster_selectors:
        img = select_first(document, selector)
        if img is None:
            continue
        src = extract_attr(img, "", "src") or extract_attr(img, "", "data-src")
        if src:
            return absolute_url(src, url)
    return None


def _extract_background(
    document: BeautifulSoup, profile: SiteProfile, url: str
) -> str | None:
    background = ""
    for selector in profile.background_selectors:
        background = extract_attr(document, selector, "data-img") or extract_attr(
            document, selector, "src"
        )
        if background:
            break
    if not background:
        background = extract_attr(document, "meta[property='og:image']", "content")
    return absolute_url(background, url) if background else None


def _extract_year(title: str) -> int | None:
    match = _YEAR_RE.search(title)
    return int(match.group(0)) if match else None


def _movie_links(document: BeautifulSoup, profile: SiteProfile, url: str) -> list[str]:
    if profile.detail_strategy is DetailStrategy.LINK_TABLE:
        links = extract_links(document, profile.link_table_selector, base_url=url)
        links = [link for link in links if is_absolute_http(link)]
        return links[-profile.link_table_keep_last :] if links else []

    seen: dict[str, None] = {}
    for selector in profile.movie_link_selectors:
        for link in extract_links(document, selector, base_url=url):
            if is_absolute_http(link):
                seen.setdefault(link, None)
    return list(seen)


def parse_detail(document: BeautifulSoup, url: str, profile: SiteProfile) -> DetailRecord:
    """Extract title, artwork, plot, year and links/episodes from a page."""
    raw_title = _extract_title(document, profile)
    blocks = find_episode_blocks(document, profile.episode_block_selectors)

    plot = extract_plot(blocks)
    if plot is None:
        fallback = extract_text(document, *profile.plot_selectors)
        plot = fallback[:_FALLBACK_PLOT_MAX_CHARS] if fallback else None

    series = bool(blocks) or is_series(
        "", url, raw_title, profile.series_path_tokens
    )
    kind = MediaKind.SERIES if series else MediaKind.MOVIE
    log.debug(
        "detail_classified",
        url=url,
        kind=kind.value,
        has_episode_blocks=bool(blocks),
    )

    common = {
        "title": normalize_title(raw_title, is_movie=not series) or raw_title,
        "url": url,
        "media_kind": kind,
        "poster_url": _extract_poster(document, profile, url),
        "background_url": _extract_background(document, profile, url),
        "plot": plot,
        "year": _extract_year(raw_title),
    }

    if series:
        episodes = group_episodes(
            blocks,
            base_url=url,
            allowed_hosts=profile.link_host_allowlist or None,
        )
        return DetailRecord(**common, episodes=tuple(episodes))

    return DetailRecord(**common, links=tuple(_movie_links(document, profile, url)))
