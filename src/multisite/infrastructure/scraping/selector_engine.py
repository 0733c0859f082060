"""Generic listing extraction over heterogeneous site markup.

The engine never knows a site's layout up front.  It walks an ordered
list of candidate CSS selectors and keeps the first one that yields a
plausible number of nodes; anything below the threshold is assumed to
be navigation noise.  Each accepted node is then mapped to a
``ListingRecord`` through ordered fallbacks for link, title and poster.

All failures degrade to "no result": an empty list or ``None``.
"""

from __future__ import annotations

import json
import re
from typing import Iterable, Sequence

import structlog
from bs4 import BeautifulSoup, Tag

from multisite.domain.entities import ListingRecord, MediaKind, SearchQuality
from multisite.infrastructure.common.constants import (
    DEFAULT_MIN_PLAUSIBLE_ITEMS,
    is_absolute_http,
)
from multisite.infrastructure.common.html_selectors import (
    absolute_url,
    extract_attr,
    extract_text,
    first_attr,
    safe_select,
    select_first,
)

log = structlog.get_logger(__name__)

# Ordered by priority: known Italian CMS families first, generic last.
DEFAULT_ITEM_SELECTORS: tuple[str, ...] = (
    # Eurostreaming / CB01 style
    "li.post",
    ".post",
    # Altadefinizione style
    ".box-movies .movie",
    ".movies-list .movie-item",
    ".film-list .film",
    # StreamingCommunity style
    ".film-card",
    ".content-item",
    ".show-card",
    # Generic WordPress themes
    "article.post",
    ".sequex-one-columns .post",
    ".movie-block",
    ".item-film",
    # Fallback generic
    ".movie",
    ".item",
    ".card",
    "article",
)

DEFAULT_SERIES_PATH_TOKENS: tuple[str, ...] = (
    "serie",
    "serietv",
    "tv-shows",
    "season",
    "episod",
)

_TITLE_SELECTORS: tuple[str, ...] = ("h2 a, h3 a, h2, h3",)
_TITLE_CONTAINER_SELECTORS: tuple[str, ...] = (".post-title, .title, .name",)
_POSTER_ATTRS: tuple[str, ...] = ("src", "data-src", "data-lazy-src")

_SEASON_MARKER_RE = re.compile(r"stagion[ei]|season", re.IGNORECASE)
_SERIES_SECTION_RE = re.compile(r"serie|serietv|tv-shows", re.IGNORECASE)
_FOUR_K_RE = re.compile(r"4K", re.IGNORECASE)
_HD_RE = re.compile(r"\bHD\b", re.IGNORECASE)
_SCRIPT_JSON_RE = re.compile(r"=\s*(\{.*?\})\s*;", re.DOTALL)

_PAGINATION_SELECTOR = ".pagination, .nav-links, .page-numbers"
_NEXT_SELECTOR = ".next, [rel=next]"


# ---------------------------------------------------------------------------
# Item discovery
# ---------------------------------------------------------------------------


def find_items(
    document: BeautifulSoup | Tag,
    selector_candidates: Sequence[str] = DEFAULT_ITEM_SELECTORS,
    minimum_plausible_count: int = DEFAULT_MIN_PLAUSIBLE_ITEMS,
) -> list[Tag]:
    """Return nodes from the first selector yielding a plausible result set.

    Returns ``[]`` (and logs a warning) when no candidate reaches
    *minimum_plausible_count*; the site has probably changed layout.
    """
    for selector in selector_candidates:
        items = safe_select(document, selector)
        if len(items) >= minimum_plausible_count:
            log.debug("selector_matched", selector=selector, count=len(items))
            return items

    log.warning(
        "selector_no_match",
        candidates=len(selector_candidates),
        minimum=minimum_plausible_count,
    )
    return []


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def _matches_any(text: str, tokens: Iterable[str]) -> bool:
    lowered = text.lower()
    return any(token.lower() in lowered for token in tokens)


def is_series(
    request_context: str,
    href: str,
    title: str,
    series_path_tokens: Iterable[str] = DEFAULT_SERIES_PATH_TOKENS,
) -> bool:
    """Best-effort movie/series classification.

    True if the request came from a series section, the href carries a
    series path token, or the title has a season marker.
    """
    if request_context and _SERIES_SECTION_RE.search(request_context):
        return True
    if href and _matches_any(href, series_path_tokens):
        return True
    return bool(title and _SEASON_MARKER_RE.search(title))


def detect_quality(title: str) -> SearchQuality | None:
    if _FOUR_K_RE.search(title):
        return SearchQuality.FOUR_K
    if _HD_RE.search(title):
        return SearchQuality.HD
    return None


# ---------------------------------------------------------------------------
# Listing extraction
# ---------------------------------------------------------------------------


def _extract_link(fragment: Tag, base_url: str) -> str:
    for anchor in safe_select(fragment, "a[href]"):
        href = absolute_url(str(anchor.get("href") or ""), base_url)
        if is_absolute_http(href):
            return href
    own = absolute_url(extract_attr(fragment, "", "href"), base_url)
    return own if is_absolute_http(own) else ""


def _extract_title(fragment: Tag) -> str:
    return (
        extract_text(fragment, *_TITLE_SELECTORS)
        or extract_attr(fragment, "a[title]", "title")
        or extract_attr(fragment, "img[alt]", "alt")
        or extract_text(fragment, *_TITLE_CONTAINER_SELECTORS)
    )


def _extract_poster(fragment: Tag, base_url: str) -> str | None:
    img = select_first(fragment, "img")
    if img is None:
        return None
    return first_attr(img, *_POSTER_ATTRS, base_url=base_url) or None


def extract_listing(
    fragment: Tag,
    *,
    base_url: str = "",
    request_context: str = "",
    series_path_tokens: Iterable[str] = DEFAULT_SERIES_PATH_TOKENS,
    site: str = "",
) -> ListingRecord | None:
    """Map one DOM fragment to a ``ListingRecord``.

    Returns ``None`` unless both a link and a title are found; a record
    is never partially populated.  ``title`` is the raw title here.
    """
    link = _extract_link(fragment, base_url)
    if not link:
        return None

    title = _extract_title(fragment).strip()
    if not title:
        return None

    kind = (
        MediaKind.SERIES
        if is_series(request_context, link, title, series_path_tokens)
        else MediaKind.MOVIE
    )
    return ListingRecord(
        title=title,
        raw_title=title,
        detail_url=link,
        media_kind=kind,
        poster_url=_extract_poster(fragment, base_url),
        quality=detect_quality(title) if kind is MediaKind.MOVIE else None,
        site=site,
    )


def extract_script_listing(
    fragment: Tag,
    *,
    base_url: str = "",
    request_context: str = "",
    series_path_tokens: Iterable[str] = DEFAULT_SERIES_PATH_TOKENS,
    site: str = "",
) -> ListingRecord | None:
    """Map a post card whose data lives in an inline ``<script>`` object.

    Some themes render cards as ``<script>var post = {"id": ..,
    "title": .., "permalink": ..};</script>`` next to the poster image.
    """
    script = select_first(fragment, "script")
    if script is None:
        return None
    match = _SCRIPT_JSON_RE.search(script.get_text())
    if match is None:
        return None
    try:
        data = json.loads(match.group(1))
    except ValueError:
        log.debug("script_listing_invalid_json", site=site)
        return None
    if not isinstance(data, dict):
        return None

    title = str(data.get("title") or "").strip()
    link = absolute_url(str(data.get("permalink") or ""), base_url)
    if not title or not is_absolute_http(link):
        return None

    kind = (
        MediaKind.SERIES
        if is_series(request_context, link, title, series_path_tokens)
        else MediaKind.MOVIE
    )
    return ListingRecord(
        title=title,
        raw_title=title,
        detail_url=link,
        media_kind=kind,
        poster_url=_extract_poster(fragment, base_url),
        quality=detect_quality(title) if kind is MediaKind.MOVIE else None,
        site=site,
    )


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


def has_next_page(document: BeautifulSoup | Tag, current_page: int) -> bool:
    """Detect whether a listing page has a following page."""
    pagination = select_first(document, _PAGINATION_SELECTOR)
    if pagination is None:
        return False
    if select_first(pagination, _NEXT_SELECTOR) is not None:
        return True

    page_numbers: list[int] = []
    for node in safe_select(pagination, "a, span"):
        label = node.get_text(strip=True).replace(".", "")
        if label.isdigit():
            page_numbers.append(int(label))
    return bool(page_numbers) and max(page_numbers) > current_page
