"""CSS-selector-based HTML extraction with fallback chains.

Composable helpers over BeautifulSoup.  Every extraction function
accepts a primary selector and optional *fallback_selectors*: the first
selector that yields a usable value wins.  This keeps the scraping
engine resilient against minor layout changes (extra wrapper ``<div>``,
renamed CSS class, etc.).
"""

from __future__ import annotations

from urllib.parse import urljoin

import structlog
from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

log = structlog.get_logger(__name__)


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML string into a BeautifulSoup tree (``lxml`` parser)."""
    return BeautifulSoup(html, "lxml")


def safe_select(root: BeautifulSoup | Tag, selector: str) -> list[Tag]:
    """``root.select`` that treats an invalid selector as no match."""
    try:
        return root.select(selector)
    except (SelectorSyntaxError, ValueError, NotImplementedError) as exc:
        log.debug("invalid_selector", selector=selector, error=str(exc))
        return []


def select_items(
    root: BeautifulSoup | Tag,
    selector: str,
    *fallback_selectors: str,
) -> list[Tag]:
    """Select elements via CSS with a fallback chain.

    Returns results from the **first** selector that matches at least
    one element.
    """
    for sel in (selector, *fallback_selectors):
        items = safe_select(root, sel)
        if items:
            return items
    return []


def select_first(
    root: BeautifulSoup | Tag,
    selector: str,
    *fallback_selectors: str,
) -> Tag | None:
    items = select_items(root, selector, *fallback_selectors)
    return items[0] if items else None


def extract_text(
    element: BeautifulSoup | Tag,
    selector: str,
    *fallback_selectors: str,
    default: str = "",
    strip: bool = True,
) -> str:
    """Extract text from the first matching child element.

    With ``selector=""`` the element's own text is returned.
    """
    if selector == "":
        text = element.get_text(" ", strip=strip)
        return text if text else default

    for sel in (selector, *fallback_selectors):
        for match in safe_select(element, sel)[:1]:
            text = match.get_text(" ", strip=strip)
            if text:
                return text
    return default


def extract_attr(
    element: BeautifulSoup | Tag,
    selector: str,
    attr: str,
    *fallback_selectors: str,
    default: str = "",
) -> str:
    """Extract an HTML attribute from the first matching child element.

    With ``selector=""`` the attribute is read from *element* itself.
    """
    if selector == "":
        val = element.get(attr) if isinstance(element, Tag) else None
        return str(val).strip() if val else default

    for sel in (selector, *fallback_selectors):
        for match in safe_select(element, sel)[:1]:
            val = match.get(attr)
            if val:
                return str(val).strip()
    return default


def first_attr(element: Tag, *attrs: str, base_url: str = "") -> str:
    """Return the first non-empty attribute among *attrs*.

    Relative values are resolved against *base_url* when given.
    """
    for attr in attrs:
        val = element.get(attr)
        if val:
            val_str = str(val).strip()
            if val_str:
                return absolute_url(val_str, base_url)
    return ""


def absolute_url(href: str, base_url: str = "") -> str:
    """Resolve *href* against *base_url* (like jsoup's ``abs:href``)."""
    href = href.strip()
    if not href or not base_url:
        return href
    return urljoin(base_url, href)


def extract_links(
    element: BeautifulSoup | Tag,
    selector: str = "a[href]",
    *fallback_selectors: str,
    base_url: str = "",
) -> list[str]:
    """Extract absolute hrefs of all links matching *selector*, de-duplicated."""
    seen: dict[str, None] = {}
    for tag in select_items(element, selector, *fallback_selectors):
        href = tag.get("href")
        if not href:
            continue
        href_str = absolute_url(str(href), base_url)
        if href_str:
            seen.setdefault(href_str, None)
    return list(seen)
