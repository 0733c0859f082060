"""Rebuild a season/episode structure from free-form spoiler blocks.

Series pages typically list episodes as lines inside collapsible
"spoiler" blocks::

    1×01 Episodio 1 – <a href="...">Host A</a> – <a href="...">Host B</a><br>
    1×02 Episodio 2 – <a href="...">Host A</a><br>

Each block is split into line-like segments, every segment carrying a
``season×episode`` token becomes one ``EpisodeRecord`` with the
segment's links as candidates.
"""

from __future__ import annotations

import re
from typing import Collection, Iterable, Sequence
from urllib.parse import urlparse

import structlog
from bs4 import BeautifulSoup, Tag

from multisite.domain.entities import EpisodeRecord
from multisite.infrastructure.common.constants import is_absolute_http
from multisite.infrastructure.common.html_selectors import (
    extract_links,
    parse_html,
    safe_select,
)

log = structlog.get_logger(__name__)

DEFAULT_EPISODE_BLOCK_SELECTORS: tuple[str, ...] = (
    ".su-spoiler-content",
    "div.sp-body",
)

# Supports "1x01", "1×01" and "1 x 01"
EPISODE_TOKEN_RE = re.compile(r"(\d+)\s*[x×]\s*(\d+)")
_EPISODE_MARKER_RE = re.compile(r"\d+\s*[x×]\s*\d+|Episodio \d+")
_EPISODE_LABEL_RE = re.compile(r"Episod(?:io|e)\s+\d+[^–\-]*", re.IGNORECASE)
_SEGMENT_SPLIT_RE = re.compile(r"<br\s*/?>|</p>", re.IGNORECASE)

DEFAULT_LABEL = "Episode {episode}"
_PLOT_MAX_CHARS = 500


def _to_positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        return 1
    return value if value >= 1 else 1


def _host_allowed(url: str, allowed_hosts: Collection[str] | None) -> bool:
    if not allowed_hosts:
        return True
    host = (urlparse(url).hostname or "").lower()
    return any(token in host for token in allowed_hosts)


def _segments(block: Tag) -> list[str]:
    return [seg for seg in _SEGMENT_SPLIT_RE.split(block.decode_contents()) if seg.strip()]


def parse_segment(
    segment_html: str,
    *,
    base_url: str = "",
    allowed_hosts: Collection[str] | None = None,
) -> EpisodeRecord | None:
    """Parse one line-like segment into an episode, or ``None``."""
    fragment = parse_html(segment_html)
    text = fragment.get_text(" ", strip=True)

    match = EPISODE_TOKEN_RE.search(text)
    if match is None:
        return None
    season = _to_positive_int(match.group(1))
    episode = _to_positive_int(match.group(2))

    label_match = _EPISODE_LABEL_RE.search(text)
    label = (
        label_match.group(0).strip()
        if label_match
        else DEFAULT_LABEL.format(episode=episode)
    )

    links = [
        link
        for link in extract_links(fragment, "a[href]", base_url=base_url)
        if is_absolute_http(link) and _host_allowed(link, allowed_hosts)
    ]
    if not links:
        return None

    return EpisodeRecord(
        season=season,
        episode=episode,
        title=label,
        candidate_links=tuple(links),
    )


def group_episodes(
    blocks: Iterable[Tag],
    *,
    base_url: str = "",
    allowed_hosts: Collection[str] | None = None,
) -> list[EpisodeRecord]:
    """Group episode segments of *blocks* into sorted ``EpisodeRecord``s.

    Duplicate (season, episode) pairs keep the last segment seen.
    """
    by_key: dict[tuple[int, int], EpisodeRecord] = {}
    skipped = 0
    for block in blocks:
        for segment in _segments(block):
            record = parse_segment(
                segment, base_url=base_url, allowed_hosts=allowed_hosts
            )
            if record is None:
                skipped += 1
                continue
            if record.key in by_key:
                log.debug("episode_duplicate_overwritten", key=record.key)
            by_key[record.key] = record

    log.debug("episodes_grouped", count=len(by_key), skipped_segments=skipped)
    return [by_key[key] for key in sorted(by_key)]


def find_episode_blocks(
    document: BeautifulSoup | Tag,
    selectors: Sequence[str] = DEFAULT_EPISODE_BLOCK_SELECTORS,
) -> list[Tag]:
    """Return spoiler-like blocks whose text carries an episode marker."""
    blocks: list[Tag] = []
    seen: set[int] = set()
    for selector in selectors:
        for block in safe_select(document, selector):
            if id(block) in seen:
                continue
            seen.add(id(block))
            if _EPISODE_MARKER_RE.search(block.get_text(" ", strip=True)):
                blocks.append(block)
    return blocks


def extract_plot(blocks: Sequence[Tag]) -> str | None:
    """Text of the first block that precedes its first episode marker."""
    for block in blocks:
        text = block.get_text(" ", strip=True)
        match = _EPISODE_MARKER_RE.search(text)
        plot = (text[: match.start()] if match else text).strip()
        if plot:
            return plot[:_PLOT_MAX_CHARS]
    return None
