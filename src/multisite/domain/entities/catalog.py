"""Domain entities for the scraped catalog.

Pure value objects without framework dependencies or I/O.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum


class MediaKind(str, Enum):
    """Kind of content a listing or detail page describes."""

    MOVIE = "movie"
    SERIES = "series"


class SearchQuality(str, Enum):
    """Quality badge derived from the listing title."""

    HD = "hd"
    FOUR_K = "4k"


@dataclass(frozen=True)
class SiteEndpoint:
    """A site discovered by the site registry."""

    name: str
    base_url: str
    language: str = "it"


@dataclass(frozen=True)
class MainPageSection:
    """A browsable section of a site (home, movies, series...)."""

    name: str
    url: str


@dataclass(frozen=True)
class ListingRecord:
    """A single browsable entry before detail-page enrichment."""

    title: str
    detail_url: str
    media_kind: MediaKind = MediaKind.MOVIE
    poster_url: str | None = None
    quality: SearchQuality | None = None
    site: str = ""
    raw_title: str = ""


@dataclass(frozen=True)
class HomePage:
    """One page of listings for a site section.

    An empty ``items`` tuple is a valid page: the site could not be
    scraped this cycle.
    """

    name: str
    items: tuple[ListingRecord, ...] = ()
    has_next: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.items


@dataclass(frozen=True)
class EpisodeRecord:
    """A single episode with its candidate playback links."""

    season: int
    episode: int
    title: str
    candidate_links: tuple[str, ...]

    def __post_init__(self) -> None:
        if self.season < 1 or self.episode < 1:
            raise ValueError(
                f"season/episode must be >= 1, got {self.season}x{self.episode}"
            )
        if not self.candidate_links:
            raise ValueError("episode must carry at least one candidate link")

    @property
    def key(self) -> tuple[int, int]:
        return (self.season, self.episode)

    @property
    def link_payload(self) -> str:
        return encode_links(self.candidate_links)


@dataclass(frozen=True)
class DetailRecord:
    """Enriched single-item view.

    Movies carry a flat tuple of candidate links, series carry episodes.
    Never both.
    """

    title: str
    url: str
    media_kind: MediaKind
    poster_url: str | None = None
    background_url: str | None = None
    plot: str | None = None
    year: int | None = None
    links: tuple[str, ...] = ()
    episodes: tuple[EpisodeRecord, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.media_kind is MediaKind.MOVIE and self.episodes:
            raise ValueError("a movie detail record cannot carry episodes")
        if self.media_kind is MediaKind.SERIES and self.links:
            raise ValueError("a series detail record cannot carry flat links")

        keys = [ep.key for ep in self.episodes]
        if len(set(keys)) != len(keys):
            raise ValueError("duplicate (season, episode) pairs in detail record")
        if keys != sorted(keys):
            raise ValueError("episodes must be sorted by (season, episode)")

    @property
    def is_movie(self) -> bool:
        return self.media_kind is MediaKind.MOVIE

    @property
    def link_payload(self) -> str:
        """Playback payload for movies (``"null"`` when nothing was found)."""
        return encode_links(self.links)


def encode_links(links: tuple[str, ...] | list[str]) -> str:
    """Serialize candidate links to the playback payload format."""
    if not links:
        return "null"
    return json.dumps(list(links))
