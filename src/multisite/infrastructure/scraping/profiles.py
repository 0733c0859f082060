"""Per-site scraping profiles.

Sites differ in markup but fall into a handful of families.  A
``SiteProfile`` picks one variant from each closed strategy set and
carries the selector data for it.  Profiles are looked up by site
identifier; unknown sites get the heuristic ``generic`` profile.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

import structlog

from multisite.infrastructure.common.constants import DEFAULT_MIN_PLAUSIBLE_ITEMS

from .episode_grouper import DEFAULT_EPISODE_BLOCK_SELECTORS
from .selector_engine import DEFAULT_ITEM_SELECTORS, DEFAULT_SERIES_PATH_TOKENS

log = structlog.get_logger(__name__)


class ListingStrategy(str, Enum):
    """How listing cards are turned into records."""

    HEURISTIC = "heuristic"  # selector fallback + link/title/poster heuristics
    SCRIPT_JSON = "script_json"  # card data embedded in an inline <script>


class DetailStrategy(str, Enum):
    """Where movie links live on a detail page."""

    SPOILER = "spoiler"  # spoiler blocks / entry content anchors
    LINK_TABLE = "link_table"  # dedicated link table, last rows are streams


@dataclass(frozen=True)
class SiteProfile:
    key: str
    listing_strategy: ListingStrategy = ListingStrategy.HEURISTIC
    detail_strategy: DetailStrategy = DetailStrategy.SPOILER

    item_selectors: tuple[str, ...] = DEFAULT_ITEM_SELECTORS
    min_plausible_items: int = DEFAULT_MIN_PLAUSIBLE_ITEMS
    series_path_tokens: tuple[str, ...] = DEFAULT_SERIES_PATH_TOKENS

    # (name, path) pairs relative to the site base URL
    section_paths: tuple[tuple[str, str], ...] = (
        ("Home", ""),
        ("Film", "/film"),
        ("Serie TV", "/serie-tv"),
        ("Anime", "/anime"),
    )
    # "{query}" is substituted with the URL-encoded query
    search_paths: tuple[str, ...] = (
        "/?s={query}",
        "/search?q={query}",
        "/cerca/{query}",
    )
    page_path: str = "/page/{page}/"

    title_selectors: tuple[str, ...] = ("h1", ".entry-title", ".post-title")
    poster_selectors: tuple[str, ...] = (
        "img.wp-post-image",
        ".poster img",
        ".featured-image img",
        "img.responsive-locandina",
    )
    background_selectors: tuple[str, ...] = ("#sequex-page-title-img",)
    plot_selectors: tuple[str, ...] = (".entry-content p",)
    episode_block_selectors: tuple[str, ...] = DEFAULT_EPISODE_BLOCK_SELECTORS
    movie_link_selectors: tuple[str, ...] = (
        ".su-spoiler-content a[href]",
        ".entry-content a[href*='uprot']",
        ".entry-content a[href*='clicka']",
        ".entry-content a[href*='mixdrop']",
    )
    link_table_selector: str = "table.cbtable a[href]"
    link_table_keep_last: int = 2
    # Host tokens accepted as episode links; empty accepts any host.
    link_host_allowlist: tuple[str, ...] = field(default_factory=tuple)


GENERIC_PROFILE = SiteProfile(key="generic")

CB01_PROFILE = SiteProfile(
    key="cb01",
    listing_strategy=ListingStrategy.SCRIPT_JSON,
    detail_strategy=DetailStrategy.LINK_TABLE,
    item_selectors=(".sequex-one-columns .post", ".post"),
    series_path_tokens=("serietv",),
    section_paths=(("Film", ""), ("Serie TV", "/serietv")),
    search_paths=("/?s={query}", "/serietv/?s={query}"),
    title_selectors=(".sequex-main-container h1", "h1"),
    plot_selectors=(".ignore-css > p:nth-child(2)", ".ignore-css > p"),
    episode_block_selectors=("div.sp-body", ".su-spoiler-content"),
)


class ProfileRegistry:
    """Profiles keyed by site identifier (lower-cased site name)."""

    def __init__(
        self,
        profiles: dict[str, SiteProfile] | None = None,
        default: SiteProfile = GENERIC_PROFILE,
    ) -> None:
        self._profiles: dict[str, SiteProfile] = {}
        self._default = default
        for site, profile in (profiles or {}).items():
            self.register(site, profile)

    def register(self, site: str, profile: SiteProfile) -> None:
        self._profiles[site.lower()] = profile
        log.debug("site_profile_registered", site=site, profile=profile.key)

    def get(self, site: str) -> SiteProfile:
        return self._profiles.get(site.lower(), self._default)

    def with_threshold(self, minimum: int) -> ProfileRegistry:
        """Copy of this registry with *minimum* as plausible-count threshold."""
        return ProfileRegistry(
            {
                site: replace(profile, min_plausible_items=minimum)
                for site, profile in self._profiles.items()
            },
            default=replace(self._default, min_plausible_items=minimum),
        )

    @property
    def sites(self) -> list[str]:
        return list(self._profiles)


def default_profile_registry() -> ProfileRegistry:
    return ProfileRegistry({"cb01": CB01_PROFILE})
