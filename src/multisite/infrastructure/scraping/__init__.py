"""Configuration-driven HTML scraping engine."""

from __future__ import annotations

from .detail_parser import parse_detail
from .episode_grouper import find_episode_blocks, group_episodes
from .profiles import (
    DetailStrategy,
    ListingStrategy,
    ProfileRegistry,
    SiteProfile,
    default_profile_registry,
)
from .selector_engine import extract_listing, find_items, has_next_page, is_series
from .title_normalizer import normalize_title

__all__ = [
    "DetailStrategy",
    "ListingStrategy",
    "ProfileRegistry",
    "SiteProfile",
    "default_profile_registry",
    "extract_listing",
    "find_episode_blocks",
    "find_items",
    "group_episodes",
    "has_next_page",
    "is_series",
    "normalize_title",
    "parse_detail",
]
