from __future__ import annotations

from .site_registry import HttpSiteSource, SiteListCache, parse_site_list

__all__ = ["HttpSiteSource", "SiteListCache", "parse_site_list"]
