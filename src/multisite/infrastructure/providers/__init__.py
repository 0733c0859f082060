"""Per-site providers."""

from __future__ import annotations

from .site_provider import SiteProvider

__all__ = ["SiteProvider"]
