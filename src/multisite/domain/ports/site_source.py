"""Port for the remote site list source."""

from __future__ import annotations

from typing import Protocol


class SiteSourcePort(Protocol):
    """Fetches the raw site list (one URL per line)."""

    async def fetch_site_list(self) -> str: ...
