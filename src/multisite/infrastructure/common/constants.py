"""Shared constants for fetching and resolution."""

from __future__ import annotations

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)

# Desktop UA used by redirect-chain resolvers (the wall serves a plain
# anchor page to this agent).
DESKTOP_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

FIREFOX_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:133.0) "
    "Gecko/20100101 Firefox/133.0"
)

DEFAULT_PAGE_TIMEOUT = 15.0
DEFAULT_RESOLVER_TIMEOUT = 10.0
DEFAULT_MAX_REDIRECT_ATTEMPTS = 5
DEFAULT_MIN_PLAUSIBLE_ITEMS = 3

URL_SCHEME_PREFIX = "http"


def is_absolute_http(url: str | None) -> bool:
    """Check whether *url* is a non-empty absolute http(s) URL."""
    return bool(url) and url.startswith(URL_SCHEME_PREFIX)  # type: ignore[union-attr]
