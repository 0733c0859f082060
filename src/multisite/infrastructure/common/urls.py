"""URL helpers for host-based routing."""

from __future__ import annotations

import zlib
from typing import Iterable
from urllib.parse import urlparse, urlsplit


def extract_domain(url: str) -> str:
    """Extract the second-level domain from a URL.

    Returns the second-to-last segment of the hostname (e.g.
    ``"uprot"`` from ``"https://uprot.net/msf/abc"``).  Handles ``www.``
    prefixes automatically since ``parts[-2]`` skips them.

    Returns ``""`` when the URL cannot be parsed or has fewer than
    two hostname segments.
    """
    try:
        hostname = urlparse(url).hostname or ""
    except ValueError:
        return ""
    parts = hostname.split(".")
    return parts[-2] if len(parts) >= 2 else ""


def host_matches(url: str, domain_tokens: Iterable[str]) -> bool:
    """Check whether the URL host carries any of *domain_tokens*."""
    try:
        hostname = (urlparse(url).hostname or "").lower()
    except ValueError:
        return False
    if not hostname:
        return False
    return any(token.lower() in hostname for token in domain_tokens)


def site_name_from_url(url: str) -> str:
    """Derive a display name from a site URL.

    ``"https://www.eurostreaming.example/"`` -> ``"Eurostreaming"``.
    """
    host = url.split("://", 1)[-1].split("/", 1)[0]
    host = host.removeprefix("www.")
    name = host.rsplit(".", 1)[0] if "." in host else host
    if not name:
        return f"Site{zlib.crc32(url.encode()) % 100_000}"
    return name[:1].upper() + name[1:]


def normalize_base_url(url: str) -> str:
    """Canonical form of a site URL: lowercase scheme and host, no trailing ``/``.

    Query and fragment are dropped; a path prefix is kept.
    """
    parts = urlsplit(url.strip())
    return f"{parts.scheme.lower()}://{parts.netloc.lower()}{parts.path.rstrip('/')}"


def bare_host(url: str) -> str:
    """Lowercase host without a leading ``www.`` (``""`` if unparsable)."""
    try:
        hostname = (urlsplit(url).hostname or "").lower()
    except ValueError:
        return ""
    return hostname.removeprefix("www.")
