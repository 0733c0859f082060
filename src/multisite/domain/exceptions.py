"""Request-level errors.

Per-record and per-link failures never raise; they are returned as
values (``None``, empty collections, ``ResolutionResult.fail``).
"""

from __future__ import annotations


class MultisiteError(Exception):
    """Base class for all multisite errors."""


class SiteRegistryUnavailableError(MultisiteError):
    """Raised when the site list cannot be fetched and no cached copy exists."""


class SiteNotFoundError(MultisiteError):
    """Raised when a site name is not known to the registry."""
