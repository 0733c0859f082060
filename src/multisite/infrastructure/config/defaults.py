"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "multisite",
    "environment": "dev",
    "http": {
        "timeout_seconds": 15.0,
        "user_agent": None,  # Falls back to DEFAULT_USER_AGENT
    },
    "registry": {
        "source_url": "https://pastebin.com/raw/KgQ4jTy6",
        "ttl_hours": 24.0,
        "retry_seconds": 300.0,
        "denylist": ["1337x.to", "ilcorsaronero"],
        "language": "it",
    },
    "scraping": {
        "min_plausible_items": 3,
        "max_concurrent_sites": 3,
        "site_timeout_seconds": 30.0,
    },
    "resolvers": {
        "max_redirect_attempts": 5,
        "timeout_seconds": 10.0,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
}
