"""Multi-site streaming catalog scraper with short-link resolution."""

__version__ = "0.1.0"
