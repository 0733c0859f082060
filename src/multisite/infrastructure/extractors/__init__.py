"""Generic media extractor adapters."""

from __future__ import annotations

from .probe import ProbingExtractor

__all__ = ["ProbingExtractor"]
