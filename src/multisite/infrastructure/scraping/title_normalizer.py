"""Title cleanup for scraped listings.

Sites decorate titles with quality badges, release years, season
markers and language tags (``"Show - Stagione 2 - ITA"``).  The rules
below strip that noise in a fixed order.  The whole sequence is applied
until the title stops changing, so ``normalize_title`` is idempotent.
"""

from __future__ import annotations

import re

_QUALITY_TAG_RE = re.compile(r"\[\s*(?:FULL\s+HD|HD|4K)\s*\]", re.IGNORECASE)

_MOVIE_RULES: tuple[re.Pattern[str], ...] = (
    # trailing "(2021)"
    re.compile(r"\(\s*\d{4}\s*\)\s*$"),
)

# Order matters: language tags go before the numeric season x episode
# tokens so "- ITA 1x01" never leaves a dangling "ITA".
_SERIES_RULES: tuple[re.Pattern[str], ...] = (
    re.compile(r"\s*[-–]\s*Stagion[ei]\s+\d+(?:\s*[-–]\s*\d+)?", re.IGNORECASE),
    re.compile(r"\s*[-–]\s*Seasons?\s+\d+(?:\s*[-–]\s*\d+)?", re.IGNORECASE),
    re.compile(r"\s*[-–]\s*(?:SUB[\s-]*)?ITA\b", re.IGNORECASE),
    re.compile(r"\s*[-–]\s*\d+\s*[x×]\s*\d*(?:\s*/\s*\d*)*"),
    re.compile(r"\b\d+\s*[x×]\s*\d+(?:/\d+)*\b"),
    re.compile(r"\s*[-–]\s*COMPLET[AO]\b", re.IGNORECASE),
)

_MULTI_SPACE_RE = re.compile(r"\s{2,}")
_TRAILING_SEPARATOR_RE = re.compile(r"[\s\-–:|]+$")


def _apply_rules(title: str, is_movie: bool) -> str:
    cleaned = _QUALITY_TAG_RE.sub("", title)
    for rule in _MOVIE_RULES if is_movie else _SERIES_RULES:
        cleaned = rule.sub("", cleaned)
    cleaned = _MULTI_SPACE_RE.sub(" ", cleaned)
    cleaned = _TRAILING_SEPARATOR_RE.sub("", cleaned)
    return cleaned.strip()


def normalize_title(raw_title: str, is_movie: bool) -> str:
    """Strip quality/year/season/language noise from a raw title.

    >>> normalize_title("Show Name - Stagione 2 - ITA", is_movie=False)
    'Show Name'
    >>> normalize_title("Film [HD] (2021)", is_movie=True)
    'Film'
    """
    current = raw_title.strip()
    # Every rule only removes characters, so each changing pass is shorter.
    while True:
        cleaned = _apply_rules(current, is_movie)
        if cleaned == current:
            break
        current = cleaned
    # A title made only of noise keeps its original text.
    return current or raw_title.strip()
