"""Domain entities for short-link and hoster resolution.

Ephemeral values produced and consumed within one playback request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class FailureReason(str, Enum):
    """Why a link could not be resolved."""

    NETWORK_FAILURE = "network_failure"  # timeout / connection
    PARSE_FAILURE = "parse_failure"  # malformed HTML / JSON
    NOT_FOUND = "not_found"  # selector or field absent
    ATTEMPTS_EXHAUSTED = "attempts_exhausted"  # redirect-chain cap hit
    NO_ROUTE = "no_route"  # no resolver and generic extractor failed


@dataclass(frozen=True)
class ResolverFailure:
    reason: FailureReason
    attempts_made: int = 0
    detail: str = ""


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of a short-link resolution: a final URL or a failure."""

    final_url: str | None = None
    failure: ResolverFailure | None = None

    def __post_init__(self) -> None:
        if (self.final_url is None) == (self.failure is None):
            raise ValueError("exactly one of final_url / failure must be set")

    @classmethod
    def success(cls, url: str) -> ResolutionResult:
        return cls(final_url=url)

    @classmethod
    def fail(
        cls,
        reason: FailureReason,
        attempts_made: int = 0,
        detail: str = "",
    ) -> ResolutionResult:
        return cls(failure=ResolverFailure(reason, attempts_made, detail))

    @property
    def ok(self) -> bool:
        return self.final_url is not None


@dataclass(frozen=True)
class MediaLink:
    """A playable media URL emitted by an extractor."""

    source: str  # extractor / hoster name
    name: str
    url: str
    referer: str = ""
    is_hls: bool = False
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class SubtitleFile:
    language: str
    url: str
