"""Port for short-link resolvers that escape redirector walls."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from multisite.domain.entities.resolution import ResolutionResult


@runtime_checkable
class ShortLinkResolverPort(Protocol):
    """Resolves a redirector / short-link URL to the URL it hides.

    Implementations only escape their own service; understanding the
    destination is the generic extractor's job.
    """

    @property
    def name(self) -> str:
        """Service name (e.g. 'uprot', 'clicka')."""
        ...

    @property
    def supported_domains(self) -> frozenset[str]:
        """Host tokens this resolver handles (second-level domain parts)."""
        ...

    async def resolve(self, url: str, referer: str = "") -> ResolutionResult:
        """Resolve *url*. Never raises; failures come back as values."""
        ...
