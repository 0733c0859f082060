"""Port for the generic media extractor fallback."""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable

from multisite.domain.entities.resolution import MediaLink, SubtitleFile

SubtitleSink = Callable[[SubtitleFile], None]
MediaLinkSink = Callable[[MediaLink], None]


@runtime_checkable
class GenericExtractorPort(Protocol):
    """Recognises third-party hosting services and emits playable links."""

    async def try_extract(
        self,
        url: str,
        referer: str,
        on_subtitle: SubtitleSink,
        on_media_link: MediaLinkSink,
    ) -> bool:
        """Return True iff at least one media link was emitted."""
        ...


@runtime_checkable
class HostRecognizerPort(Protocol):
    """Resolves one hoster's embed page to a playable media link."""

    @property
    def name(self) -> str: ...

    @property
    def supported_domains(self) -> frozenset[str]: ...

    async def resolve(self, url: str, referer: str = "") -> MediaLink | None: ...
