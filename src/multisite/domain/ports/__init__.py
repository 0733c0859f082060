from .generic_extractor import (
    GenericExtractorPort,
    HostRecognizerPort,
    MediaLinkSink,
    SubtitleSink,
)
from .link_resolver import ShortLinkResolverPort
from .site_source import SiteSourcePort

__all__ = [
    "GenericExtractorPort",
    "HostRecognizerPort",
    "MediaLinkSink",
    "ShortLinkResolverPort",
    "SiteSourcePort",
    "SubtitleSink",
]
