from .catalog import (
    DetailRecord,
    EpisodeRecord,
    HomePage,
    ListingRecord,
    MainPageSection,
    MediaKind,
    SearchQuality,
    SiteEndpoint,
    encode_links,
)
from .resolution import (
    FailureReason,
    MediaLink,
    ResolutionResult,
    ResolverFailure,
    SubtitleFile,
)

__all__ = [
    "DetailRecord",
    "EpisodeRecord",
    "FailureReason",
    "HomePage",
    "ListingRecord",
    "MainPageSection",
    "MediaKind",
    "MediaLink",
    "ResolutionResult",
    "ResolverFailure",
    "SearchQuality",
    "SiteEndpoint",
    "SubtitleFile",
    "encode_links",
]
