from caskfetch.domain.models import (
    CaskIndexEntry,
    CaskSearchResult,
    DescriptorFields,
    DescriptorLocation,
    ResolvedDownload,
    Settings,
    VersionComponents,
)

__all__ = [
    "CaskIndexEntry",
    "CaskSearchResult",
    "DescriptorFields",
    "DescriptorLocation",
    "ResolvedDownload",
    "Settings",
    "VersionComponents",
]
