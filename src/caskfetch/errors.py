"""Error types raised by Caskfetch."""

from __future__ import annotations


class CaskFetchError(Exception):
    """Base class for all Caskfetch errors."""


class IndexUnavailableError(CaskFetchError):
    """Raised when the cask index or a descriptor cannot be fetched or decoded."""


class ResolutionError(CaskFetchError, ValueError):
    """Raised when a descriptor cannot be turned into a download URL."""


class MissingUrlTemplateError(ResolutionError):
    """Raised when a descriptor has no recognizable ``url`` field."""

    def __init__(self, message: str = "Could not find download location.") -> None:
        super().__init__(message)


class InvalidResolvedUrlError(ResolutionError):
    """Raised when template expansion does not yield a valid URL."""

    def __init__(self, template: str, expanded: str, version: str) -> None:
        self.template = template
        self.expanded = expanded
        self.version = version
        super().__init__(f"Unknown download URL for version {version!r}: {expanded}")
