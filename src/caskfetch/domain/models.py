"""Caskfetch domain models for cask descriptors, search results and settings."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from mashumaro.config import BaseConfig
from mashumaro.mixins.json import DataClassJSONMixin


@dataclass
class CaskJsonMixin(DataClassJSONMixin):
    """Shared mixin providing mashumaro config and JSON file I/O."""

    class Config(BaseConfig):
        omit_none = True

    @classmethod
    def from_json_file(cls, file_path: Path) -> Self:
        return cls.from_dict(json.loads(file_path.read_text()))

    def to_json_string(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    def to_json_file(self, file_path: Path) -> None:
        file_path.write_text(self.to_json_string())


@dataclass(frozen=True)
class DescriptorFields:
    """Fields extracted from the raw text of a cask descriptor."""

    #: Display name, empty when the descriptor has none
    name: str = ""
    #: Version as written in the descriptor (may contain ``,`` ``:`` ``-``)
    version: str = ""
    #: Declared checksum, empty when absent or not a quoted string
    sha256: str = ""
    description: str | None = None
    homepage: str | None = None
    #: Unexpanded download URL
    url_template: str | None = None


@dataclass(frozen=True)
class VersionComponents:
    """Sub-components of a cask version used by URL placeholders."""

    major: str = ""
    minor: str = ""
    patch: str = ""
    #: ``patch`` without its ``-suffix``
    patch_only: str = ""
    before_comma: str = ""
    after_comma: str = ""
    after_comma_before_colon: str = ""
    after_colon: str = ""


@dataclass
class ResolvedDownload(CaskJsonMixin):
    """A concrete download URL together with the descriptive cask metadata."""

    url: str
    name: str = ""
    description: str | None = None
    homepage: str | None = None
    version: str = ""
    sha256: str = ""


@dataclass
class CaskIndexEntry(CaskJsonMixin):
    """One record of the JSON cask index."""

    token: str
    name: list[str] = field(default_factory=list)
    desc: str | None = None
    homepage: str | None = None
    url: str | None = None
    sha256: str | None = None
    version: str | None = None

    @property
    def display_name(self) -> str:
        """First name variant, falling back to the token."""
        return self.name[0] if self.name else self.token

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match against names, token and description."""
        needle = query.lower()
        candidates = [*self.name, self.token]
        if self.desc:
            candidates.append(self.desc)
        return any(needle in candidate.lower() for candidate in candidates)


@dataclass
class CaskSearchResult(CaskJsonMixin):
    """A search hit taken from the JSON cask index."""

    name: str
    token: str = ""
    description: str | None = None
    homepage: str | None = None
    url: str | None = None
    sha256: str | None = None
    version: str | None = None

    @classmethod
    def from_index_entry(cls, entry: CaskIndexEntry) -> CaskSearchResult:
        return cls(
            name=entry.display_name,
            token=entry.token,
            description=entry.desc,
            homepage=entry.homepage,
            url=entry.url,
            sha256=entry.sha256,
            version=entry.version,
        )


@dataclass
class DescriptorLocation(CaskJsonMixin):
    """A descriptor file found through code search."""

    #: File name without the ``.rb`` suffix
    name: str
    #: API URL of the file content record
    url: str


@dataclass
class Settings(CaskJsonMixin):
    """Endpoints and transport options used by the index client."""

    index_url: str = "https://formulae.brew.sh/api/cask.json"
    search_api_url: str = "https://api.github.com/search/code"
    repository: str = "Homebrew/homebrew-cask"
    #: Request timeout in seconds
    timeout: int = 60
    #: Optional token sent to the code search API
    github_token: str | None = None
