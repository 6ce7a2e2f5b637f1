"""Version placeholder expansion and download URL resolution for cask descriptors."""

from __future__ import annotations

import string
from collections.abc import Callable
from urllib.parse import urlsplit

from py_app_dev.core.logging import logger

from caskfetch.descriptor import extract_fields
from caskfetch.domain import CaskSearchResult, ResolvedDownload, VersionComponents
from caskfetch.errors import InvalidResolvedUrlError, MissingUrlTemplateError

PlaceholderResolver = Callable[[str, VersionComponents], str]
# Signature: (full_version, components) -> replacement

#: Ordered placeholder rules. Later rules see the output of earlier ones, so
#: the order is part of the contract (including the second ``major_minor``).
PLACEHOLDER_RULES: tuple[tuple[str, PlaceholderResolver], ...] = (
    ("#{version}", lambda v, c: v),
    ("#{version.major}", lambda v, c: c.major),
    ("#{version.minor}", lambda v, c: c.minor),
    ("#{version.major_minor}", lambda v, c: f"{c.major}.{c.minor}"),
    ("#{version.major_minor.no_dots}", lambda v, c: f"{c.major}{c.minor}"),
    ("#{version.major_minor_patch}", lambda v, c: f"{c.major}.{c.minor}.{c.patch_only}"),
    ("#{version.major_minor}", lambda v, c: c.major),
    ("#{version.dots_to_underscores}", lambda v, c: f"{c.major}_{c.minor}_{c.patch}"),
    ("#{version.no_dots}", lambda v, c: f"{c.major}{c.minor}{c.patch}"),
    ("#{version.patch}", lambda v, c: c.patch),
    ("#{version.dots_to_hyphens}", lambda v, c: f"{c.major}-{c.minor}-{c.patch}"),
    ("#{version.before_comma}", lambda v, c: c.before_comma),
    ("#{version.after_comma}", lambda v, c: c.after_comma),
    ("#{version.after_comma.before_colon}", lambda v, c: c.after_comma_before_colon),
    ("#{version.after_colon}", lambda v, c: c.after_colon),
    # thunderbird
    ("#{language}", lambda v, c: "en-US"),
    # virtualbox
    ("#{version.sub(%r{-.*},'')}", lambda v, c: f"{c.major}.{c.minor}.{c.patch_only}"),
)

_URL_CHARS = frozenset(string.ascii_letters + string.digits + "-._~:/?#[]@!$&'()*+,;=%")


def _segments(value: str, separator: str) -> list[str]:
    return [segment for segment in value.split(separator) if segment]


def split_version(version: str) -> VersionComponents:
    """
    Decompose *version* into the parts referenced by URL placeholders.

    Every split runs on the full version string and drops empty segments,
    so ``"1.2.3,45:6"`` yields ``patch == "3,45:6"`` and ``after_colon == "6"``.
    """
    dotted = _segments(version, ".")
    major = dotted[0] if len(dotted) >= 1 else ""
    minor = dotted[1] if len(dotted) >= 2 else ""
    patch = dotted[2] if len(dotted) >= 3 else ""

    patch_parts = _segments(patch, "-")
    patch_only = patch_parts[0] if patch_parts else ""

    before_comma = after_comma = after_comma_before_colon = ""
    comma_parts = _segments(version, ",")
    if len(comma_parts) > 1:
        before_comma, after_comma = comma_parts[0], comma_parts[1]
        after_comma_parts = _segments(after_comma, ":")
        if len(after_comma_parts) > 1:
            after_comma_before_colon = after_comma_parts[0]

    colon_parts = _segments(version, ":")
    after_colon = colon_parts[1] if len(colon_parts) > 1 else ""

    return VersionComponents(
        major=major,
        minor=minor,
        patch=patch,
        patch_only=patch_only,
        before_comma=before_comma,
        after_comma=after_comma,
        after_comma_before_colon=after_comma_before_colon,
        after_colon=after_colon,
    )


def expand_version_template(template: str, version: str) -> str:
    """
    Replace the known ``#{...}`` placeholders in *template* with parts of *version*.

    Unknown placeholders are left as-is.
    """
    components = split_version(version)
    result = template
    for placeholder, resolve in PLACEHOLDER_RULES:
        result = result.replace(placeholder, resolve(version, components))
    return result


def is_valid_url(value: str) -> bool:
    """Check that *value* is an absolute URL made only of RFC 3986 characters."""
    if not value or any(char not in _URL_CHARS for char in value):
        return False
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    if not parts.scheme:
        return False
    return bool(parts.netloc) or (parts.scheme == "file" and bool(parts.path))


def resolve_url_template(template: str | None, version: str) -> str:
    """
    Expand *template* with *version* and validate the result.

    Raises:
        MissingUrlTemplateError: If there is no template.
        InvalidResolvedUrlError: If the expanded string is not a valid URL.

    """
    if template is None:
        raise MissingUrlTemplateError()
    expanded = expand_version_template(template, version)
    logger.debug(f"Expanded {template!r} with version {version!r} to {expanded!r}")
    if not is_valid_url(expanded):
        raise InvalidResolvedUrlError(template, expanded, version)
    return expanded


def resolve_descriptor(text: str) -> ResolvedDownload:
    """
    Resolve the download URL declared in the raw text of a cask descriptor.

    Raises:
        MissingUrlTemplateError: If the descriptor has no usable ``url`` line.
        InvalidResolvedUrlError: If the expanded URL is not valid.

    """
    fields = extract_fields(text)
    url = resolve_url_template(fields.url_template, fields.version)
    return ResolvedDownload(
        url=url,
        name=fields.name,
        description=fields.description,
        homepage=fields.homepage,
        version=fields.version,
        sha256=fields.sha256,
    )


def resolve_index_entry(entry: CaskSearchResult) -> ResolvedDownload:
    """
    Resolve the download URL of a cask taken from the JSON index.

    Raises:
        MissingUrlTemplateError: If the entry has no url.
        InvalidResolvedUrlError: If the expanded URL is not valid.

    """
    version = entry.version or ""
    url = resolve_url_template(entry.url, version)
    return ResolvedDownload(
        url=url,
        name=entry.name,
        description=entry.description,
        homepage=entry.homepage,
        version=version,
        sha256=entry.sha256 or "",
    )
