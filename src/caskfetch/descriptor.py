"""Line-oriented field extraction for cask descriptor files."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from py_app_dev.core.logging import logger

from caskfetch.domain import DescriptorFields

_TRIM_CHARS = " ,\"'\n"


class ExtractionMode(Enum):
    #: The line must be exactly ``<key> <value>``
    STRICT = "strict"
    #: Everything on the line except the key is the value
    FREE_TEXT = "free_text"


@dataclass(frozen=True)
class ExtractionRule:
    """Where to find one descriptor field and how to read its value."""

    field: str
    token: str
    mode: ExtractionMode


EXTRACTION_RULES: tuple[ExtractionRule, ...] = (
    ExtractionRule("version", 'version "', ExtractionMode.STRICT),
    ExtractionRule("sha256", 'sha256 "', ExtractionMode.STRICT),
    ExtractionRule("name", "name", ExtractionMode.FREE_TEXT),
    ExtractionRule("description", "desc", ExtractionMode.FREE_TEXT),
    ExtractionRule("homepage", "homepage", ExtractionMode.FREE_TEXT),
    ExtractionRule("url_template", "url", ExtractionMode.STRICT),
)


def trim_value(value: str) -> str:
    """Strip spaces, commas, quotes and newlines from both ends of *value*."""
    return value.strip(_TRIM_CHARS)


def find_line(text: str, token: str) -> str | None:
    """Return the first line of *text* containing *token*, or None."""
    for line in text.splitlines():
        if token in line:
            return line
    return None


def extract_value(text: str, rule: ExtractionRule) -> str | None:
    """
    Extract the value for a single rule from *text*.

    Only the first line containing the rule's token is considered. In strict
    mode a line that does not split into exactly two tokens yields None.
    """
    line = find_line(text, rule.token)
    if line is None:
        return None
    line = line.replace(", '", ",'")
    if rule.mode is ExtractionMode.FREE_TEXT:
        return trim_value(line.replace(rule.token, ""))
    tokens = [token for token in line.split(" ") if token]
    if len(tokens) != 2:
        return None
    return trim_value(tokens[1])


def extract_fields(text: str) -> DescriptorFields:
    """
    Extract name, version, sha256, desc, homepage and url from descriptor text.

    Missing fields are reported as empty strings (name, version, sha256) or
    None (description, homepage, url_template); this function never raises.
    """
    values = {rule.field: extract_value(text, rule) for rule in EXTRACTION_RULES}
    fields = DescriptorFields(
        name=values["name"] or "",
        version=values["version"] or "",
        sha256=values["sha256"] or "",
        description=values["description"],
        homepage=values["homepage"],
        url_template=values["url_template"],
    )
    logger.debug(f"Extracted descriptor fields: {fields}")
    return fields
