"""Cask index lookup, code search and descriptor download."""

from __future__ import annotations

from typing import Any

import requests
from mashumaro.exceptions import InvalidFieldValue, MissingField
from py_app_dev.core.logging import logger

from caskfetch.domain import CaskIndexEntry, CaskSearchResult, DescriptorLocation, Settings
from caskfetch.errors import IndexUnavailableError

DESCRIPTOR_SUFFIX = ".rb"


def search_index_entries(entries: list[CaskIndexEntry], query: str) -> list[CaskSearchResult]:
    """
    Filter index entries matching *query* and sort them by display name.

    Args:
        entries: Records from the JSON cask index.
        query: Search term (case-insensitive substring of a name variant, the token or the description).

    Returns:
        Matching results, sorted by name with plain string ordering (uppercase before lowercase).

    """
    results = [CaskSearchResult.from_index_entry(entry) for entry in entries if entry.matches(query)]
    return sorted(results, key=lambda result: result.name)


def parse_code_search(payload: dict[str, Any]) -> list[DescriptorLocation]:
    """Turn a code-search response into descriptor locations sorted by name."""
    if not payload.get("total_count"):
        return []
    locations = []
    for item in payload.get("items") or []:
        if not isinstance(item, dict):
            continue
        name = item.get("name")
        url = item.get("url")
        if not isinstance(name, str) or not name.endswith(DESCRIPTOR_SUFFIX) or not isinstance(url, str) or not url:
            continue
        locations.append(DescriptorLocation(name=name[: -len(DESCRIPTOR_SUFFIX)], url=url))
    return sorted(locations, key=lambda location: location.name)


class CaskIndexClient:
    """HTTP access to the cask index and to descriptor files."""

    def __init__(self, settings: Settings | None = None, session: requests.Session | None = None) -> None:
        self.settings = settings or Settings()
        self.session = session or requests.Session()
        if self.settings.github_token:
            self.session.headers["Authorization"] = f"Bearer {self.settings.github_token}"

    def _get(self, url: str, **kwargs: Any) -> requests.Response:
        try:
            response = self.session.get(url, timeout=self.settings.timeout, **kwargs)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise IndexUnavailableError(f"Failed to fetch {url}: {exc}") from exc
        return response

    def _get_json(self, url: str, **kwargs: Any) -> Any:
        response = self._get(url, **kwargs)
        try:
            return response.json()
        except ValueError as exc:
            raise IndexUnavailableError(f"JSON decoding failed for {url}: {exc}") from exc

    def fetch_search_index(self) -> list[CaskIndexEntry]:
        """
        Download and decode the full JSON cask index.

        Raises:
            IndexUnavailableError: On network failures or an undecodable index.

        """
        logger.info(f"Fetching cask index from {self.settings.index_url}")
        payload = self._get_json(self.settings.index_url)
        if not isinstance(payload, list):
            raise IndexUnavailableError(f"Unexpected cask index format at {self.settings.index_url}")
        if not all(isinstance(item, dict) for item in payload):
            raise IndexUnavailableError(f"Invalid cask index entry at {self.settings.index_url}: not an object")
        try:
            entries = [CaskIndexEntry.from_dict(item) for item in payload]
        except (MissingField, InvalidFieldValue, TypeError, ValueError) as exc:
            raise IndexUnavailableError(f"Invalid cask index entry: {exc}") from exc
        logger.debug(f"Cask index contains {len(entries)} entries")
        return entries

    def search_by_name(self, query: str) -> list[DescriptorLocation]:
        """
        Find descriptor files whose contents match *query* through code search.

        Raises:
            IndexUnavailableError: On network failures or an undecodable response.

        """
        logger.info(f"Searching {self.settings.repository} for '{query}'")
        payload = self._get_json(
            self.settings.search_api_url,
            params={"q": f"repo:{self.settings.repository} {query}"},
        )
        if not isinstance(payload, dict):
            raise IndexUnavailableError("JSON decoding of search result failed")
        return parse_code_search(payload)

    def fetch_descriptor(self, url: str) -> str:
        """
        Download the raw descriptor text behind a code-search content URL.

        The content record is fetched first; its ``download_url`` points at the raw file.

        Raises:
            IndexUnavailableError: On network failures, a missing ``download_url`` or non UTF-8 content.

        """
        record = self._get_json(url)
        download_url = record.get("download_url") if isinstance(record, dict) else None
        if not isinstance(download_url, str) or not download_url:
            raise IndexUnavailableError(
                "JSON decoding of download URL failed. Search rate limit may be reached. Please try again later."
            )
        logger.info(f"Fetching descriptor from {download_url}")
        response = self._get(download_url)
        try:
            return response.content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise IndexUnavailableError(f"Descriptor at {download_url} is not valid UTF-8: {exc}") from exc
