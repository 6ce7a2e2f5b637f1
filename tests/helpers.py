"""Reusable test helpers for faking HTTP responses and cask records."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import requests

SHA256 = "ab" * 32

FIREFOX_DESCRIPTOR = f"""cask "firefox" do
  version "121.0.1"
  sha256 "{SHA256}"

  url "https://download-installer.cdn.mozilla.net/pub/firefox/releases/#{{version}}/mac/#{{language}}/Firefox%20#{{version}}.dmg",
      verified: "download-installer.cdn.mozilla.net/pub/firefox/releases/"
  name "Mozilla Firefox"
  desc "Web browser"
  homepage "https://www.mozilla.org/firefox/"

  app "Firefox.app"
end
"""

FIREFOX_URL = "https://download-installer.cdn.mozilla.net/pub/firefox/releases/121.0.1/mac/en-US/Firefox%20121.0.1.dmg"


def index_record(token: str, names: list[str], **kwargs: Any) -> dict[str, Any]:
    """Build a JSON cask index record with sensible defaults."""
    record: dict[str, Any] = {
        "token": token,
        "full_token": token,
        "name": names,
        "desc": None,
        "homepage": f"https://{token}.example.com/",
        "url": f"https://{token}.example.com/download/{token}-#{{version}}.dmg",
        "sha256": SHA256,
        "version": "1.0.0",
    }
    record.update(kwargs)
    return record


def mock_response(json_data: Any = None, content: bytes = b"", error: Exception | None = None) -> MagicMock:
    """Create a mock ``requests.Response``."""
    response = MagicMock()
    response.content = content
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
    else:
        response.json.return_value = json_data
    if error:
        response.raise_for_status.side_effect = error
    return response


def mock_session(*responses: MagicMock) -> MagicMock:
    """Create a mock ``requests.Session`` returning *responses* in order."""
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    session.get.side_effect = list(responses)
    return session
