"""CLI tests for caskfetch main.py."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from py_app_dev.core.exceptions import UserNotificationException
from typer.testing import CliRunner

from caskfetch.domain import CaskIndexEntry, DescriptorLocation
from caskfetch.errors import IndexUnavailableError
from caskfetch.main import app
from tests.helpers import FIREFOX_DESCRIPTOR, FIREFOX_URL, index_record

runner = CliRunner()


@pytest.fixture
def index_client(index_entries: list[CaskIndexEntry]) -> Iterator[MagicMock]:
    """Replace the index client created by the CLI with a fake."""
    with patch("caskfetch.caskfetch.CaskIndexClient") as client_cls:
        client = client_cls.return_value
        client.fetch_search_index.return_value = index_entries
        yield client


def test_help() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "caskfetch" in result.stdout


def test_search(index_client: MagicMock, tmp_path: Path) -> None:
    result = runner.invoke(app, ["search", "editor", "--root", str(tmp_path)])

    assert result.exit_code == 0
    assert "2 results" in result.stdout
    assert result.stdout.index("Atom") < result.stdout.index("Zed")


def test_search_no_results(index_client: MagicMock, tmp_path: Path) -> None:
    result = runner.invoke(app, ["search", "nonexistent", "--root", str(tmp_path)])

    assert result.exit_code == 0
    assert "No search results" in result.stdout


def test_search_descriptors(index_client: MagicMock, tmp_path: Path) -> None:
    index_client.search_by_name.return_value = [DescriptorLocation(name="firefox", url="https://api.example.com/firefox")]

    result = runner.invoke(app, ["search", "firefox", "--descriptors", "--root", str(tmp_path)])

    assert result.exit_code == 0
    assert "1 result" in result.stdout
    assert "firefox" in result.stdout
    index_client.fetch_search_index.assert_not_called()


def test_search_index_unavailable(index_client: MagicMock, tmp_path: Path) -> None:
    index_client.fetch_search_index.side_effect = IndexUnavailableError("offline")

    result = runner.invoke(app, ["search", "atom", "--root", str(tmp_path)])

    assert result.exit_code == 1


def test_search_with_settings_file(index_client: MagicMock, tmp_path: Path) -> None:
    config_path = tmp_path / "settings.json"
    config_path.write_text(json.dumps({"timeout": 3}))

    result = runner.invoke(app, ["search", "atom", "-c", str(config_path), "--root", str(tmp_path)])

    assert result.exit_code == 0
    assert "Atom" in result.stdout


def test_search_with_missing_settings_file(index_client: MagicMock, tmp_path: Path) -> None:
    result = runner.invoke(app, ["search", "atom", "-c", str(tmp_path / "missing.json"), "--root", str(tmp_path)])

    assert result.exit_code == 1


@pytest.mark.parametrize("content", ["{not json", '{"timeout": 3'])
def test_search_with_malformed_settings_file(index_client: MagicMock, tmp_path: Path, content: str) -> None:
    config_path = tmp_path / "settings.json"
    config_path.write_text(content)

    result = runner.invoke(app, ["search", "atom", "-c", str(config_path), "--root", str(tmp_path)])

    assert result.exit_code == 1
    assert isinstance(result.exception, UserNotificationException)
    assert "Invalid settings file" in str(result.exception)
    index_client.fetch_search_index.assert_not_called()


def test_url(index_client: MagicMock, tmp_path: Path) -> None:
    result = runner.invoke(app, ["url", "atom", "--root", str(tmp_path)])

    assert result.exit_code == 0
    assert "Atom 1.60.0" in result.stdout
    assert "Cross-platform text editor" in result.stdout
    assert "https://atom.example.com/download/atom-1.60.0.dmg" in result.stdout


def test_url_json(index_client: MagicMock, tmp_path: Path) -> None:
    result = runner.invoke(app, ["url", "zed", "--json", "--root", str(tmp_path)])

    assert result.exit_code == 0
    assert json.loads(result.stdout)["url"] == "https://zed.example.com/download/zed-0.120.4.dmg"


def test_url_from_descriptor(index_client: MagicMock, tmp_path: Path) -> None:
    index_client.search_by_name.return_value = [DescriptorLocation(name="firefox", url="https://api.example.com/firefox")]
    index_client.fetch_descriptor.return_value = FIREFOX_DESCRIPTOR

    result = runner.invoke(app, ["url", "firefox", "--descriptors", "--root", str(tmp_path)])

    assert result.exit_code == 0
    assert FIREFOX_URL in result.stdout
    assert "Mozilla Firefox" in result.stdout


def test_url_unknown_cask(index_client: MagicMock, tmp_path: Path) -> None:
    result = runner.invoke(app, ["url", "nonexistent", "--root", str(tmp_path)])

    assert result.exit_code == 1


def test_url_invalid_resolved_url(index_client: MagicMock, tmp_path: Path) -> None:
    result = runner.invoke(app, ["url", "firefox", "--root", str(tmp_path)])

    assert result.exit_code == 1


def test_download(index_client: MagicMock, tmp_path: Path) -> None:
    source = tmp_path / "tool.dmg"
    source.write_bytes(b"disk image")
    sha256 = hashlib.sha256(b"disk image").hexdigest()
    index_client.fetch_search_index.return_value = [
        CaskIndexEntry.from_dict(index_record("tool", ["Tool"], url=source.as_uri(), sha256=sha256)),
    ]
    root_dir = tmp_path / ".caskfetch"

    result = runner.invoke(app, ["download", "tool", "--root", str(root_dir)])

    assert result.exit_code == 0
    cached = list((root_dir / "cache").iterdir())
    assert len(cached) == 1
    assert cached[0].read_bytes() == b"disk image"


def test_download_checksum_mismatch(index_client: MagicMock, tmp_path: Path) -> None:
    source = tmp_path / "tool.dmg"
    source.write_bytes(b"disk image")
    index_client.fetch_search_index.return_value = [
        CaskIndexEntry.from_dict(index_record("tool", ["Tool"], url=source.as_uri(), sha256="0" * 64)),
    ]

    result = runner.invoke(app, ["download", "tool", "--root", str(tmp_path / ".caskfetch")])

    assert result.exit_code == 1
