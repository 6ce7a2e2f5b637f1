"""Shared pytest fixtures for Caskfetch tests."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from caskfetch.caskfetch import CaskFetch
from caskfetch.domain import CaskIndexEntry
from caskfetch.index import CaskIndexClient
from tests.helpers import index_record


@pytest.fixture
def index_entries() -> list[CaskIndexEntry]:
    """A small cask index with mixed-case names."""
    return [
        CaskIndexEntry.from_dict(index_record("zed", ["Zed"], desc="Multiplayer code editor", version="0.120.4")),
        CaskIndexEntry.from_dict(index_record("atom", ["Atom"], desc="Cross-platform text editor", version="1.60.0")),
        CaskIndexEntry.from_dict(index_record("bash-app", ["bash"], desc="Shell launcher")),
        CaskIndexEntry.from_dict(
            index_record("firefox", ["Mozilla Firefox", "Firefox"], desc="Web browser", url="https://example.com/Firefox #{version}.dmg")
        ),
    ]


@pytest.fixture
def client(index_entries: list[CaskIndexEntry]) -> MagicMock:
    """An index client that serves *index_entries* without network access."""
    fake = MagicMock(spec=CaskIndexClient)
    fake.fetch_search_index.return_value = index_entries
    return fake


@pytest.fixture
def caskfetch(tmp_path: Path, client: MagicMock) -> CaskFetch:
    """Provide a Caskfetch instance rooted in a temporary directory."""
    return CaskFetch(root_dir=tmp_path / ".caskfetch", client=client)
