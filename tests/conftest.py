"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from docchat.db.connection import Database
from docchat.db.schema import initialize


@pytest.fixture
def tmp_db(tmp_path):
    """File-based index DB in tmp_path with schema initialized, closed after test."""
    db = Database(tmp_path / ".docchat.db")
    conn = db.connect()
    initialize(conn)
    yield conn
    conn.close()


@pytest.fixture(autouse=True)
def _no_docchat_env(monkeypatch):
    """Keep DOCCHAT_* overrides from the developer's shell out of tests."""
    for name in ("DOCCHAT_EMBEDDING_MODEL", "DOCCHAT_GENERATION_MODEL", "DOCCHAT_INDEX_PATH"):
        monkeypatch.delenv(name, raising=False)
