"""Tests for the sqlite-vec connection layer."""

from __future__ import annotations

import threading

from docchat.db.connection import Database


def test_connect_creates_file(tmp_path):
    path = tmp_path / "index.db"
    conn = Database(path).connect()
    try:
        assert path.exists()
    finally:
        conn.close()


def test_sqlite_vec_functions_loaded(tmp_path):
    conn = Database(tmp_path / "index.db").connect()
    try:
        version = conn.execute("SELECT vec_version()").fetchone()[0]
        assert version.startswith("v")
    finally:
        conn.close()


def test_wal_mode(tmp_path):
    conn = Database(tmp_path / "index.db").connect()
    try:
        mode = conn.execute("PRAGMA journal_mode").fetchone()[0]
        assert mode.lower() == "wal"
    finally:
        conn.close()


def test_connection_usable_from_another_thread(tmp_path):
    conn = Database(tmp_path / "index.db").connect()
    result: list[int] = []

    def _work():
        result.append(conn.execute("SELECT 1").fetchone()[0])

    t = threading.Thread(target=_work)
    t.start()
    t.join()
    conn.close()
    assert result == [1]


def test_context_manager_closes(tmp_path):
    db = Database(tmp_path / "index.db")
    with db as conn:
        assert conn.execute("SELECT 1").fetchone()[0] == 1
    assert db._conn is None
