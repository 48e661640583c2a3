"""Tests for the forward-only migration runner."""

from __future__ import annotations

from docchat.db.connection import Database
from docchat.db.migrations import MIGRATIONS, run_migrations
from docchat.db.schema import CURRENT_VERSION, initialize


def _fresh_conn(tmp_path):
    """Open a new connection without running migrations."""
    db = Database(tmp_path / "test.db")
    return db.connect()


def _table_exists(conn, name: str) -> bool:
    return conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name=?", (name,)
    ).fetchone() is not None


def test_run_migrations_creates_tables(tmp_path):
    conn = _fresh_conn(tmp_path)
    run_migrations(conn)
    for table in ("schema_version", "vectors", "index_meta"):
        assert _table_exists(conn, table)
    conn.close()


def test_run_migrations_records_version(tmp_path):
    conn = _fresh_conn(tmp_path)
    run_migrations(conn)
    version = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()[0]
    assert version == MIGRATIONS[-1][0] == CURRENT_VERSION
    conn.close()


def test_run_migrations_idempotent(tmp_path):
    conn = _fresh_conn(tmp_path)
    run_migrations(conn)
    run_migrations(conn)
    rows = conn.execute("SELECT COUNT(*) FROM schema_version").fetchone()[0]
    assert rows == len(MIGRATIONS)
    conn.close()


def test_document_index_exists(tmp_db):
    names = {
        r["name"]
        for r in tmp_db.execute(
            "SELECT name FROM sqlite_master WHERE type='index' AND tbl_name='vectors'"
        ).fetchall()
    }
    assert "idx_vectors_document" in names


def test_initialize_on_existing_db(tmp_path):
    conn = _fresh_conn(tmp_path)
    initialize(conn)
    conn.execute(
        "INSERT INTO index_meta (key, value) VALUES ('dimensions', '3')"
    )
    conn.commit()
    initialize(conn)
    assert conn.execute("SELECT value FROM index_meta").fetchone()[0] == "3"
    conn.close()
