"""Tests for the docchat remove command."""

from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from docchat.bootstrap import open_index_connection
from docchat.cli.main import app
from docchat.db.index import VectorIndex
from docchat.models import IndexedVector

runner = CliRunner()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_db(path: Path) -> None:
    conn = open_index_connection(path)
    index = VectorIndex(conn)
    for namespace, doc in (("alice", "doc_a"), ("bob", "doc_a"), ("alice", "doc_b")):
        index.upsert(
            [
                IndexedVector(
                    id=f"{doc}_chunk_0",
                    values=[1.0, 0.0],
                    metadata={"text": "t", "documentId": doc, "pageNumber": 1},
                )
            ],
            namespace=namespace,
        )
    conn.close()


def _count(path: Path, document_id: str) -> int:
    conn = open_index_connection(path)
    try:
        return VectorIndex(conn).count(document_id=document_id)
    finally:
        conn.close()


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


def test_remove_no_db_exits_1(tmp_path: Path) -> None:
    missing = tmp_path / "missing.db"
    result = runner.invoke(app, ["remove", "--document", "doc_a", "--db", str(missing), "--yes"])
    assert result.exit_code == 1
    assert "No index found" in result.output
    assert not missing.exists()


def test_remove_unknown_document(tmp_path: Path) -> None:
    db = tmp_path / "index.db"
    _make_db(db)
    result = runner.invoke(app, ["remove", "--document", "doc_zzz", "--db", str(db), "--yes"])
    assert result.exit_code == 0
    assert "not found" in result.output


def test_remove_deletes_in_every_namespace(tmp_path: Path) -> None:
    db = tmp_path / "index.db"
    _make_db(db)

    result = runner.invoke(app, ["remove", "--document", "doc_a", "--db", str(db), "--yes"])

    assert result.exit_code == 0, result.output
    assert "2 vectors deleted" in result.output
    assert _count(db, "doc_a") == 0
    assert _count(db, "doc_b") == 1


def test_remove_confirmation_declined(tmp_path: Path) -> None:
    db = tmp_path / "index.db"
    _make_db(db)

    result = runner.invoke(app, ["remove", "--document", "doc_a", "--db", str(db)], input="n\n")

    assert result.exit_code == 0
    assert "Cancelled" in result.output
    assert _count(db, "doc_a") == 2
