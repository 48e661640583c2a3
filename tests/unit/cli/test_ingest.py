"""Tests for the docchat ingest command."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from docchat.bootstrap import open_index_connection
from docchat.cli.main import app
from docchat.db.index import VectorIndex

runner = CliRunner()


# ------------------------------------------------------------------
# Fixtures
# ------------------------------------------------------------------


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "index.db"


@pytest.fixture
def doc(tmp_path: Path) -> Path:
    path = tmp_path / "notes.txt"
    path.write_text("Alpha likes cats. Beta likes dogs.", encoding="utf-8")
    return path


@pytest.fixture
def mock_embedding():
    resp = MagicMock()
    resp.data = [{"embedding": [0.1, 0.2, 0.3]}]
    with patch("docchat.rag.llm_client.litellm.embedding", return_value=resp) as mock_e:
        yield mock_e


def _count(db_path: Path, **kwargs) -> int:
    conn = open_index_connection(db_path)
    try:
        return VectorIndex(conn).count(**kwargs)
    finally:
        conn.close()


# ------------------------------------------------------------------
# Tests
# ------------------------------------------------------------------


def test_ingest_indexes_document(db_path, doc, mock_embedding):
    result = runner.invoke(
        app,
        ["ingest", "--file", str(doc), "--user", "alice", "--document-id", "doc_1",
         "--db", str(db_path), "--yes"],
    )

    assert result.exit_code == 0, result.output
    assert "doc_1" in result.output
    assert _count(db_path, namespace="alice", document_id="doc_1") == 1
    assert mock_embedding.call_count == 1


def test_ingest_generates_document_id(db_path, doc, mock_embedding):
    result = runner.invoke(
        app, ["ingest", "--file", str(doc), "--user", "alice", "--db", str(db_path), "--yes"]
    )
    assert result.exit_code == 0, result.output
    assert "doc_" in result.output


def test_ingest_dry_run_writes_nothing(db_path, doc, mock_embedding):
    result = runner.invoke(
        app,
        ["ingest", "--file", str(doc), "--user", "alice", "--db", str(db_path), "--dry-run"],
    )

    assert result.exit_code == 0, result.output
    assert "1 chunks" in result.output
    assert not db_path.exists()
    mock_embedding.assert_not_called()


def test_ingest_rejects_unsupported_type(tmp_path, db_path, mock_embedding):
    pdf = tmp_path / "paper.pdf"
    pdf.write_bytes(b"%PDF-1.7")

    result = runner.invoke(
        app, ["ingest", "--file", str(pdf), "--user", "alice", "--db", str(db_path), "--yes"]
    )

    assert result.exit_code == 1
    assert "Unsupported file type" in result.output


def test_ingest_rejects_empty_document(tmp_path, db_path, mock_embedding):
    empty = tmp_path / "empty.txt"
    empty.write_text("  \n ", encoding="utf-8")

    result = runner.invoke(
        app, ["ingest", "--file", str(empty), "--user", "alice", "--db", str(db_path), "--yes"]
    )

    assert result.exit_code == 1
    assert "no text" in result.output


def test_ingest_requires_api_key(db_path, doc, monkeypatch, mock_embedding):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    result = runner.invoke(
        app, ["ingest", "--file", str(doc), "--user", "alice", "--db", str(db_path), "--yes"]
    )

    assert result.exit_code == 1
    assert "OPENAI_API_KEY" in result.output


def test_ingest_embedding_failure(db_path, doc):
    with patch(
        "docchat.rag.llm_client.litellm.embedding", side_effect=RuntimeError("quota_exceeded")
    ):
        result = runner.invoke(
            app, ["ingest", "--file", str(doc), "--user", "alice", "--db", str(db_path), "--yes"]
        )

    assert result.exit_code == 1
    assert "quota_exceeded" in result.output
    assert _count(db_path) == 0


def test_ingest_confirmation_declined(db_path, doc, mock_embedding):
    result = runner.invoke(
        app,
        ["ingest", "--file", str(doc), "--user", "alice", "--db", str(db_path)],
        input="n\n",
    )

    assert result.exit_code == 0
    assert "Skipped" in result.output
    mock_embedding.assert_not_called()


def test_ingest_embedding_model_mismatch(db_path, doc, mock_embedding, monkeypatch):
    runner.invoke(
        app, ["ingest", "--file", str(doc), "--user", "alice", "--db", str(db_path), "--yes"]
    )
    monkeypatch.setenv("DOCCHAT_EMBEDDING_MODEL", "openai/text-embedding-3-small")

    result = runner.invoke(
        app, ["ingest", "--file", str(doc), "--user", "alice", "--db", str(db_path), "--yes"]
    )

    assert result.exit_code == 1
    assert "mismatch" in result.output


def test_reingest_same_document_id_replaces_chunks(tmp_path, db_path, mock_embedding):
    long_doc = tmp_path / "long.txt"
    long_doc.write_text(" ".join(f"Sentence {i} is here." for i in range(300)), encoding="utf-8")
    short_doc = tmp_path / "short.txt"
    short_doc.write_text("Only one short sentence.", encoding="utf-8")
    args = ["--user", "alice", "--document-id", "doc_1", "--db", str(db_path), "--yes"]

    first = runner.invoke(app, ["ingest", "--file", str(long_doc), *args])
    assert first.exit_code == 0, first.output
    assert _count(db_path, document_id="doc_1") > 1

    second = runner.invoke(app, ["ingest", "--file", str(short_doc), *args])

    assert second.exit_code == 0, second.output
    assert _count(db_path, namespace="alice", document_id="doc_1") == 1
