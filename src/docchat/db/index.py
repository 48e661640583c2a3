"""Vector index adapter over a sqlite-vec database.

Vectors live in the ``vectors`` table, partitioned by namespace (one per user).
Similarity is cosine: ``score = 1 - vec_distance_cosine(a, b)``, so results
come back best-first in [-1, 1].

The adapter never caches vectors; the database is the system of record.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from dataclasses import dataclass
from typing import Any, Iterable

from docchat.db.vectors import compile_filter, encode_vector
from docchat.errors import IndexDeleteError, IndexQueryError, IndexWriteError
from docchat.models import DEFAULT_PAGE_NUMBER, IndexedVector, RetrievedMatch

logger = logging.getLogger(__name__)

# Maximum vectors written per upsert call.
UPSERT_BATCH_SIZE = 100

_UPSERT_SQL = """
INSERT INTO vectors (namespace, id, document_id, embedding, metadata)
VALUES (?, ?, ?, ?, ?)
ON CONFLICT(namespace, id) DO UPDATE SET
    document_id = excluded.document_id,
    embedding   = excluded.embedding,
    metadata    = excluded.metadata,
    updated_at  = datetime('now')
"""


@dataclass
class IndexedDocument:
    """Per-document summary of what a namespace holds."""

    document_id: str
    filename: str
    vector_count: int


class VectorIndex:
    """Upsert, query, and delete vectors in the sqlite-vec index.

    The connection is opened once at startup and injected here. All access to
    it goes through one lock, so a single index may serve concurrent callers.

    Args:
        conn: Open connection with sqlite-vec loaded and schema initialised
            (see docchat.db.schema.initialize).
        batch_size: Vectors per upsert batch.
        embedding_model: Model recorded in ``index_meta`` on first write.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        batch_size: int = UPSERT_BATCH_SIZE,
        embedding_model: str | None = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self._conn = conn
        self._lock = threading.RLock()
        self.batch_size = batch_size
        self.embedding_model = embedding_model

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert(self, vectors: Iterable[IndexedVector], namespace: str) -> int:
        """Write *vectors* into *namespace* in sequential batches.

        Each batch commits on its own. If a batch fails, the batches before it
        stay committed and IndexWriteError reports how many were written.

        Returns:
            Number of vectors written.
        """
        if not namespace:
            raise IndexWriteError("A namespace is required for upsert")

        items = list(vectors)
        written = 0
        for batch_no, start in enumerate(range(0, len(items), self.batch_size), 1):
            batch = items[start : start + self.batch_size]
            with self._lock:
                try:
                    self._write_batch(batch, namespace)
                except (sqlite3.Error, ValueError) as exc:
                    self._conn.rollback()
                    logger.warning(
                        "Upsert batch %d failed in namespace %s; %d vectors already committed",
                        batch_no,
                        namespace,
                        written,
                    )
                    raise IndexWriteError(
                        f"Failed to store vectors (batch {batch_no}): {exc}",
                        written=written,
                    ) from exc
            written += len(batch)
            logger.debug(
                "Upserted batch %d (%d vectors) into namespace %s",
                batch_no,
                len(batch),
                namespace,
            )
        return written

    def _write_batch(self, batch: list[IndexedVector], namespace: str) -> None:
        dims = {len(v.values) for v in batch}
        if 0 in dims:
            raise ValueError("cannot index an empty vector")
        if len(dims) != 1:
            raise ValueError(f"mixed vector dimensions in batch: {sorted(dims)}")
        self._ensure_dimensions(dims.pop())

        rows = []
        for v in batch:
            document_id = v.metadata.get("documentId")
            if not document_id:
                raise ValueError(f"vector '{v.id}' has no documentId in metadata")
            rows.append(
                (
                    namespace,
                    v.id,
                    str(document_id),
                    encode_vector(v.values),
                    json.dumps(v.metadata),
                )
            )
        self._conn.executemany(_UPSERT_SQL, rows)
        self._conn.commit()

    def _ensure_dimensions(self, dims: int) -> None:
        """Record the index dimension on first write; reject mismatches after."""
        stored = self._get_meta("dimensions")
        if stored is None:
            self._conn.execute(
                "INSERT INTO index_meta (key, value) VALUES ('dimensions', ?)", (str(dims),)
            )
            if self.embedding_model:
                self._conn.execute(
                    "INSERT OR REPLACE INTO index_meta (key, value) VALUES ('embedding_model', ?)",
                    (self.embedding_model,),
                )
        elif int(stored) != dims:
            raise ValueError(
                f"vector dimension {dims} does not match index dimension {stored}"
            )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def query(
        self,
        vector: list[float],
        top_k: int,
        namespace: str,
        filter: dict[str, Any] | None = None,
    ) -> list[RetrievedMatch]:
        """Return up to *top_k* matches in *namespace*, best score first.

        Raises:
            IndexQueryError: On a malformed filter or a database error
                (including a query vector of the wrong dimension).
        """
        if top_k < 1:
            raise IndexQueryError(f"top_k must be >= 1, got {top_k}")
        try:
            where_sql, where_params = compile_filter(filter)
        except ValueError as exc:
            raise IndexQueryError(f"Invalid metadata filter: {exc}") from exc

        sql = (
            "SELECT id, metadata, vec_distance_cosine(embedding, ?) AS distance "
            "FROM vectors WHERE namespace = ?"
        )
        if where_sql:
            sql += f" AND ({where_sql})"
        sql += " ORDER BY distance ASC, id ASC LIMIT ?"
        params = [encode_vector(vector), namespace, *where_params, top_k]

        with self._lock:
            try:
                rows = self._conn.execute(sql, params).fetchall()
            except sqlite3.Error as exc:
                raise IndexQueryError(f"Vector query failed: {exc}") from exc

        return [_row_to_match(row) for row in rows]

    def list_documents(self, namespace: str) -> list[IndexedDocument]:
        """Return the documents stored in *namespace*, oldest first."""
        with self._lock:
            try:
                rows = self._conn.execute(
                    """
                    SELECT document_id,
                           MAX(json_extract(metadata, '$.filename')) AS filename,
                           COUNT(*) AS n
                    FROM vectors WHERE namespace = ?
                    GROUP BY document_id
                    ORDER BY MIN(updated_at), document_id
                    """,
                    (namespace,),
                ).fetchall()
            except sqlite3.Error as exc:
                raise IndexQueryError(f"Listing documents failed: {exc}") from exc
        return [
            IndexedDocument(
                document_id=r["document_id"],
                filename=r["filename"] or "",
                vector_count=r["n"],
            )
            for r in rows
        ]

    def count(self, namespace: str | None = None, document_id: str | None = None) -> int:
        """Return the number of stored vectors, optionally narrowed by namespace or document."""
        clauses: list[str] = []
        params: list[str] = []
        if namespace is not None:
            clauses.append("namespace = ?")
            params.append(namespace)
        if document_id is not None:
            clauses.append("document_id = ?")
            params.append(document_id)
        sql = "SELECT COUNT(*) FROM vectors"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        with self._lock:
            row = self._conn.execute(sql, params).fetchone()
        return row[0]

    def stored_embedding_model(self) -> str | None:
        """Return the embedding model recorded on first write, if any."""
        with self._lock:
            return self._get_meta("embedding_model")

    def _get_meta(self, key: str) -> str | None:
        row = self._conn.execute(
            "SELECT value FROM index_meta WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else None

    # ------------------------------------------------------------------
    # Deletes
    # ------------------------------------------------------------------

    def delete_by_document(self, document_id: str, namespace: str | None = None) -> int:
        """Delete every vector whose ``documentId`` is *document_id*.

        Every namespace is searched unless *namespace* is given.

        Returns:
            Number of vectors deleted.
        """
        with self._lock:
            try:
                if namespace is None:
                    cur = self._conn.execute(
                        "DELETE FROM vectors WHERE document_id = ?", (document_id,)
                    )
                else:
                    cur = self._conn.execute(
                        "DELETE FROM vectors WHERE namespace = ? AND document_id = ?",
                        (namespace, document_id),
                    )
                self._conn.commit()
            except sqlite3.Error as exc:
                self._conn.rollback()
                raise IndexDeleteError(
                    f"Failed to delete vectors for document '{document_id}': {exc}"
                ) from exc
        logger.info("Deleted %d vectors for document %s", cur.rowcount, document_id)
        return cur.rowcount


# ------------------------------------------------------------------
# Row → model helpers
# ------------------------------------------------------------------


def _row_to_match(row: sqlite3.Row) -> RetrievedMatch:
    meta = json.loads(row["metadata"])
    return RetrievedMatch(
        text=meta.get("text", ""),
        document_id=meta.get("documentId", ""),
        page_number=int(meta.get("pageNumber", DEFAULT_PAGE_NUMBER)),
        score=1.0 - float(row["distance"]),
    )
