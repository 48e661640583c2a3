"""Embedding writer — embed chunks and upsert them into a user's namespace.

For a document:
1. Embed every chunk through the EmbeddingGateway, with bounded concurrency
   (chunks are independent).
2. Build one IndexedVector per chunk, id ``{documentId}_chunk_{i}``, tagged
   with the owner and document id.
3. Remove any earlier version of the document from the user's namespace.
4. Upsert the vectors sequentially in batches (VectorIndex handles batching).
"""

from __future__ import annotations

import logging
from typing import Callable

from docchat.db.index import VectorIndex
from docchat.errors import IndexDeleteError, IndexWriteError, UnsupportedInputError
from docchat.models import DEFAULT_PAGE_NUMBER, Chunk, DocumentMetadata, IndexedVector
from docchat.rag.embeddings import EmbeddingGateway

logger = logging.getLogger(__name__)


def vector_id(document_id: str, chunk_index: int) -> str:
    return f"{document_id}_chunk_{chunk_index}"


class EmbeddingWriter:
    """Embed chunks and write them to the vector index.

    Args:
        gateway: Embedding gateway (shared cache).
        index: Vector index adapter.
        max_workers: Upper bound on concurrent embedding calls per document.
    """

    def __init__(
        self,
        gateway: EmbeddingGateway,
        index: VectorIndex,
        max_workers: int = 8,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self._gateway = gateway
        self._index = index
        self.max_workers = max_workers

    def write(
        self,
        chunks: list[Chunk],
        user_id: str,
        metadata: DocumentMetadata,
        on_progress: Callable[[str], None] | None = None,
    ) -> int:
        """Embed *chunks* and upsert them under *user_id*. Returns vectors written.

        Raises:
            UnsupportedInputError: If *chunks* is empty.
            EmbeddingServiceError: If any chunk fails to embed (nothing is written).
            IndexWriteError: If a batch write fails (earlier batches stay written)
                or an earlier version of the document cannot be removed.
        """
        if not chunks:
            raise UnsupportedInputError(
                f"Document '{metadata.filename or metadata.document_id}' has no text to index"
            )

        if on_progress:
            on_progress("embedding")
        embeddings = self._gateway.embed_many(
            [c.text for c in chunks], max_workers=self.max_workers
        )

        vectors = [
            self._build_vector(chunk, values, user_id, metadata)
            for chunk, values in zip(chunks, embeddings)
        ]

        self._clear_previous(metadata.document_id, user_id)

        if on_progress:
            on_progress("writing")
        written = self._index.upsert(vectors, namespace=user_id)
        logger.info(
            "Indexed %d chunks for document %s (user %s)",
            written,
            metadata.document_id,
            user_id,
        )
        return written

    def _clear_previous(self, document_id: str, user_id: str) -> None:
        """Drop an earlier version of *document_id* so no stale chunk outlives it."""
        previous = self._index.count(namespace=user_id, document_id=document_id)
        if not previous:
            return
        try:
            self._index.delete_by_document(document_id, namespace=user_id)
        except IndexDeleteError as exc:
            raise IndexWriteError(
                f"Could not replace existing document '{document_id}': {exc}", written=0
            ) from exc
        logger.info(
            "Replaced %d existing vectors for document %s (user %s)",
            previous,
            document_id,
            user_id,
        )

    @staticmethod
    def _build_vector(
        chunk: Chunk,
        values: list[float],
        user_id: str,
        metadata: DocumentMetadata,
    ) -> IndexedVector:
        return IndexedVector(
            id=vector_id(metadata.document_id, chunk.sequence_index),
            values=values,
            metadata={
                **metadata.as_metadata(),
                "text": chunk.text,
                "documentId": metadata.document_id,
                "userId": user_id,
                "pageNumber": DEFAULT_PAGE_NUMBER,
                "chunkIndex": chunk.sequence_index,
            },
        )
