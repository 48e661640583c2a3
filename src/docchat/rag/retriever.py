"""Retriever: embed the query, then top-K similarity search in the user's namespace.

Retrieval is all-or-nothing: an embedding or index failure surfaces as
RetrievalError, never as a shorter result list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from docchat.db.index import VectorIndex
from docchat.errors import EmbeddingServiceError, RetrievalError, VectorIndexError
from docchat.models import RetrievedMatch
from docchat.rag.embeddings import EmbeddingGateway

logger = logging.getLogger(__name__)

# Number of chunks retrieved per query.
TOP_K = 5


@dataclass
class RetrieverConfig:
    """Configuration for the retriever.

    Attributes:
        top_k: Maximum number of matches returned per query.
    """

    top_k: int = TOP_K


def build_filter(document_scope: Iterable[str] | None) -> dict | None:
    """Restrict matches to *document_scope*; None/empty means all of the user's documents."""
    scope = sorted(set(document_scope or ()))
    if not scope:
        return None
    return {"documentId": {"$in": scope}}


class Retriever:
    """Produce ranked, user-scoped chunk matches for a query."""

    def __init__(
        self,
        gateway: EmbeddingGateway,
        index: VectorIndex,
        config: RetrieverConfig | None = None,
    ) -> None:
        self._gateway = gateway
        self._index = index
        self.config = config or RetrieverConfig()

    def retrieve(
        self,
        query: str,
        document_scope: Iterable[str] | None,
        user_id: str,
    ) -> list[RetrievedMatch]:
        """Return up to ``top_k`` matches for *query*, best score first.

        Raises:
            RetrievalError: If embedding the query or querying the index fails.
        """
        try:
            query_vector = self._gateway.embed(query)
        except EmbeddingServiceError as exc:
            raise RetrievalError(f"Failed to retrieve relevant information: {exc}") from exc

        flt = build_filter(document_scope)
        try:
            matches = self._index.query(
                query_vector,
                top_k=self.config.top_k,
                namespace=user_id,
                filter=flt,
            )
        except VectorIndexError as exc:
            raise RetrievalError(f"Failed to retrieve relevant information: {exc}") from exc

        logger.debug(
            "Retrieved %d matches for user %s (scope: %s)",
            len(matches),
            user_id,
            "all" if flt is None else len(flt["documentId"]["$in"]),
        )
        return matches
