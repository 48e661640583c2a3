"""Exception taxonomy for the docchat ingest + answer pipeline.

Every component fails fast and raises one of these with ``raise ... from exc``
so the upstream cause stays attached. No component retries internally.
"""

from __future__ import annotations


class DocChatError(Exception):
    """Base class for all docchat failures."""


class EmbeddingServiceError(DocChatError):
    """The embedding service errored, timed out, or returned no vector."""


class VectorIndexError(DocChatError):
    """Base class for vector index failures."""


class IndexWriteError(VectorIndexError):
    """An upsert batch failed.

    Batches written before the failing one stay committed; ``written`` is the
    number of vectors already in the index when the failure happened.
    """

    def __init__(self, message: str, written: int = 0) -> None:
        super().__init__(message)
        self.written = written


class IndexQueryError(VectorIndexError):
    """A similarity query against the index failed."""


class IndexDeleteError(VectorIndexError):
    """Deleting a document's vectors failed."""


class RetrievalError(DocChatError):
    """Query-time embedding or index lookup failed."""


class GenerationError(DocChatError):
    """The completion service failed or returned an empty/malformed answer."""


class UnsupportedInputError(DocChatError, ValueError):
    """The document cannot be ingested (unsupported type or no text)."""


class PipelineError(DocChatError):
    """A question could not be answered. The cause is chained."""


class PipelineTimeoutError(PipelineError):
    """The pipeline did not finish within the caller's timeout."""
