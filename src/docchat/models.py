"""Domain models shared by the ingest and answer pipelines."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

EmbeddingVector = list[float]

# Plain text carries no page structure; every chunk is cited as page 1.
DEFAULT_PAGE_NUMBER = 1


@dataclass(frozen=True)
class Chunk:
    text: str
    source_document_id: str
    sequence_index: int


@dataclass
class IndexedVector:
    """A vector as written to the index.

    ``metadata`` uses the index's wire names: ``text``, ``documentId``,
    ``userId``, ``pageNumber``, ``chunkIndex`` (plus document-level fields).
    """

    id: str
    values: EmbeddingVector
    metadata: dict = field(default_factory=dict)


@dataclass(frozen=True)
class RetrievedMatch:
    text: str
    document_id: str
    page_number: int
    score: float


@dataclass(frozen=True)
class Source:
    document_id: str
    page_number: int


@dataclass
class GeneratedAnswer:
    text: str
    sources: list[Source] = field(default_factory=list)


def new_document_id() -> str:
    return f"doc_{uuid.uuid4()}"


@dataclass
class DocumentMetadata:
    """Document-level fields copied into every vector's metadata."""

    document_id: str = field(default_factory=new_document_id)
    filename: str = ""
    file_type: str = ""
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def as_metadata(self) -> dict:
        return {
            "filename": self.filename,
            "fileType": self.file_type,
            "timestamp": self.timestamp,
        }
