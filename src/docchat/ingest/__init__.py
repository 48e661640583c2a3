"""docchat ingest pipeline — normalization, chunking, embedding writer."""

from docchat.ingest.base import (
    MAX_CHUNK_SIZE,
    OVERLAP_SIZE,
    SENTENCE_LOOKAHEAD,
    BaseChunker,
    normalize_text,
)
from docchat.ingest.plaintext import PlainTextChunker

__all__ = [
    "BaseChunker",
    "MAX_CHUNK_SIZE",
    "OVERLAP_SIZE",
    "PlainTextChunker",
    "SENTENCE_LOOKAHEAD",
    "normalize_text",
]
