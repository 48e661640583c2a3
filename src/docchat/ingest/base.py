"""Base chunker interface and text normalization."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod

from docchat.models import Chunk

# Nominal window length in characters.
MAX_CHUNK_SIZE = 1000
# Characters shared by consecutive windows; must stay below MAX_CHUNK_SIZE or
# the cursor stops advancing.
OVERLAP_SIZE = 200
# How far past the nominal window end to look for a sentence terminator.
# A chunk therefore never exceeds MAX_CHUNK_SIZE + SENTENCE_LOOKAHEAD characters.
SENTENCE_LOOKAHEAD = 100

_WHITESPACE_RE = re.compile(r"\s+")
_NEWLINES_RE = re.compile(r"\n+")


def normalize_text(text: str) -> str:
    """Collapse whitespace runs to single spaces and newline runs to one, then trim."""
    text = _WHITESPACE_RE.sub(" ", text)
    text = _NEWLINES_RE.sub("\n", text)
    return text.strip()


class BaseChunker(ABC):
    """Abstract base for chunkers.

    Subclasses implement ``chunk()`` and use ``_make_chunks()`` to number the
    emitted segments.
    """

    def __init__(
        self,
        max_chunk_size: int = MAX_CHUNK_SIZE,
        overlap: int = OVERLAP_SIZE,
    ) -> None:
        if max_chunk_size < 1:
            raise ValueError("max_chunk_size must be >= 1")
        if not 0 <= overlap < max_chunk_size:
            raise ValueError("overlap must be in [0, max_chunk_size)")
        self.max_chunk_size = max_chunk_size
        self.overlap = overlap

    @property
    def step(self) -> int:
        """Distance between consecutive window starts."""
        return self.max_chunk_size - self.overlap

    @abstractmethod
    def chunk(self, document_id: str, text: str) -> list[Chunk]:
        """Split normalized *text* into Chunk objects for *document_id*.

        Returns:
            Ordered list of Chunk objects with sequential ``sequence_index``.
        """

    def _make_chunks(self, document_id: str, texts: list[str]) -> list[Chunk]:
        """Convert text segments into sequentially indexed Chunks, skipping empties."""
        return [
            Chunk(text=t, source_document_id=document_id, sequence_index=i)
            for i, t in enumerate(t for t in texts if t)
        ]
