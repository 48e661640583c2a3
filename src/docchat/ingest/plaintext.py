"""Plain text chunker — sentence-aware fixed window with overlap."""

from __future__ import annotations

from docchat.ingest.base import (
    MAX_CHUNK_SIZE,
    OVERLAP_SIZE,
    SENTENCE_LOOKAHEAD,
    BaseChunker,
)
from docchat.models import Chunk


class PlainTextChunker(BaseChunker):
    """Split normalized text into overlapping windows that prefer sentence ends.

    Each window nominally spans ``max_chunk_size`` characters. When the window
    ends inside the text, its end moves:

    1. just past the first ``.`` within ``sentence_lookahead`` characters of
       the nominal end, otherwise
    2. back to the last space at or before the nominal end that still lies at
       or past the next window's start, otherwise
    3. nowhere (a hard split through an over-long token).

    Window starts advance by ``max_chunk_size - overlap``, so consecutive
    chunks share ``overlap`` characters and their union covers the text.
    """

    def __init__(
        self,
        max_chunk_size: int = MAX_CHUNK_SIZE,
        overlap: int = OVERLAP_SIZE,
        sentence_lookahead: int = SENTENCE_LOOKAHEAD,
    ) -> None:
        super().__init__(max_chunk_size=max_chunk_size, overlap=overlap)
        if sentence_lookahead < 0:
            raise ValueError("sentence_lookahead must be >= 0")
        self.sentence_lookahead = sentence_lookahead

    def chunk(self, document_id: str, text: str) -> list[Chunk]:
        if not text.strip():
            return []
        return self._make_chunks(document_id, self._split(text))

    def _split(self, text: str) -> list[str]:
        segments: list[str] = []
        length = len(text)
        start = 0

        while start < length:
            end = start + self.max_chunk_size
            if end < length:
                end = self._adjust_end(text, start, end)
            else:
                end = length

            segments.append(text[start:end].strip())

            start = min(start + self.step, length)
            # With zero overlap a hard split can stop one short of the end;
            # that last character still needs a window.
            if start >= length - 1 and end >= length:
                break

        return segments

    def _adjust_end(self, text: str, start: int, end: int) -> int:
        """Return the window end, preferring a nearby period, then a space.

        The space search stops at ``start + step``: when the only space in the
        window lies before the next window's start, the window hard splits at
        *end* instead of backing off there, so no text falls between windows.
        """
        period = text.find(".", end)
        if period != -1 and period - end < self.sentence_lookahead:
            return period + 1
        space = text.rfind(" ", start + self.step, end + 1)
        if space != -1:
            return space
        return end
