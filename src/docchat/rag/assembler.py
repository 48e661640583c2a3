"""Context assembler: format retrieved chunks into a source-tagged prompt context."""

from __future__ import annotations

from typing import Iterable

from docchat.models import RetrievedMatch


def format_block(position: int, match: RetrievedMatch) -> str:
    """Render one match as a ``[Source n]`` block (*position* is 1-based)."""
    return (
        f"[Source {position}]\n"
        f"{match.text}\n"
        f"Document: {match.document_id}, Page: {match.page_number}"
    )


def assemble(matches: Iterable[RetrievedMatch]) -> str:
    """Join every match, in rank order, into one context string.

    Blocks are separated by a blank line. Nothing is truncated or dropped.
    """
    return "\n\n".join(format_block(i, m) for i, m in enumerate(matches, 1))
