"""Source deduplication for answer citations."""

from __future__ import annotations

from typing import Iterable

from docchat.models import RetrievedMatch, Source


def dedupe_sources(matches: Iterable[RetrievedMatch]) -> list[Source]:
    """Collapse *matches* into unique (document, page) sources in first-seen order."""
    seen: dict[Source, None] = {}
    for match in matches:
        seen.setdefault(Source(document_id=match.document_id, page_number=match.page_number))
    return list(seen)
