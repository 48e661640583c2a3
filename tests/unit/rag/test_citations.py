"""Tests for source deduplication."""

from __future__ import annotations

from docchat.models import RetrievedMatch, Source
from docchat.rag.citations import dedupe_sources


def _m(doc: str, page: int, text: str = "t") -> RetrievedMatch:
    return RetrievedMatch(text=text, document_id=doc, page_number=page, score=0.1)


def test_dedupe_first_seen_order():
    sources = dedupe_sources([_m("A", 1), _m("A", 1, "other"), _m("B", 2)])
    assert sources == [Source("A", 1), Source("B", 2)]


def test_same_document_different_pages_kept():
    sources = dedupe_sources([_m("A", 2), _m("A", 1), _m("A", 2)])
    assert sources == [Source("A", 2), Source("A", 1)]


def test_empty():
    assert dedupe_sources([]) == []
