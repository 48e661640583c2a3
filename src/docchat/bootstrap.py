"""Explicit construction of the shared services, once per process.

The index connection and embedding cache are created here and handed to every
component that needs them, rather than created lazily on first use.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path

from docchat.config import DocChatConfig
from docchat.db.connection import Database
from docchat.db.index import VectorIndex
from docchat.db.schema import initialize
from docchat.ingest.embedding_writer import EmbeddingWriter
from docchat.ingest.plaintext import PlainTextChunker
from docchat.rag.embeddings import EmbeddingCache, EmbeddingGateway, InMemoryEmbeddingCache
from docchat.rag.generator import AnswerGenerator, GeneratorConfig
from docchat.rag.pipeline import RagPipeline
from docchat.rag.retriever import Retriever, RetrieverConfig


@dataclass
class Services:
    """Every long-lived component, wired together."""

    conn: sqlite3.Connection
    index: VectorIndex
    gateway: EmbeddingGateway
    chunker: PlainTextChunker
    writer: EmbeddingWriter
    retriever: Retriever
    generator: AnswerGenerator
    pipeline: RagPipeline

    def close(self) -> None:
        self.conn.close()


def open_index_connection(db_path: Path | str) -> sqlite3.Connection:
    """Open (or create) the index database and run migrations."""
    conn = Database(db_path).connect()
    initialize(conn)
    return conn


def chunker_from_config(cfg: DocChatConfig) -> PlainTextChunker:
    return PlainTextChunker(
        max_chunk_size=cfg.chunking.max_chunk_size,
        overlap=cfg.chunking.overlap,
        sentence_lookahead=cfg.chunking.sentence_lookahead,
    )


def build_services(
    cfg: DocChatConfig,
    conn: sqlite3.Connection | None = None,
    cache: EmbeddingCache | None = None,
) -> Services:
    """Wire all components from *cfg*.

    Args:
        cfg: Loaded configuration.
        conn: Existing index connection; opened from ``cfg.index.path`` if omitted.
        cache: Embedding cache; a fresh in-memory cache if omitted.
    """
    if conn is None:
        conn = open_index_connection(cfg.index.path)

    index = VectorIndex(
        conn,
        batch_size=cfg.index.batch_size,
        embedding_model=cfg.embedding.model,
    )
    gateway = EmbeddingGateway(
        model=cfg.embedding.model,
        cache=cache if cache is not None else InMemoryEmbeddingCache(),
        num_retries=cfg.embedding.num_retries,
    )
    chunker = chunker_from_config(cfg)
    retriever = Retriever(gateway, index, RetrieverConfig(top_k=cfg.retrieval.top_k))
    generator = AnswerGenerator(
        GeneratorConfig(
            model=cfg.generation.model,
            temperature=cfg.generation.temperature,
            max_tokens=cfg.generation.max_tokens,
            num_retries=cfg.generation.num_retries,
        )
    )
    return Services(
        conn=conn,
        index=index,
        gateway=gateway,
        chunker=chunker,
        writer=EmbeddingWriter(gateway, index, max_workers=cfg.embedding.max_workers),
        retriever=retriever,
        generator=generator,
        pipeline=RagPipeline(retriever, generator),
    )
