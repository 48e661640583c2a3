"""Embedding gateway with an injectable, thread-safe cache.

Cache keys are the trimmed, case-folded input text. Embeddings for identical
text are assumed deterministic, so an entry never goes stale. Failed calls are
never cached.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable

from docchat.errors import EmbeddingServiceError
from docchat.rag import llm_client

logger = logging.getLogger(__name__)


def cache_key(text: str) -> str:
    return text.strip().casefold()


class EmbeddingCache(ABC):
    """Abstract embedding cache keyed by normalized text."""

    @abstractmethod
    def get(self, key: str) -> list[float] | None:
        """Return a copy of the cached vector for *key*, or None."""

    @abstractmethod
    def put(self, key: str, vector: list[float]) -> None:
        """Store *vector* under *key*."""

    @abstractmethod
    def clear(self) -> None:
        """Drop every cached vector."""

    @abstractmethod
    def __len__(self) -> int: ...


class InMemoryEmbeddingCache(EmbeddingCache):
    """Process-lifetime cache guarded by a lock.

    Vectors are stored as tuples, so a reader always gets a complete vector.
    Two simultaneous misses on the same key may both compute it; the last
    write wins, which is harmless because the values are identical.
    """

    def __init__(self, initial: dict[str, list[float]] | None = None) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[float, ...]] = {}
        for key, vector in (initial or {}).items():
            self._entries[cache_key(key)] = tuple(vector)

    def get(self, key: str) -> list[float] | None:
        with self._lock:
            entry = self._entries.get(key)
        return list(entry) if entry is not None else None

    def put(self, key: str, vector: list[float]) -> None:
        frozen = tuple(vector)
        with self._lock:
            self._entries[key] = frozen

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class NullEmbeddingCache(EmbeddingCache):
    """Cache that stores nothing; every embed goes upstream."""

    def get(self, key: str) -> list[float] | None:
        return None

    def put(self, key: str, vector: list[float]) -> None:
        pass

    def clear(self) -> None:
        pass

    def __len__(self) -> int:
        return 0


class EmbeddingGateway:
    """Turn text into embedding vectors, consulting the cache first.

    Args:
        model: LiteLLM embedding model string (provider/model format).
        cache: Cache instance; defaults to a fresh InMemoryEmbeddingCache.
        num_retries: Passed through to LiteLLM (0 = fail on first error).
    """

    def __init__(
        self,
        model: str = "openai/text-embedding-ada-002",
        cache: EmbeddingCache | None = None,
        num_retries: int = 0,
    ) -> None:
        self.model = model
        self.cache = cache if cache is not None else InMemoryEmbeddingCache()
        self.num_retries = num_retries
        self.cache_hits = 0
        self.upstream_calls = 0
        self._counter_lock = threading.Lock()

    def embed(self, text: str) -> list[float]:
        """Return the embedding for *text*.

        Raises:
            EmbeddingServiceError: If the upstream call fails or returns no vector.
        """
        key = cache_key(text)
        cached = self.cache.get(key)
        if cached is not None:
            with self._counter_lock:
                self.cache_hits += 1
            logger.debug("Embedding cache hit (%d chars)", len(key))
            return cached

        with self._counter_lock:
            self.upstream_calls += 1
        logger.debug("Embedding cache miss (%d chars) — calling %s", len(key), self.model)
        try:
            vector = llm_client.embed(self.model, text, num_retries=self.num_retries)
        except Exception as exc:
            raise EmbeddingServiceError(
                f"Failed to generate text embedding with '{self.model}': {exc}"
            ) from exc

        if not vector:
            raise EmbeddingServiceError(
                f"Embedding service '{self.model}' returned an empty vector"
            )
        vector = [float(v) for v in vector]
        self.cache.put(key, vector)
        return vector

    def embed_many(self, texts: Iterable[str], max_workers: int = 8) -> list[list[float]]:
        """Embed independent *texts* concurrently, preserving input order.

        At most *max_workers* upstream calls are in flight at once. The first
        failure in input order is raised after in-flight calls finish.
        """
        items = list(texts)
        if not items:
            return []
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        if max_workers == 1 or len(items) == 1:
            return [self.embed(t) for t in items]
        with ThreadPoolExecutor(max_workers=min(max_workers, len(items))) as pool:
            return list(pool.map(self.embed, items))
