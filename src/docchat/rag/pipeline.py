"""RAG pipeline entry point: retrieve → assemble → generate → cite.

Steps run strictly in order, each consuming the previous step's output. Any
component failure becomes one PipelineError; no partial answer is returned.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Iterable

from docchat.errors import DocChatError, PipelineError, PipelineTimeoutError
from docchat.models import GeneratedAnswer
from docchat.rag.assembler import assemble
from docchat.rag.citations import dedupe_sources
from docchat.rag.generator import AnswerGenerator
from docchat.rag.retriever import Retriever

logger = logging.getLogger(__name__)


class RagPipeline:
    """Answer questions over a user's indexed documents."""

    def __init__(self, retriever: Retriever, generator: AnswerGenerator) -> None:
        self.retriever = retriever
        self.generator = generator

    def answer(
        self,
        query: str,
        document_scope: Iterable[str] | None,
        user_id: str,
    ) -> GeneratedAnswer:
        """Return the model's answer to *query* and the sources it was given.

        Raises:
            PipelineError: If retrieval or generation fails (cause chained).
        """
        try:
            matches = self.retriever.retrieve(query, document_scope, user_id)
            context = assemble(matches)
            text = self.generator.generate(query, context)
        except DocChatError as exc:
            logger.error("Answer pipeline failed for user %s: %s", user_id, exc)
            raise PipelineError(f"Failed to generate response: {exc}") from exc

        sources = dedupe_sources(matches)
        logger.info(
            "Answered query for user %s from %d matches (%d sources)",
            user_id,
            len(matches),
            len(sources),
        )
        return GeneratedAnswer(text=text, sources=sources)


def answer_with_timeout(
    pipeline: RagPipeline,
    query: str,
    document_scope: Iterable[str] | None,
    user_id: str,
    timeout: float,
) -> GeneratedAnswer:
    """Run ``pipeline.answer`` with a deadline of *timeout* seconds.

    The call runs on a daemon thread. On timeout it is abandoned: its eventual
    result is discarded and it does not keep the interpreter alive at exit.

    Raises:
        PipelineTimeoutError: If the answer is not ready in time.
        PipelineError: If the pipeline fails first.
    """
    if timeout <= 0:
        raise ValueError("timeout must be > 0")
    future: Future[GeneratedAnswer] = Future()

    def _run() -> None:
        try:
            future.set_result(pipeline.answer(query, document_scope, user_id))
        except Exception as exc:
            future.set_exception(exc)

    threading.Thread(target=_run, name="docchat-answer", daemon=True).start()
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError as exc:
        logger.warning("Answer for user %s abandoned after %gs", user_id, timeout)
        raise PipelineTimeoutError(
            f"No answer within {timeout:g}s; the request was abandoned"
        ) from exc
