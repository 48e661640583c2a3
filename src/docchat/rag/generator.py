"""Answer generator: prompt the completion model with the assembled context."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from docchat.errors import GenerationError
from docchat.rag.llm_client import complete

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant. Use the following context to answer the question. "
    "If you don't know the answer, say you don't know.\n\n"
    "Context: {context}"
)


@dataclass
class GeneratorConfig:
    model: str = "openai/gpt-4"
    temperature: float = 0.7
    max_tokens: int = 1000
    num_retries: int = 0


def build_messages(query: str, context: str) -> list[dict]:
    """Return the system + user turns for *query* grounded on *context*."""
    return [
        {"role": "system", "content": SYSTEM_PROMPT.format(context=context)},
        {"role": "user", "content": query},
    ]


class AnswerGenerator:
    """Ask the completion service to answer *query* from *context*."""

    def __init__(self, config: GeneratorConfig | None = None) -> None:
        self.config = config or GeneratorConfig()

    def generate(self, query: str, context: str) -> str:
        """Return the trimmed text of the first completion choice.

        Raises:
            GenerationError: On upstream failure, a malformed response, or an
                empty answer.
        """
        cfg = self.config
        try:
            raw = complete(
                model=cfg.model,
                messages=build_messages(query, context),
                max_tokens=cfg.max_tokens,
                temperature=cfg.temperature,
                num_retries=cfg.num_retries,
            )
        except Exception as exc:
            raise GenerationError(
                f"Failed to generate response from '{cfg.model}': {exc}"
            ) from exc

        if not isinstance(raw, str):
            raise GenerationError(f"Malformed completion from '{cfg.model}'")
        text = raw.strip()
        if not text:
            raise GenerationError(f"Empty completion from '{cfg.model}'")
        logger.debug("Generated %d-character answer with %s", len(text), cfg.model)
        return text
