"""
llm/generation_client.py

Single text-in / text-out call to the generation provider.

Model, temperature and timeout come from config and are fixed for the
process. No retries here: retry policy belongs to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from langchain.chat_models import init_chat_model

import config
from errors import GenerationFailure, UpstreamTimeout

logger = logging.getLogger(__name__)


def build_chat_model() -> Any:
    """Chat model from config. Built on first use so tests never need an API key."""
    return init_chat_model(
        config.LLM_MODEL,
        temperature=config.LLM_TEMPERATURE,
        timeout=config.LLM_TIMEOUT_SECONDS,
        max_retries=0,
    )


def _is_timeout(exc: BaseException) -> bool:
    return isinstance(exc, TimeoutError) or "timeout" in type(exc).__name__.lower()


def _message_text(message: Any) -> str:
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        # content blocks: keep the text parts only
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)
    return "" if content is None else str(content)


class GenerationClient:

    def __init__(self, model: Optional[Any] = None):
        self._model = model

    @property
    def model(self) -> Any:
        if self._model is None:
            self._model = build_chat_model()
        return self._model

    def complete(self, prompt: str) -> str:
        if not prompt or not prompt.strip():
            raise ValueError("prompt must be a non-empty string")

        try:
            message = self.model.invoke(prompt)
        except Exception as e:
            if _is_timeout(e):
                logger.warning("Generation call timed out after %ss", config.LLM_TIMEOUT_SECONDS)
                raise UpstreamTimeout("Generation provider timed out") from e
            logger.error("Generation call failed: %s", e)
            raise GenerationFailure("Generation provider call failed") from e

        text = _message_text(message).strip()
        if not text:
            raise GenerationFailure("Generation provider returned an empty response")

        logger.debug("Generation returned %d chars", len(text))
        return text
