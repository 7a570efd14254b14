"""OpenAI chat-completion client used by the AI analysis stages.

Environment:
    OPENAI_API_KEY: OpenAI API key (required)
    LLM_MODEL: chat model id (default gpt-4o-mini)

Usage:
    llm = LLMClient()
    raw_json = await llm.complete_json(prompt)
    text = await llm.complete_text(prompt, max_tokens=500)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI

from .. import config
from ..errors import ConfigurationError, LLMClientError
from ..settings import (
    LLM_ANALYSIS_MAX_TOKENS,
    LLM_HTTP_TIMEOUT,
    LLM_MODEL,
    LLM_OVERVIEW_MAX_TOKENS,
)

logger = logging.getLogger("figdoc.integrations.llm")


def is_openai_configured() -> bool:
    return bool(config.OPENAI_API_KEY)


class LLMClient:
    """Async OpenAI wrapper. One attempt per call; no retries.

    Args:
        api_key: OpenAI key. Falls back to OPENAI_API_KEY env var.
        model: Chat model id.
        timeout: HTTP request timeout in seconds.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = LLM_MODEL,
        timeout: float = LLM_HTTP_TIMEOUT,
    ):
        key = api_key or config.OPENAI_API_KEY
        if not key:
            raise ConfigurationError("OpenAI API key not configured")
        self.model = model
        # max_retries=0: a transient failure is final for the stage
        self._client = AsyncOpenAI(api_key=key, timeout=timeout, max_retries=0)

    async def close(self) -> None:
        await self._client.close()

    async def _chat(self, prompt: str, max_tokens: int, **extra: Any) -> Optional[str]:
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
            **extra,
        }
        try:
            response = await self._client.chat.completions.create(**kwargs)
        except APIStatusError as e:
            raise LLMClientError(e.status_code, _error_body(e)) from e
        except (APITimeoutError, APIConnectionError) as e:
            raise LLMClientError(None, str(e)) from e

        if not response.choices:
            return None
        content = response.choices[0].message.content
        usage = getattr(response, "usage", None)
        if usage is not None:
            logger.info(
                "chat completion: model=%s, prompt_tokens=%s, completion_tokens=%s",
                self.model, usage.prompt_tokens, usage.completion_tokens,
            )
        return content

    async def complete_json(
        self,
        prompt: str,
        max_tokens: int = LLM_ANALYSIS_MAX_TOKENS,
    ) -> str:
        """Request a JSON-object reply and return its raw text."""
        content = await self._chat(
            prompt, max_tokens, response_format={"type": "json_object"},
        )
        if not content:
            raise LLMClientError(None, "No response from OpenAI")
        return content

    async def complete_text(
        self,
        prompt: str,
        max_tokens: int = LLM_OVERVIEW_MAX_TOKENS,
    ) -> Optional[str]:
        """Plain-text reply, or ``None`` when the model returned nothing."""
        return await self._chat(prompt, max_tokens) or None


def _error_body(error: APIStatusError) -> str:
    return error.response.text[:500] or str(error)
