"""Local LLM implementation using OpenAI-compatible API."""

import logging
from collections.abc import AsyncIterator
from typing import Any, Optional

import httpx
from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI

from tokensa.llm.base import (
    OVERLOAD_STATUSES,
    BaseLLM,
    LLMConnectionError,
    LLMOverloadError,
    LLMResponse,
    LLMResponseError,
    LLMTimeoutError,
    Message,
)

logger = logging.getLogger(__name__)


class LocalLLM(BaseLLM):
    """Local LLM via OpenAI-compatible API (Ollama /v1, vLLM, llama.cpp, etc.)."""

    def __init__(
        self,
        base_url: str,
        model: str,
        timeout: int = 120,
        api_key: str = "not-needed",  # Many local servers don't require a key
    ):
        """Initialize local LLM client.

        Args:
            base_url: OpenAI-compatible API endpoint (e.g., http://localhost:11434/v1)
            model: Model name/path
            timeout: Request timeout in seconds
            api_key: API key (often not required for local)
        """
        self._base_url = base_url
        self._model = model
        self._timeout = timeout

        self._client = AsyncOpenAI(
            base_url=base_url,
            api_key=api_key,
            timeout=httpx.Timeout(timeout, connect=10.0),
            max_retries=0,
        )

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def provider(self) -> str:
        return "openai"

    def _translate(self, exc: Exception) -> Exception:
        # APITimeoutError subclasses APIConnectionError, check it first
        if isinstance(exc, APITimeoutError):
            logger.error(f"Local LLM timeout: {exc}")
            return LLMTimeoutError(f"Local LLM request timed out after {self._timeout}s")
        if isinstance(exc, APIConnectionError):
            logger.error(f"Local LLM connection error: {exc}")
            return LLMConnectionError(f"Failed to connect to local LLM at {self._base_url}")
        if isinstance(exc, APIStatusError) and exc.status_code in OVERLOAD_STATUSES:
            logger.warning(f"Local LLM overloaded ({exc.status_code}): {exc}")
            return LLMOverloadError("Local LLM is overloaded")
        logger.error(f"Local LLM error: {exc}")
        return LLMResponseError(str(exc))

    async def complete(
        self,
        messages: list[Message],
        *,
        temperature: float = 0.5,
        top_p: float = 0.9,
        max_tokens: int = 200,
        seed: Optional[int] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate completion using local LLM."""
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[m.to_dict() for m in messages],
                temperature=temperature,
                top_p=top_p,
                max_tokens=max_tokens,
                seed=seed,
                **kwargs,
            )
        except (APIConnectionError, APIStatusError) as e:
            raise self._translate(e) from e

        choice = response.choices[0]
        return LLMResponse(
            content=choice.message.content or "",
            model=response.model,
            usage={
                "prompt_tokens": response.usage.prompt_tokens if response.usage else 0,
                "completion_tokens": response.usage.completion_tokens if response.usage else 0,
            },
            finish_reason=choice.finish_reason,
            raw_response=response,
        )

    async def stream(
        self,
        messages: list[Message],
        *,
        temperature: float = 0.5,
        top_p: float = 0.9,
        max_tokens: int = 200,
        seed: Optional[int] = None,
        **kwargs: Any,
    ) -> AsyncIterator[str]:
        """Yield content deltas from a streamed chat completion."""
        try:
            stream = await self._client.chat.completions.create(
                model=self._model,
                messages=[m.to_dict() for m in messages],
                temperature=temperature,
                top_p=top_p,
                max_tokens=max_tokens,
                seed=seed,
                stream=True,
                **kwargs,
            )
            async for chunk in stream:
                if not chunk.choices:
                    continue
                text = chunk.choices[0].delta.content
                if text:
                    yield text
        except (APIConnectionError, APIStatusError) as e:
            raise self._translate(e) from e

    async def health_check(self) -> bool:
        """Check if local LLM is available."""
        try:
            await self._client.models.list()
            return True
        except Exception as e:
            logger.debug(f"Local LLM health check failed: {e}")
            return False

    async def aclose(self) -> None:
        await self._client.close()
