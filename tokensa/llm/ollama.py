"""Ollama LLM implementation using the native chat API."""

import json
import logging
from collections.abc import AsyncIterator
from typing import Any, Optional

import httpx

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


class OllamaLLM(BaseLLM):
    """Local model served by an Ollama daemon (/api/chat, /api/tags)."""

    def __init__(
        self,
        base_url: str,
        model: str,
        timeout: int = 120,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Ollama client.

        Args:
            base_url: Ollama daemon URL (e.g., http://localhost:11434)
            model: Model tag (e.g., qwen3:4b)
            timeout: Request timeout in seconds
            transport: Optional httpx transport, mainly for tests
        """
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._timeout = timeout

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(timeout, connect=10.0),
            transport=transport,
        )

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def provider(self) -> str:
        return "ollama"

    def _payload(
        self,
        messages: list[Message],
        *,
        stream: bool,
        temperature: float,
        top_p: float,
        max_tokens: int,
        seed: Optional[int],
        **kwargs: Any,
    ) -> dict[str, Any]:
        options: dict[str, Any] = {
            "temperature": temperature,
            "top_p": top_p,
            "num_predict": max_tokens,
        }
        if seed is not None:
            options["seed"] = seed
        options.update(kwargs)
        return {
            "model": self._model,
            "stream": stream,
            "messages": [m.to_dict() for m in messages],
            "options": options,
        }

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.is_success:
            return
        try:
            detail = response.json().get("error") or response.text
        except ValueError:
            detail = response.text
        if response.status_code in OVERLOAD_STATUSES:
            logger.warning(f"Ollama overloaded ({response.status_code}): {detail}")
            raise LLMOverloadError(f"Ollama is overloaded: {detail}")
        logger.error(f"Ollama returned {response.status_code}: {detail}")
        raise LLMResponseError(f"Ollama returned {response.status_code}: {detail}")

    def _translate(self, exc: httpx.HTTPError) -> Exception:
        if isinstance(exc, httpx.TimeoutException):
            logger.error(f"Ollama timeout: {exc}")
            return LLMTimeoutError(f"Ollama request timed out after {self._timeout}s")
        logger.error(f"Ollama connection error: {exc}")
        return LLMConnectionError(f"Failed to connect to Ollama at {self._base_url}")

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
        """Generate the full completion in one response."""
        payload = self._payload(
            messages,
            stream=False,
            temperature=temperature,
            top_p=top_p,
            max_tokens=max_tokens,
            seed=seed,
            **kwargs,
        )
        try:
            response = await self._client.post("/api/chat", json=payload)
        except httpx.HTTPError as e:
            raise self._translate(e) from e

        self._raise_for_status(response)
        try:
            data = response.json()
        except ValueError as e:
            raise LLMResponseError("Ollama returned invalid JSON") from e
        if data.get("error"):
            raise LLMResponseError(str(data["error"]))

        return LLMResponse(
            content=(data.get("message") or {}).get("content", ""),
            model=data.get("model", self._model),
            usage={
                "prompt_tokens": data.get("prompt_eval_count", 0),
                "completion_tokens": data.get("eval_count", 0),
            },
            finish_reason=data.get("done_reason"),
            raw_response=data,
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
        """Yield message fragments as Ollama emits its NDJSON lines."""
        payload = self._payload(
            messages,
            stream=True,
            temperature=temperature,
            top_p=top_p,
            max_tokens=max_tokens,
            seed=seed,
            **kwargs,
        )
        try:
            async with self._client.stream("POST", "/api/chat", json=payload) as response:
                if not response.is_success:
                    await response.aread()
                    self._raise_for_status(response)

                async for line in response.aiter_lines():
                    if not line.strip():
                        continue
                    try:
                        chunk = json.loads(line)
                    except json.JSONDecodeError:
                        logger.warning(f"Skipping malformed stream line: {line[:80]}")
                        continue
                    if chunk.get("error"):
                        raise LLMResponseError(str(chunk["error"]))
                    text = (chunk.get("message") or {}).get("content", "")
                    if text:
                        yield text
                    if chunk.get("done"):
                        break
        except httpx.HTTPError as e:
            raise self._translate(e) from e

    async def health_check(self) -> bool:
        """Check if the Ollama daemon answers (lists local models)."""
        try:
            response = await self._client.get("/api/tags")
            return response.is_success
        except Exception as e:
            logger.debug(f"Ollama health check failed: {e}")
            return False

    async def list_models(self) -> list[str]:
        """Names of the models pulled on the daemon."""
        try:
            response = await self._client.get("/api/tags")
        except httpx.HTTPError as e:
            raise self._translate(e) from e
        self._raise_for_status(response)
        return [m.get("name", "") for m in response.json().get("models", [])]

    async def aclose(self) -> None:
        await self._client.aclose()
