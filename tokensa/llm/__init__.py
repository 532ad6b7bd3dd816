"""LLM abstraction layer over the locally hosted model."""

from tokensa.llm.base import (
    BaseLLM,
    LLMConnectionError,
    LLMError,
    LLMOverloadError,
    LLMResponse,
    LLMResponseError,
    LLMTimeoutError,
    Message,
    MessageRole,
)
from tokensa.llm.local import LocalLLM
from tokensa.llm.ollama import OllamaLLM


def create_llm_from_settings() -> BaseLLM:
    """Create the configured LLM client from application settings."""
    from tokensa.config import get_settings

    settings = get_settings()

    if settings.llm_backend == "openai":
        return LocalLLM(
            base_url=settings.openai_base_url,
            model=settings.ollama_model,
            timeout=settings.llm_timeout,
        )

    return OllamaLLM(
        base_url=settings.ollama_base_url,
        model=settings.ollama_model,
        timeout=settings.llm_timeout,
    )


__all__ = [
    "BaseLLM",
    "LLMConnectionError",
    "LLMError",
    "LLMOverloadError",
    "LLMResponse",
    "LLMResponseError",
    "LLMTimeoutError",
    "LocalLLM",
    "Message",
    "MessageRole",
    "OllamaLLM",
    "create_llm_from_settings",
]
