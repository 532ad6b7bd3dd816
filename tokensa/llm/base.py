"""Abstract LLM interface."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class MessageRole(str, Enum):
    """Message role in conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class Message:
    """Chat message."""

    role: MessageRole
    content: str

    def to_dict(self) -> dict[str, str]:
        """Convert to API-compatible dict."""
        return {"role": self.role.value, "content": self.content}


@dataclass
class LLMResponse:
    """Response from LLM."""

    content: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)
    finish_reason: Optional[str] = None
    raw_response: Optional[Any] = None

    @property
    def input_tokens(self) -> int:
        """Get input token count."""
        return self.usage.get("prompt_tokens", 0) or self.usage.get("input_tokens", 0)

    @property
    def output_tokens(self) -> int:
        """Get output token count."""
        return self.usage.get("completion_tokens", 0) or self.usage.get("output_tokens", 0)


# HTTP statuses meaning the server is busy, retried as overload
OVERLOAD_STATUSES = frozenset({429, 503})


class LLMError(Exception):
    """Base exception for LLM errors."""

    pass


class LLMConnectionError(LLMError):
    """Connection to LLM failed."""

    pass


class LLMTimeoutError(LLMError):
    """LLM request timed out."""

    pass


class LLMOverloadError(LLMError):
    """LLM is overloaded."""

    pass


class LLMResponseError(LLMError):
    """LLM answered with an error or an unusable payload."""

    pass


class BaseLLM(ABC):
    """Abstract base class for LLM implementations."""

    @abstractmethod
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
        """Generate a completion in a single response.

        Args:
            messages: List of conversation messages
            temperature: Sampling temperature
            top_p: Nucleus sampling threshold
            max_tokens: Maximum tokens to generate
            seed: Sampling seed for reproducible output
            **kwargs: Additional provider-specific options

        Returns:
            LLMResponse with generated content

        Raises:
            LLMConnectionError: If connection fails
            LLMTimeoutError: If request times out
            LLMOverloadError: If service is overloaded
            LLMResponseError: If the service returns an error
        """
        pass

    @abstractmethod
    def stream(
        self,
        messages: list[Message],
        *,
        temperature: float = 0.5,
        top_p: float = 0.9,
        max_tokens: int = 200,
        seed: Optional[int] = None,
        **kwargs: Any,
    ) -> AsyncIterator[str]:
        """Generate a completion incrementally.

        Yields text fragments as the model produces them. Raises the same
        errors as complete(), either when the stream is opened or mid-way.
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the LLM service is available.

        Returns:
            True if service is healthy, False otherwise
        """
        pass

    async def aclose(self) -> None:
        """Release network resources held by the client."""
        return None

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name/identifier."""
        pass

    @property
    @abstractmethod
    def provider(self) -> str:
        """Get the provider name (e.g., 'ollama', 'openai')."""
        pass
