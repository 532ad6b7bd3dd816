"""Structured observability events for LLM and report telemetry."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """Types of observability events."""

    LLM_CALL_START = "llm_call_start"
    LLM_CALL_SUCCESS = "llm_call_success"
    LLM_CALL_ERROR = "llm_call_error"
    GENERATION_START = "generation_start"
    GENERATION_SUCCESS = "generation_success"
    GENERATION_ERROR = "generation_error"


class GenerationMode(str, Enum):
    """How the model output is delivered."""

    COMPLETE = "complete"
    STREAM = "stream"


class ObservabilityEvent(BaseModel):
    """Base class for all observability events."""

    event_type: EventType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    request_id: Optional[str] = None
    duration_ms: Optional[float] = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    # Error fields (populated on error)
    error_type: Optional[str] = None
    error_message: Optional[str] = None


class LLMCallEvent(ObservabilityEvent):
    """Event for calls to the local model."""

    provider: str
    model: str
    mode: GenerationMode = GenerationMode.COMPLETE
    messages: list[dict[str, str]] = Field(default_factory=list)
    temperature: float = 0.5
    top_p: float = 0.9
    max_tokens: int = 200
    seed: Optional[int] = None

    # Response fields (populated on success)
    response_content: Optional[str] = None
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    total_tokens: Optional[int] = None
    chunk_count: int = 0
    finish_reason: Optional[str] = None


class GenerationEvent(ObservabilityEvent):
    """Event for one report generation. Identity fields are never recorded."""

    mode: GenerationMode
    age: float
    niveau: Optional[str] = None
    tag_count: int = 0
    categories: list[str] = Field(default_factory=list)
    personalized: bool = False
    output_chars: Optional[int] = None
