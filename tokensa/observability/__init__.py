"""Observability module for LLM and report telemetry."""

from tokensa.observability.events import (
    EventType,
    GenerationEvent,
    GenerationMode,
    LLMCallEvent,
    ObservabilityEvent,
)
from tokensa.observability.logger import ObservabilityLogger, get_observability_logger

__all__ = [
    "EventType",
    "GenerationEvent",
    "GenerationMode",
    "LLMCallEvent",
    "ObservabilityEvent",
    "ObservabilityLogger",
    "get_observability_logger",
]
