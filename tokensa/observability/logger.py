"""Observability logger for structured telemetry."""

import json
import logging
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Optional

from tokensa.observability.events import (
    EventType,
    GenerationEvent,
    GenerationMode,
    LLMCallEvent,
    ObservabilityEvent,
)

logger = logging.getLogger(__name__)


class ObservabilityLogger:
    """Central logger for LLM and report generation events.

    Writes structured events to JSON Lines files for later analysis.
    """

    _instance: Optional["ObservabilityLogger"] = None

    def __init__(
        self,
        log_dir: Optional[Path] = None,
        enabled: bool = True,
        log_full_content: bool = False,
        max_content_length: int = 500,
    ):
        """Initialize observability logger.

        Args:
            log_dir: Directory for log files (default: data/logs)
            enabled: Whether logging is enabled
            log_full_content: Whether to log full message content
            max_content_length: Max length for truncated content
        """
        self.enabled = enabled
        self.log_full_content = log_full_content
        self.max_content_length = max_content_length

        if log_dir is None:
            log_dir = Path("data/logs")
        self.log_dir = log_dir
        if self.enabled:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        self._log_files: dict[str, Path] = {
            "llm": self.log_dir / "llm_calls.jsonl",
            "generations": self.log_dir / "generations.jsonl",
        }

    @classmethod
    def get_instance(cls) -> "ObservabilityLogger":
        """Get or create singleton instance configured from settings."""
        if cls._instance is None:
            from tokensa.config import get_settings

            settings = get_settings()
            cls._instance = cls(
                log_dir=settings.observability_log_dir,
                enabled=settings.observability_enabled,
            )
        return cls._instance

    def generate_request_id(self) -> str:
        """Generate a unique request ID."""
        return str(uuid.uuid4())[:8]

    def _write_event(self, event: ObservabilityEvent, log_type: str) -> None:
        """Write event to appropriate log file."""
        if not self.enabled:
            return

        try:
            log_file = self._log_files.get(log_type)
            if log_file:
                with open(log_file, "a", encoding="utf-8") as f:
                    f.write(event.model_dump_json() + "\n")

        except OSError as e:
            logger.warning(f"Failed to write observability event: {e}")

    def _truncate(self, content: str) -> str:
        """Truncate content if needed."""
        if self.log_full_content:
            return content
        if len(content) <= self.max_content_length:
            return content
        return content[: self.max_content_length] + "..."

    # LLM Call Logging

    @contextmanager
    def llm_call(
        self,
        provider: str,
        model: str,
        messages: list[dict[str, str]],
        mode: GenerationMode = GenerationMode.COMPLETE,
        temperature: float = 0.5,
        top_p: float = 0.9,
        max_tokens: int = 200,
        seed: Optional[int] = None,
        request_id: Optional[str] = None,
    ):
        """Context manager for logging calls to the model.

        Usage:
            with obs.llm_call(provider, model, messages) as event:
                response = await llm.complete(...)
                event.response_content = response.content
        """
        start_time = time.time()
        request_id = request_id or self.generate_request_id()

        logged_messages = [
            {"role": m["role"], "content": self._truncate(m.get("content", ""))}
            for m in messages
        ]

        event = LLMCallEvent(
            event_type=EventType.LLM_CALL_START,
            provider=provider,
            model=model,
            mode=mode,
            messages=logged_messages,
            temperature=temperature,
            top_p=top_p,
            max_tokens=max_tokens,
            seed=seed,
            request_id=request_id,
        )

        try:
            yield event
            event.event_type = EventType.LLM_CALL_SUCCESS
            if event.response_content:
                event.response_content = self._truncate(event.response_content)

        except BaseException as e:
            event.event_type = EventType.LLM_CALL_ERROR
            event.error_type = type(e).__name__
            event.error_message = str(e)[:200]
            raise

        finally:
            event.duration_ms = (time.time() - start_time) * 1000
            self._write_event(event, "llm")

    # Report generation logging

    @contextmanager
    def generation_run(
        self,
        mode: GenerationMode,
        age: float,
        niveau: Optional[str] = None,
        categories: Optional[list[str]] = None,
        tag_count: int = 0,
        personalized: bool = False,
        request_id: Optional[str] = None,
    ):
        """Context manager for logging one report generation."""
        start_time = time.time()
        request_id = request_id or self.generate_request_id()

        event = GenerationEvent(
            event_type=EventType.GENERATION_START,
            mode=mode,
            age=age,
            niveau=niveau,
            tag_count=tag_count,
            categories=categories or [],
            personalized=personalized,
            request_id=request_id,
        )

        try:
            yield event
            event.event_type = EventType.GENERATION_SUCCESS

        except BaseException as e:
            event.event_type = EventType.GENERATION_ERROR
            event.error_type = type(e).__name__
            event.error_message = str(e)[:200]
            raise

        finally:
            event.duration_ms = (time.time() - start_time) * 1000
            self._write_event(event, "generations")

    # Utility methods

    def get_recent_events(
        self,
        log_type: str,
        limit: int = 100,
    ) -> list[dict[str, Any]]:
        """Read recent events from a log file."""
        log_file = self._log_files.get(log_type)
        if not log_file or not log_file.exists():
            return []

        events = []
        with open(log_file, encoding="utf-8") as f:
            for line in f:
                try:
                    events.append(json.loads(line))
                except json.JSONDecodeError:
                    continue

        return events[-limit:]

    def get_stats(self, log_type: str) -> dict[str, Any]:
        """Get basic statistics for a log type."""
        events = self.get_recent_events(log_type, limit=1000)
        if not events:
            return {"total": 0}

        total = len(events)
        errors = sum(1 for e in events if "error" in e.get("event_type", ""))
        avg_duration = sum(e.get("duration_ms") or 0 for e in events) / total

        return {
            "total": total,
            "errors": errors,
            "error_rate": errors / total,
            "avg_duration_ms": avg_duration,
        }


def get_observability_logger() -> ObservabilityLogger:
    """Get the global observability logger instance."""
    return ObservabilityLogger.get_instance()
