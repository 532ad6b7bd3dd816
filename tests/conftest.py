"""Pytest configuration and fixtures."""

from typing import Any, Optional

import pytest
from unittest.mock import AsyncMock, MagicMock

from tokensa.config import Settings
from tokensa.llm import BaseLLM, LLMResponse
from tokensa.models.intake import GenerationRequest
from tokensa.models.tags import SymptomTag
from tokensa.observability import ObservabilityLogger


class ScriptedLLM(BaseLLM):
    """In-memory model that replays canned output and errors."""

    def __init__(
        self,
        content: str = "",
        chunks: Optional[list[str]] = None,
        complete_errors: Optional[list[Exception]] = None,
        stream_error: Optional[Exception] = None,
        fail_after: int = 0,
        healthy: bool = True,
        model: str = "qwen3:4b",
    ):
        self.content = content
        self.chunks = chunks or []
        self.complete_errors = list(complete_errors or [])
        self.stream_error = stream_error
        self.fail_after = fail_after
        self.healthy = healthy
        self._model = model
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    async def complete(self, messages, **kwargs) -> LLMResponse:
        self.calls.append({"messages": messages, **kwargs})
        if self.complete_errors:
            raise self.complete_errors.pop(0)
        return LLMResponse(
            content=self.content,
            model=self._model,
            usage={"prompt_tokens": 12, "completion_tokens": 34},
            finish_reason="stop",
        )

    async def stream(self, messages, **kwargs):
        self.calls.append({"messages": messages, **kwargs})
        for i, chunk in enumerate(self.chunks):
            if self.stream_error is not None and i == self.fail_after:
                raise self.stream_error
            yield chunk
        if self.stream_error is not None and self.fail_after >= len(self.chunks):
            raise self.stream_error

    async def health_check(self) -> bool:
        return self.healthy

    async def aclose(self) -> None:
        self.closed = True

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def provider(self) -> str:
        return "scripted"


@pytest.fixture
def settings():
    """Settings isolated from the environment, with a single attempt per call."""
    return Settings(
        _env_file=None,
        observability_enabled=False,
        max_retries=1,
        debug_mode=False,
    )


@pytest.fixture
def obs_logger(tmp_path):
    """Observability logger writing to a temp directory."""
    return ObservabilityLogger(log_dir=tmp_path / "logs", enabled=True)


@pytest.fixture
def make_llm():
    """Factory for scripted models."""
    return ScriptedLLM


@pytest.fixture
def sample_request():
    """Typical intake: a CE2 pupil with reading and writing difficulties."""
    return GenerationRequest(
        age=8,
        niveau="CE2",
        tags=[
            SymptomTag.LECTURE_DECODAGE_ITERATIONS,
            SymptomTag.LECTURE_FLUENCE_LENTEUR,
            SymptomTag.ECRITURE_GRAPHOMOTRICITE_DYSGRAPHIE,
        ],
    )


@pytest.fixture
def mock_generator():
    """Mock report generator as stored on app.state."""
    generator = MagicMock()
    generator.model_name = "qwen3:4b"
    generator.ping = AsyncMock(return_value=True)
    generator.generate_once = AsyncMock(return_value="Synthèse de test.")

    async def _stream(request):
        for chunk in ["Lors des épreuves, ", "l'enfant ", "lit lentement."]:
            yield chunk

    generator.stream_generate = MagicMock(side_effect=_stream)
    return generator
