"""Report generation on top of the local model client."""

import logging
from collections.abc import AsyncIterator
from typing import Optional

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from tokensa.config import Settings, get_settings
from tokensa.llm.base import (
    BaseLLM,
    LLMError,
    LLMOverloadError,
    LLMResponse,
    LLMResponseError,
    LLMTimeoutError,
    Message,
)
from tokensa.models.intake import GenerationRequest
from tokensa.observability import GenerationMode, ObservabilityLogger, get_observability_logger
from tokensa.report.postprocess import ThinkingFilter, postprocess
from tokensa.report.prompt import build_messages

logger = logging.getLogger(__name__)


def stream_error_message(error: Exception, model: str) -> str:
    """Readable line sent in-band when the stream cannot be opened."""
    message = str(error) or "Erreur inconnue"
    return (
        f"Erreur de génération: {message}. Vérifiez qu'Ollama tourne et que le modèle "
        f'"{model}" est disponible (ollama pull {model}).\n'
    )


class ReportGenerator:
    """Turns intake data into a speech-therapy report with the local model."""

    def __init__(
        self,
        llm: BaseLLM,
        settings: Optional[Settings] = None,
        observability: Optional[ObservabilityLogger] = None,
    ):
        self.llm = llm
        self.settings = settings or get_settings()
        self._obs = observability

    @property
    def obs(self) -> ObservabilityLogger:
        if self._obs is None:
            self._obs = get_observability_logger()
        return self._obs

    @property
    def model_name(self) -> str:
        return self.llm.model_name

    def _sampling(self) -> dict:
        return {
            "temperature": self.settings.llm_temperature,
            "top_p": self.settings.llm_top_p,
            "max_tokens": self.settings.llm_num_predict,
            "seed": self.settings.llm_seed,
        }

    def _generation_run(self, request: GenerationRequest, mode: GenerationMode):
        return self.obs.generation_run(
            mode=mode,
            age=request.age,
            niveau=request.niveau,
            categories=sorted({tag.category for tag in request.tags}),
            tag_count=len(request.tags),
            personalized=bool(request.prenom) or request.homme is not None,
        )

    def _llm_call(self, messages: list[Message], mode: GenerationMode, request_id: Optional[str]):
        sampling = self._sampling()
        return self.obs.llm_call(
            provider=self.llm.provider,
            model=self.llm.model_name,
            messages=[m.to_dict() for m in messages],
            mode=mode,
            temperature=sampling["temperature"],
            top_p=sampling["top_p"],
            max_tokens=sampling["max_tokens"],
            seed=sampling["seed"],
            request_id=request_id,
        )

    async def ping(self) -> bool:
        """True when the local model API answers."""
        return await self.llm.health_check()

    async def _complete_with_retry(self, messages: list[Message]) -> LLMResponse:
        """Single-shot call, retrying transient timeouts and overloads."""
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type((LLMTimeoutError, LLMOverloadError)),
            stop=stop_after_attempt(max(1, self.settings.max_retries)),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            reraise=True,
        ):
            with attempt:
                return await self.llm.complete(messages, **self._sampling())
        raise LLMError("No attempt was made")

    async def generate_once(self, request: GenerationRequest) -> str:
        """Generate the full report and return the cleaned-up text.

        Raises:
            LLMError: If the model cannot be reached or returns nothing usable
        """
        messages = build_messages(request)

        with self._generation_run(request, GenerationMode.COMPLETE) as run:
            with self._llm_call(messages, GenerationMode.COMPLETE, run.request_id) as event:
                response = await self._complete_with_retry(messages)
                event.response_content = response.content
                event.finish_reason = response.finish_reason
                if response.usage:
                    event.input_tokens = response.input_tokens
                    event.output_tokens = response.output_tokens
                    event.total_tokens = response.input_tokens + response.output_tokens

            text = postprocess(response.content, request)
            if not text:
                raise LLMResponseError("Model returned an empty report")
            run.output_chars = len(text)

        logger.info(f"Report generated: {len(text)} chars, {len(request.tags)} tags")
        return text

    async def stream_generate(self, request: GenerationRequest) -> AsyncIterator[str]:
        """Relay report fragments as the model produces them.

        If the model cannot be reached when the stream opens, a single readable
        error line is yielded instead. A failure later on ends the stream.
        """
        state = {"received": False}
        try:
            async for text in self._relay(request, state):
                yield text
        except LLMError as e:
            if state["received"]:
                logger.error(f"Stream interrupted: {e}")
                return
            logger.error(f"Stream could not be opened: {e}")
            yield stream_error_message(e, self.model_name)

    async def _relay(self, request: GenerationRequest, state: dict) -> AsyncIterator[str]:
        messages = build_messages(request)
        think_filter = ThinkingFilter()
        emitted = 0

        with self._generation_run(request, GenerationMode.STREAM) as run:
            with self._llm_call(messages, GenerationMode.STREAM, run.request_id) as event:
                async for fragment in self.llm.stream(messages, **self._sampling()):
                    state["received"] = True
                    event.chunk_count += 1
                    text = think_filter.feed(fragment)
                    if text:
                        emitted += len(text)
                        yield text

            tail = think_filter.flush()
            if tail:
                emitted += len(tail)
                yield tail
            run.output_chars = emitted
