"""Tests for the Ollama chat client."""

import json

import httpx
import pytest

from tokensa.llm import (
    LLMConnectionError,
    LLMOverloadError,
    LLMResponseError,
    LLMTimeoutError,
    Message,
    MessageRole,
    OllamaLLM,
)


MESSAGES = [
    Message(role=MessageRole.SYSTEM, content="Tu es orthophoniste."),
    Message(role=MessageRole.USER, content="Rédige le rapport."),
]


def make_client(handler) -> OllamaLLM:
    return OllamaLLM(
        base_url="http://ollama.test:11434/",
        model="qwen3:4b",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


def ndjson(*chunks: dict) -> bytes:
    return "".join(json.dumps(c) + "\n" for c in chunks).encode()


class TestComplete:
    """Tests for single-shot chat."""

    @pytest.mark.asyncio
    async def test_request_payload(self):
        """Messages and sampling options are sent to /api/chat."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"message": {"content": "ok"}, "done": True})

        llm = make_client(handler)
        await llm.complete(MESSAGES, temperature=0.5, top_p=0.9, max_tokens=200, seed=42)

        assert seen["path"] == "/api/chat"
        assert seen["body"] == {
            "model": "qwen3:4b",
            "stream": False,
            "messages": [
                {"role": "system", "content": "Tu es orthophoniste."},
                {"role": "user", "content": "Rédige le rapport."},
            ],
            "options": {"temperature": 0.5, "top_p": 0.9, "num_predict": 200, "seed": 42},
        }

    @pytest.mark.asyncio
    async def test_seed_omitted_when_none(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"message": {"content": "ok"}})

        await make_client(handler).complete(MESSAGES)

        assert "seed" not in seen["body"]["options"]

    @pytest.mark.asyncio
    async def test_response_parsing(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "model": "qwen3:4b",
                    "message": {"role": "assistant", "content": "Bonjour"},
                    "done": True,
                    "done_reason": "stop",
                    "prompt_eval_count": 120,
                    "eval_count": 45,
                },
            )

        response = await make_client(handler).complete(MESSAGES)

        assert response.content == "Bonjour"
        assert response.model == "qwen3:4b"
        assert response.input_tokens == 120
        assert response.output_tokens == 45
        assert response.finish_reason == "stop"

    @pytest.mark.asyncio
    async def test_overloaded(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, json={"error": "server busy"})

        with pytest.raises(LLMOverloadError):
            await make_client(handler).complete(MESSAGES)

    @pytest.mark.asyncio
    async def test_missing_model(self):
        """Daemon error text is carried in the exception."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"error": 'model "qwen3:4b" not found, try pulling it first'})

        with pytest.raises(LLMResponseError, match="not found"):
            await make_client(handler).complete(MESSAGES)

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        with pytest.raises(LLMConnectionError):
            await make_client(handler).complete(MESSAGES)

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(LLMTimeoutError):
            await make_client(handler).complete(MESSAGES)


class TestStream:
    """Tests for streamed chat."""

    @pytest.mark.asyncio
    async def test_yields_content_until_done(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                content=ndjson(
                    {"message": {"content": "Lors "}, "done": False},
                    {"message": {"content": ""}, "done": False},
                    {"message": {"content": "des épreuves"}, "done": False},
                    {"message": {"content": ""}, "done": True, "done_reason": "stop"},
                ),
            )

        llm = make_client(handler)
        chunks = [c async for c in llm.stream(MESSAGES)]

        assert seen["body"]["stream"] is True
        assert chunks == ["Lors ", "des épreuves"]

    @pytest.mark.asyncio
    async def test_skips_blank_and_malformed_lines(self):
        def handler(request: httpx.Request) -> httpx.Response:
            body = b'\n{not json}\n' + ndjson({"message": {"content": "ok"}, "done": True})
            return httpx.Response(200, content=body)

        chunks = [c async for c in make_client(handler).stream(MESSAGES)]

        assert chunks == ["ok"]

    @pytest.mark.asyncio
    async def test_in_band_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                content=ndjson({"message": {"content": "a"}}, {"error": "out of memory"}),
            )

        llm = make_client(handler)
        received = []
        with pytest.raises(LLMResponseError, match="out of memory"):
            async for chunk in llm.stream(MESSAGES):
                received.append(chunk)

        assert received == ["a"]

    @pytest.mark.asyncio
    async def test_error_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"error": "model not found"})

        with pytest.raises(LLMResponseError, match="model not found"):
            [c async for c in make_client(handler).stream(MESSAGES)]

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        with pytest.raises(LLMConnectionError):
            [c async for c in make_client(handler).stream(MESSAGES)]


class TestHealth:
    """Tests for availability checks."""

    @pytest.mark.asyncio
    async def test_healthy(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/tags"
            return httpx.Response(200, json={"models": []})

        assert await make_client(handler).health_check() is True

    @pytest.mark.asyncio
    async def test_unreachable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        assert await make_client(handler).health_check() is False

    @pytest.mark.asyncio
    async def test_list_models(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json={"models": [{"name": "qwen3:4b"}, {"name": "qwen3:1.7b"}]}
            )

        llm = make_client(handler)

        assert await llm.list_models() == ["qwen3:4b", "qwen3:1.7b"]
        await llm.aclose()
