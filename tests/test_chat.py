import asyncio
import json

import httpx
import pytest

from app.infra.config import settings
from app.services import chat


def _sse_body(*pieces: str) -> bytes:
    lines = [f"data: {json.dumps({'choices': [{'delta': {'content': p}}]})}\n\n" for p in pieces]
    return ("".join(lines) + "data: [DONE]\n\n").encode()


async def _drain(messages, transport):
    deltas = await chat._open_direct_stream(messages, 0.6, transport=transport)
    return [d async for d in deltas]


def test_build_messages_has_system_then_user():
    messages = chat.build_messages("I feel stuck", "sfbt", "en")
    assert [m["role"] for m in messages] == ["system", "user"]
    assert "solution-focused" in messages[0]["content"]
    assert messages[1]["content"] == "I feel stuck"


def test_missing_groq_key_is_reported(monkeypatch):
    monkeypatch.setattr(settings, "groq_api_key", "")
    with pytest.raises(chat.ProviderNotConfigured, match="Missing GROQ_API_KEY"):
        chat.ensure_configured()


def test_hugging_face_alone_is_enough_for_router(monkeypatch):
    monkeypatch.setattr(settings, "groq_api_key", "")
    monkeypatch.setattr(settings, "hf_token", "hf-test")
    chat.ensure_configured()

    monkeypatch.setattr(settings, "llm_transport", "direct")
    with pytest.raises(chat.ProviderNotConfigured):
        chat.ensure_configured()


def test_model_list_puts_groq_first_and_hf_as_fallback(monkeypatch):
    monkeypatch.setattr(settings, "hf_token", "hf-test")
    model_list = chat._model_list()
    assert [m["model_name"] for m in model_list] == ["primary", "fallback"]
    assert model_list[0]["litellm_params"]["model"] == "groq/llama-3.1-8b-instant"
    assert model_list[1]["litellm_params"]["model"].startswith("huggingface/")


def test_direct_stream_relays_deltas():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["payload"] = json.loads(request.content)
        return httpx.Response(200, content=_sse_body("I hear ", "you."))

    messages = chat.build_messages("hello", "pct", "en")
    deltas = asyncio.run(_drain(messages, httpx.MockTransport(handler)))

    assert deltas == ["I hear ", "you."]
    assert seen["url"] == "https://groq.test/openai/v1/chat/completions"
    assert seen["auth"] == "Bearer test-key"
    assert seen["payload"]["stream"] is True
    assert seen["payload"]["temperature"] == 0.6
    assert seen["payload"]["model"] == "llama-3.1-8b-instant"
    assert seen["payload"]["messages"] == messages


def test_direct_stream_raises_before_first_delta_on_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text="invalid api key")

    with pytest.raises(chat.UpstreamError) as info:
        asyncio.run(_drain([], httpx.MockTransport(handler)))
    assert info.value.status_code == 401
    assert str(info.value) == "Groq error: 401 invalid api key"


def test_open_stream_uses_direct_transport(monkeypatch):
    monkeypatch.setattr(settings, "llm_transport", "direct")
    captured = {}

    async def fake_direct(messages, temperature, **kwargs):
        captured["temperature"] = temperature

        async def _gen():
            yield "ok"

        return _gen()

    monkeypatch.setattr(chat, "_open_direct_stream", fake_direct)

    async def _run():
        stream = await chat.open_stream([{"role": "user", "content": "hi"}], temperature=0.2)
        return [d async for d in stream]

    assert asyncio.run(_run()) == ["ok"]
    assert captured["temperature"] == 0.2


async def _drain_router(messages, **extra):
    deltas = await chat._open_router_stream(messages, 0.6, **extra)
    return [d async for d in deltas]


def test_router_stream_relays_mocked_completion():
    messages = chat.build_messages("hello", "pct", "en")
    deltas = asyncio.run(_drain_router(messages, mock_response="Take a slow breath with me."))
    assert deltas
    assert "".join(deltas) == "Take a slow breath with me."


def test_router_error_keeps_upstream_status(monkeypatch):
    import litellm

    class _RefusingRouter:
        async def acompletion(self, **kwargs):
            raise litellm.RateLimitError(message="slow down", llm_provider="groq", model="llama-3.1-8b-instant")

    monkeypatch.setattr(chat, "_router", _RefusingRouter())
    with pytest.raises(chat.UpstreamError) as info:
        asyncio.run(_drain_router([]))
    assert info.value.status_code == 429
    assert "slow down" in str(info.value)


def test_router_error_without_status_maps_to_bad_gateway(monkeypatch):
    class _BrokenRouter:
        async def acompletion(self, **kwargs):
            raise ConnectionError("no route to host")

    monkeypatch.setattr(chat, "_router", _BrokenRouter())
    with pytest.raises(chat.UpstreamError) as info:
        asyncio.run(_drain_router([]))
    assert info.value.status_code == 502


def test_router_deltas_skip_empty_chunks():
    from types import SimpleNamespace

    def _chunk(content):
        return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content))])

    async def _stream():
        for piece in ("I ", None, "", "hear you."):
            yield _chunk(piece)

    async def _run():
        return [d async for d in chat._iter_router_deltas(_stream())]

    assert asyncio.run(_run()) == ["I ", "hear you."]
