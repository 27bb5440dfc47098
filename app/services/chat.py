"""Service – streaming chat completion (Groq primary, Hugging Face fallback).

Two transports are available, selected by ``settings.llm_transport``:

* ``router`` – LiteLLM Router with a Groq deployment and, when a Hugging Face
  token is configured, a Hugging Face fallback deployment.
* ``direct`` – a raw POST to Groq's OpenAI-compatible endpoint whose SSE body
  is relayed through :mod:`app.services.sse`.

Either way :func:`open_stream` raises before yielding anything if the
upstream refuses the request, so the HTTP layer can still pick a status code.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator

import httpx
from litellm.router import Router

from app.infra.config import settings
from app.services import sse
from app.services.modalities import system_prompt

logger = logging.getLogger(__name__)


class ProviderNotConfigured(RuntimeError):
    """No API key is available for the selected transport."""


class UpstreamError(RuntimeError):
    """The LLM provider rejected the request."""

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Groq error: {status_code} {body}".rstrip())


def build_messages(user_text: str, modality: str | None, lang: str | None) -> list[dict]:
    return [
        {"role": "system", "content": system_prompt(modality, lang)},
        {"role": "user", "content": user_text},
    ]


def ensure_configured() -> None:
    if settings.llm_transport == "direct" or not settings.hf_token:
        if not settings.groq_api_key:
            raise ProviderNotConfigured("Missing GROQ_API_KEY")


# ---------------------------------------------------------------------------
# LiteLLM router transport
# ---------------------------------------------------------------------------

# Router initialised lazily; reset_router() drops it after a settings change
_router: Router | None = None


def _model_list() -> list[dict]:
    deployments = []
    if settings.groq_api_key:
        deployments.append(
            {"model": f"groq/{settings.groq_model}", "api_key": settings.groq_api_key}
        )
    if settings.hf_token:
        deployments.append(
            {"model": f"huggingface/{settings.hf_model}", "api_key": settings.hf_token}
        )
    names = ["primary", "fallback"]
    return [
        {"model_name": name, "litellm_params": params}
        for name, params in zip(names, deployments)
    ]


def _ensure_router() -> Router:
    """Return a singleton Router (initialise if needed)."""

    global _router
    if _router is None:
        model_list = _model_list()
        fallbacks = [{"primary": ["fallback"]}] if len(model_list) > 1 else []
        _router = Router(model_list=model_list, fallbacks=fallbacks)
        logger.info(
            "LLM router ready: %s",
            ", ".join(m["litellm_params"]["model"] for m in model_list),
        )
    return _router


def reset_router() -> None:
    global _router
    _router = None


async def _iter_router_deltas(stream) -> AsyncIterator[str]:
    async for chunk in stream:
        # LiteLLM returns each chunk as an OpenAI-style delta
        delta = chunk.choices[0].delta
        content_piece = (
            delta.get("content") if isinstance(delta, dict) else getattr(delta, "content", "")
        )
        if content_piece:
            yield content_piece


async def _open_router_stream(
    messages: list[dict], temperature: float, **extra
) -> AsyncIterator[str]:
    try:
        stream = await _ensure_router().acompletion(
            model="primary",
            messages=messages,
            temperature=temperature,
            stream=True,
            **extra,
        )
    except Exception as exc:
        status = getattr(exc, "status_code", None) or 502
        raise UpstreamError(int(status), str(exc)) from exc
    return _iter_router_deltas(stream)


# ---------------------------------------------------------------------------
# Direct SSE transport
# ---------------------------------------------------------------------------


async def _relay(client: httpx.AsyncClient, response: httpx.Response) -> AsyncIterator[str]:
    try:
        async for delta in sse.aiter_deltas(sse.split_lines(response.aiter_bytes())):
            yield delta
    finally:
        await response.aclose()
        await client.aclose()


async def _open_direct_stream(
    messages: list[dict],
    temperature: float,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[str]:
    payload = {
        "model": settings.groq_model,
        "stream": True,
        "temperature": temperature,
        "messages": messages,
    }
    client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.llm_timeout, connect=10.0),
        transport=transport,
    )
    request = client.build_request(
        "POST",
        f"{settings.groq_base_url}/chat/completions",
        headers={
            "Authorization": f"Bearer {settings.groq_api_key}",
            "Content-Type": "application/json",
        },
        json=payload,
    )
    try:
        response = await client.send(request, stream=True)
    except httpx.HTTPError as exc:
        await client.aclose()
        raise UpstreamError(502, str(exc)) from exc

    if response.status_code >= 400:
        body = (await response.aread()).decode("utf-8", errors="replace")
        await response.aclose()
        await client.aclose()
        raise UpstreamError(response.status_code, body)
    return _relay(client, response)


async def open_stream(
    messages: list[dict],
    *,
    temperature: float | None = None,
) -> AsyncIterator[str]:
    """Start a completion and return an async iterator of text deltas."""

    ensure_configured()
    temperature = settings.llm_temperature if temperature is None else temperature
    if settings.llm_transport == "direct":
        return await _open_direct_stream(messages, temperature)
    return await _open_router_stream(messages, temperature)
