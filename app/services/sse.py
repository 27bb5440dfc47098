"""Service – parse an upstream OpenAI-style Server-Sent-Events body into text deltas."""

from __future__ import annotations

import json
import logging
from typing import AsyncIterable, AsyncIterator

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


def parse_data_line(line: str) -> str | None:
    """Return the text delta carried by one SSE line, if any.

    Blank lines, comments and non-`data:` fields are ignored, as is the
    terminal `[DONE]` marker and any payload that is not valid JSON.
    """

    trimmed = line.strip()
    if not trimmed.startswith(DATA_PREFIX):
        return None
    data = trimmed[len(DATA_PREFIX):].strip()
    if not data or data == DONE_SENTINEL:
        return None
    try:
        payload = json.loads(data)
    except json.JSONDecodeError:
        logger.debug("Skipping malformed SSE payload (%d chars)", len(data))
        return None

    try:
        delta = payload["choices"][0]["delta"]
    except (KeyError, IndexError, TypeError):
        return None
    if isinstance(delta, dict):
        content = delta.get("content")
        return content if isinstance(content, str) and content else None
    if isinstance(delta, str) and delta:
        return delta
    return None


async def split_lines(chunks: AsyncIterable[bytes]) -> AsyncIterator[str]:
    """Reassemble newline-delimited lines from arbitrary byte chunks."""
    buf = b""
    async for chunk in chunks:
        buf += chunk
        *complete, buf = buf.split(b"\n")
        for raw in complete:
            yield raw.decode("utf-8", errors="replace").rstrip("\r")
    if buf:
        yield buf.decode("utf-8", errors="replace").rstrip("\r")


async def aiter_deltas(lines: AsyncIterable[str]) -> AsyncIterator[str]:
    """Yield non-empty content deltas from an iterable of SSE lines."""
    async for line in lines:
        delta = parse_data_line(line)
        if delta:
            yield delta
