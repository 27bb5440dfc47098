from __future__ import annotations

import logging
import uuid
from typing import AsyncIterator

from fastapi import APIRouter, HTTPException  # type: ignore
from fastapi.responses import StreamingResponse

from app.services import chat, safety, transcript
from app.services.modalities import get_modality, list_modalities, next_modality, normalize_lang
from app.services.transcript import ChatMessage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

STREAM_HEADERS = {"Cache-Control": "no-store, no-transform"}


# ---------------------------------------------------------------------------
# Helper utilities
# ---------------------------------------------------------------------------
async def _single_chunk(text: str) -> AsyncIterator[str]:
    yield text


async def _relay_to_client(
    session_id: str, deltas: AsyncIterator[str], modality: str | None
) -> AsyncIterator[str]:
    """Forward deltas as plain text and record the full reply when done."""
    reply_accum = ""
    try:
        async for token in deltas:
            reply_accum += token
            yield token
    except Exception as exc:
        logger.exception("Upstream stream failed mid-reply: %s", exc)
    finally:
        if reply_accum:
            transcript.append(session_id, ChatMessage("bot", reply_accum, modality))
        logger.info("Reply finished – session=%s chars=%d", session_id, len(reply_accum))


async def _stream_reply(session_id: str, user_text: str, modality: str, lang: str) -> StreamingResponse:
    transcript.get_session(session_id, lang)
    transcript.append(session_id, ChatMessage("user", user_text))

    match = safety.detect_crisis(user_text)
    if match:
        logger.warning("Crisis pattern matched (%s) – returning resources", match.category)
        deltas = _single_chunk(safety.crisis_response(lang))
        reply_modality = None
    else:
        try:
            deltas = await chat.open_stream(chat.build_messages(user_text, modality, lang))
        except chat.ProviderNotConfigured as exc:
            logger.error("Reply refused: %s", exc)
            raise HTTPException(500, detail=str(exc))
        except chat.UpstreamError as exc:
            logger.error("Upstream rejected request: status=%s", exc.status_code)
            raise HTTPException(500, detail=str(exc))
        reply_modality = modality

    headers = {**STREAM_HEADERS, "X-Session-Id": session_id}
    if reply_modality:
        headers["X-Modality"] = reply_modality
    return StreamingResponse(
        _relay_to_client(session_id, deltas, reply_modality),
        media_type="text/plain; charset=utf-8",
        headers=headers,
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------
@router.get("/modalities")
def modalities():
    return {"modalities": list_modalities()}


@router.post("/reply")
async def reply(body: dict):
    """Stream a modality-styled reply to `userText` as plain-text chunks."""
    user_text = body.get("userText")
    if not user_text or not isinstance(user_text, str):
        raise HTTPException(400, detail="Bad Request: userText required")

    modality = get_modality(body.get("modality")).key
    lang = normalize_lang(body.get("lang"))
    session_id = str(body.get("sessionId") or uuid.uuid4())
    logger.info("Reply requested – session=%s modality=%s lang=%s chars=%d",
                session_id, modality, lang, len(user_text))
    return await _stream_reply(session_id, user_text, modality, lang)


@router.post("/reply/rotate")
async def rotate_modality(body: dict):
    """Re-send the last user message using the next modality in rotation."""
    session_id = body.get("sessionId")
    if not session_id:
        raise HTTPException(400, detail="Bad Request: sessionId required")

    last_user = transcript.last_user_text(str(session_id))
    if last_user is None:
        raise HTTPException(409, detail="No user message to re-send")

    current = body.get("modality")
    if not isinstance(current, str) or not current:
        current = transcript.last_bot_modality(str(session_id))
    modality = next_modality(current)
    lang = normalize_lang(body.get("lang"))
    return await _stream_reply(str(session_id), last_user, modality, lang)


@router.get("/sessions/{session_id}")
def get_session(session_id: str):
    if not transcript.exists(session_id):
        raise HTTPException(404, detail="Unknown session")
    messages = transcript.get_session(session_id)
    return {"sessionId": session_id, "messages": [m.to_dict() for m in messages]}


@router.delete("/sessions/{session_id}")
def start_over(session_id: str):
    transcript.reset(session_id)
    return {"status": "ok"}
