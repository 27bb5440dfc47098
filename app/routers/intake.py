from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException  # type: ignore
from fastapi.responses import Response

from app.services import transcript
from app.services.intake_pdf import FILENAME, render_intake_pdf
from app.services.transcript import ChatMessage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/intake")

_ROLES = {"user": "user", "bot": "bot", "assistant": "bot"}


def _messages_from_body(raw: list) -> list[ChatMessage]:
    messages = []
    for item in raw:
        if not isinstance(item, dict) or item.get("role") not in _ROLES:
            raise HTTPException(400, detail="Bad Request: each message needs role user|bot and text")
        messages.append(
            ChatMessage(_ROLES[item["role"]], str(item.get("text") or ""), item.get("modality"))
        )
    return messages


@router.post("/pdf")
def export_intake_pdf(body: dict):
    """Render the intake snapshot from posted messages or a stored session."""
    raw = body.get("messages")
    session_id = body.get("sessionId")
    if isinstance(raw, list):
        messages = _messages_from_body(raw)
    elif session_id and transcript.exists(str(session_id)):
        messages = transcript.get_session(str(session_id))
    elif session_id:
        raise HTTPException(404, detail="Unknown session")
    else:
        raise HTTPException(400, detail="Bad Request: messages or sessionId required")

    pdf_bytes = render_intake_pdf(messages, body.get("modality"), body.get("lang"))
    logger.info("Intake PDF rendered – %d messages, %d bytes", len(messages), len(pdf_bytes))
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={FILENAME}"},
    )
