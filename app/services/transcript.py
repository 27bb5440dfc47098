"""Service – per-session transcript kept in memory (simple store)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, List, Optional

from app.infra.config import settings
from app.services.modalities import initial_message

logger = logging.getLogger(__name__)

RECENT_LIMIT = 12


@dataclass
class ChatMessage:
    role: str  # "user" | "bot"
    text: str
    modality: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


# Hold conversation history across requests
_SESSIONS: Dict[str, List[ChatMessage]] = {}


def get_session(session_id: str, lang: str | None = None) -> List[ChatMessage]:
    """Return the transcript for a session, initialising with the greeting."""
    if session_id not in _SESSIONS:
        _SESSIONS[session_id] = [ChatMessage("bot", initial_message(lang))]
    return _SESSIONS[session_id]


def exists(session_id: str) -> bool:
    return session_id in _SESSIONS


def append(session_id: str, message: ChatMessage) -> None:
    get_session(session_id).append(message)
    _write_log(session_id, message)


def last_user_text(session_id: str) -> str | None:
    for message in reversed(_SESSIONS.get(session_id, [])):
        if message.role == "user":
            return message.text
    return None


def last_bot_modality(session_id: str) -> str | None:
    for message in reversed(_SESSIONS.get(session_id, [])):
        if message.role == "bot" and message.modality:
            return message.modality
    return None


def recent(messages: List[ChatMessage], limit: int = RECENT_LIMIT) -> List[ChatMessage]:
    return messages[-limit:]


def reset(session_id: str) -> bool:
    return _SESSIONS.pop(session_id, None) is not None


def _write_log(session_id: str, message: ChatMessage) -> None:
    if not settings.transcript_log_dir:
        return
    safe_session = session_id.replace("..", "").replace("/", "_")  # rudimentary sanitisation
    log_dir = Path(settings.transcript_log_dir)
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        speaker = "User" if message.role == "user" else "Assistant"
        with open(log_dir / f"{safe_session}.txt", "a", encoding="utf-8") as log_file:
            log_file.write(f"{speaker}: {message.text}\n")
    except OSError as exc:
        logger.warning("Failed to write conversation log: %s", exc)
