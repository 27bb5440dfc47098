"""Service – render the therapy intake snapshot as a PDF (reportlab)."""

from __future__ import annotations

import io
from datetime import datetime
from typing import Iterable, List, Tuple

from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.pdfgen import canvas

from app.services.modalities import ASSISTANT_NAME, get_modality, normalize_lang
from app.services.transcript import ChatMessage, recent

FILENAME = "credibot-intake.pdf"

MARGIN = 56
HEADING_SIZE = 18
HEADING_ADVANCE = 22
BODY_SIZE = 12
BODY_LEADING = 16
PARAGRAPH_GAP = 6

CJK_FONT = "STSong-Light"

Block = Tuple[str, str]  # ("heading" | "paragraph", text)

_LABELS = {
    "title": ("Credibot - Therapy Intake Snapshot", "Credibot - 治疗准备摘要"),
    "style": ("Active Style", "当前风格"),
    "recent": ("Recent Conversation (excerpt)", "最近对话（节选）"),
    "client": ("Client", "来访者"),
    "empty": ("No messages yet.", "暂无对话。"),
    "notes": ("Notes and Boundaries", "说明与边界"),
    "boundaries": (
        "This document is for preparation and discussion with a licensed clinician. It is not "
        "diagnosis or treatment. If you are in crisis, contact your local emergency number or "
        "988 in the U.S.",
        "本文件用于与持证临床医生进行准备与沟通，不构成诊断或治疗。"
        "如果你处于危机中，请联系当地紧急电话（在美国拨打 988）。",
    ),
}


def _t(key: str, lang: str) -> str:
    en, zh = _LABELS[key]
    return zh if lang == "zh" else en


def _conversation_excerpt(messages: Iterable[ChatMessage], lang: str) -> str:
    lines = []
    for m in messages:
        who = _t("client", lang) if m.role == "user" else ASSISTANT_NAME
        tag = f" [{get_modality(m.modality).short}]" if m.modality else ""
        lines.append(f"{who}{tag}: {m.text}")
    return "\n\n".join(lines)


def intake_sections(
    messages: List[ChatMessage],
    active_modality: str | None,
    lang: str | None,
    now: datetime | None = None,
) -> List[Block]:
    """Ordered heading/paragraph blocks making up the intake document."""
    lang = normalize_lang(lang)
    now = now or datetime.now()
    convo = _conversation_excerpt(recent(messages), lang)
    return [
        ("heading", _t("title", lang)),
        ("paragraph", now.strftime("%Y-%m-%d %H:%M")),
        ("heading", _t("style", lang)),
        ("paragraph", get_modality(active_modality).name),
        ("heading", _t("recent", lang)),
        ("paragraph", convo or _t("empty", lang)),
        ("heading", _t("notes", lang)),
        ("paragraph", _t("boundaries", lang)),
    ]


def wrap_text(text: str, font: str, size: float, max_width: float) -> List[str]:
    """Word-wrap `text`, breaking words (and CJK runs) that are wider than a line."""
    out: List[str] = []
    for para in text.split("\n"):
        if not para.strip():
            out.append("")
            continue
        for line in simpleSplit(para, font, size, max_width):
            current = ""
            for ch in line:
                if current and pdfmetrics.stringWidth(current + ch, font, size) > max_width:
                    out.append(current)
                    current = ch.lstrip()
                else:
                    current += ch
            out.append(current)
    return out


def _fonts(lang: str) -> Tuple[str, str]:
    if lang == "zh":
        if CJK_FONT not in pdfmetrics.getRegisteredFontNames():
            pdfmetrics.registerFont(UnicodeCIDFont(CJK_FONT))
        return CJK_FONT, CJK_FONT
    return "Helvetica-Bold", "Helvetica"


def render_intake_pdf(
    messages: List[ChatMessage],
    active_modality: str | None,
    lang: str | None,
    now: datetime | None = None,
) -> bytes:
    lang = normalize_lang(lang)
    heading_font, body_font = _fonts(lang)
    page_width, page_height = letter
    max_width = page_width - MARGIN * 2

    buf = io.BytesIO()
    pdf = canvas.Canvas(buf, pagesize=letter)
    pdf.setTitle(_t("title", lang))
    y = page_height - MARGIN

    for kind, text in intake_sections(messages, active_modality, lang, now):
        if kind == "heading":
            if y < MARGIN + HEADING_ADVANCE:
                pdf.showPage()
                y = page_height - MARGIN
            pdf.setFont(heading_font, HEADING_SIZE)
            pdf.drawString(MARGIN, y, text)
            y -= HEADING_ADVANCE
            continue

        for line in wrap_text(text, body_font, BODY_SIZE, max_width):
            if y < MARGIN:
                pdf.showPage()
                y = page_height - MARGIN
            pdf.setFont(body_font, BODY_SIZE)
            pdf.drawString(MARGIN, y, line)
            y -= BODY_LEADING
        y -= PARAGRAPH_GAP

    pdf.save()
    return buf.getvalue()
