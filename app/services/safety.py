"""Service – crisis keyword filter.

Messages that match one of the patterns below never reach the model; the
caller streams `crisis_response()` back instead.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_FLAGS = re.IGNORECASE | re.UNICODE

# (category, pattern) – English patterns are word-bounded
CRISIS_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("suicide", re.compile(r"\b(suicid(e|al)|kill(ing)?\s+my\s?self|take\s+my\s+(own\s+)?life)\b", _FLAGS)),
    ("suicide", re.compile(r"\b(end(ing)?\s+(my\s+life|it\s+all)|better\s+off\s+dead|no\s+reason\s+to\s+live)\b", _FLAGS)),
    ("suicide", re.compile(r"\b(want(ing)?|wish)\s+(to\s+)?(be\s+)?dead\b|\bwant(ing)?\s+to\s+die\b", _FLAGS)),
    ("self_harm", re.compile(r"\b(self[\s-]?harm(ing)?|hurt(ing)?\s+my\s?self|cut(ting)?\s+my\s?self)\b", _FLAGS)),
    ("overdose", re.compile(r"\b(overdos(e|ing)|od\s+on)\b", _FLAGS)),
    ("danger", re.compile(r"\b(going\s+to|gonna)\s+(hurt|kill)\s+(someone|somebody|him|her|them)\b", _FLAGS)),
    ("suicide", re.compile(r"(自杀|轻生|不想活|想死(?![你您他她它]|我了)|结束(我的)?生命)", _FLAGS)),
    ("self_harm", re.compile(r"(自残|自伤|伤害自己|割腕)", _FLAGS)),
)

_RESOURCES = {
    "en": (
        "I'm really glad you reached out, and I'm concerned about your safety. "
        "I can't help with this here, but people can right now:\n\n"
        "• Call or text 988 (Suicide & Crisis Lifeline, U.S., 24/7)\n"
        "• Text HOME to 741741 (Crisis Text Line)\n"
        "• If you are in immediate danger, call your local emergency number (911 in the U.S.)\n"
        "• Outside the U.S.: https://www.iasp.info/resources/Crisis_Centres/\n\n"
        "If you can, reach out to someone you trust and stay with them. You don't have to face this alone."
    ),
    "zh": (
        "谢谢你愿意说出来，我很关心你的安全。这里无法提供危机支持，但现在就有人可以帮助你：\n\n"
        "• 美国：拨打或发短信至 988（自杀与危机生命线，全天候）\n"
        "• 美国：发送 HOME 至 741741（危机短信热线）\n"
        "• 如有紧急危险，请立即拨打当地紧急电话（美国 911，中国大陆 110/120）\n"
        "• 其他国家和地区：https://www.iasp.info/resources/Crisis_Centres/\n\n"
        "如果可以，请联系一位你信任的人并和他们待在一起。你不必独自面对。"
    ),
}


@dataclass(frozen=True)
class CrisisMatch:
    category: str
    fragment: str


def detect_crisis(text: str | None) -> CrisisMatch | None:
    """Return the first crisis pattern hit in `text`, or None."""
    if not text or not text.strip():
        return None
    for category, pattern in CRISIS_PATTERNS:
        found = pattern.search(text)
        if found:
            return CrisisMatch(category, found.group(0))
    return None


def crisis_response(lang: str | None) -> str:
    return _RESOURCES["zh" if lang == "zh" else "en"]
