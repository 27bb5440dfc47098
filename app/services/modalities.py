"""Service – conversational modality presets and system-prompt templates."""

from __future__ import annotations

from dataclasses import dataclass, asdict

ASSISTANT_NAME = "Credibot"

DEFAULT_MODALITY = "pct"
DEFAULT_LANG = "en"
LANGUAGES = ("en", "zh")


@dataclass(frozen=True)
class Modality:
    key: str
    name: str
    short: str
    style: str


# Rotation order for "change modality"
MODALITIES: tuple[Modality, ...] = (
    Modality(
        "pct",
        "Person-Centered (PCT)",
        "Person-Centered",
        "Use person-centered counseling style: empathic reflections, non-directive, warm and validating.",
    ),
    Modality(
        "eft",
        "Emotion-Focused (EFT)",
        "Emotion-Focused",
        "Use emotion-focused style: slow the moment, invite naming and deepening present emotion.",
    ),
    Modality(
        "cbt",
        "Cognitive Behavioral (CBT)",
        "CBT",
        "Use CBT style: map situation → thought → emotion (0–100) → behavior; collaborative empiricism.",
    ),
    Modality(
        "dbt",
        "Dialectical Behavior (DBT)",
        "DBT",
        "Use DBT style: balance acceptance and change; suggest concrete skills (mindfulness, TIP, DEAR MAN).",
    ),
    Modality(
        "sfbt",
        "Solution-Focused (SFBT)",
        "Solution-Focused",
        "Use solution-focused style: notice exceptions, scale progress, co-create next tiny step.",
    ),
    Modality(
        "psychodynamic",
        "Psychodynamic",
        "Psychodynamic",
        "Use psychodynamic style: patterns, defenses, meanings, transference; be gentle and curious.",
    ),
    Modality(
        "act",
        "Acceptance & Commitment (ACT)",
        "ACT",
        "Use ACT style: acceptance, defusion, present-moment, values, committed action; brief exercise.",
    ),
)

_BY_KEY = {m.key: m for m in MODALITIES}

_SAFETY_RULES = {
    "en": (
        "Do not claim to diagnose or treat; if crisis is indicated, advise contacting local "
        "emergency services or 988 (US). Be warm, specific, respectful."
    ),
    "zh": "不要声称提供诊断或治疗；如涉及危机，请建议联系当地紧急电话或美国 988。语气温暖、具体、尊重。",
}

_LANGUAGE_LINE = {
    "en": "Respond in English.",
    "zh": "Respond in Simplified Chinese.",
}

_GREETING = {
    "en": (
        "Hi there—I'm Credibot. I can help you get ready for therapy: understand different "
        "conversational styles, clarify your preferences, and sketch next steps. If this is an "
        "emergency, call your local crisis line or 988 in the U.S."
    ),
    "zh": (
        "你好，我是 Credibot。我可以帮助你为心理治疗做准备：了解不同的会谈风格、理清你的偏好，"
        "并规划下一步。如果情况紧急，请拨打当地危机热线，或在美国拨打 988。"
    ),
}


def normalize_lang(lang: str | None) -> str:
    return "zh" if lang == "zh" else DEFAULT_LANG


def get_modality(key: str | None) -> Modality:
    """Return the preset for `key`, falling back to person-centered."""
    if not isinstance(key, str):
        return _BY_KEY[DEFAULT_MODALITY]
    return _BY_KEY.get(key, _BY_KEY[DEFAULT_MODALITY])


def next_modality(key: str | None) -> str:
    keys = [m.key for m in MODALITIES]
    current = get_modality(key).key
    return keys[(keys.index(current) + 1) % len(keys)]


def system_prompt(modality: str | None, lang: str | None) -> str:
    lang = normalize_lang(lang)
    style = get_modality(modality).style
    return (
        f"{_LANGUAGE_LINE[lang]}\n"
        f"You are {ASSISTANT_NAME}, a therapy-prep assistant. {style}\n"
        f"Rules: {_SAFETY_RULES[lang]} Keep replies about 80–140 words. "
        "End with ONE concise question that helps the user continue."
    )


def initial_message(lang: str | None) -> str:
    return _GREETING[normalize_lang(lang)]


def list_modalities() -> list[dict]:
    return [asdict(m) for m in MODALITIES]
