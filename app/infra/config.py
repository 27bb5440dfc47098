# infra/config.py
"""Centralised configuration using python-dotenv (simple).

Loads variables from a local `.env` if present and exposes a `settings` object
with attribute access. Tests can monkeypatch attributes on it directly.
"""

from __future__ import annotations

import os
from types import SimpleNamespace

from dotenv import load_dotenv


# Read .env into os.environ (no-op if file is missing)
load_dotenv()


def _env(key: str, default: str | None = None) -> str:
    """Tiny helper for getenv with default."""

    return os.getenv(key, default or "")


# Single namespace exported for easy imports
settings = SimpleNamespace(
    # Core
    api_port=int(_env("PORT", "9000")),
    log_level=_env("LOG_LEVEL", "INFO").upper(),
    transcript_log_dir=_env("TRANSCRIPT_LOG_DIR"),

    # Vendor keys
    groq_api_key=_env("GROQ_API_KEY"),
    hf_token=_env("HF_TOKEN") or _env("HUGGINGFACE_API_KEY"),

    # Model names
    groq_model=_env("GROQ_MODEL", "llama-3.1-8b-instant"),
    hf_model=_env("HF_MODEL", "meta-llama/Llama-3.1-8B-Instruct"),

    # Transport: "router" (litellm, Groq -> Hugging Face fallback) or "direct"
    llm_transport=_env("LLM_TRANSPORT", "router").lower(),
    groq_base_url=_env("GROQ_BASE_URL", "https://api.groq.com/openai/v1").rstrip("/"),
    llm_temperature=float(_env("LLM_TEMPERATURE", "0.6")),
    llm_timeout=float(_env("LLM_TIMEOUT", "60")),
)


# Ensure essential keys are present for SDKs
if settings.groq_api_key:
    os.environ.setdefault("GROQ_API_KEY", settings.groq_api_key)

if settings.hf_token:
    os.environ.setdefault("HF_TOKEN", settings.hf_token)
