import pytest
from fastapi.testclient import TestClient

from app.infra.config import settings
from app.services import chat, transcript


@pytest.fixture(autouse=True)
def _clean_state(monkeypatch):
    monkeypatch.setattr(settings, "groq_api_key", "test-key")
    monkeypatch.setattr(settings, "hf_token", "")
    monkeypatch.setattr(settings, "llm_transport", "router")
    monkeypatch.setattr(settings, "groq_base_url", "https://groq.test/openai/v1")
    monkeypatch.setattr(settings, "transcript_log_dir", "")
    transcript._SESSIONS.clear()
    chat.reset_router()
    yield
    transcript._SESSIONS.clear()
    chat.reset_router()


@pytest.fixture
def client():
    from app.main import app

    return TestClient(app)


@pytest.fixture
def fake_llm(monkeypatch):
    """Replace the provider with a canned stream; records the messages sent."""

    calls = []

    def install(*chunks, fail_after=None):
        async def _open(messages, **kwargs):
            calls.append(messages)

            async def _gen():
                for i, chunk in enumerate(chunks):
                    if fail_after is not None and i == fail_after:
                        raise RuntimeError("connection reset")
                    yield chunk

            return _gen()

        monkeypatch.setattr(chat, "open_stream", _open)
        return calls

    return install
