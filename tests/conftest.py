import pytest
from fastapi.testclient import TestClient

from main import app

MODEL_REPLY = (
    "## Immediate actions\n"
    "- Apply direct pressure to the wound\n"
    "- Elevate the limb if possible\n"
    "\n"
    "Follow-up scenarios:\n"
    "- Bleeding does not stop after 10 minutes\n"
    "• Casualty shows signs of shock\n"
    "* Tourniquet is unavailable\n"
    "\n"
    "Stay with the casualty until MEDEVAC arrives."
)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture(autouse=True)
def no_api_key(monkeypatch):
    """Never reach the real Gemini endpoint from tests."""
    monkeypatch.setattr("emergency_ai.llm.gemini_client.GOOGLE_AI_API_KEY", "")
    monkeypatch.setattr("emergency_ai.llm.gemini_client._client", None)


@pytest.fixture
def model_reply():
    return MODEL_REPLY
