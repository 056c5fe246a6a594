from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from emergency_ai.llm import gemini_client
from emergency_ai.llm.gemini_client import invoke_gemini, stream_gemini


def _completion(text):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


def _event(delta):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=delta))])


def test_missing_api_key_raises_value_error():
    with pytest.raises(ValueError, match="GOOGLE_AI_API_KEY"):
        invoke_gemini("prompt")


def test_client_built_with_key_and_base_url(monkeypatch):
    monkeypatch.setattr(gemini_client, "GOOGLE_AI_API_KEY", "test-key")
    with patch("emergency_ai.llm.gemini_client.OpenAI") as m_openai:
        first = gemini_client._get_client()
        second = gemini_client._get_client()
    assert first is second
    m_openai.assert_called_once_with(api_key="test-key", base_url=gemini_client.GEMINI_API_BASE_URL)


def test_invoke_returns_stripped_text():
    fake = MagicMock()
    fake.chat.completions.create.return_value = _completion("  Take cover.  \n")
    with patch("emergency_ai.llm.gemini_client._get_client", return_value=fake):
        out = invoke_gemini("prompt", model_id="gemini-test", temperature=0)
    assert out == "Take cover."
    kwargs = fake.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gemini-test"
    assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]
    assert kwargs["temperature"] == 0
    assert kwargs["stream"] is False


def test_invoke_none_content_is_empty_string():
    fake = MagicMock()
    fake.chat.completions.create.return_value = _completion(None)
    with patch("emergency_ai.llm.gemini_client._get_client", return_value=fake):
        assert invoke_gemini("prompt") == ""


def test_timeout_passed_only_when_set(monkeypatch):
    monkeypatch.setattr(gemini_client, "GEMINI_TIMEOUT_SEC", None)
    fake = MagicMock()
    fake.chat.completions.create.return_value = _completion("ok")
    with patch("emergency_ai.llm.gemini_client._get_client", return_value=fake):
        invoke_gemini("prompt")
        assert "timeout" not in fake.chat.completions.create.call_args.kwargs
        invoke_gemini("prompt", timeout_sec=12)
        assert fake.chat.completions.create.call_args.kwargs["timeout"] == 12


def test_stream_yields_non_empty_deltas_in_order():
    fake = MagicMock()
    events = [_event("Hel"), _event(None), SimpleNamespace(choices=[]), _event("lo"), _event("")]
    fake.chat.completions.create.return_value = iter(events)
    with patch("emergency_ai.llm.gemini_client._get_client", return_value=fake):
        deltas = stream_gemini("prompt")
        assert fake.chat.completions.create.call_count == 1
        assert fake.chat.completions.create.call_args.kwargs["stream"] is True
        assert list(deltas) == ["Hel", "lo"]


def test_stream_upstream_error_raises_at_call():
    fake = MagicMock()
    fake.chat.completions.create.side_effect = ConnectionError("unreachable")
    with patch("emergency_ai.llm.gemini_client._get_client", return_value=fake):
        with pytest.raises(ConnectionError):
            stream_gemini("prompt")
