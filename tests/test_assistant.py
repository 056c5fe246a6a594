"""
Tests for the guidance flow: answer() and the relayed stream (text chunks + terminal chunk).
"""

import json
from unittest.mock import patch

from emergency_ai.llm.assistant import answer, open_stream, relay_stream
from emergency_ai.llm.splitter import split_response


def _relay(deltas: list[str]) -> tuple[list[str], dict]:
    out = list(relay_stream(iter(deltas)))
    return out[:-1], json.loads(out[-1])


def test_answer_splits_model_reply(model_reply):
    with patch("emergency_ai.llm.assistant.invoke_gemini", return_value=model_reply) as m:
        reply = answer("Soldier bleeding from the leg", "Medical Emergency")
    assert m.call_count == 1
    prompt = m.call_args[0][0]
    assert "Medical Emergency" in prompt and "Soldier bleeding from the leg" in prompt
    assert reply.suggestions == [
        "Bleeding does not stop after 10 minutes",
        "Casualty shows signs of shock",
        "Tourniquet is unavailable",
    ]
    assert "Follow-up" not in reply.response
    assert reply.response.startswith("## Immediate actions")
    assert reply.response.endswith("Stay with the casualty until MEDEVAC arrives.")


def test_relay_withholds_block_split_across_deltas():
    deltas = [
        "## Steps\n- Apply pressure\n\nFollow-up",
        " scenarios:\n- Shock\n- Infection",
        "\n\nStay calm.",
    ]
    text_chunks, terminal = _relay(deltas)
    assert terminal == {"suggestions": ["Shock", "Infection"], "done": True}
    streamed = "".join(text_chunks)
    assert "Follow-up" not in streamed
    assert "Shock" not in streamed
    assert streamed.strip() == split_response("".join(deltas)).response


def test_relay_without_marker_streams_everything():
    deltas = ["Hel", "lo wo", "rld, this reply is long enough to pass the holdback window."]
    text_chunks, terminal = _relay(deltas)
    assert "".join(text_chunks) == "".join(deltas)
    assert terminal == {"suggestions": [], "done": True}


def test_relay_block_at_end_of_reply(model_reply):
    deltas = list(model_reply.replace("\n\nStay with the casualty until MEDEVAC arrives.", ""))
    text_chunks, terminal = _relay(deltas)
    assert len(terminal["suggestions"]) == 3
    assert "".join(text_chunks).strip() == split_response("".join(deltas)).response


def test_relay_empty_stream_yields_only_terminal():
    assert list(relay_stream(iter([]))) == [json.dumps({"suggestions": [], "done": True})]


def test_open_stream_calls_model_before_iteration():
    with patch("emergency_ai.llm.assistant.stream_gemini", return_value=iter(["x"])) as m:
        open_stream("Radio dead", "Communication Loss")
    assert m.call_count == 1
    assert "Communication Loss" in m.call_args[0][0]
