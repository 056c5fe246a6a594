from emergency_ai.llm.prompts import FOLLOW_UP_MARKER, build_prompt
from emergency_ai.llm.splitter import SUGGESTION_PATTERN


def test_prompt_embeds_category_and_message():
    prompt = build_prompt("Navigation Issues", "GPS signal lost in a valley")
    assert "Current emergency category: Navigation Issues." in prompt
    assert "GPS signal lost in a valley" in prompt
    assert "military emergency protocols" in prompt


def test_prompt_requests_step_by_step_and_follow_up_block():
    prompt = build_prompt("Medical Emergency", "Heat exhaustion")
    assert "step-by-step" in prompt
    assert "3-4 relevant follow-up scenarios" in prompt
    assert FOLLOW_UP_MARKER in prompt


def test_marker_requested_by_prompt_is_recognised_by_splitter():
    assert SUGGESTION_PATTERN.search(FOLLOW_UP_MARKER + "\n- x")


def test_prompt_is_deterministic():
    assert build_prompt("Hostile Contact", "Ambush") == build_prompt("Hostile Contact", "Ambush")
