"""
Emergency guidance flow: prompt -> Gemini -> split answer from follow-up scenarios.
Non-streaming returns a Reply; streaming yields answer text chunks and then one
terminal JSON chunk carrying the suggestions.
"""

import json
from collections.abc import Iterable, Iterator

from emergency_ai.llm.gemini_client import invoke_gemini, stream_gemini
from emergency_ai.llm.prompts import FOLLOW_UP_MARKER, build_prompt
from emergency_ai.llm.splitter import SUGGESTION_PATTERN, split_response
from emergency_ai.models import Reply

# A marker split across deltas can hide in this many trailing chars
_HOLDBACK = len(FOLLOW_UP_MARKER) - 1


def answer(message: str, category: str) -> Reply:
    """One model call; returns the main answer and the extracted suggestions."""
    raw = invoke_gemini(build_prompt(category, message))
    split = split_response(raw)
    return Reply(response=split.response, suggestions=split.suggestions)


def terminal_chunk(suggestions: list[str]) -> str:
    return json.dumps({"suggestions": suggestions, "done": True})


def open_stream(message: str, category: str) -> Iterator[str]:
    """Start the streaming model call. Upstream errors raise here, before any chunk is produced."""
    return stream_gemini(build_prompt(category, message))


def relay_stream(deltas: Iterable[str]) -> Iterator[str]:
    """
    Re-emit model deltas as answer text, withholding the follow-up block, then yield
    the terminal chunk. Concatenated text chunks equal the text with the block cut out.
    """
    full = ""
    sent = 0
    block_start: int | None = None

    for delta in deltas:
        full += delta
        if block_start is not None:
            continue
        match = SUGGESTION_PATTERN.search(full)
        if match:
            block_start = match.start()
            if block_start > sent:
                yield full[sent:block_start]
            sent = block_start
            continue
        safe = len(full) - _HOLDBACK
        if safe > sent:
            yield full[sent:safe]
            sent = safe

    if block_start is None:
        if len(full) > sent:
            yield full[sent:]
        yield terminal_chunk([])
        return

    # The block ends at the first blank line; anything after it is answer text again
    match = SUGGESTION_PATTERN.search(full)
    trailing = full[match.end() :]
    if trailing.strip():
        yield trailing
    yield terminal_chunk(split_response(full).suggestions)
