"""
Split a model reply into the main answer and the embedded follow-up scenario list.
Only the first "Follow-up scenario(s):" block is treated as suggestions.
"""

import re
from typing import NamedTuple

# Shortest block after the marker, up to a blank line or end of text
SUGGESTION_PATTERN = re.compile(r"Follow-up scenarios?:([\s\S]*?)(?=\n\n|\Z)", re.IGNORECASE)

_BULLET = re.compile(r"^[•\-\*]+\s*")


class SplitResponse(NamedTuple):
    response: str
    suggestions: list[str]


def parse_suggestion_block(block: str) -> list[str]:
    """One suggestion per non-empty line, bullet markers and whitespace stripped."""
    suggestions: list[str] = []
    for line in block.split("\n"):
        cleaned = _BULLET.sub("", line.strip()).strip()
        if cleaned:
            suggestions.append(cleaned)
    return suggestions


def split_response(text: str) -> SplitResponse:
    """
    Return (response, suggestions). If no marker is found the whole text is the
    response and suggestions is empty. The matched block is cut out of the text
    and the remainder trimmed.
    """
    text = text or ""
    match = SUGGESTION_PATTERN.search(text)
    if not match:
        return SplitResponse(text.strip(), [])
    suggestions = parse_suggestion_block(match.group(1))
    main = (text[: match.start()] + text[match.end() :]).strip()
    return SplitResponse(main, suggestions)
