"""
Client-side handling of a streamed reply.

The stream is a sequence of raw text chunks followed by one terminal chunk,
a JSON object {"suggestions": [...], "done": true}. decode_chunk turns each raw
read into a TextChunk or TerminalChunk; StreamAccumulator collects text until the
terminal chunk arrives and then finalizes an assistant Message.
"""

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, ValidationError

from emergency_ai.models import Message


@dataclass(frozen=True)
class TextChunk:
    text: str


@dataclass(frozen=True)
class TerminalChunk:
    suggestions: list[str]


Chunk = TextChunk | TerminalChunk


class TerminalPayload(BaseModel):
    model_config = ConfigDict(strict=True)

    suggestions: list[str]
    done: bool


# Start of a terminal payload that arrived glued to the preceding text
_TERMINAL_START = re.compile(r'\{\s*"suggestions"\s*:')


def decode_chunk(raw: str) -> Chunk:
    """Terminal if raw is a JSON object with a suggestions list and done=true; text otherwise."""
    try:
        payload = TerminalPayload.model_validate_json(raw)
    except ValidationError:
        return TextChunk(raw)
    if payload.done:
        return TerminalChunk(list(payload.suggestions))
    return TextChunk(raw)


def iter_chunks(raws: Iterable[str]) -> Iterator[Chunk]:
    """
    Decode raw network reads in order. A read holding trailing answer text and the
    terminal payload together is split into a TextChunk followed by a TerminalChunk.
    """
    for raw in raws:
        if not raw:
            continue
        chunk = decode_chunk(raw)
        if isinstance(chunk, TerminalChunk):
            yield chunk
            continue
        starts = [m.start() for m in _TERMINAL_START.finditer(raw)]
        if starts and starts[-1] > 0:
            tail = decode_chunk(raw[starts[-1] :])
            if isinstance(tail, TerminalChunk):
                yield TextChunk(raw[: starts[-1]])
                yield tail
                continue
        yield chunk


class StreamState(str, Enum):
    ACCUMULATING = "accumulating"
    DONE = "done"


class StreamAccumulator:
    """Two-state machine: ACCUMULATING until a terminal chunk, then DONE."""

    def __init__(self) -> None:
        self.state = StreamState.ACCUMULATING
        self._parts: list[str] = []
        self.message: Message | None = None

    @property
    def buffer(self) -> str:
        return "".join(self._parts)

    @property
    def done(self) -> bool:
        return self.state is StreamState.DONE

    def feed(self, chunk: Chunk) -> Message | None:
        """
        Apply one chunk. Returns the finalized Message on the terminal chunk, else None.
        Raises RuntimeError if called after DONE.
        """
        if self.done:
            raise RuntimeError("Stream already finalized")
        if isinstance(chunk, TerminalChunk):
            self.message = Message(
                role="assistant",
                content=self.buffer.strip(),
                suggestions=tuple(chunk.suggestions),
            )
            self._parts.clear()
            self.state = StreamState.DONE
            return self.message
        self._parts.append(chunk.text)
        return None

    def close(self) -> Message | None:
        """
        End of stream. Returns the finalized Message if DONE was reached; otherwise
        the partial buffer is discarded and None is returned.
        """
        if not self.done:
            self._parts.clear()
        return self.message
