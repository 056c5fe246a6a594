"""
Chat state for one conversation, kept apart from rendering.

ChatState is frozen; the module-level transition functions return a new state.
ChatSession drives a turn (submit -> await/stream -> finalize/fail) through an
injected transport and owns the current state.
"""

from collections.abc import Iterable
from typing import Protocol

from pydantic import BaseModel, ConfigDict

from emergency_ai.categories import initial_suggestions_for
from emergency_ai.logging_structured import log_stream_incomplete, log_upstream_failure
from emergency_ai.models import Message, Reply
from emergency_ai.speech import SpeechRecognizer
from emergency_ai.streaming import StreamAccumulator, TextChunk, iter_chunks

APOLOGY_MESSAGE = "I apologize, but I'm having trouble processing your request. Please try again."


class ChatTransport(Protocol):
    def send(self, message: str, category: str) -> Reply: ...

    def stream(self, message: str, category: str) -> Iterable[str]: ...


class ChatState(BaseModel):
    model_config = ConfigDict(frozen=True)

    messages: tuple[Message, ...] = ()
    input: str = ""
    selected_category: str | None = None
    suggestions: tuple[str, ...] = ()
    streaming_buffer: str = ""
    loading: bool = False
    listening: bool = False


# --- Transitions ---


def select_category(state: ChatState, category: str) -> ChatState:
    """Select category; before the first message the canned suggestions are shown."""
    canned = initial_suggestions_for(category)
    update: dict = {"selected_category": category}
    if not state.messages:
        update["suggestions"] = tuple(canned)
    return state.model_copy(update=update)


def set_input(state: ChatState, text: str) -> ChatState:
    return state.model_copy(update={"input": text})


def can_submit(state: ChatState, text: str | None = None) -> bool:
    text = state.input if text is None else text
    return bool(text.strip()) and state.selected_category is not None and not state.loading


def begin_turn(state: ChatState, text: str) -> ChatState:
    """Append the user message, clear input and buffer, mark loading."""
    user_message = Message(role="user", content=text)
    return state.model_copy(
        update={
            "messages": state.messages + (user_message,),
            "input": "",
            "streaming_buffer": "",
            "loading": True,
        }
    )


def append_stream_text(state: ChatState, text: str) -> ChatState:
    return state.model_copy(update={"streaming_buffer": state.streaming_buffer + text})


def complete_turn(state: ChatState, message: Message) -> ChatState:
    """Commit the assistant message and replace suggestions with the model-derived list."""
    return state.model_copy(
        update={
            "messages": state.messages + (message,),
            "suggestions": tuple(message.suggestions),
            "streaming_buffer": "",
            "loading": False,
        }
    )


def fail_turn(state: ChatState) -> ChatState:
    """Commit the fixed apology; suggestions stay as they were."""
    apology = Message(role="assistant", content=APOLOGY_MESSAGE)
    return state.model_copy(
        update={
            "messages": state.messages + (apology,),
            "streaming_buffer": "",
            "loading": False,
        }
    )


def abandon_stream(state: ChatState) -> ChatState:
    """Stream ended without a terminal chunk: drop the partial buffer, commit nothing."""
    return state.model_copy(update={"streaming_buffer": "", "loading": False})


# --- Controller ---


class ChatSession:
    """
    One conversation against a transport. Only one turn may be in flight; a second
    submit while loading is rejected, so headless callers get the same serialization
    the UI gets from disabling its controls.
    """

    def __init__(
        self,
        transport: ChatTransport,
        *,
        streaming: bool = False,
        speech: SpeechRecognizer | None = None,
    ) -> None:
        self.transport = transport
        self.streaming = streaming
        self.state = ChatState()
        self._speech = speech
        if speech is not None:
            speech.on_transcript(self._on_transcript)
            speech.on_end(self._on_speech_end)

    @property
    def messages(self) -> tuple[Message, ...]:
        return self.state.messages

    @property
    def suggestions(self) -> tuple[str, ...]:
        return self.state.suggestions

    @property
    def loading(self) -> bool:
        return self.state.loading

    def select_category(self, category: str) -> None:
        self.state = select_category(self.state, category)

    def set_input(self, text: str) -> None:
        self.state = set_input(self.state, text)

    def can_submit(self) -> bool:
        return can_submit(self.state)

    def submit(self, text: str | None = None) -> bool:
        """Run one non-streaming turn. Returns False (no request issued) if rejected."""
        text = self.state.input if text is None else text
        if not can_submit(self.state, text):
            return False
        category = self.state.selected_category
        self.state = begin_turn(self.state, text)
        try:
            reply = self.transport.send(text, category)
        except Exception as e:
            log_upstream_failure(request_id=None, error=e, where="session.submit")
            self.state = fail_turn(self.state)
            return True
        message = Message(role="assistant", content=reply.response, suggestions=tuple(reply.suggestions))
        self.state = complete_turn(self.state, message)
        return True

    def submit_streaming(self, text: str | None = None) -> bool:
        """Run one streaming turn, mirroring the live buffer into state. Returns False if rejected."""
        text = self.state.input if text is None else text
        if not can_submit(self.state, text):
            return False
        category = self.state.selected_category
        self.state = begin_turn(self.state, text)
        accumulator = StreamAccumulator()
        try:
            for chunk in iter_chunks(self.transport.stream(text, category)):
                final = accumulator.feed(chunk)
                if final is not None:
                    self.state = complete_turn(self.state, final)
                    return True
                if isinstance(chunk, TextChunk):
                    self.state = append_stream_text(self.state, chunk.text)
        except Exception as e:
            log_upstream_failure(request_id=None, error=e, where="session.submit_streaming")
            self.state = fail_turn(self.state)
            return True
        log_stream_incomplete(request_id=None, buffered_chars=len(accumulator.buffer))
        accumulator.close()
        self.state = abandon_stream(self.state)
        return True

    def click_suggestion(self, suggestion: str) -> bool:
        """Resubmit a suggestion chip as the next message. Ignored while loading."""
        if self.state.loading:
            return False
        if self.streaming:
            return self.submit_streaming(suggestion)
        return self.submit(suggestion)

    # --- Speech input ---

    @property
    def speech_available(self) -> bool:
        return self._speech is not None

    @property
    def listening(self) -> bool:
        return self.state.listening

    def start_listening(self) -> None:
        if self._speech is None:
            raise RuntimeError("Speech recognition is not available")
        self._speech.start()
        self.state = self.state.model_copy(update={"listening": True})

    def stop_listening(self) -> None:
        if self._speech is None:
            raise RuntimeError("Speech recognition is not available")
        self._speech.stop()
        self.state = self.state.model_copy(update={"listening": False})

    def _on_transcript(self, text: str) -> None:
        self.state = set_input(self.state, text)

    def _on_speech_end(self) -> None:
        self.state = self.state.model_copy(update={"listening": False})
