"""Optional speech-to-text input. Sessions without a recognizer simply have no voice input."""

from collections.abc import Callable
from typing import Protocol, runtime_checkable


@runtime_checkable
class SpeechRecognizer(Protocol):
    def start(self) -> None: ...

    def stop(self) -> None: ...

    def on_transcript(self, callback: Callable[[str], None]) -> None: ...

    def on_end(self, callback: Callable[[], None]) -> None: ...
