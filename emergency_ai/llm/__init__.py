from emergency_ai.llm.gemini_client import invoke_gemini, stream_gemini
from emergency_ai.llm.assistant import answer, open_stream, relay_stream
from emergency_ai.llm.prompts import build_prompt
from emergency_ai.llm.splitter import SplitResponse, split_response

__all__ = [
    "invoke_gemini",
    "stream_gemini",
    "answer",
    "open_stream",
    "relay_stream",
    "build_prompt",
    "split_response",
    "SplitResponse",
]
