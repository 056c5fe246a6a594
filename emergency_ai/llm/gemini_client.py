"""
Gemini via the official OpenAI-compatible client. One prompt in, text out.
Streaming variant yields text deltas in arrival order. No retries.
"""

import os
from collections.abc import Iterator

from openai import OpenAI

_client: OpenAI | None = None

GOOGLE_AI_API_KEY = (os.getenv("GOOGLE_AI_API_KEY") or "").strip()
GEMINI_API_BASE_URL = (
    os.getenv("GEMINI_API_BASE_URL") or "https://generativelanguage.googleapis.com/v1beta/openai"
).rstrip("/")
GEMINI_MODEL_ID = os.getenv("GEMINI_MODEL_ID", "gemini-1.5-pro")
GEMINI_TIMEOUT_SEC = float(os.getenv("GEMINI_TIMEOUT_SEC") or 0) or None
DEFAULT_TEMPERATURE = 0.4


def _get_client() -> OpenAI:
    global _client
    if _client is None:
        if not GOOGLE_AI_API_KEY:
            raise ValueError(
                "GOOGLE_AI_API_KEY is required. Set it in the environment or .env."
            )
        _client = OpenAI(
            api_key=GOOGLE_AI_API_KEY,
            base_url=GEMINI_API_BASE_URL,
        )
    return _client


def _completion_kwargs(
    prompt: str,
    *,
    model_id: str | None,
    timeout_sec: float | None,
    temperature: float | None,
    stream: bool,
) -> dict:
    kwargs: dict = {
        "model": model_id or GEMINI_MODEL_ID,
        "messages": [{"role": "user", "content": prompt}],
        "temperature": temperature if temperature is not None else DEFAULT_TEMPERATURE,
        "stream": stream,
    }
    timeout = timeout_sec if timeout_sec is not None else GEMINI_TIMEOUT_SEC
    if timeout is not None:
        kwargs["timeout"] = timeout
    return kwargs


def invoke_gemini(
    prompt: str,
    *,
    model_id: str | None = None,
    timeout_sec: float | None = None,
    temperature: float | None = None,
) -> str:
    """Single completion for prompt. Returns the stripped assistant text."""
    client = _get_client()
    kwargs = _completion_kwargs(
        prompt, model_id=model_id, timeout_sec=timeout_sec, temperature=temperature, stream=False
    )
    response = client.chat.completions.create(**kwargs)
    content = response.choices[0].message.content
    return (content or "").strip()


def stream_gemini(
    prompt: str,
    *,
    model_id: str | None = None,
    timeout_sec: float | None = None,
    temperature: float | None = None,
) -> Iterator[str]:
    """
    Open a streaming completion and return an iterator of non-empty text deltas.
    The request is sent before this returns, so auth and transport errors raise here
    rather than on first iteration.
    """
    client = _get_client()
    kwargs = _completion_kwargs(
        prompt, model_id=model_id, timeout_sec=timeout_sec, temperature=temperature, stream=True
    )
    stream = client.chat.completions.create(**kwargs)
    return _iter_deltas(stream)


def _iter_deltas(stream) -> Iterator[str]:
    for event in stream:
        if not event.choices:
            continue
        delta = event.choices[0].delta.content
        if delta:
            yield delta
