"""
HTTP transport for ChatSession: talks to /api/chat and /api/chat/stream with httpx.
Errors propagate as exceptions; the session turns them into the apology message.
"""

from collections.abc import Iterator

import httpx

from emergency_ai.models import Reply


class ChatApiError(Exception):
    """The API answered with an error body."""


class ChatApiClient:
    def __init__(self, http: httpx.Client) -> None:
        self.http = http

    def send(self, message: str, category: str) -> Reply:
        r = self.http.post("/api/chat", json={"message": message, "category": category})
        if r.status_code != 200:
            raise ChatApiError(_error_text(r))
        data = r.json()
        if "error" in data:
            raise ChatApiError(str(data["error"]))
        return Reply.model_validate(data)

    def stream(self, message: str, category: str) -> Iterator[str]:
        """Yield decoded text reads in arrival order, terminal chunk included."""
        with self.http.stream(
            "POST", "/api/chat/stream", json={"message": message, "category": category}
        ) as r:
            if r.status_code != 200:
                r.read()
                raise ChatApiError(_error_text(r))
            for text in r.iter_text():
                if text:
                    yield text


def _error_text(r: httpx.Response) -> str:
    try:
        data = r.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return f"HTTP {r.status_code}"
