"""
Structured JSON logging and in-memory metrics.
One JSON line per event on stderr; /metrics returns counters as JSON.
"""

import json
import sys
import uuid
from typing import Any

# In-memory counters for /metrics
_metrics: dict[str, int | dict[str, int]] = {
    "requests_total": 0,
    "streamed_requests_total": 0,
    "upstream_failures_total": 0,
    "incomplete_streams_total": 0,
    "by_category": {},
    "suggestions_total": 0,
    "model_tokens_est_total": 0,
}


def _emit(payload: dict[str, Any]) -> None:
    print(json.dumps(payload), file=sys.stderr, flush=True)


def _incr(key: str, amount: int = 1) -> None:
    _metrics[key] = (_metrics.get(key) or 0) + amount


def estimate_tokens(text: str) -> int:
    """Rough token estimate (chars / 4)."""
    return max(0, len(text or "") // 4)


def generate_request_id() -> str:
    return str(uuid.uuid4())


def log_request(
    *,
    request_id: str,
    category: str | None,
    latency_ms: float,
    streamed: bool = False,
    suggestions_count: int = 0,
    model_tokens_est: int = 0,
    upstream_error: bool = False,
) -> None:
    """Emit one JSON log line per chat request and update in-memory metrics."""
    _emit(
        {
            "event": "chat_request",
            "request_id": request_id,
            "category": category,
            "latency_ms": round(latency_ms, 2),
            "streamed": streamed,
            "suggestions_count": suggestions_count,
            "model_tokens_est": model_tokens_est,
            "upstream_error": upstream_error,
        }
    )

    _incr("requests_total")
    if streamed:
        _incr("streamed_requests_total")
    if category:
        by_category = _metrics.setdefault("by_category", {})
        by_category[category] = (by_category.get(category) or 0) + 1
    if suggestions_count:
        _incr("suggestions_total", suggestions_count)
    if model_tokens_est:
        _incr("model_tokens_est_total", model_tokens_est)


def log_upstream_failure(*, request_id: str | None, error: BaseException, where: str) -> None:
    """Log a failed model call (network, auth, quota, model error)."""
    _incr("upstream_failures_total")
    _emit(
        {
            "event": "upstream_failure",
            "request_id": request_id,
            "where": where,
            "error_type": type(error).__name__,
            "error": str(error)[:500],
        }
    )


def log_stream_incomplete(*, request_id: str | None, buffered_chars: int) -> None:
    """Log a stream that ended without a terminal chunk; the partial text is discarded."""
    _incr("incomplete_streams_total")
    _emit(
        {
            "event": "stream_incomplete",
            "request_id": request_id,
            "buffered_chars": buffered_chars,
        }
    )


def get_metrics() -> dict[str, Any]:
    """Return current counters as JSON-serializable dict."""
    return {
        "requests_total": _metrics.get("requests_total", 0),
        "streamed_requests_total": _metrics.get("streamed_requests_total", 0),
        "upstream_failures_total": _metrics.get("upstream_failures_total", 0),
        "incomplete_streams_total": _metrics.get("incomplete_streams_total", 0),
        "by_category": dict(_metrics.get("by_category") or {}),
        "suggestions_total": _metrics.get("suggestions_total", 0),
        "model_tokens_est_total": _metrics.get("model_tokens_est_total", 0),
    }
