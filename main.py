import time
from collections.abc import Iterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel

from emergency_ai.categories import EMERGENCY_CATEGORIES, INITIAL_SUGGESTIONS, is_known_category
from emergency_ai.llm.assistant import answer, open_stream, relay_stream
from emergency_ai.llm.splitter import split_response
from emergency_ai.logging_structured import (
    estimate_tokens,
    generate_request_id,
    get_metrics,
    log_request,
    log_stream_incomplete,
    log_upstream_failure,
)

FAILURE_MESSAGE = "Failed to process the request"

app = FastAPI(title="Emergency Assistant API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metrics")
def metrics() -> dict:
    """Basic counters as JSON (no Prometheus)."""
    return get_metrics()


class ChatRequest(BaseModel):
    message: str
    category: str


class ChatResponse(BaseModel):
    response: str
    suggestions: list[str] = []


class CategoriesResponse(BaseModel):
    categories: list[str]
    initial_suggestions: dict[str, list[str]]


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _validate(request: ChatRequest) -> JSONResponse | None:
    if not request.message.strip():
        return _error(400, "Message must not be empty")
    if not is_known_category(request.category):
        return _error(400, f"Unknown emergency category: {request.category}")
    return None


@app.get("/api/categories", response_model=CategoriesResponse)
def categories() -> CategoriesResponse:
    return CategoriesResponse(
        categories=list(EMERGENCY_CATEGORIES),
        initial_suggestions={k: list(v) for k, v in INITIAL_SUGGESTIONS.items()},
    )


@app.post("/api/chat", response_model=ChatResponse)
def chat(request: ChatRequest):
    invalid = _validate(request)
    if invalid is not None:
        return invalid

    request_id = generate_request_id()
    start = time.perf_counter()
    try:
        reply = answer(request.message, request.category)
    except Exception as e:
        log_upstream_failure(request_id=request_id, error=e, where="api.chat")
        log_request(
            request_id=request_id,
            category=request.category,
            latency_ms=(time.perf_counter() - start) * 1000,
            upstream_error=True,
        )
        return _error(500, FAILURE_MESSAGE)

    log_request(
        request_id=request_id,
        category=request.category,
        latency_ms=(time.perf_counter() - start) * 1000,
        suggestions_count=len(reply.suggestions),
        model_tokens_est=estimate_tokens(reply.response),
    )
    return ChatResponse(response=reply.response, suggestions=reply.suggestions)


@app.post("/api/chat/stream")
def chat_stream(request: ChatRequest):
    """
    Stream the answer as raw text chunks, then one terminal chunk
    {"suggestions": [...], "done": true}. Upstream errors before the first chunk
    give a 500 JSON body; errors mid-stream end the stream without a terminal chunk.
    """
    invalid = _validate(request)
    if invalid is not None:
        return invalid

    request_id = generate_request_id()
    start = time.perf_counter()
    try:
        deltas = open_stream(request.message, request.category)
    except Exception as e:
        log_upstream_failure(request_id=request_id, error=e, where="api.chat_stream")
        log_request(
            request_id=request_id,
            category=request.category,
            latency_ms=(time.perf_counter() - start) * 1000,
            streamed=True,
            upstream_error=True,
        )
        return _error(500, FAILURE_MESSAGE)

    def event_stream() -> Iterator[str]:
        received: list[str] = []

        def tap() -> Iterator[str]:
            for delta in deltas:
                received.append(delta)
                yield delta

        completed = False
        try:
            for chunk in relay_stream(tap()):
                yield chunk
            completed = True
        except Exception as e:
            log_upstream_failure(request_id=request_id, error=e, where="api.chat_stream")
            log_stream_incomplete(request_id=request_id, buffered_chars=sum(len(d) for d in received))
        full = "".join(received)
        log_request(
            request_id=request_id,
            category=request.category,
            latency_ms=(time.perf_counter() - start) * 1000,
            streamed=True,
            suggestions_count=len(split_response(full).suggestions) if completed else 0,
            model_tokens_est=estimate_tokens(full),
            upstream_error=not completed,
        )

    return StreamingResponse(
        event_stream(),
        media_type="text/plain; charset=utf-8",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
