"""Shared helpers for building stream input and mock transports."""

import json
from typing import Any, Dict, Iterable, List, Optional

import httpx
from tenacity import wait_none

from gateway.protocols import StreamParseContext, StreamParseState, drain_stream_events
from gateway.transport import HttpTransport


def sse(payload: Any, event: Optional[str] = None) -> str:
    """Render one SSE frame."""
    data = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False)
    prefix = f"event: {event}\n" if event else ""
    return f"{prefix}data: {data}\n\n"


def openai_chunk(content: Optional[str] = None, finish_reason: Optional[str] = None, **delta) -> Dict[str, Any]:
    """Build an OpenAI chat.completion.chunk payload."""
    if content is not None:
        delta["content"] = content
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion.chunk",
        "choices": [{"index": 0, "delta": delta, "finish_reason": finish_reason}],
    }


def parse_all(strategy, chunks: Iterable, provider_id: str = "test", close: bool = True) -> List[Any]:
    """Feed chunks through a strategy the way the dispatcher does."""
    state = StreamParseState()
    events: List[Any] = []
    for chunk in chunks:
        events.extend(drain_stream_events(
            strategy.parse_stream_event,
            StreamParseContext(provider_id=provider_id, chunk=chunk),
            state,
        ))
    if close:
        events.extend(drain_stream_events(
            strategy.parse_stream_event,
            StreamParseContext(provider_id=provider_id, end_of_input=True),
            state,
        ))
    return events


def split_every(data: bytes, size: int) -> List[bytes]:
    return [data[i:i + size] for i in range(0, len(data), size)]


def mock_transport(handler) -> HttpTransport:
    """HttpTransport over httpx.MockTransport without retry backoff."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpTransport(client=client, retry_wait=wait_none())


def streaming_response(chunks: Iterable[bytes], status_code: int = 200) -> httpx.Response:
    """Response whose body arrives as the given chunks."""

    async def body():
        for chunk in chunks:
            yield chunk

    return httpx.Response(status_code, headers={"Content-Type": "text/event-stream"}, content=body())
