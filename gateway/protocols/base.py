"""Protocol strategy interface and per-stream parse state.

A protocol strategy implements one wire dialect (request body, headers and
stream decoding) and holds no per-call state, so a single instance is shared
by every provider speaking that dialect. Everything that must survive between
network chunks lives in a ``StreamParseState`` owned by the caller driving
one streaming response.
"""

import codecs
import logging
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Deque, Dict, List, Optional, Union

from ..errors import ErrorKind, RequestBuildError, excerpt
from ..schemas import ChatRequest
from ..types import AuthType, ProviderConfig
from .events import StreamDone, StreamError, StreamEvent, ToolCall
from .sse import SSEFrame, parse_frame, split_frame

logger = logging.getLogger(__name__)


def in_band_error(payload: Dict[str, Any], data: str) -> StreamError:
    """Build an error event from a vendor error payload of any shape."""
    error = payload.get("error", payload)
    if isinstance(error, dict):
        message = error.get("message") or "Unknown stream error"
        code = error.get("code") or error.get("type")
    else:
        message = str(error)
        code = None
    return StreamError(
        message=str(message),
        code=str(code) if code is not None else None,
        raw=excerpt(data),
    )


def unexpected_shape(data: str) -> StreamError:
    """Error event for a decodable frame whose structure is not understood."""
    return StreamError(
        message="Unexpected stream payload shape",
        kind=ErrorKind.RESPONSE_PARSE_FAILED,
        raw=excerpt(data),
    )


@dataclass
class HeaderBuildContext:
    """Inputs for dialect header construction."""

    config: ProviderConfig
    stream: bool = False


@dataclass
class RequestBuildContext:
    """Inputs for dialect request construction."""

    config: ProviderConfig
    request: ChatRequest
    stream: bool = True


@dataclass
class StreamParseContext:
    """One unit of raw stream input.

    Attributes:
        provider_id: Provider the stream belongs to, for attribution.
        chunk: Raw bytes or text received from the transport. Empty to drain
            events already buffered in the state.
        end_of_input: The connection closed; a trailing frame without a
            blank-line terminator is treated as complete.
    """

    provider_id: str
    chunk: Union[bytes, str] = b""
    end_of_input: bool = False

    def continuation(self) -> "StreamParseContext":
        """Context for draining further events without feeding new input."""
        return replace(self, chunk=b"")


@dataclass
class PartialToolCall:
    """Tool call fields assembled across frames."""

    id: Optional[str] = None
    name: Optional[str] = None
    arguments: str = ""


@dataclass
class StreamParseState:
    """Mutable accumulator for one in-flight stream.

    Created at the start of a stream and dropped at its end (or on
    cancellation). Never share an instance between concurrent streams.
    """

    buffer: str = ""
    pending: Deque[StreamEvent] = field(default_factory=deque)
    tool_calls: Dict[int, PartialToolCall] = field(default_factory=dict)
    finish_reason: Optional[str] = None
    usage: Dict[str, Any] = field(default_factory=dict)
    terminated: bool = False
    decoder: Any = field(default_factory=lambda: codecs.getincrementaldecoder("utf-8")(errors="replace"))

    def feed(self, chunk: Union[bytes, str], final: bool = False) -> None:
        """Append raw input to the frame buffer."""
        if isinstance(chunk, str):
            text = chunk
            if final:
                text += self.decoder.decode(b"", final=True)
        else:
            text = self.decoder.decode(chunk or b"", final=final)
        if text:
            self.buffer += text

    def next_frame(self, flush: bool = False) -> Optional[SSEFrame]:
        """Pop the next complete frame, skipping heartbeat-only blocks."""
        while True:
            block, self.buffer = split_frame(self.buffer, flush=flush)
            if block is None:
                return None
            frame = parse_frame(block)
            if frame is not None:
                return frame

    def finished_tool_calls(self, parse_arguments: Callable[[str], Dict[str, Any]]) -> List[ToolCall]:
        """Assemble accumulated tool calls in index order."""
        calls = []
        for index in sorted(self.tool_calls):
            partial = self.tool_calls[index]
            calls.append(ToolCall(
                id=partial.id or f"call_{index}",
                name=partial.name or "",
                arguments=parse_arguments(partial.arguments),
                raw_arguments=partial.arguments,
            ))
        return calls

    def terminate(self, event: StreamDone) -> None:
        """Queue the terminal event and stop accepting input."""
        self.pending.append(event)
        self.terminated = True
        self.buffer = ""


class ProtocolStrategy(ABC):
    """One wire dialect, reusable by every provider that speaks it."""

    name: str = "protocol"

    # Chat endpoint, relative to the resolved base URL
    chat_path: str = "/chat/completions"

    # Header used for AuthType.API_KEY credentials
    api_key_header: str = "x-api-key"

    def build_headers(self, ctx: HeaderBuildContext) -> Dict[str, str]:
        """Dialect-fixed headers plus the vendor's default headers.

        Authentication is not included; the provider layers it in.
        """
        headers = self.base_headers(ctx)
        if ctx.config.headers:
            headers.update(ctx.config.headers)
        return headers

    def base_headers(self, ctx: HeaderBuildContext) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        headers["Accept"] = "text/event-stream" if ctx.stream else "application/json"
        return headers

    def auth_headers(self, auth_type: AuthType, token: str) -> Dict[str, str]:
        """Map a credential onto request headers for this dialect."""
        if auth_type == AuthType.BEARER:
            return {"Authorization": f"Bearer {token}"}
        if auth_type == AuthType.API_KEY:
            return {self.api_key_header: token}
        return {}

    @abstractmethod
    def build_request(self, ctx: RequestBuildContext) -> Dict[str, Any]:
        """Map a normalized request into the dialect's body.

        Raises:
            RequestBuildError: If a required normalized field is absent.
        """

    def parse_stream_event(
        self,
        ctx: StreamParseContext,
        state: StreamParseState,
    ) -> Optional[StreamEvent]:
        """Consume one chunk and return at most one normalized event.

        Events decoded from earlier input are returned before new input is
        looked at, so callers drain a chunk by calling again with an empty
        chunk until None comes back (see ``drain_stream_events``).
        """
        if state.terminated:
            if state.pending:
                return state.pending.popleft()
            # Input after the end marker is discarded.
            return None

        state.feed(ctx.chunk, final=ctx.end_of_input)
        while not state.pending:
            frame = state.next_frame(flush=ctx.end_of_input)
            if frame is None:
                if ctx.end_of_input:
                    self.finish_stream(ctx, state)
                    if state.pending:
                        break
                return None
            self.handle_frame(ctx, frame, state)
        return state.pending.popleft()

    @abstractmethod
    def handle_frame(self, ctx: StreamParseContext, frame: SSEFrame, state: StreamParseState) -> None:
        """Decode one complete frame, queueing zero or more events on ``state``."""

    def finish_stream(self, ctx: StreamParseContext, state: StreamParseState) -> None:
        """Called once input is exhausted without the end sentinel."""

    def require(self, ctx: RequestBuildContext) -> None:
        """Validate the normalized fields every dialect needs."""
        request = ctx.request
        if not request.model or not request.model.strip():
            raise RequestBuildError("Request is missing required field 'model'", ctx.config.id, field="model")
        if not request.messages:
            raise RequestBuildError("Request is missing required field 'messages'", ctx.config.id, field="messages")

    def merge_extra_body(self, ctx: RequestBuildContext, body: Dict[str, Any]) -> Dict[str, Any]:
        """Apply vendor default fields, then per-request overrides."""
        if ctx.config.extra_body:
            for key, value in ctx.config.extra_body.items():
                body.setdefault(key, value)
        if ctx.request.extra_body:
            body.update(ctx.request.extra_body)
        return body


def drain_stream_events(
    parse: Callable[[StreamParseContext, StreamParseState], Optional[StreamEvent]],
    ctx: StreamParseContext,
    state: StreamParseState,
) -> List[StreamEvent]:
    """Feed one chunk and collect every event it makes available.

    Args:
        parse: A strategy's ``parse_stream_event`` or a provider's
            ``parse_protocol_stream_event``.
        ctx: Context carrying the new chunk.
        state: The stream's parse state.
    """
    events: List[StreamEvent] = []
    event = parse(ctx, state)
    follow = ctx.continuation()
    while event is not None:
        events.append(event)
        event = parse(follow, state)
    return events
