"""Wire dialects shared by providers.

Each strategy is stateless and reused by every provider speaking its dialect.
"""

from .base import (
    HeaderBuildContext,
    ProtocolStrategy,
    RequestBuildContext,
    StreamParseContext,
    StreamParseState,
    drain_stream_events,
)
from .events import StreamDone, StreamError, StreamEvent, TextDelta, ToolCall, ToolCallDelta
from .openai_protocol import OpenAiProtocol
from .anthropic_protocol import AnthropicProtocol
from ..types import ProtocolType

_PROTOCOLS = {
    ProtocolType.OPENAI_COMPATIBLE: OpenAiProtocol(),
    ProtocolType.ANTHROPIC: AnthropicProtocol(),
}


def get_protocol(protocol_type: ProtocolType) -> ProtocolStrategy:
    """Return the shared strategy instance for a dialect."""
    return _PROTOCOLS[protocol_type]


__all__ = [
    "HeaderBuildContext",
    "ProtocolStrategy",
    "RequestBuildContext",
    "StreamParseContext",
    "StreamParseState",
    "drain_stream_events",
    "StreamDone",
    "StreamError",
    "StreamEvent",
    "TextDelta",
    "ToolCall",
    "ToolCallDelta",
    "OpenAiProtocol",
    "AnthropicProtocol",
    "get_protocol",
]
