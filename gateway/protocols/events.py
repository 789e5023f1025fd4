"""Normalized stream events produced by protocol strategies."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from ..errors import ErrorKind
from ..usage import Usage


@dataclass
class ToolCall:
    """A fully assembled tool call."""

    id: str
    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)
    raw_arguments: str = ""


@dataclass
class TextDelta:
    """Incremental text content."""

    text: str
    type: str = "text-delta"


@dataclass
class ToolCallDelta:
    """Incremental structured tool call data."""

    index: int
    id: Optional[str] = None
    name: Optional[str] = None
    arguments_delta: str = ""
    type: str = "tool-call-delta"


@dataclass
class StreamDone:
    """Terminal event carrying the stop reason and usage accounting."""

    finish_reason: Optional[str] = None
    usage: Optional[Usage] = None
    tool_calls: List[ToolCall] = field(default_factory=list)
    type: str = "done"


@dataclass
class StreamError:
    """Error reported by the vendor in-band, or a frame that could not be decoded."""

    message: str
    kind: ErrorKind = ErrorKind.STREAM_PROTOCOL_ERROR
    code: Optional[str] = None
    raw: Optional[str] = None
    type: str = "error"


StreamEvent = Union[TextDelta, ToolCallDelta, StreamDone, StreamError]
