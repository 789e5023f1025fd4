"""Incremental server-sent-events framing.

Frames are separated by a blank line in any of the three line-ending styles
permitted by the SSE grammar. A separator that straddles two network chunks
is only recognised once both halves are buffered, so the framing result does
not depend on where the transport split the byte stream.
"""

import re
from dataclasses import dataclass
from typing import Optional

_FRAME_SEPARATOR = re.compile(r"\r\n\r\n|\n\n|\r\r")
_LINE_SEPARATOR = re.compile(r"\r\n|\r|\n")


@dataclass
class SSEFrame:
    """One dispatched SSE event."""

    event: Optional[str]
    data: str


def parse_frame(block: str) -> Optional[SSEFrame]:
    """Parse the text of one frame.

    Returns None for blocks holding only comments (heartbeats) or nothing.
    """
    event: Optional[str] = None
    data_lines = []
    saw_field = False
    for line in _LINE_SEPARATOR.split(block):
        if not line or line.startswith(":"):
            continue
        name, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]
        if name == "data":
            data_lines.append(value)
            saw_field = True
        elif name == "event":
            event = value or None
            saw_field = True
        # id and retry carry nothing the gateway consumes
    if not saw_field:
        return None
    return SSEFrame(event=event, data="\n".join(data_lines))


def split_frame(buffer: str, flush: bool = False):
    """Split the first complete frame off ``buffer``.

    Args:
        buffer: Accumulated undelimited text.
        flush: Treat a trailing unterminated block as complete.

    Returns:
        ``(block, rest)`` where ``block`` is None when no frame is complete.
    """
    match = _FRAME_SEPARATOR.search(buffer)
    if match is None:
        # A lone trailing CR may still become CRLF once the next chunk lands.
        if flush and buffer.strip():
            return buffer, ""
        return None, buffer
    return buffer[:match.start()], buffer[match.end():]
