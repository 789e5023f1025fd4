"""OpenAI-compatible chat completions dialect.

Spoken by OpenAI and by most vendors exposing ``/chat/completions``
(DeepSeek, Moonshot/Kimi, Zhipu, Volcengine Ark, OpenRouter, ...).
"""

import json
import logging
from typing import Any, Dict

from ..errors import ErrorKind, excerpt
from ..schemas import ChatMessage
from ..usage import merge_usage, normalize_usage
from .base import (
    PartialToolCall,
    ProtocolStrategy,
    RequestBuildContext,
    StreamParseContext,
    StreamParseState,
    in_band_error,
    unexpected_shape,
)
from .events import StreamDone, StreamError, TextDelta, ToolCallDelta
from .sse import SSEFrame

logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"


def parse_tool_arguments(raw: str) -> Dict[str, Any]:
    """Decode accumulated tool arguments; unparseable text is kept under ``_raw``."""
    if not raw or not raw.strip():
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        return {"_raw": raw}
    if isinstance(value, dict):
        return value
    return {"_value": value}


def _well_formed_delta(delta: Any) -> bool:
    """Whether a choice delta has the structure the decoder relies on."""
    if not isinstance(delta, dict):
        return False
    fragments = delta.get("tool_calls") or []
    if not isinstance(fragments, list):
        return False
    content = delta.get("content")
    if content is not None and not isinstance(content, str):
        return False
    for fragment in fragments:
        if not isinstance(fragment, dict):
            return False
        function = fragment.get("function")
        if function is not None and not isinstance(function, dict):
            return False
        arguments = (function or {}).get("arguments")
        if arguments is not None and not isinstance(arguments, str):
            return False
    return True


class OpenAiProtocol(ProtocolStrategy):
    """OpenAI chat completions wire format."""

    name = "openai"
    api_key_header = "api-key"

    def build_request(self, ctx: RequestBuildContext) -> Dict[str, Any]:
        self.require(ctx)
        request = ctx.request

        body: Dict[str, Any] = {
            "model": request.model,
            "messages": [self._convert_message(m) for m in request.messages],
        }
        if request.temperature is not None:
            body["temperature"] = request.temperature
        if request.max_tokens is not None:
            body["max_tokens"] = request.max_tokens
        if request.top_p is not None:
            body["top_p"] = request.top_p
        if request.stop:
            body["stop"] = request.stop
        if request.tools:
            body["tools"] = [
                {
                    "type": "function",
                    "function": {
                        "name": tool.name,
                        "description": tool.description or "",
                        "parameters": tool.parameters,
                    },
                }
                for tool in request.tools
            ]
            if request.tool_choice is not None:
                body["tool_choice"] = request.tool_choice
        if ctx.stream:
            body["stream"] = True
            body["stream_options"] = {"include_usage": True}

        return self.merge_extra_body(ctx, body)

    def _convert_message(self, message: ChatMessage) -> Dict[str, Any]:
        converted: Dict[str, Any] = {"role": message.role, "content": message.content}
        if message.name:
            converted["name"] = message.name
        if message.role == "tool" and message.tool_call_id:
            converted["tool_call_id"] = message.tool_call_id
        if message.tool_calls:
            converted["tool_calls"] = [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {"name": call.name, "arguments": call.arguments},
                }
                for call in message.tool_calls
            ]
        return converted

    def handle_frame(self, ctx: StreamParseContext, frame: SSEFrame, state: StreamParseState) -> None:
        data = frame.data.strip()
        if not data:
            return
        if data == DONE_SENTINEL:
            self._terminate(state)
            return

        try:
            payload = json.loads(data)
        except json.JSONDecodeError as e:
            logger.warning(f"Malformed stream frame from {ctx.provider_id}: {e}")
            state.pending.append(StreamError(
                message=f"Malformed stream payload: {e.msg}",
                kind=ErrorKind.RESPONSE_PARSE_FAILED,
                raw=excerpt(data),
            ))
            return

        if not isinstance(payload, dict):
            state.pending.append(unexpected_shape(data))
            return

        if frame.event == "error" or payload.get("error"):
            state.pending.append(in_band_error(payload, data))
            return

        usage = payload.get("usage")
        if isinstance(usage, dict):
            state.usage = merge_usage(state.usage, usage)

        choices = payload.get("choices") or []
        if not isinstance(choices, list):
            state.pending.append(unexpected_shape(data))
            return
        if not choices:
            return
        choice = choices[0]
        if not isinstance(choice, dict):
            state.pending.append(unexpected_shape(data))
            return
        delta = choice.get("delta") or {}
        if not _well_formed_delta(delta):
            state.pending.append(unexpected_shape(data))
            return

        content = delta.get("content")
        if content:
            state.pending.append(TextDelta(text=content))

        for fragment in delta.get("tool_calls") or []:
            state.pending.append(self._accumulate_tool_call(fragment, state))

        finish_reason = choice.get("finish_reason")
        if finish_reason:
            state.finish_reason = str(finish_reason)

    def finish_stream(self, ctx: StreamParseContext, state: StreamParseState) -> None:
        # Some compatible vendors close the connection without [DONE].
        if state.finish_reason is not None:
            logger.debug(f"Stream from {ctx.provider_id} closed without {DONE_SENTINEL}")
            self._terminate(state)

    def _accumulate_tool_call(self, fragment: Dict[str, Any], state: StreamParseState) -> ToolCallDelta:
        index = fragment.get("index")
        if not isinstance(index, int):
            index = len(state.tool_calls)
        partial = state.tool_calls.setdefault(index, PartialToolCall())

        function = fragment.get("function") or {}
        call_id = fragment.get("id")
        name = function.get("name")
        arguments = function.get("arguments") or ""
        if call_id:
            partial.id = call_id
        if name:
            partial.name = name
        partial.arguments += arguments

        return ToolCallDelta(index=index, id=call_id, name=name, arguments_delta=arguments)

    def _terminate(self, state: StreamParseState) -> None:
        state.terminate(StreamDone(
            finish_reason=state.finish_reason,
            usage=normalize_usage(state.usage or None),
            tool_calls=state.finished_tool_calls(parse_tool_arguments),
        ))

