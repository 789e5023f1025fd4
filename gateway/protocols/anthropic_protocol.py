"""Anthropic messages dialect.

Streams are typed SSE events; the stream ends with ``message_stop``.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from ..errors import ErrorKind, RequestBuildError, excerpt
from ..schemas import ChatMessage
from ..usage import merge_usage, normalize_usage
from .base import (
    HeaderBuildContext,
    PartialToolCall,
    ProtocolStrategy,
    RequestBuildContext,
    StreamParseContext,
    StreamParseState,
    in_band_error,
    unexpected_shape,
)
from .events import StreamDone, StreamError, TextDelta, ToolCallDelta
from .openai_protocol import parse_tool_arguments
from .sse import SSEFrame

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_MAX_TOKENS = 4096

# Anthropic stop reasons mapped onto the OpenAI vocabulary
STOP_REASONS = {
    "end_turn": "stop",
    "stop_sequence": "stop",
    "max_tokens": "length",
    "tool_use": "tool_calls",
}


class AnthropicProtocol(ProtocolStrategy):
    """Anthropic ``/v1/messages`` wire format."""

    name = "anthropic"
    chat_path = "/messages"
    api_key_header = "x-api-key"

    def base_headers(self, ctx: HeaderBuildContext) -> Dict[str, str]:
        headers = super().base_headers(ctx)
        headers["anthropic-version"] = ANTHROPIC_VERSION
        return headers

    def build_request(self, ctx: RequestBuildContext) -> Dict[str, Any]:
        self.require(ctx)
        request = ctx.request

        system_parts: List[str] = []
        messages: List[Dict[str, Any]] = []
        for message in request.messages:
            if message.role == "system":
                if isinstance(message.content, str) and message.content:
                    system_parts.append(message.content)
                continue
            self._append_message(messages, self._convert_message(message))

        if not messages:
            raise self._missing_messages(ctx)

        body: Dict[str, Any] = {
            "model": request.model,
            "messages": messages,
            "max_tokens": request.max_tokens or DEFAULT_MAX_TOKENS,
        }
        if system_parts:
            body["system"] = "\n\n".join(system_parts)
        if request.temperature is not None:
            body["temperature"] = request.temperature
        if request.top_p is not None:
            body["top_p"] = request.top_p
        if request.stop:
            body["stop_sequences"] = request.stop
        if request.tools:
            body["tools"] = [
                {
                    "name": tool.name,
                    "description": tool.description or "",
                    "input_schema": tool.parameters,
                }
                for tool in request.tools
            ]
            choice = self._convert_tool_choice(request.tool_choice)
            if choice is not None:
                body["tool_choice"] = choice
        if ctx.stream:
            body["stream"] = True

        return self.merge_extra_body(ctx, body)

    def _missing_messages(self, ctx: RequestBuildContext) -> RequestBuildError:
        return RequestBuildError(
            "Request needs at least one non-system message",
            ctx.config.id,
            field="messages",
        )

    def _convert_message(self, message: ChatMessage) -> Dict[str, Any]:
        if message.role == "tool":
            return {
                "role": "user",
                "content": [{
                    "type": "tool_result",
                    "tool_use_id": message.tool_call_id or "",
                    "content": message.content if message.content is not None else "",
                }],
            }

        if message.role == "assistant" and message.tool_calls:
            blocks: List[Dict[str, Any]] = []
            if isinstance(message.content, str) and message.content:
                blocks.append({"type": "text", "text": message.content})
            for call in message.tool_calls:
                blocks.append({
                    "type": "tool_use",
                    "id": call.id,
                    "name": call.name,
                    "input": parse_tool_arguments(call.arguments),
                })
            return {"role": "assistant", "content": blocks}

        return {"role": message.role, "content": message.content or ""}

    def _append_message(self, messages: List[Dict[str, Any]], message: Dict[str, Any]) -> None:
        # Consecutive tool results must share one user turn.
        if (
            messages
            and message["role"] == "user"
            and messages[-1]["role"] == "user"
            and isinstance(message["content"], list)
            and isinstance(messages[-1]["content"], list)
        ):
            messages[-1]["content"].extend(message["content"])
            return
        messages.append(message)

    def _convert_tool_choice(self, tool_choice: Any) -> Optional[Dict[str, Any]]:
        if tool_choice is None:
            return None
        if isinstance(tool_choice, dict):
            function = tool_choice.get("function")
            if isinstance(function, dict) and function.get("name"):
                return {"type": "tool", "name": function["name"]}
            return tool_choice
        if tool_choice == "required":
            return {"type": "any"}
        if tool_choice in ("auto", "none", "any"):
            return {"type": tool_choice}
        return {"type": "tool", "name": tool_choice}

    def handle_frame(self, ctx: StreamParseContext, frame: SSEFrame, state: StreamParseState) -> None:
        data = frame.data.strip()
        if not data:
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

        event_type = frame.event or payload.get("type")

        if event_type == "ping":
            return

        if event_type == "error" or payload.get("error"):
            state.pending.append(in_band_error(payload, data))
            return

        if event_type == "message_start":
            message = payload.get("message") or {}
            if not isinstance(message, dict):
                state.pending.append(unexpected_shape(data))
                return
            usage = message.get("usage")
            if isinstance(usage, dict):
                state.usage = merge_usage(state.usage, usage)
            return

        if event_type == "content_block_start":
            block = payload.get("content_block") or {}
            index = payload.get("index", len(state.tool_calls))
            if not isinstance(block, dict) or not isinstance(index, int):
                state.pending.append(unexpected_shape(data))
                return
            if block.get("type") == "tool_use":
                state.tool_calls[index] = PartialToolCall(id=block.get("id"), name=block.get("name"))
                state.pending.append(ToolCallDelta(index=index, id=block.get("id"), name=block.get("name")))
            elif block.get("type") == "text" and isinstance(block.get("text"), str) and block["text"]:
                state.pending.append(TextDelta(text=block["text"]))
            return

        if event_type == "content_block_delta":
            delta = payload.get("delta") or {}
            index = payload.get("index", 0)
            if not isinstance(delta, dict) or not isinstance(index, int):
                state.pending.append(unexpected_shape(data))
                return
            if delta.get("type") == "text_delta":
                text = delta.get("text")
                if text is not None and not isinstance(text, str):
                    state.pending.append(unexpected_shape(data))
                elif text:
                    state.pending.append(TextDelta(text=text))
            elif delta.get("type") == "input_json_delta":
                fragment = delta.get("partial_json") or ""
                if not isinstance(fragment, str):
                    state.pending.append(unexpected_shape(data))
                    return
                partial = state.tool_calls.setdefault(index, PartialToolCall())
                partial.arguments += fragment
                if fragment:
                    state.pending.append(ToolCallDelta(index=index, arguments_delta=fragment))
            return

        if event_type == "message_delta":
            delta = payload.get("delta") or {}
            if not isinstance(delta, dict):
                state.pending.append(unexpected_shape(data))
                return
            stop_reason = delta.get("stop_reason")
            if stop_reason:
                state.finish_reason = STOP_REASONS.get(str(stop_reason), str(stop_reason))
            usage = payload.get("usage")
            if isinstance(usage, dict):
                state.usage = merge_usage(state.usage, usage)
            return

        if event_type == "message_stop":
            self._terminate(state)
            return

        # content_block_stop and unknown event types carry nothing we emit

    def finish_stream(self, ctx: StreamParseContext, state: StreamParseState) -> None:
        if state.finish_reason is not None:
            logger.debug(f"Stream from {ctx.provider_id} closed without message_stop")
            self._terminate(state)

    def _terminate(self, state: StreamParseState) -> None:
        state.terminate(StreamDone(
            finish_reason=state.finish_reason,
            usage=normalize_usage(state.usage or None),
            tool_calls=state.finished_tool_calls(parse_tool_arguments),
        ))
