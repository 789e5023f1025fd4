"""Pydantic schemas for normalized requests."""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any, Union


# ============================================================================
# Chat Schemas
# ============================================================================

class AssistantToolCall(BaseModel):
    """A tool call previously issued by the assistant."""
    id: str
    name: str
    arguments: str = "{}"


class ChatMessage(BaseModel):
    """One message of a chat conversation."""
    role: str
    content: Union[str, List[Dict[str, Any]], None] = None
    name: Optional[str] = None
    tool_call_id: Optional[str] = None
    tool_calls: Optional[List[AssistantToolCall]] = None

    @field_validator('role')
    @classmethod
    def validate_role(cls, v: str) -> str:
        """Validate message role."""
        v = v.strip().lower()
        if v not in {"system", "user", "assistant", "tool"}:
            raise ValueError(f'Unsupported message role: {v}')
        return v


class ToolDefinition(BaseModel):
    """A tool the model may call."""
    name: str
    description: Optional[str] = None
    parameters: Dict[str, Any] = Field(default_factory=lambda: {"type": "object", "properties": {}})


class ChatRequest(BaseModel):
    """Vendor-independent chat completion request.

    ``model`` and ``messages`` are required by every dialect; they are
    optional here so that the dialect can report which field is missing.
    """
    model: Optional[str] = None
    messages: List[ChatMessage] = Field(default_factory=list)
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    stop: Optional[List[str]] = None
    tools: Optional[List[ToolDefinition]] = None
    tool_choice: Optional[Union[str, Dict[str, Any]]] = None
    extra_body: Optional[Dict[str, Any]] = None

    @field_validator('temperature')
    @classmethod
    def validate_temperature(cls, v: Optional[float]) -> Optional[float]:
        """Validate temperature range."""
        if v is not None and not 0.0 <= v <= 2.0:
            raise ValueError('Temperature must be between 0.0 and 2.0')
        return v


# ============================================================================
# Image Generation Schemas
# ============================================================================

class ImageGenerationRequest(BaseModel):
    """Vendor-independent image generation request."""
    prompt: str
    size: Optional[str] = None
    quality: Optional[str] = None
    n: Optional[int] = None
    response_format: Optional[str] = None

    @field_validator('n')
    @classmethod
    def validate_n(cls, v: Optional[int]) -> Optional[int]:
        """Validate number of images."""
        if v is not None and v < 1:
            raise ValueError('n must be at least 1')
        return v
