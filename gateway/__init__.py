"""LLM gateway: many vendor APIs behind one normalized interface."""

from .client import LLMClient
from .errors import (
    AuthenticationError,
    CredentialMissingError,
    EndpointUnresolvedError,
    ErrorKind,
    ProviderError,
    ProviderNotFoundError,
    RateLimitError,
    RequestBuildError,
    ResponseParseError,
    StreamProtocolError,
    TransportError,
    UpstreamError,
)
from .schemas import AssistantToolCall, ChatMessage, ChatRequest, ImageGenerationRequest, ToolDefinition
from .types import ApiKeyCredentials, AuthType, NoCredentials, ProtocolType, ProviderConfig

__all__ = [
    "LLMClient",
    "AuthenticationError",
    "CredentialMissingError",
    "EndpointUnresolvedError",
    "ErrorKind",
    "ProviderError",
    "ProviderNotFoundError",
    "RateLimitError",
    "RequestBuildError",
    "ResponseParseError",
    "StreamProtocolError",
    "TransportError",
    "UpstreamError",
    "AssistantToolCall",
    "ChatMessage",
    "ChatRequest",
    "ImageGenerationRequest",
    "ToolDefinition",
    "ApiKeyCredentials",
    "AuthType",
    "NoCredentials",
    "ProtocolType",
    "ProviderConfig",
]
