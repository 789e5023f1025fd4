"""Dispatcher driving provider calls end to end.

Selects a provider by id, walks it through endpoint and credential
resolution, builds the request, sends it and feeds the response stream
through the provider's parser. Errors surface immediately; no retries
happen here beyond what the transport applies to unary requests.
"""

import logging
from typing import AsyncIterator, List, Optional

from .errors import ErrorKind, ResponseParseError, StreamProtocolError
from .image_generation import GeneratedImage
from .protocols import (
    RequestBuildContext,
    StreamDone,
    StreamError,
    StreamEvent,
    StreamParseContext,
    StreamParseState,
    TextDelta,
    drain_stream_events,
)
from .providers.base import ChatResult, ProviderContext
from .providers.credentials import CredentialStore, EnvCredentialStore
from .providers.endpoints import EnvSettingsStore, SettingsStore
from .providers.registry import ProviderRegistry, build_default_registry
from .schemas import ChatRequest, ImageGenerationRequest
from .transport import HttpTransport

logger = logging.getLogger(__name__)


class LLMClient:
    """Entry point for chat streaming and image generation."""

    def __init__(
        self,
        registry: Optional[ProviderRegistry] = None,
        credential_store: Optional[CredentialStore] = None,
        settings_store: Optional[SettingsStore] = None,
        transport: Optional[HttpTransport] = None,
    ):
        self.transport = transport or HttpTransport()
        self.registry = registry or build_default_registry(self.transport)
        self.context = ProviderContext(
            credential_store=credential_store or EnvCredentialStore(),
            settings=settings_store or EnvSettingsStore(),
        )

    async def stream_text(self, provider_id: str, request: ChatRequest) -> AsyncIterator[StreamEvent]:
        """Stream a chat completion as normalized events.

        Resolution and build failures raise before anything is sent. Once
        streaming, vendor errors arrive as ``StreamError`` events; a stream
        that closes without its end marker ends with a ``StreamError`` of
        kind STREAM_PROTOCOL_ERROR.

        Raises:
            ProviderNotFoundError, EndpointUnresolvedError,
            CredentialMissingError, RequestBuildError, UpstreamError,
            TransportError.
        """
        provider = self.registry.require_provider(provider_id)

        base_url = await provider.resolve_base_url(self.context)
        credentials = await provider.get_credentials(self.context)
        body = provider.build_protocol_request(
            RequestBuildContext(config=provider.config, request=request, stream=True)
        )
        headers = await provider.build_headers(self.context, credentials, stream=True)
        url = f"{base_url}{provider.protocol.chat_path}"

        logger.info(f"Streaming {request.model} from {provider.id} ({url})")

        # One state per stream; it is dropped with this generator.
        state = StreamParseState()
        chunks = self.transport.stream(url, headers, body, provider.id)
        try:
            async for chunk in chunks:
                ctx = StreamParseContext(provider_id=provider.id, chunk=chunk)
                for event in drain_stream_events(provider.parse_protocol_stream_event, ctx, state):
                    yield event
                if state.terminated:
                    break
            else:
                ctx = StreamParseContext(provider_id=provider.id, end_of_input=True)
                for event in drain_stream_events(provider.parse_protocol_stream_event, ctx, state):
                    yield event
        finally:
            await chunks.aclose()

        if not state.terminated:
            logger.warning(f"Stream from {provider.id} closed before its end marker")
            yield StreamError(
                message="Stream closed before completion",
                kind=ErrorKind.STREAM_PROTOCOL_ERROR,
            )

    async def collect_text(self, provider_id: str, request: ChatRequest) -> ChatResult:
        """Run a streamed chat completion to the end and collect its text.

        Raises:
            StreamProtocolError: If the vendor reports an in-band error.
            ResponseParseError: If a stream frame cannot be decoded.
        """
        parts: List[str] = []
        done: Optional[StreamDone] = None
        async for event in self.stream_text(provider_id, request):
            if isinstance(event, TextDelta):
                parts.append(event.text)
            elif isinstance(event, StreamDone):
                done = event
            elif isinstance(event, StreamError):
                if event.kind == ErrorKind.RESPONSE_PARSE_FAILED:
                    raise ResponseParseError(event.message, provider_id, raw=event.raw)
                raise StreamProtocolError(event.message, provider_id, code=event.code)

        return ChatResult(
            text="".join(parts),
            provider=provider_id,
            model=request.model or "",
            finish_reason=done.finish_reason if done else None,
            usage=done.usage if done else None,
            tool_calls=done.tool_calls if done else [],
        )

    async def generate_image(
        self,
        provider_id: str,
        model: str,
        request: ImageGenerationRequest,
    ) -> List[GeneratedImage]:
        """Generate images with the vendor's image client."""
        client = self.registry.require_image_client(provider_id)
        return await client.generate(self.context, model, request)

    async def close(self) -> None:
        await self.transport.close()
