"""Provider abstraction layer.

A provider binds one vendor's static configuration to the protocol strategy
for its wire dialect, plus whatever vendor-specific overrides the shared
strategy cannot express. Credential and endpoint resolution is shared by
every variant through the composed ``BaseProvider`` helper.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging

from ..errors import CredentialMissingError
from ..protocols import (
    HeaderBuildContext,
    ProtocolStrategy,
    RequestBuildContext,
    StreamParseContext,
    StreamParseState,
)
from ..protocols.events import StreamEvent, ToolCall
from ..types import AuthType, ProtocolType, ProviderConfig, ProviderCredentials
from ..usage import Usage
from .credentials import CredentialResolver, CredentialStore
from .endpoints import EndpointResolver, SettingsStore

logger = logging.getLogger(__name__)


@dataclass
class ProviderContext:
    """Runtime collaborators handed to providers for one call."""

    credential_store: CredentialStore
    settings: SettingsStore


@dataclass
class ChatResult:
    """Unified result of a collected chat stream."""

    text: str
    provider: str
    model: str
    finish_reason: Optional[str] = None
    usage: Optional[Usage] = None
    tool_calls: List[ToolCall] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "text": self.text,
            "provider": self.provider,
            "model": self.model,
            "finish_reason": self.finish_reason,
            "usage": self.usage.to_dict() if self.usage else None,
            "tool_calls": [
                {"id": call.id, "name": call.name, "arguments": call.arguments}
                for call in self.tool_calls
            ],
        }


class BaseProvider:
    """Credential and endpoint resolution shared by every provider variant."""

    def __init__(self, config: ProviderConfig):
        self.config = config

    async def resolve_base_url_with_fallback(self, settings: SettingsStore) -> str:
        """Resolve the base URL, honouring tier settings and overrides.

        Raises:
            EndpointUnresolvedError: If no usable base URL exists.
        """
        return await EndpointResolver(settings).resolve(self.config)

    async def get_credentials(self, store: CredentialStore) -> ProviderCredentials:
        """Look up credentials; returns NoCredentials instead of raising."""
        return await CredentialResolver(store).resolve(self.config)

    async def require_credentials(self, store: CredentialStore) -> ProviderCredentials:
        """Look up credentials, failing when the vendor needs one and none exists.

        Raises:
            CredentialMissingError: If no credential is configured.
        """
        credentials = await self.get_credentials(store)
        if not credentials.is_configured() and self.config.auth_type != AuthType.NONE:
            raise CredentialMissingError(self.config.id, self.config.api_key_name)
        return credentials


class LLMProvider(ABC):
    """Capability interface implemented by every provider variant.

    Subclasses set ``self.base`` and ``self.protocol`` and implement
    ``add_provider_headers``; everything else delegates to those two.
    """

    base: BaseProvider
    protocol: ProtocolStrategy

    def __init__(self, config: ProviderConfig, protocol: ProtocolStrategy):
        """Initialize the provider.

        Args:
            config: Static vendor configuration.
            protocol: Shared strategy for the vendor's wire dialect.
        """
        self.base = BaseProvider(config)
        self.protocol = protocol

    @property
    def id(self) -> str:
        return self.base.config.id

    @property
    def name(self) -> str:
        return self.base.config.name

    @property
    def protocol_type(self) -> ProtocolType:
        return self.base.config.protocol

    @property
    def config(self) -> ProviderConfig:
        return self.base.config

    async def resolve_base_url(self, ctx: ProviderContext) -> str:
        return await self.base.resolve_base_url_with_fallback(ctx.settings)

    async def get_credentials(self, ctx: ProviderContext) -> ProviderCredentials:
        """Resolve this vendor's credentials.

        Raises:
            CredentialMissingError: Naming the vendor and the missing secret.
        """
        return await self.base.require_credentials(ctx.credential_store)

    @abstractmethod
    async def add_provider_headers(self, ctx: ProviderContext, headers: Dict[str, str]) -> None:
        """Apply vendor-specific header overrides in place."""

    def build_protocol_headers(self, ctx: HeaderBuildContext) -> Dict[str, str]:
        return self.protocol.build_headers(ctx)

    def build_protocol_request(self, ctx: RequestBuildContext) -> Dict[str, Any]:
        return self.protocol.build_request(ctx)

    def parse_protocol_stream_event(
        self,
        ctx: StreamParseContext,
        state: StreamParseState,
    ) -> Optional[StreamEvent]:
        return self.protocol.parse_stream_event(ctx, state)

    async def build_headers(
        self,
        ctx: ProviderContext,
        credentials: ProviderCredentials,
        stream: bool = False,
    ) -> Dict[str, str]:
        """Assemble outgoing headers.

        Order is strategy defaults, then authentication, then vendor
        overrides, so a vendor override wins on key collision.
        """
        headers = self.build_protocol_headers(HeaderBuildContext(config=self.config, stream=stream))
        token = getattr(credentials, "token", None)
        if token:
            headers.update(self.protocol.auth_headers(self.config.auth_type, token))
        await self.add_provider_headers(ctx, headers)
        return headers

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, protocol={self.protocol.name!r})"
