"""Generic provider for vendors that need nothing beyond their dialect."""

from typing import Dict, Optional

from ..protocols import ProtocolStrategy, get_protocol
from ..types import ProviderConfig
from .base import LLMProvider, ProviderContext


class DefaultProvider(LLMProvider):
    """Provider with no vendor-specific overrides.

    Used for every vendor whose differences are fully captured by its
    ``ProviderConfig`` (endpoint tiers, default headers, default body fields).
    """

    def __init__(self, config: ProviderConfig, protocol: Optional[ProtocolStrategy] = None):
        super().__init__(config, protocol or get_protocol(config.protocol))

    async def add_provider_headers(self, ctx: ProviderContext, headers: Dict[str, str]) -> None:
        return None
