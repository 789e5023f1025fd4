"""Anthropic provider implementation."""

from typing import Dict

from ..protocols import get_protocol
from ..types import ProtocolType, ProviderConfig
from .base import LLMProvider, ProviderContext

# Optional beta features, comma separated, read from settings
BETA_SETTING_SUFFIX = "_beta"


class AnthropicProvider(LLMProvider):
    """Anthropic messages API.

    Adds the ``anthropic-beta`` header when the ``<id>_beta`` setting lists
    beta features.
    """

    def __init__(self, config: ProviderConfig):
        super().__init__(config, get_protocol(ProtocolType.ANTHROPIC))

    async def add_provider_headers(self, ctx: ProviderContext, headers: Dict[str, str]) -> None:
        beta = await ctx.settings.get(f"{self.id}{BETA_SETTING_SUFFIX}")
        if beta and beta.strip():
            headers["anthropic-beta"] = ",".join(part.strip() for part in beta.split(",") if part.strip())
