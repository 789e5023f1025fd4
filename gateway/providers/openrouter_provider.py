"""OpenRouter provider implementation using the abstraction layer."""

from typing import Dict, Optional

from ..config import get_settings
from ..protocols import get_protocol
from ..types import ProtocolType, ProviderConfig
from .base import LLMProvider, ProviderContext


class OpenRouterProvider(LLMProvider):
    """OpenRouter API provider implementation.

    OpenRouter aggregates multiple LLM providers behind the OpenAI dialect and
    ranks calling applications by the ``HTTP-Referer`` and ``X-Title``
    attribution headers.
    """

    def __init__(
        self,
        config: ProviderConfig,
        app_url: Optional[str] = None,
        app_title: Optional[str] = None,
    ):
        """Initialize OpenRouter provider.

        Args:
            config: Provider configuration.
            app_url: Referer sent for attribution. Defaults to GATEWAY_APP_URL.
            app_title: Title sent for attribution. Defaults to GATEWAY_APP_TITLE.
        """
        super().__init__(config, get_protocol(ProtocolType.OPENAI_COMPATIBLE))
        settings = get_settings()
        self.app_url = app_url or settings.app_url
        self.app_title = app_title or settings.app_title

    async def add_provider_headers(self, ctx: ProviderContext, headers: Dict[str, str]) -> None:
        headers["HTTP-Referer"] = self.app_url
        headers["X-Title"] = self.app_title
