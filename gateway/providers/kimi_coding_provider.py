"""Kimi coding plan provider.

The coding plan endpoint only accepts requests identifying as the Kimi CLI.
"""

from typing import Dict

from ..protocols import get_protocol
from ..types import ProtocolType, ProviderConfig
from .base import LLMProvider, ProviderContext

KIMI_CLI_USER_AGENT = "KimiCLI/1.3"


class KimiCodingProvider(LLMProvider):
    """Kimi coding plan: OpenAI dialect plus a fixed client User-Agent."""

    def __init__(self, config: ProviderConfig):
        super().__init__(config, get_protocol(ProtocolType.OPENAI_COMPATIBLE))

    async def add_provider_headers(self, ctx: ProviderContext, headers: Dict[str, str]) -> None:
        headers["User-Agent"] = KIMI_CLI_USER_AGENT
