"""Static vendor configuration.

Dialects and endpoint tiers are declared here rather than discovered.
"""

from typing import Dict, List, Type

from ..types import AuthType, ProtocolType, ProviderConfig
from .anthropic_provider import AnthropicProvider
from .base import LLMProvider
from .kimi_coding_provider import KimiCodingProvider
from .openrouter_provider import OpenRouterProvider

PROVIDER_CONFIGS: List[ProviderConfig] = [
    ProviderConfig(
        id="openai",
        name="OpenAI",
        protocol=ProtocolType.OPENAI_COMPATIBLE,
        base_url="https://api.openai.com/v1",
        api_key_name="OPENAI_API_KEY",
        supports_oauth=True,
    ),
    ProviderConfig(
        id="anthropic",
        name="Anthropic",
        protocol=ProtocolType.ANTHROPIC,
        base_url="https://api.anthropic.com/v1",
        api_key_name="ANTHROPIC_API_KEY",
        auth_type=AuthType.API_KEY,
    ),
    ProviderConfig(
        id="deepseek",
        name="DeepSeek",
        protocol=ProtocolType.OPENAI_COMPATIBLE,
        base_url="https://api.deepseek.com/v1",
        api_key_name="DEEPSEEK_API_KEY",
    ),
    ProviderConfig(
        id="moonshot",
        name="Moonshot",
        protocol=ProtocolType.OPENAI_COMPATIBLE,
        base_url="https://api.moonshot.cn/v1",
        api_key_name="MOONSHOT_API_KEY",
        supports_international=True,
        international_base_url="https://api.moonshot.ai/v1",
    ),
    ProviderConfig(
        id="kimi_coding",
        name="Kimi Coding Plan",
        protocol=ProtocolType.OPENAI_COMPATIBLE,
        base_url="https://api.kimi.com/coding/v1",
        api_key_name="KIMI_CODING_API_KEY",
    ),
    ProviderConfig(
        id="zhipu",
        name="Zhipu AI",
        protocol=ProtocolType.OPENAI_COMPATIBLE,
        base_url="https://open.bigmodel.cn/api/paas/v4",
        api_key_name="ZHIPU_API_KEY",
        supports_coding_plan=True,
        supports_international=True,
        coding_plan_base_url="https://open.bigmodel.cn/api/coding/paas/v4",
        international_base_url="https://api.z.ai/api/paas/v4",
    ),
    ProviderConfig(
        id="minimax",
        name="MiniMax",
        protocol=ProtocolType.ANTHROPIC,
        base_url="https://api.minimaxi.com/anthropic/v1",
        api_key_name="MINIMAX_API_KEY",
        supports_international=True,
        international_base_url="https://api.minimax.io/anthropic/v1",
    ),
    ProviderConfig(
        id="volcengine",
        name="Volcengine",
        protocol=ProtocolType.OPENAI_COMPATIBLE,
        base_url="https://ark.cn-beijing.volces.com/api/v3",
        api_key_name="VOLCENGINE_API_KEY",
    ),
    ProviderConfig(
        id="openrouter",
        name="OpenRouter",
        protocol=ProtocolType.OPENAI_COMPATIBLE,
        base_url="https://openrouter.ai/api/v1",
        api_key_name="OPENROUTER_API_KEY",
    ),
    ProviderConfig(
        id="ollama",
        name="Ollama",
        protocol=ProtocolType.OPENAI_COMPATIBLE,
        base_url="http://localhost:11434/v1",
        api_key_name="",
        auth_type=AuthType.NONE,
    ),
]

# Vendors needing overrides beyond their config; everything else is DefaultProvider
PROVIDER_CLASSES: Dict[str, Type[LLMProvider]] = {
    "anthropic": AnthropicProvider,
    "kimi_coding": KimiCodingProvider,
    "openrouter": OpenRouterProvider,
}

# Vendors with an OpenAI-shaped /images/generations endpoint
IMAGE_PROVIDER_IDS = ("openai", "volcengine")


def get_provider_config(provider_id: str) -> ProviderConfig:
    """Look up a catalog entry by id.

    Raises:
        KeyError: If the id is not in the catalog.
    """
    for config in PROVIDER_CONFIGS:
        if config.id == provider_id:
            return config
    raise KeyError(provider_id)
