"""Provider abstraction layer for LLM vendors.

This package binds vendor configuration to wire dialects and resolves the
endpoint and credentials each call uses.
"""

from .base import (
    BaseProvider,
    ChatResult,
    LLMProvider,
    ProviderContext,
)
from .credentials import (
    CredentialResolver,
    CredentialStore,
    EnvCredentialStore,
    InMemoryCredentialStore,
)
from .endpoints import (
    EndpointResolver,
    EnvSettingsStore,
    InMemorySettingsStore,
    SettingsStore,
)
from .registry import ProviderRegistry, build_default_registry, get_registry, reset_registry
from .default_provider import DefaultProvider
from .anthropic_provider import AnthropicProvider
from .kimi_coding_provider import KimiCodingProvider
from .openrouter_provider import OpenRouterProvider

__all__ = [
    "BaseProvider",
    "ChatResult",
    "LLMProvider",
    "ProviderContext",
    "CredentialResolver",
    "CredentialStore",
    "EnvCredentialStore",
    "InMemoryCredentialStore",
    "EndpointResolver",
    "EnvSettingsStore",
    "InMemorySettingsStore",
    "SettingsStore",
    "ProviderRegistry",
    "build_default_registry",
    "get_registry",
    "reset_registry",
    "DefaultProvider",
    "AnthropicProvider",
    "KimiCodingProvider",
    "OpenRouterProvider",
]
