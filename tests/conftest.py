"""Pytest configuration and fixtures for gateway tests."""

import pytest

from gateway.providers.base import ProviderContext
from gateway.providers.credentials import InMemoryCredentialStore
from gateway.providers.endpoints import InMemorySettingsStore
from gateway.schemas import ChatMessage, ChatRequest
from gateway.types import AuthType, ProtocolType, ProviderConfig


# Test data fixtures
@pytest.fixture
def openai_config() -> ProviderConfig:
    return ProviderConfig(
        id="openai",
        name="OpenAI",
        protocol=ProtocolType.OPENAI_COMPATIBLE,
        base_url="https://api.openai.com/v1",
        api_key_name="OPENAI_API_KEY",
    )


@pytest.fixture
def anthropic_config() -> ProviderConfig:
    return ProviderConfig(
        id="anthropic",
        name="Anthropic",
        protocol=ProtocolType.ANTHROPIC,
        base_url="https://api.anthropic.com/v1",
        api_key_name="ANTHROPIC_API_KEY",
        auth_type=AuthType.API_KEY,
    )


@pytest.fixture
def zhipu_config() -> ProviderConfig:
    """Vendor with every endpoint tier."""
    return ProviderConfig(
        id="zhipu",
        name="Zhipu AI",
        protocol=ProtocolType.OPENAI_COMPATIBLE,
        base_url="https://open.bigmodel.cn/api/paas/v4/",
        api_key_name="ZHIPU_API_KEY",
        supports_coding_plan=True,
        supports_international=True,
        coding_plan_base_url="https://open.bigmodel.cn/api/coding/paas/v4/",
        international_base_url="https://api.z.ai/api/paas/v4/",
    )


@pytest.fixture
def credential_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore({
        "OPENAI_API_KEY": "sk-openai-test",
        "ANTHROPIC_API_KEY": "sk-ant-test",
        "ZHIPU_API_KEY": "zhipu-test",
        "KIMI_CODING_API_KEY": "kimi-test",
        "OPENROUTER_API_KEY": "or-test",
        "VOLCENGINE_API_KEY": "ark-test",
    })


@pytest.fixture
def settings_store() -> InMemorySettingsStore:
    return InMemorySettingsStore()


@pytest.fixture
def provider_context(credential_store, settings_store) -> ProviderContext:
    return ProviderContext(credential_store=credential_store, settings=settings_store)


@pytest.fixture
def chat_request() -> ChatRequest:
    return ChatRequest(
        model="m1",
        messages=[
            ChatMessage(role="system", content="You are terse."),
            ChatMessage(role="user", content="What is the capital of France?"),
        ],
    )
