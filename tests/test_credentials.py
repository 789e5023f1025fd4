"""Tests for credential stores and resolution."""

import time
import pytest

from gateway.providers.credentials import (
    CredentialResolver,
    EnvCredentialStore,
    InMemoryCredentialStore,
    normalize_expires_at,
)
from gateway.types import ApiKeyCredentials, AuthType, NoCredentials, ProtocolType, ProviderConfig


@pytest.fixture
def oauth_config() -> ProviderConfig:
    return ProviderConfig(
        id="openai",
        name="OpenAI",
        protocol=ProtocolType.OPENAI_COMPATIBLE,
        base_url="https://api.openai.com/v1",
        api_key_name="OPENAI_API_KEY",
        supports_oauth=True,
    )


class TestCredentialResolver:
    """Tests for CredentialResolver."""

    @pytest.mark.asyncio
    async def test_api_key_found(self, openai_config, credential_store):
        credentials = await CredentialResolver(credential_store).resolve(openai_config)
        assert credentials == ApiKeyCredentials(token="sk-openai-test")
        assert credentials.is_configured() is True

    @pytest.mark.asyncio
    async def test_missing_key_returns_no_credentials(self, openai_config):
        credentials = await CredentialResolver(InMemoryCredentialStore()).resolve(openai_config)
        assert isinstance(credentials, NoCredentials)
        assert credentials.is_configured() is False

    @pytest.mark.asyncio
    async def test_blank_key_is_missing(self, openai_config):
        store = InMemoryCredentialStore({"OPENAI_API_KEY": "   "})
        assert isinstance(await CredentialResolver(store).resolve(openai_config), NoCredentials)

    @pytest.mark.asyncio
    async def test_key_is_stripped(self, openai_config):
        store = InMemoryCredentialStore({"OPENAI_API_KEY": " sk-1\n"})
        credentials = await CredentialResolver(store).resolve(openai_config)
        assert credentials.token == "sk-1"

    @pytest.mark.asyncio
    async def test_keyless_vendor(self):
        config = ProviderConfig(
            id="ollama",
            name="Ollama",
            protocol=ProtocolType.OPENAI_COMPATIBLE,
            base_url="http://localhost:11434/v1",
            api_key_name="",
            auth_type=AuthType.NONE,
        )
        assert isinstance(await CredentialResolver(InMemoryCredentialStore()).resolve(config), NoCredentials)

    @pytest.mark.asyncio
    async def test_oauth_token_preferred(self, oauth_config, credential_store):
        credential_store.set("openai_oauth_access_token", "oauth-token")
        credentials = await CredentialResolver(credential_store).resolve(oauth_config)
        assert credentials.token == "oauth-token"
        assert credentials.source == "oauth"

    @pytest.mark.asyncio
    async def test_expired_oauth_token_falls_back(self, oauth_config, credential_store):
        credential_store.set("openai_oauth_access_token", "oauth-token")
        credential_store.set("openai_oauth_expires_at", str(int(time.time()) - 60))
        credentials = await CredentialResolver(credential_store).resolve(oauth_config)
        assert credentials.token == "sk-openai-test"
        assert credentials.source == "api_key"

    @pytest.mark.asyncio
    async def test_unexpired_oauth_token_in_milliseconds(self, oauth_config, credential_store):
        credential_store.set("openai_oauth_access_token", "oauth-token")
        credential_store.set("openai_oauth_expires_at", str(int(time.time() * 1000) + 60_000))
        credentials = await CredentialResolver(credential_store).resolve(oauth_config)
        assert credentials.source == "oauth"

    @pytest.mark.asyncio
    async def test_oauth_ignored_without_support(self, openai_config, credential_store):
        credential_store.set("openai_oauth_access_token", "oauth-token")
        credentials = await CredentialResolver(credential_store).resolve(openai_config)
        assert credentials.source == "api_key"

    def test_repr_masks_token(self):
        credentials = ApiKeyCredentials(token="sk-secret-value")
        assert "secret-value" not in repr(credentials)
        assert "sk-s***" in repr(credentials)


class TestNormalizeExpiresAt:
    """Tests for expiry unit detection."""

    def test_seconds(self):
        assert normalize_expires_at(1_700_000_000) == 1_700_000_000_000

    def test_milliseconds(self):
        assert normalize_expires_at(1_700_000_000_000) == 1_700_000_000_000


class TestEnvCredentialStore:
    """Tests for EnvCredentialStore."""

    @pytest.mark.asyncio
    async def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("DEEPSEEK_API_KEY", "ds-key")
        assert await EnvCredentialStore().get("DEEPSEEK_API_KEY") == "ds-key"

    @pytest.mark.asyncio
    async def test_missing(self, monkeypatch):
        monkeypatch.delenv("DEEPSEEK_API_KEY", raising=False)
        assert await EnvCredentialStore().get("DEEPSEEK_API_KEY") is None
