"""Tests for base URL resolution across endpoint tiers."""

import pytest

from gateway.errors import EndpointUnresolvedError, ErrorKind
from gateway.providers.endpoints import (
    EndpointResolver,
    EnvSettingsStore,
    InMemorySettingsStore,
    is_truthy,
    normalize_base_url,
)
from gateway.types import ProtocolType, ProviderConfig


class TestEndpointResolver:
    """Tests for EndpointResolver tier precedence."""

    @pytest.mark.asyncio
    async def test_default_tier(self, zhipu_config):
        url = await EndpointResolver(InMemorySettingsStore()).resolve(zhipu_config)
        assert url == "https://open.bigmodel.cn/api/paas/v4"

    @pytest.mark.asyncio
    async def test_international_tier(self, zhipu_config):
        settings = InMemorySettingsStore({"zhipu_use_international": "true"})
        url = await EndpointResolver(settings).resolve(zhipu_config)
        assert url == "https://api.z.ai/api/paas/v4"

    @pytest.mark.asyncio
    async def test_coding_tier(self, zhipu_config):
        settings = InMemorySettingsStore({"zhipu_use_coding_plan": "1"})
        url = await EndpointResolver(settings).resolve(zhipu_config)
        assert url == "https://open.bigmodel.cn/api/coding/paas/v4"

    @pytest.mark.asyncio
    async def test_coding_tier_beats_international(self, zhipu_config):
        settings = InMemorySettingsStore({"zhipu_use_coding_plan": "yes", "zhipu_use_international": "yes"})
        url = await EndpointResolver(settings).resolve(zhipu_config)
        assert url == "https://open.bigmodel.cn/api/coding/paas/v4"

    @pytest.mark.asyncio
    async def test_override_beats_every_tier(self, zhipu_config):
        settings = InMemorySettingsStore({
            "zhipu_base_url": "http://proxy.local/v4/",
            "zhipu_use_coding_plan": "true",
        })
        url = await EndpointResolver(settings).resolve(zhipu_config)
        assert url == "http://proxy.local/v4"

    @pytest.mark.asyncio
    async def test_tier_ignored_without_capability(self):
        config = ProviderConfig(
            id="deepseek",
            name="DeepSeek",
            protocol=ProtocolType.OPENAI_COMPATIBLE,
            base_url="https://api.deepseek.com/v1",
            api_key_name="DEEPSEEK_API_KEY",
            international_base_url="https://intl.deepseek.test/v1",
        )
        settings = InMemorySettingsStore({"deepseek_use_international": "true"})
        assert await EndpointResolver(settings).resolve(config) == "https://api.deepseek.com/v1"

    @pytest.mark.asyncio
    async def test_enabled_tier_without_url_falls_back(self):
        config = ProviderConfig(
            id="moonshot",
            name="Moonshot",
            protocol=ProtocolType.OPENAI_COMPATIBLE,
            base_url="https://api.moonshot.cn/v1",
            api_key_name="MOONSHOT_API_KEY",
            supports_international=True,
        )
        settings = InMemorySettingsStore({"moonshot_use_international": "true"})
        assert await EndpointResolver(settings).resolve(config) == "https://api.moonshot.cn/v1"

    @pytest.mark.asyncio
    async def test_falsy_flag(self, zhipu_config):
        settings = InMemorySettingsStore({"zhipu_use_international": "false"})
        url = await EndpointResolver(settings).resolve(zhipu_config)
        assert url == "https://open.bigmodel.cn/api/paas/v4"

    @pytest.mark.asyncio
    async def test_no_usable_url(self):
        config = ProviderConfig(
            id="broken",
            name="Broken",
            protocol=ProtocolType.OPENAI_COMPATIBLE,
            base_url="  ",
            api_key_name="BROKEN_KEY",
        )
        with pytest.raises(EndpointUnresolvedError) as exc_info:
            await EndpointResolver(InMemorySettingsStore()).resolve(config)
        assert exc_info.value.provider == "broken"
        assert exc_info.value.kind == ErrorKind.ENDPOINT_UNRESOLVED


class TestHelpers:
    """Tests for URL and flag helpers."""

    def test_strips_one_trailing_slash(self):
        assert normalize_base_url("https://a.test/v1/") == "https://a.test/v1"
        assert normalize_base_url("https://a.test/v1//") == "https://a.test/v1/"
        assert normalize_base_url(" https://a.test/v1 ") == "https://a.test/v1"

    @pytest.mark.parametrize("value", ["1", "true", "TRUE", "yes", "on", " On "])
    def test_truthy(self, value):
        assert is_truthy(value) is True

    @pytest.mark.parametrize("value", [None, "", "0", "false", "off", "enabled"])
    def test_not_truthy(self, value):
        assert is_truthy(value) is False


class TestEnvSettingsStore:
    """Tests for EnvSettingsStore."""

    @pytest.mark.asyncio
    async def test_prefixed_upper_case_lookup(self, monkeypatch):
        monkeypatch.setenv("GATEWAY_ZHIPU_USE_CODING_PLAN", "true")
        store = EnvSettingsStore(prefix="GATEWAY_")
        assert await store.get("zhipu_use_coding_plan") == "true"

    @pytest.mark.asyncio
    async def test_missing(self, monkeypatch):
        monkeypatch.delenv("GATEWAY_ZHIPU_BASE_URL", raising=False)
        assert await EnvSettingsStore(prefix="GATEWAY_").get("zhipu_base_url") is None
