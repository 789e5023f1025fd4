"""Settings stores and base URL resolution across endpoint tiers."""

import logging
import os
from typing import Dict, Optional, Protocol

from ..config import get_settings
from ..errors import EndpointUnresolvedError
from ..types import ProviderConfig

logger = logging.getLogger(__name__)

TRUTHY = {"1", "true", "yes", "on"}


class SettingsStore(Protocol):
    """String-keyed runtime flags consulted during tier selection."""

    async def get(self, key: str) -> Optional[str]:
        ...


class InMemorySettingsStore:
    """Dict-backed settings store."""

    def __init__(self, values: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(values or {})

    async def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class EnvSettingsStore:
    """Reads ``<prefix><KEY>`` environment variables, e.g. GATEWAY_ZHIPU_USE_CODING_PLAN."""

    def __init__(self, prefix: Optional[str] = None):
        self.prefix = prefix if prefix is not None else get_settings().settings_env_prefix

    async def get(self, key: str) -> Optional[str]:
        return os.getenv(f"{self.prefix}{key}".upper())


def use_coding_plan_key(config: ProviderConfig) -> str:
    return f"{config.id}_use_coding_plan"


def use_international_key(config: ProviderConfig) -> str:
    return f"{config.id}_use_international"


def base_url_override_key(config: ProviderConfig) -> str:
    return f"{config.id}_base_url"


def is_truthy(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in TRUTHY


def normalize_base_url(url: str) -> str:
    """Strip surrounding whitespace and exactly one trailing slash."""
    url = url.strip()
    if url.endswith("/"):
        url = url[:-1]
    return url


class EndpointResolver:
    """Picks the base URL for a vendor.

    Precedence, highest first:

    1. a non-blank ``<id>_base_url`` override setting;
    2. the coding tier, when supported, configured and enabled;
    3. the international tier, when supported, configured and enabled;
    4. the default ``base_url``.
    """

    def __init__(self, settings: SettingsStore):
        self.settings = settings

    async def resolve(self, config: ProviderConfig) -> str:
        """Resolve the base URL for ``config``.

        Raises:
            EndpointUnresolvedError: If no usable base URL exists.
        """
        url = await self._select(config)
        if not url or not normalize_base_url(url):
            raise EndpointUnresolvedError("No base URL configured", config.id)
        return normalize_base_url(url)

    async def _select(self, config: ProviderConfig) -> Optional[str]:
        override = await self.settings.get(base_url_override_key(config))
        if override and override.strip():
            logger.debug(f"Using base URL override for {config.id}")
            return override

        if (
            config.supports_coding_plan
            and config.coding_plan_base_url
            and is_truthy(await self.settings.get(use_coding_plan_key(config)))
        ):
            logger.debug(f"Using coding plan endpoint for {config.id}")
            return config.coding_plan_base_url

        if (
            config.supports_international
            and config.international_base_url
            and is_truthy(await self.settings.get(use_international_key(config)))
        ):
            logger.debug(f"Using international endpoint for {config.id}")
            return config.international_base_url

        return config.base_url
