"""Credential stores and resolution.

Stores expose one async ``get(name)`` returning the secret or None. The
resolver turns a lookup into a typed ``ProviderCredentials`` and never raises
on missing configuration; store failures propagate unchanged.
"""

import logging
import os
import time
from typing import Dict, Optional, Protocol

from ..types import ApiKeyCredentials, NoCredentials, ProviderConfig, ProviderCredentials

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    """Secret lookup consumed by the resolver."""

    async def get(self, name: str) -> Optional[str]:
        ...


class EnvCredentialStore:
    """Reads secrets from environment variables (``.env`` is loaded by config)."""

    async def get(self, name: str) -> Optional[str]:
        return os.getenv(name)


class InMemoryCredentialStore:
    """Dict-backed store, used by tests and embedding applications."""

    def __init__(self, values: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(values or {})

    async def get(self, name: str) -> Optional[str]:
        return self._values.get(name)

    def set(self, name: str, value: str) -> None:
        self._values[name] = value

    def delete(self, name: str) -> None:
        self._values.pop(name, None)


def oauth_token_name(config: ProviderConfig) -> str:
    return f"{config.id}_oauth_access_token"


def oauth_expiry_name(config: ProviderConfig) -> str:
    return f"{config.id}_oauth_expires_at"


def normalize_expires_at(expires_at: float) -> float:
    """Return an expiry in milliseconds; values below 1e12 are taken as seconds."""
    return expires_at * 1000 if expires_at < 1_000_000_000_000 else expires_at


class CredentialResolver:
    """Looks up the secret a vendor configuration names."""

    def __init__(self, store: CredentialStore):
        self.store = store

    async def resolve(self, config: ProviderConfig) -> ProviderCredentials:
        """Resolve credentials for ``config``.

        OAuth access tokens take precedence over API keys for vendors that
        support the alternate auth flow, as long as they have not expired.

        Returns:
            ApiKeyCredentials, or NoCredentials when nothing is configured.
        """
        if config.supports_oauth:
            token = await self._oauth_token(config)
            if token:
                return ApiKeyCredentials(token=token, source="oauth")

        if not config.api_key_name:
            return NoCredentials()

        value = await self.store.get(config.api_key_name)
        if value is None or not value.strip():
            logger.debug(f"No credential '{config.api_key_name}' configured for {config.id}")
            return NoCredentials()
        return ApiKeyCredentials(token=value.strip())

    async def _oauth_token(self, config: ProviderConfig) -> Optional[str]:
        token = await self.store.get(oauth_token_name(config))
        if token is None or not token.strip():
            return None

        expires_at = await self.store.get(oauth_expiry_name(config))
        if expires_at:
            try:
                expiry_ms = normalize_expires_at(float(expires_at))
            except ValueError:
                logger.warning(f"Ignoring unparseable OAuth expiry for {config.id}")
                return token.strip()
            if expiry_ms <= time.time() * 1000:
                logger.info(f"OAuth token for {config.id} expired, falling back to API key")
                return None
        return token.strip()
