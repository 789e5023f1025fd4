"""Static vendor configuration and credential types."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


class ProtocolType(Enum):
    """Wire dialect spoken by a vendor."""
    OPENAI_COMPATIBLE = "openai_compatible"
    ANTHROPIC = "anthropic"


class AuthType(Enum):
    """How a credential is placed on the request."""
    BEARER = "bearer"
    API_KEY = "api_key"
    NONE = "none"


def _freeze(mapping: Optional[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    if mapping is None:
        return None
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class ProviderConfig:
    """Static description of one vendor.

    Attributes:
        id: Stable provider identifier used for lookup and error attribution.
        name: Human readable vendor name.
        protocol: Wire dialect used for chat requests.
        base_url: Default endpoint tier.
        api_key_name: Name of the secret in the credential store.
        supports_oauth: Vendor accepts OAuth access tokens instead of API keys.
        supports_coding_plan: Coding tier may be selected.
        supports_international: International tier may be selected.
        coding_plan_base_url: Base URL of the coding tier.
        international_base_url: Base URL of the international tier.
        headers: Extra default headers sent on every request.
        extra_body: Extra default request fields.
        auth_type: Authentication scheme.
    """

    id: str
    name: str
    protocol: ProtocolType
    base_url: str
    api_key_name: str
    supports_oauth: bool = False
    supports_coding_plan: bool = False
    supports_international: bool = False
    coding_plan_base_url: Optional[str] = None
    international_base_url: Optional[str] = None
    headers: Optional[Mapping[str, str]] = None
    extra_body: Optional[Mapping[str, Any]] = None
    auth_type: AuthType = AuthType.BEARER

    def __post_init__(self) -> None:
        # Copy caller-owned mappings so the config cannot change under us.
        object.__setattr__(self, "headers", _freeze(self.headers))
        object.__setattr__(self, "extra_body", _freeze(self.extra_body))


def mask_secret(secret: Optional[str]) -> str:
    """Return a log-safe rendering of a secret."""
    if not secret:
        return "<empty>"
    return f"{secret[:4]}***"


class ProviderCredentials:
    """Base class for the closed set of credential variants."""

    def is_configured(self) -> bool:
        return False


@dataclass(frozen=True)
class ApiKeyCredentials(ProviderCredentials):
    """A bearer/API token.

    ``source`` is ``"api_key"`` for stored keys and ``"oauth"`` for access
    tokens obtained through the alternate auth flow.
    """

    token: str = field(repr=False)
    source: str = "api_key"

    def is_configured(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"ApiKeyCredentials(token={mask_secret(self.token)!r}, source={self.source!r})"

    __str__ = __repr__


@dataclass(frozen=True)
class NoCredentials(ProviderCredentials):
    """No credential configured."""

    def __repr__(self) -> str:
        return "NoCredentials()"
