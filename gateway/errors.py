"""Error hierarchy shared by providers, protocols and transports.

Every error raised by the gateway is a ``ProviderError`` carrying the vendor
it is attributed to and an ``ErrorKind`` so a dispatcher can decide on retry
and user-facing messaging without string matching.
"""

from enum import Enum
from typing import Optional

# Upper bound for raw vendor bodies embedded in messages.
MAX_BODY_EXCERPT = 500


class ErrorKind(Enum):
    """Classification of gateway failures."""
    CREDENTIAL_MISSING = "credential_missing"
    ENDPOINT_UNRESOLVED = "endpoint_unresolved"
    REQUEST_BUILD_FAILED = "request_build_failed"
    TRANSPORT_FAILED = "transport_failed"
    UPSTREAM_ERROR = "upstream_error"
    RESPONSE_PARSE_FAILED = "response_parse_failed"
    STREAM_PROTOCOL_ERROR = "stream_protocol_error"


def excerpt(raw: Optional[str], limit: int = MAX_BODY_EXCERPT) -> str:
    """Truncate a raw payload for diagnostics."""
    if not raw:
        return ""
    if len(raw) <= limit:
        return raw
    return raw[:limit] + "..."


class ProviderError(Exception):
    """Base exception for provider errors."""

    kind: ErrorKind = ErrorKind.UPSTREAM_ERROR

    def __init__(
        self,
        message: str,
        provider: str,
        recoverable: bool = True,
        kind: Optional[ErrorKind] = None,
    ):
        """Initialize the error.

        Args:
            message: Error message.
            provider: Id of the provider that raised the error.
            recoverable: Whether retrying the call could succeed
                (e.g., rate limit) or not (e.g., invalid API key).
            kind: Overrides the class-level error kind.
        """
        super().__init__(f"[{provider}] {message}")
        self.message = message
        self.provider = provider
        self.recoverable = recoverable
        if kind is not None:
            self.kind = kind


class CredentialMissingError(ProviderError):
    """Raised when no usable secret is configured for a vendor."""

    kind = ErrorKind.CREDENTIAL_MISSING

    def __init__(self, provider: str, credential_name: str):
        super().__init__(
            f"API key '{credential_name}' not found",
            provider,
            recoverable=False,
        )
        self.credential_name = credential_name


class EndpointUnresolvedError(ProviderError):
    """Raised when no usable base URL exists for the selected tier."""

    kind = ErrorKind.ENDPOINT_UNRESOLVED

    def __init__(self, message: str, provider: str):
        super().__init__(message, provider, recoverable=False)


class RequestBuildError(ProviderError):
    """Raised when a normalized request cannot be mapped into a dialect."""

    kind = ErrorKind.REQUEST_BUILD_FAILED

    def __init__(self, message: str, provider: str, field: Optional[str] = None):
        super().__init__(message, provider, recoverable=False)
        self.field = field


class TransportError(ProviderError):
    """Raised on network or connection failures."""

    kind = ErrorKind.TRANSPORT_FAILED

    def __init__(self, message: str, provider: str):
        super().__init__(message, provider, recoverable=True)


class UpstreamError(ProviderError):
    """Raised when a vendor answers with a non-success status."""

    kind = ErrorKind.UPSTREAM_ERROR

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: int,
        body: Optional[str] = None,
        recoverable: Optional[bool] = None,
    ):
        """Initialize the upstream error.

        Args:
            message: Error message.
            provider: Id of the provider.
            status_code: HTTP status returned by the vendor.
            body: Raw response body, kept for diagnostics.
            recoverable: Defaults to True for 5xx statuses.
        """
        if recoverable is None:
            recoverable = status_code >= 500
        super().__init__(message, provider, recoverable=recoverable)
        self.status_code = status_code
        self.body = body


class AuthenticationError(UpstreamError):
    """Raised when provider authentication fails."""

    def __init__(self, message: str, provider: str, status_code: int = 401, body: Optional[str] = None):
        super().__init__(message, provider, status_code, body, recoverable=False)


class RateLimitError(UpstreamError):
    """Raised when a provider rate limits the request."""

    def __init__(
        self,
        message: str,
        provider: str,
        retry_after: Optional[int] = None,
        body: Optional[str] = None,
    ):
        """Initialize the rate limit error.

        Args:
            message: Error message.
            provider: Id of the provider.
            retry_after: Seconds to wait before retrying, if provided.
            body: Raw response body.
        """
        super().__init__(message, provider, 429, body, recoverable=True)
        self.retry_after = retry_after


class ResponseParseError(ProviderError):
    """Raised when a vendor payload is malformed or has an unexpected shape."""

    kind = ErrorKind.RESPONSE_PARSE_FAILED

    def __init__(self, message: str, provider: str, raw: Optional[str] = None):
        super().__init__(message, provider, recoverable=False)
        self.raw = raw


class StreamProtocolError(ProviderError):
    """Raised when a vendor reports an error in-band during streaming."""

    kind = ErrorKind.STREAM_PROTOCOL_ERROR

    def __init__(self, message: str, provider: str, code: Optional[str] = None):
        super().__init__(message, provider, recoverable=False)
        self.code = code


class ProviderNotFoundError(ProviderError):
    """Raised when a provider id is not registered."""

    kind = ErrorKind.ENDPOINT_UNRESOLVED

    def __init__(self, provider: str):
        super().__init__("Provider is not registered", provider, recoverable=False)
