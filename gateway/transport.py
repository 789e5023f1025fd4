"""HTTP transport used by the dispatcher and the image adapters.

Unary POSTs are retried on rate limiting and server errors; streams never are,
since events may already have been handed to the caller. httpx failures are
translated into the gateway error hierarchy here so nothing above this module
sees transport-library exceptions.
"""

import httpx
import logging
from typing import Any, AsyncIterator, Dict, Optional
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
    before_sleep_log,
)

from .config import get_settings
from .errors import (
    AuthenticationError,
    RateLimitError,
    ResponseParseError,
    TransportError,
    UpstreamError,
    excerpt,
)

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


def _should_retry_http_error(exception: BaseException) -> bool:
    """Check if an HTTP error should trigger a retry.

    Retries on 429 (rate limit) and 500/502/503/504 (server errors). Other
    4xx statuses and non-HTTP errors are not retried.
    """
    if isinstance(exception, httpx.HTTPStatusError):
        return exception.response.status_code in RETRYABLE_STATUS_CODES
    return False


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception(_should_retry_http_error),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
async def _make_request(
    client: httpx.AsyncClient,
    url: str,
    headers: Dict[str, str],
    payload: Dict[str, Any],
    timeout: float,
) -> httpx.Response:
    """Make HTTP request with retry logic.

    Args:
        client: HTTP client to use.
        url: Request URL.
        headers: Request headers.
        payload: Request body.
        timeout: Request timeout in seconds.

    Returns:
        The successful response.

    Raises:
        httpx.HTTPStatusError: If request fails after retries.
    """
    response = await client.post(url, headers=headers, json=payload, timeout=timeout)
    response.raise_for_status()
    return response


def _parse_retry_after(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    try:
        return int(float(value))
    except ValueError:
        return None


def translate_status_error(status_code: int, body: str, headers: httpx.Headers, provider: str) -> UpstreamError:
    """Map a non-success vendor response onto the error hierarchy."""
    if status_code in (401, 403):
        return AuthenticationError(
            f"Authentication failed (HTTP {status_code}): {excerpt(body)}",
            provider,
            status_code=status_code,
            body=body,
        )
    if status_code == 429:
        retry_after = _parse_retry_after(headers.get("Retry-After"))
        if retry_after is not None:
            return RateLimitError(f"Rate limited. Retry after {retry_after}s", provider, retry_after=retry_after, body=body)
        return RateLimitError("Rate limited", provider, body=body)
    return UpstreamError(f"HTTP {status_code}: {excerpt(body)}", provider, status_code=status_code, body=body)


class HttpTransport:
    """Sends requests to vendor endpoints over a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        max_retries: Optional[int] = None,
        retry_wait: Any = None,
    ):
        """Initialize the transport.

        Args:
            client: Client to use; one is created lazily when omitted.
            max_retries: Attempts for unary requests. Defaults to GATEWAY_MAX_RETRIES.
            retry_wait: tenacity wait strategy overriding exponential backoff.
        """
        settings = get_settings()
        self._client = client
        self._owns_client = client is None
        self.max_retries = max(1, max_retries if max_retries is not None else settings.max_retries)
        self.retry_wait = retry_wait
        self.request_timeout = settings.request_timeout
        self.stream_timeout = settings.stream_timeout

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    async def post_json(
        self,
        url: str,
        headers: Dict[str, str],
        body: Dict[str, Any],
        provider: str,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """POST a JSON body and decode the JSON reply.

        Raises:
            UpstreamError: On a non-success status after retries.
            TransportError: On network failures.
            ResponseParseError: If the reply is not JSON.
        """
        overrides: Dict[str, Any] = {"stop": stop_after_attempt(self.max_retries)}
        if self.retry_wait is not None:
            overrides["wait"] = self.retry_wait
        send = _make_request.retry_with(**overrides)

        try:
            response = await send(self._get_client(), url, headers, body, timeout or self.request_timeout)
        except httpx.HTTPStatusError as e:
            logger.warning(f"HTTP error from {provider}: {e.response.status_code}")
            raise translate_status_error(e.response.status_code, e.response.text, e.response.headers, provider) from e
        except httpx.RequestError as e:
            raise TransportError(f"Network error: {e}", provider) from e

        try:
            return response.json()
        except ValueError as e:
            raise ResponseParseError(
                f"Response is not valid JSON: {excerpt(response.text)}",
                provider,
                raw=response.text,
            ) from e

    async def stream(
        self,
        url: str,
        headers: Dict[str, str],
        body: Dict[str, Any],
        provider: str,
        timeout: Optional[float] = None,
    ) -> AsyncIterator[bytes]:
        """POST a JSON body and yield raw response chunks.

        Closing the iterator early closes the underlying response.

        Raises:
            UpstreamError: If the vendor answers with a non-success status.
            TransportError: On network failures, including mid-stream.
        """
        client = self._get_client()
        try:
            async with client.stream(
                "POST",
                url,
                headers=headers,
                json=body,
                timeout=timeout or self.stream_timeout,
            ) as response:
                if response.status_code >= 400:
                    raw = (await response.aread()).decode("utf-8", errors="replace")
                    logger.warning(f"HTTP error from {provider}: {response.status_code}")
                    raise translate_status_error(response.status_code, raw, response.headers, provider)
                async for chunk in response.aiter_bytes():
                    yield chunk
        except httpx.RequestError as e:
            raise TransportError(f"Network error: {e}", provider) from e

    async def close(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None
