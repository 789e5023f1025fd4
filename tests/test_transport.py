"""Tests for the HTTP transport."""

import json
import pytest
import httpx
from unittest.mock import MagicMock

from gateway.errors import (
    AuthenticationError,
    ErrorKind,
    RateLimitError,
    ResponseParseError,
    TransportError,
    UpstreamError,
)
from gateway.transport import _should_retry_http_error, translate_status_error

from tests.helpers import mock_transport, streaming_response


def _status_error(status_code: int) -> httpx.HTTPStatusError:
    response = MagicMock()
    response.status_code = status_code
    return httpx.HTTPStatusError("error", request=MagicMock(), response=response)


class TestRetryPredicate:
    """Tests for _should_retry_http_error."""

    @pytest.mark.parametrize("status_code", [429, 500, 502, 503, 504])
    def test_retryable(self, status_code):
        assert _should_retry_http_error(_status_error(status_code)) is True

    @pytest.mark.parametrize("status_code", [400, 401, 403, 404, 422])
    def test_not_retryable(self, status_code):
        assert _should_retry_http_error(_status_error(status_code)) is False

    def test_non_http_error(self):
        assert _should_retry_http_error(ValueError("boom")) is False


class TestTranslateStatusError:
    """Tests for status code mapping."""

    def test_authentication(self):
        error = translate_status_error(401, "bad key", httpx.Headers(), "openai")
        assert isinstance(error, AuthenticationError)
        assert error.recoverable is False
        assert error.kind == ErrorKind.UPSTREAM_ERROR

    def test_forbidden(self):
        assert isinstance(translate_status_error(403, "", httpx.Headers(), "openai"), AuthenticationError)

    def test_rate_limit_with_retry_after(self):
        error = translate_status_error(429, "slow down", httpx.Headers({"Retry-After": "30"}), "openai")
        assert isinstance(error, RateLimitError)
        assert error.retry_after == 30
        assert error.recoverable is True

    def test_server_error(self):
        error = translate_status_error(503, "unavailable", httpx.Headers(), "openai")
        assert type(error) is UpstreamError
        assert error.status_code == 503
        assert error.recoverable is True
        assert "unavailable" in error.message

    def test_client_error(self):
        error = translate_status_error(400, "x" * 2000, httpx.Headers(), "openai")
        assert error.recoverable is False
        assert len(error.message) < 600
        assert len(error.body) == 2000


class TestPostJson:
    """Tests for unary requests."""

    @pytest.mark.asyncio
    async def test_success(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        transport = mock_transport(handler)
        result = await transport.post_json("https://api.test/v1/x", {"Authorization": "Bearer t"}, {"a": 1}, "test")

        assert result == {"ok": True}
        assert seen[0].headers["Authorization"] == "Bearer t"
        assert json.loads(seen[0].content) == {"a": 1}

    @pytest.mark.asyncio
    async def test_retries_server_errors(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) < 3:
                return httpx.Response(503, text="busy")
            return httpx.Response(200, json={"ok": True})

        transport = mock_transport(handler)
        transport.max_retries = 3
        assert await transport.post_json("https://api.test/v1/x", {}, {}, "test") == {"ok": True}
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(429, text="limited")

        transport = mock_transport(handler)
        transport.max_retries = 2
        with pytest.raises(RateLimitError):
            await transport.post_json("https://api.test/v1/x", {}, {}, "test")
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(401, text="nope")

        transport = mock_transport(handler)
        with pytest.raises(AuthenticationError) as exc_info:
            await transport.post_json("https://api.test/v1/x", {}, {}, "volcengine")
        assert len(calls) == 1
        assert exc_info.value.provider == "volcengine"

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        transport = mock_transport(handler)
        with pytest.raises(TransportError) as exc_info:
            await transport.post_json("https://api.test/v1/x", {}, {}, "test")
        assert exc_info.value.kind == ErrorKind.TRANSPORT_FAILED

    @pytest.mark.asyncio
    async def test_non_json_reply(self):
        transport = mock_transport(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(ResponseParseError):
            await transport.post_json("https://api.test/v1/x", {}, {}, "test")


class TestStream:
    """Tests for streaming requests."""

    @pytest.mark.asyncio
    async def test_yields_chunks(self):
        transport = mock_transport(lambda request: streaming_response([b"data: a\n\n", b"data: b\n\n"]))
        chunks = [chunk async for chunk in transport.stream("https://api.test/v1/x", {}, {}, "test")]
        assert b"".join(chunks) == b"data: a\n\ndata: b\n\n"

    @pytest.mark.asyncio
    async def test_error_status(self):
        transport = mock_transport(lambda request: httpx.Response(500, text="exploded"))
        with pytest.raises(UpstreamError) as exc_info:
            async for _ in transport.stream("https://api.test/v1/x", {}, {}, "test"):
                pass
        assert exc_info.value.status_code == 500
        assert exc_info.value.body == "exploded"

    @pytest.mark.asyncio
    async def test_stream_not_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503, text="busy")

        transport = mock_transport(handler)
        with pytest.raises(UpstreamError):
            async for _ in transport.stream("https://api.test/v1/x", {}, {}, "test"):
                pass
        assert len(calls) == 1
