# ABOUTME: Unit tests for the HTTP client used by ISBN lookup.
# ABOUTME: Tests the HttpClient protocol, HomelibHttpClient, rate limiting, retries, and errors.

import time

import httpx
import pytest

from homelib.metadata.http import (
    HomelibHttpClient,
    HttpClient,
    MetadataFetchError,
)


class FakeTransport(httpx.BaseTransport):
    """Fake transport for httpx that returns canned responses."""

    def __init__(self, responses: list[httpx.Response] | None = None) -> None:
        self._responses = list(responses or [])
        self._call_count = 0
        self.requests: list[httpx.Request] = []

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        self._call_count += 1
        self.requests.append(request)
        if self._responses:
            return self._responses.pop(0)
        return httpx.Response(200, json={"ok": True})

    @property
    def call_count(self) -> int:
        return self._call_count


class RaisingTransport(httpx.BaseTransport):
    def handle_request(self, request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)


def _client(transport: httpx.BaseTransport, **kwargs) -> HomelibHttpClient:
    kwargs.setdefault("min_request_interval", 0.0)
    kwargs.setdefault("retry_delay", 0.0)
    return HomelibHttpClient(transport=transport, **kwargs)


class TestHttpClientProtocol:
    def test_homelib_client_satisfies_protocol(self) -> None:
        client = HomelibHttpClient(min_request_interval=0.0)
        assert isinstance(client, HttpClient)
        client.close()


class TestHomelibHttpClient:
    """Tests for HomelibHttpClient."""

    def test_get_returns_json(self) -> None:
        transport = FakeTransport()
        client = _client(transport)
        assert client.get("https://example.com/api", params={"q": "test"}) == {"ok": True}
        assert transport.requests[0].url.params["q"] == "test"

    def test_user_agent_header(self) -> None:
        transport = FakeTransport()
        client = _client(transport)
        client.get("https://example.com/api")
        assert transport.requests[0].headers["user-agent"].startswith("homelib/")

    def test_rate_limiting_delays_requests(self) -> None:
        """Consecutive requests are spaced by min_request_interval."""
        transport = FakeTransport()
        interval = 0.15
        client = _client(transport, min_request_interval=interval)

        start = time.monotonic()
        client.get("https://example.com/1")
        client.get("https://example.com/2")
        elapsed = time.monotonic() - start

        assert elapsed >= interval
        assert transport.call_count == 2

    def test_http_error_raises_metadata_fetch_error(self) -> None:
        transport = FakeTransport([httpx.Response(404, json={"error": "not found"})])
        client = _client(transport)

        with pytest.raises(MetadataFetchError, match="404"):
            client.get("https://example.com/missing")
        assert transport.call_count == 1

    def test_retries_transient_errors(self) -> None:
        transport = FakeTransport([
            httpx.Response(503),
            httpx.Response(429),
            httpx.Response(200, json={"title": "Dune"}),
        ])
        client = _client(transport)

        assert client.get("https://example.com/isbn") == {"title": "Dune"}
        assert transport.call_count == 3

    def test_gives_up_after_max_retries(self) -> None:
        transport = FakeTransport([httpx.Response(500) for _ in range(5)])
        client = _client(transport, max_retries=2)

        with pytest.raises(MetadataFetchError, match="after 3 attempts"):
            client.get("https://example.com/isbn")
        assert transport.call_count == 3

    def test_invalid_json_raises(self) -> None:
        transport = FakeTransport([httpx.Response(200, text="<html>not json</html>")])
        client = _client(transport)

        with pytest.raises(MetadataFetchError, match="Invalid JSON"):
            client.get("https://example.com/isbn")

    def test_network_error_raises(self) -> None:
        client = _client(RaisingTransport())

        with pytest.raises(MetadataFetchError, match="Request failed"):
            client.get("https://example.com/isbn")

    def test_accepts_json(self) -> None:
        transport = FakeTransport()
        _client(transport).get("https://example.com/api")
        assert transport.requests[0].headers["accept"] == "application/json"

    def test_retry_delay_doubles(self, monkeypatch: pytest.MonkeyPatch) -> None:
        sleeps: list[float] = []
        monkeypatch.setattr(time, "sleep", sleeps.append)
        transport = FakeTransport([httpx.Response(503) for _ in range(3)])
        client = _client(transport, max_retries=2, retry_delay=0.5)

        with pytest.raises(MetadataFetchError):
            client.get("https://example.com/isbn")
        assert sleeps == [0.5, 1.0]


class TestClientLifecycle:
    def test_context_manager_closes_client(self) -> None:
        transport = FakeTransport()
        with _client(transport) as client:
            client.get("https://example.com/api")

        with pytest.raises(RuntimeError):
            client.get("https://example.com/api")
