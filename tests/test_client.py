"""Tests for EvomiClient.

The Evomi API is replaced with an ``httpx.MockTransport`` so every request
can be inspected without network access.
"""

import asyncio
import base64
import json

import httpx
import pytest
from pydantic import SecretStr

from evomi_connector.errors import DomainError, TransportError
from evomi_connector.models.request import Credentials, RequestDescriptor
from evomi_connector.services.client import EvomiClient

_CREDENTIALS = Credentials(api_key=SecretStr("test-key"), base_url="https://api.test")

_DESCRIPTOR = RequestDescriptor(
    method="POST",
    url="https://api.test/api/v1/scraper/realtime",
    headers={"Content-Type": "application/json", "x-integration": "n8n"},
    body={"url": "https://example.com", "mode": "request", "delivery": "raw", "content": "markdown"},
)


def _run(handler, call):
    """Run *call(client)* against a client backed by *handler*."""

    async def main():
        transport = httpx.MockTransport(handler)
        async with httpx.AsyncClient(transport=transport) as http:
            async with EvomiClient(_CREDENTIALS, http_client=http) as client:
                return await call(client)

    return asyncio.run(main())


def _scrape(handler):
    return _run(handler, lambda client: client.scrape(_DESCRIPTOR))


class TestScrapeRequest:
    def test_sends_descriptor_with_api_key(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True})

        _scrape(handler)

        assert seen["method"] == "POST"
        assert seen["url"] == "https://api.test/api/v1/scraper/realtime"
        assert seen["headers"]["x-api-key"] == "test-key"
        assert seen["headers"]["x-integration"] == "n8n"
        assert seen["headers"]["content-type"] == "application/json"
        assert seen["body"] == _DESCRIPTOR.body

    def test_descriptor_headers_not_mutated(self):
        _scrape(lambda request: httpx.Response(200, json={}))
        assert "x-api-key" not in _DESCRIPTOR.headers


class TestScrapeDecoding:
    def test_json_payload(self):
        payload = _scrape(lambda request: httpx.Response(200, json={"title": "Example"}))
        assert payload == {"title": "Example"}

    def test_json_list_is_wrapped(self):
        payload = _scrape(lambda request: httpx.Response(200, json=[1, 2]))
        assert payload == {"data": [1, 2]}

    def test_empty_body(self):
        assert _scrape(lambda request: httpx.Response(204)) is None

    def test_markdown_body(self):
        payload = _scrape(
            lambda request: httpx.Response(
                200, text="# Title", headers={"content-type": "text/markdown; charset=utf-8"}
            )
        )
        assert payload == {"content": "# Title", "content_type": "text/markdown; charset=utf-8"}

    def test_screenshot_body_is_base64(self):
        png = b"\x89PNG\r\n\x1a\nfake"
        payload = _scrape(
            lambda request: httpx.Response(200, content=png, headers={"content-type": "image/png"})
        )
        assert payload == {
            "data": base64.b64encode(png).decode("ascii"),
            "content_type": "image/png",
        }


class TestScrapeErrors:
    def test_error_status_with_payload_does_not_raise(self):
        payload = _scrape(
            lambda request: httpx.Response(
                429, json={"success": False, "error": "Rate limit exceeded"}
            )
        )
        assert payload == {"success": False, "error": "Rate limit exceeded"}

    def test_error_status_without_payload_becomes_failure(self):
        payload = _scrape(lambda request: httpx.Response(502, text="Bad gateway"))
        assert payload == {"success": False, "error": "HTTP 502"}

    def test_unauthorized_status_without_payload(self):
        payload = _scrape(lambda request: httpx.Response(401))
        assert payload == {"success": False, "error": "Unauthorized"}

    def test_connection_failure_raises_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        with pytest.raises(TransportError) as excinfo:
            _scrape(handler)

        assert "Could not connect to the Evomi API at https://api.test" in excinfo.value.message
        assert "Connection refused" in excinfo.value.message
        assert isinstance(excinfo.value.cause, httpx.ConnectError)


class TestHealthCheck:
    def test_ok(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["key"] = request.headers.get("x-api-key")
            return httpx.Response(200, json={"status": "healthy"})

        result = _run(handler, lambda client: client.health_check())

        assert result == {"status": "healthy"}
        assert seen == {
            "method": "GET",
            "url": "https://api.test/api/v1/scraper/health",
            "key": "test-key",
        }

    def test_rejected_key(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"success": False, "error": "Invalid API key"})

        with pytest.raises(DomainError) as excinfo:
            _run(handler, lambda client: client.health_check())

        assert excinfo.value.message.startswith("Invalid API key.")

    def test_bare_401_is_auth_failure(self):
        with pytest.raises(DomainError) as excinfo:
            _run(lambda request: httpx.Response(401), lambda client: client.health_check())
        assert excinfo.value.message.startswith("Invalid API key.")

    def test_server_error(self):
        with pytest.raises(DomainError) as excinfo:
            _run(lambda request: httpx.Response(503), lambda client: client.health_check())
        assert excinfo.value.message == "Evomi API error: HTTP 503"


class TestLifecycle:
    def test_owned_client_is_closed(self):
        async def main():
            client = EvomiClient(_CREDENTIALS)
            async with client:
                assert not client.http.is_closed
            return client

        client = asyncio.run(main())
        with pytest.raises(RuntimeError):
            client.http

    def test_injected_client_is_left_open(self):
        async def main():
            http = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
            async with EvomiClient(_CREDENTIALS, http_client=http):
                pass
            closed = http.is_closed
            await http.aclose()
            return closed

        assert asyncio.run(main()) is False
