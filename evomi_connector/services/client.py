"""Async client for the Evomi Scraper API."""

import base64
import logging
from typing import Any, Dict, Optional

import httpx

from evomi_connector.errors import DomainError
from evomi_connector.models.request import Credentials, RequestDescriptor
from evomi_connector.services.classifier import (
    extract_api_message,
    friendly_message,
    is_failure,
    transport_error,
)
from evomi_connector.services.request_builder import HEALTH_PATH

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"
TIMEOUT = 60  # seconds


class EvomiClient:
    """One client for every call to the Evomi host: authenticate, health-check, scrape.

    Pass an ``httpx.AsyncClient`` to share it with the caller; otherwise the
    client owns one for the lifetime of its ``async with`` block.

    Usage::

        async with EvomiClient(credentials) as client:
            payload = await client.scrape(descriptor)
    """

    def __init__(
        self,
        credentials: Credentials,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = TIMEOUT,
    ) -> None:
        self.credentials = credentials
        self._http = http_client
        self._owns_http = http_client is None
        self._timeout = timeout

    async def __aenter__(self) -> "EvomiClient":
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self._timeout)
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http and self._http is not None:
            await self._http.aclose()
            self._http = None

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            raise RuntimeError("EvomiClient is not open; use it as an async context manager.")
        return self._http

    def authenticate(self, headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """Return a copy of *headers* with the API key added."""
        authed = dict(headers or {})
        authed[API_KEY_HEADER] = self.credentials.api_key.get_secret_value()
        return authed

    async def health_check(self) -> Dict[str, Any]:
        """Verify the credentials against ``GET /api/v1/scraper/health``.

        Raises:
            DomainError: if the API rejects the key or reports a failure.
            TransportError: if the API cannot be reached.
        """
        url = f"{self.credentials.base_url}{HEALTH_PATH}"
        response = await self._send("GET", url, headers=self.authenticate())
        payload = _decode_payload(response)

        if is_failure(payload):
            api_message = extract_api_message(payload)
        elif response.is_error:
            api_message = _status_message(response)
        else:
            return payload or {}

        raise DomainError(friendly_message(api_message), api_message=str(api_message))

    async def scrape(self, descriptor: RequestDescriptor) -> Optional[Dict[str, Any]]:
        """Send *descriptor* and return the decoded payload.

        Non-2xx statuses do not raise: the API reports failures in the body as
        ``success: false``. A non-2xx status without such a body is turned into
        one so the classifier sees every failure the same way.

        Raises:
            TransportError: if the API cannot be reached.
        """
        response = await self._send(
            descriptor.method,
            descriptor.url,
            headers=self.authenticate(descriptor.headers),
            json=descriptor.body,
        )
        payload = _decode_payload(response)

        if response.is_error and not is_failure(payload):
            logger.warning(
                "Evomi API returned HTTP %d without an error payload", response.status_code
            )
            return {"success": False, "error": _status_message(response)}

        return payload

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self.http.request(method, url, **kwargs)
        except httpx.RequestError as exc:
            logger.error("Transport error calling %s %s: %s", method, url, exc)
            raise transport_error(exc, self.credentials.base_url)


def _status_message(response: httpx.Response) -> str:
    if response.status_code == 401:
        return "Unauthorized"
    return f"HTTP {response.status_code}"


def _decode_payload(response: httpx.Response) -> Optional[Dict[str, Any]]:
    """Turn a response body into a record payload.

    JSON mappings are returned as-is; other JSON values are wrapped in
    ``data``. Raw deliveries become ``content`` (text) or base64 ``data``
    (binary, e.g. PNG screenshots).
    """
    if not response.content:
        return None

    content_type = response.headers.get("content-type", "")
    media_type = content_type.split(";")[0].strip().lower()

    if media_type == "application/json" or media_type.endswith("+json"):
        try:
            value = response.json()
        except ValueError:
            return {"content": response.text, "content_type": content_type}
        if value is None:
            return None
        return value if isinstance(value, dict) else {"data": value}

    if media_type.startswith("text/") or not media_type:
        return {"content": response.text, "content_type": content_type or "text/plain"}

    return {
        "data": base64.b64encode(response.content).decode("ascii"),
        "content_type": content_type,
    }
