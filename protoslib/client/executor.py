"""Authenticated request execution against the Protos REST API."""

import json
import logging
from typing import Any

import httpx

from protoslib.core.config import Settings
from protoslib.core.errors import (
    RequestFailedError,
    ResponseDecodeError,
    TransportError,
    decode_error_body,
)

logger = logging.getLogger("protoslib.client")

JSON_CONTENT_TYPE = "application/json"


class RequestExecutor:
    """Sends one request per call and classifies the outcome.

    A call either returns the full response body of a 2xx response or raises.
    Nothing is retried.

    Args:
        settings: Base URL, identity and timeout.
        http_client: Client to use. One is created (and owned) if omitted.
        transport: httpx transport for the owned client, e.g. httpx.MockTransport.
    """

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=settings.base_url,
            timeout=settings.timeout,
            transport=transport,
        )

    async def execute(self, method: str, path: str, body: Any = None) -> bytes:
        """Send method to path and return the response body.

        Args:
            method: HTTP verb.
            path: Path relative to the API base URL.
            body: bytes/str sent as-is, anything else JSON-encoded. None sends no body.

        Raises:
            RequestFailedError: Non-2xx status, carrying the server's ``error``
                message or the raw body text.
            TransportError: The request could not be sent or the body read.
        """
        headers = dict(self.settings.identity_headers)
        content: bytes | str | None = None
        if body is not None:
            headers["Content-Type"] = JSON_CONTENT_TYPE
            content = body if isinstance(body, bytes | str) else json.dumps(body)

        try:
            response = await self._client.request(method, path, content=content, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed", e) from e

        payload = response.content
        if not response.is_success:
            message = (
                decode_error_body(payload)
                or payload.decode("utf-8", errors="replace")
                or response.reason_phrase
            )
            logger.debug(
                "%s %s returned %s: %s", method, path, response.status_code, message
            )
            raise RequestFailedError(message, response.status_code)

        return payload

    async def execute_json(self, method: str, path: str, body: Any = None) -> Any:
        """Like execute(), decoding the response body as JSON.

        Raises:
            ResponseDecodeError: The body is not valid JSON.
        """
        payload = await self.execute(method, path, body)
        try:
            return json.loads(payload)
        except ValueError as e:
            raise ResponseDecodeError(f"Invalid JSON in response to {method} {path}: {e}") from e

    async def aclose(self) -> None:
        """Close the HTTP client if this executor created it."""
        if self._owns_client:
            await self._client.aclose()
