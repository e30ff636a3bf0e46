"""
Outbound HTTP dispatch.

Thin wrapper around a shared ``httpx.AsyncClient``: builds one JSON POST,
sends it, and reports the upstream status line or the transport error.
The client is owned by the application lifespan and is safe for concurrent
use by every in-flight webhook handler and the parse route registrar.
"""

import logging
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


class RequestBuildError(Exception):
    """Raised when the outbound request cannot be constructed (e.g. invalid URL)."""


class DispatchError(Exception):
    """Raised when the outbound request fails at the transport level."""


@dataclass(frozen=True)
class DispatchResult:
    """Upstream response summary."""

    status_code: int
    reason_phrase: str

    @property
    def status_line(self) -> str:
        """Status as ``"<code> <reason>"``, e.g. ``"200 OK"``."""
        return f"{self.status_code} {self.reason_phrase}".strip()

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class DispatchClient:
    """Issues single POST requests with a caller-supplied body."""

    def __init__(self, http_client: httpx.AsyncClient):
        self.http_client = http_client

    def build_request(self, url: str, body: bytes) -> httpx.Request:
        """
        Build a JSON POST request.

        Args:
            url: Absolute target URL
            body: Serialized JSON body

        Returns:
            httpx.Request: Request ready to send

        Raises:
            RequestBuildError: If the URL is malformed or uses an unsupported scheme
        """
        try:
            return self.http_client.build_request("POST", url, content=body, headers=JSON_HEADERS)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol, ValueError, TypeError) as e:
            raise RequestBuildError(str(e)) from e

    async def send(self, request: httpx.Request) -> DispatchResult:
        """
        Send a previously built request.

        Non-2xx responses are returned, not raised; callers decide how to
        report them.

        Raises:
            DispatchError: On connection, timeout, or protocol failures
        """
        try:
            response = await self.http_client.send(request)
        except httpx.HTTPError as e:
            raise DispatchError(str(e) or e.__class__.__name__) from e

        logger.debug(
            "Outbound request completed",
            extra={"host": request.url.host, "status_code": response.status_code},
        )
        return DispatchResult(
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
        )
