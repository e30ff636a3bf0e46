"""
Mailjet REST client for the parseroute resource.

Only the two calls the relay needs: look up a parse route by email address
and create one. Authentication is HTTP basic with the account API key and
secret, passed per request so the shared ``httpx.AsyncClient`` carries no
account state.
"""

import logging

import httpx

from config import MailjetConfig
from schemas.mailjet import ParseRoute

logger = logging.getLogger(__name__)

PARSEROUTE_RESOURCE = "parseroute"


class MailjetError(Exception):
    """Base class for Mailjet API failures."""


class ParseRouteNotFound(MailjetError):
    """Mailjet has no parse route for the requested email address."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"No parse route registered for {email}")


class MailjetAPIError(MailjetError):
    """Transport failure, unexpected status code, or unreadable response body."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class MailjetClient:
    """
    Minimal async client for Mailjet's v3 REST API.

    Args:
        http_client: Shared async HTTP client
        config: Mailjet account credentials
        api_url: REST API base URL (e.g. https://api.mailjet.com/v3/REST)
    """

    def __init__(self, http_client: httpx.AsyncClient, config: MailjetConfig, api_url: str):
        self.http_client = http_client
        self.api_url = api_url.rstrip("/")
        self._auth = httpx.BasicAuth(
            config.api_key.get_secret_value(),
            config.api_secret.get_secret_value(),
        )

    def _resource_url(self, *path: str) -> str:
        return "/".join([self.api_url, PARSEROUTE_RESOURCE, *path])

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self.http_client.request(method, url, auth=self._auth, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise MailjetAPIError(f"{method} {url} failed: {e}") from e

        logger.debug(
            "Mailjet request completed",
            extra={"method": method, "url": url, "status_code": response.status_code},
        )
        return response

    @staticmethod
    def _first_route(response: httpx.Response) -> ParseRoute | None:
        try:
            data = response.json().get("Data") or []
            return ParseRoute.model_validate(data[0]) if data else None
        except (ValueError, AttributeError, KeyError, TypeError) as e:
            raise MailjetAPIError(
                f"Unreadable Mailjet response: {e}", status_code=response.status_code
            ) from e

    async def get_parse_route(self, email: str) -> ParseRoute:
        """
        Fetch the parse route registered for ``email``.

        Raises:
            ParseRouteNotFound: Mailjet answered 404 or returned no routes
            MailjetAPIError: Any other failure
        """
        response = await self._request("GET", self._resource_url(email))
        if response.status_code == 404:
            raise ParseRouteNotFound(email)
        if response.is_error:
            raise MailjetAPIError(
                f"Mailjet lookup returned {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        route = self._first_route(response)
        if route is None:
            raise ParseRouteNotFound(email)
        return route

    async def create_parse_route(self, email: str, url: str) -> ParseRoute:
        """
        Register ``url`` as the webhook receiving mail sent to ``email``.

        Raises:
            MailjetAPIError: On transport failure, non-2xx status, or empty response
        """
        payload = ParseRoute(email=email, url=url).model_dump(
            by_alias=True, include={"email", "url"}
        )
        response = await self._request("POST", self._resource_url(), json=payload)
        if response.is_error:
            raise MailjetAPIError(
                f"Mailjet create returned {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        route = self._first_route(response)
        if route is None:
            raise MailjetAPIError(
                "Mailjet create returned no parse route", status_code=response.status_code
            )
        return route
