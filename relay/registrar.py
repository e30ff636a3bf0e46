"""
Parse route registration.

At startup the relay makes sure Mailjet forwards mail for the configured
sender address to this service's ``/webhook`` endpoint. The check runs once,
in the background, and its outcome is only visible in the logs and on
``app.state.route_registration``.

There is no distributed lock: two instances started against the same account
can both see "not found" and both create a route.
"""

import asyncio
import logging

from providers.mailjet import MailjetClient, MailjetError, ParseRouteNotFound
from schemas.common import RegistrationOutcome

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/webhook"


def webhook_url(base_url: str) -> str:
    """Public URL Mailjet should post inbound mail to."""
    return base_url.rstrip("/") + WEBHOOK_PATH


class RouteRegistrar:
    """
    Idempotent check-then-create of the Mailjet parse route.

    Args:
        client: Mailjet REST client
        strict_lookup: When False, every lookup failure (transport errors
            included) is treated as "not found" and a create is attempted.
            When True, only a genuine not-found does so.
    """

    def __init__(self, client: MailjetClient, strict_lookup: bool = False):
        self.client = client
        self.strict_lookup = strict_lookup

    async def ensure_route(self, email: str, base_url: str) -> RegistrationOutcome:
        """
        Register ``base_url + "/webhook"`` for ``email`` unless a route exists.

        Never raises for Mailjet failures; they are logged and reported
        through the returned outcome.
        """
        try:
            route = await self.client.get_parse_route(email)
        except ParseRouteNotFound as e:
            logger.info(f"Parse route lookup: {e}", extra={"email": email})
        except MailjetError as e:
            logger.warning(
                f"Error getting instance of the parse API: {e}",
                extra={"email": email, "strict_lookup": self.strict_lookup},
            )
            if self.strict_lookup:
                return RegistrationOutcome.LOOKUP_FAILED
        else:
            logger.info(
                f"Email already used: {route.email} -> {route.url}",
                extra={"email": route.email, "url": route.url},
            )
            return RegistrationOutcome.ALREADY_REGISTERED

        return await self._create(email, webhook_url(base_url))

    async def _create(self, email: str, url: str) -> RegistrationOutcome:
        try:
            route = await self.client.create_parse_route(email, url)
        except MailjetError as e:
            logger.error(
                f"Error creating new instance of the parse API: {e}",
                extra={"email": email, "url": url},
            )
            return RegistrationOutcome.CREATE_FAILED

        logger.info(f"Parse route email: {route.email}", extra={"email": route.email, "url": url})
        return RegistrationOutcome.CREATED


async def _ensure_route_with_timeout(
    registrar: RouteRegistrar, email: str, base_url: str, timeout: float
) -> RegistrationOutcome:
    try:
        return await asyncio.wait_for(registrar.ensure_route(email, base_url), timeout=timeout)
    except asyncio.TimeoutError:
        logger.error(
            f"Parse route registration timed out after {timeout}s",
            extra={"email": email},
        )
        return RegistrationOutcome.TIMED_OUT


def start_route_registration(
    registrar: RouteRegistrar, email: str, base_url: str, timeout: float
) -> "asyncio.Task[RegistrationOutcome]":
    """
    Launch the one-shot registration in the background.

    Must be called from a running event loop. The returned task resolves to
    the RegistrationOutcome; awaiting it is optional.

    Args:
        registrar: Configured RouteRegistrar
        email: Sender address to route
        base_url: Public base URL of this service
        timeout: Upper bound in seconds for lookup plus create

    Returns:
        asyncio.Task: Completion signal for the registration
    """
    logger.info(
        f"Scheduling parse route registration: {email} -> {webhook_url(base_url)}",
        extra={"email": email, "url": webhook_url(base_url), "timeout": timeout},
    )
    return asyncio.create_task(
        _ensure_route_with_timeout(registrar, email, base_url, timeout),
        name="parse-route-registration",
    )
