"""
Webhook endpoint for the Mailjet Parse API.

POST /webhook receives one inbound email, turns it into a Slack message and
posts it to the configured incoming webhook. The response body is a single
line of plain text: either the Slack status line or a description of what
went wrong. By default the status code is always 200, so callers must read
the body to learn the outcome.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from config import RelayConfig, Settings
from providers.dispatch import DispatchClient, DispatchError, RequestBuildError
from relay.translator import translate
from schemas.mailjet import InboundEmailEvent

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhooks"])


# --- Dependencies (populated on app.state by main.create_app / lifespan) ---


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_relay_config(request: Request) -> RelayConfig:
    return request.app.state.relay_config


def get_dispatch_client(request: Request) -> DispatchClient:
    return request.app.state.dispatch_client


def describe_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic ValidationError into one line."""
    messages = []
    for err in error.errors(include_url=False):
        loc = ".".join(str(part) for part in err["loc"])
        messages.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(messages) or str(error)


def _reply(text: str, status_code: int, settings: Settings) -> PlainTextResponse:
    if not settings.webhook_error_status_codes:
        status_code = 200
    return PlainTextResponse(content=f"{text}\n", status_code=status_code)


@router.post("/webhook", response_class=PlainTextResponse)
async def mailjet_webhook(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    relay_config: RelayConfig = Depends(get_relay_config),
    dispatch_client: DispatchClient = Depends(get_dispatch_client),
) -> PlainTextResponse:
    """
    Relay one Mailjet inbound email to Slack.

    Exactly one Slack request is made per call, and only when the body
    decodes. Nothing is retried; Mailjet may re-deliver per its own policy.

    Returns:
        PlainTextResponse: Slack status line (e.g. "200 OK") or error text
    """
    body = await request.body()
    try:
        event = InboundEmailEvent.model_validate_json(body)
    except ValidationError as e:
        message = describe_validation_error(e)
        logger.warning(f"Rejected inbound payload: {message}", extra={"body_size": len(body)})
        return _reply(message, 400, settings)

    notification = translate(event, relay_config.slack)

    try:
        payload = notification.model_dump_json().encode("utf-8")
    except PydanticSerializationError as e:
        logger.error(f"Could not serialize Slack message: {e}")
        return _reply(str(e), 500, settings)

    url = settings.slack_webhook_base_url + relay_config.slack.token.get_secret_value()
    try:
        slack_request = dispatch_client.build_request(url, payload)
    except RequestBuildError as e:
        logger.error(f"Error creating request: {e}")
        return _reply(f"Error creating request: {e}", 500, settings)

    try:
        result = await dispatch_client.send(slack_request)
    except DispatchError as e:
        logger.error(f"Slack error response: {e}", extra={"sender": event.sender})
        return _reply(f"Slack error response: {e}", 502, settings)

    logger.info(
        "Relayed inbound email to Slack",
        extra={
            "sender": event.sender,
            "channel": notification.channel,
            "status_code": result.status_code,
        },
    )
    return _reply(result.status_line, 200 if result.is_success else 502, settings)
