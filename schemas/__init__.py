"""
Pydantic schemas for the Mailjet Slack relay.

Provides data models for:
- Inbound Mailjet Parse API webhook payloads
- Mailjet parse route resources
- Outbound Slack incoming-webhook messages
- Common enums shared across modules
"""

# Common types
from schemas.common import RegistrationOutcome

# Mailjet schemas
from schemas.mailjet import EmailPart, InboundEmailEvent, ParseRoute

# Slack schemas
from schemas.slack import SlackNotification

__all__ = [
    # Common
    "RegistrationOutcome",
    # Mailjet
    "EmailPart",
    "InboundEmailEvent",
    "ParseRoute",
    # Slack
    "SlackNotification",
]
