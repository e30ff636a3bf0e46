"""
Inbound email → Slack message translation.
"""

from config import SlackConfig
from schemas.mailjet import InboundEmailEvent
from schemas.slack import SlackNotification


def translate(event: InboundEmailEvent, slack_config: SlackConfig) -> SlackNotification:
    """
    Build the Slack message for one inbound email.

    Channel and icon are taken from configuration only; nothing in the
    inbound payload can redirect the message.

    Args:
        event: Decoded Mailjet Parse API payload
        slack_config: Configured Slack channel and emoji

    Returns:
        SlackNotification: Message to post
    """
    return SlackNotification(
        channel=slack_config.channel,
        username=event.from_display_name,
        text=event.text_part,
        icon_emoji=slack_config.emoji,
    )
