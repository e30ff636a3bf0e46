"""
Slack incoming-webhook message schema.
"""

from pydantic import BaseModel, ConfigDict, Field


class SlackNotification(BaseModel):
    """
    Message posted to a Slack incoming webhook.

    ``channel`` and ``icon_emoji`` always come from the relay configuration;
    ``username`` and ``text`` come from the inbound email.
    """

    model_config = ConfigDict(frozen=True)

    channel: str = Field(default="", examples=["#alerts"])
    username: str = Field(default="", examples=["Alice <alice@example.com>"])
    text: str = Field(default="", examples=["Build 42 is live."])
    icon_emoji: str = Field(default="", examples=[":email:"])
