"""
Mailjet schemas.

Defines data models for:
- The Parse API webhook payload (one inbound email per request)
- The parseroute REST resource used to register the webhook
"""

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationInfo, field_validator


def _null_to_empty(value: Any) -> Any:
    return "" if value is None else value


# A null header value decodes to "", like any other missing string
HeaderValue = Annotated[str | list[str], BeforeValidator(_null_to_empty)]


class NullAsDefaultModel(BaseModel):
    """Payload model where a JSON null falls back to the field default."""

    model_config = ConfigDict(extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def null_to_default(cls, v: Any, info: ValidationInfo) -> Any:
        """Replace null with the field's empty default instead of rejecting the payload."""
        if v is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return v


class EmailPart(NullAsDefaultModel):
    """One MIME part of the inbound email, as summarized by Mailjet."""

    headers: dict[str, HeaderValue] = Field(default_factory=dict, alias="Headers")
    content_ref: str = Field(
        default="",
        alias="ContentRef",
        description="Key of the payload field holding this part's content",
        examples=["Text-part"],
    )


# A null entry in Parts decodes to an empty part
PartValue = Annotated[EmailPart, BeforeValidator(lambda v: {} if v is None else v)]


class InboundEmailEvent(NullAsDefaultModel):
    """
    Inbound email event posted by the Mailjet Parse API.

    All fields are optional; anything Mailjet omits or sends as null falls
    back to an empty value. Unknown keys are ignored.
    """

    sender: str = Field(default="", alias="Sender", examples=["alice@example.com"])
    recipient: str = Field(default="", alias="Recipient", examples=["inbox@relay.example.com"])
    date: str = Field(default="", alias="Date", examples=["20240115T103000"])
    from_display_name: str = Field(
        default="",
        alias="From",
        description="Display form of the From header",
        examples=["Alice <alice@example.com>"],
    )
    subject: str = Field(default="", alias="Subject")
    headers: dict[str, HeaderValue] = Field(
        default_factory=dict,
        alias="Headers",
        description="Raw email headers; repeated headers arrive as lists",
    )
    parts: list[PartValue] = Field(default_factory=list, alias="Parts")
    text_part: str = Field(default="", alias="Text-part")
    html_part: str = Field(default="", alias="Html-part")
    spam_assassin_score: float = Field(default=0.0, alias="SpamAssassinScore")
    custom_id: str = Field(default="", alias="CustomID")
    payload: str = Field(default="", alias="Payload")

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "examples": [
                {
                    "Sender": "alice@example.com",
                    "Recipient": "inbox@relay.example.com",
                    "Date": "20240115T103000",
                    "From": "Alice <alice@example.com>",
                    "Subject": "Deploy finished",
                    "Headers": {"Message-ID": "<abc@example.com>"},
                    "Parts": [{"Headers": {"Content-Type": "text/plain"}, "ContentRef": "Text-part"}],
                    "Text-part": "Build 42 is live.",
                    "Html-part": "<p>Build 42 is live.</p>",
                    "SpamAssassinScore": 0.1,
                    "CustomID": "",
                    "Payload": "",
                }
            ]
        },
    )


class ParseRoute(BaseModel):
    """Mailjet parseroute resource: mail for ``email`` is posted to ``url``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int | None = Field(default=None, alias="ID")
    api_key_id: int | None = Field(default=None, alias="APIKeyID")
    email: str = Field(default="", alias="Email")
    url: str = Field(default="", alias="Url")
