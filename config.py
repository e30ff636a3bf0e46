"""Configuration for the Mailjet Slack relay.

Two layers:
- ``Settings``: typed, 12-factor process settings via pydantic-settings
  (environment variables and .env). No I/O or side effects at import.
- ``RelayConfig``: the Mailjet account and Slack webhook credentials, read once
  from a JSON file at startup and immutable afterwards.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_FILE = "config.json"
DEFAULT_PORT = 3000


class ConfigError(Exception):
    """Raised when the relay configuration file cannot be read or parsed."""

    def __init__(self, path: str | Path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Unable to read the config file ({self.path}): {reason}")


class Settings(BaseSettings):
    """Process settings loaded from environment variables and .env file."""

    # --- Pydantic model config  ---
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # --- App / Logging ---
    app_env: Literal["development", "test", "production"] = Field(
        default="development",
        description="Application environment (affects logging, docs exposure).",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Python logging verbosity level."
    )

    @property
    def is_prod(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @property
    def is_dev(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"

    # --- Server ---
    config_file: Path = Field(
        default=Path(DEFAULT_CONFIG_FILE),
        description="Path to the JSON file holding Mailjet and Slack credentials.",
    )
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="Listen port.")
    public_base_url: str | None = Field(
        default=None,
        description="Externally reachable base URL. Defaults to http://<Mailjet domain>:<port>.",
    )

    # --- Upstream endpoints ---
    slack_webhook_base_url: str = Field(
        default="https://hooks.slack.com/services/",
        description="Slack incoming-webhook prefix; the configured token is appended.",
    )
    mailjet_api_url: str = Field(
        default="https://api.mailjet.com/v3/REST",
        description="Base URL of the Mailjet REST API.",
    )
    outbound_timeout_seconds: float | None = Field(
        default=30.0,
        gt=0,
        description="Timeout for outbound HTTP calls. None leaves calls unbounded.",
    )

    # --- Parse route registration ---
    route_registration_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Upper bound for the one-shot parse route registration task.",
    )
    await_route_registration: bool = Field(
        default=False,
        description="Wait for parse route registration before accepting requests.",
    )
    strict_route_lookup: bool = Field(
        default=False,
        description=(
            "Only create a parse route when Mailjet reports it missing. When False, "
            "any lookup failure (including transport errors) triggers a create."
        ),
    )

    # --- Webhook responses ---
    webhook_error_status_codes: bool = Field(
        default=False,
        description=(
            "Return 4xx/5xx on webhook failures. When False every response is 200 "
            "and only the body text reports the outcome."
        ),
    )


class MailjetConfig(BaseModel):
    """Mailjet account credentials and the sender address to route."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    api_key: SecretStr = Field(default=SecretStr(""), alias="APIKey")
    api_secret: SecretStr = Field(default=SecretStr(""), alias="APISecret")
    email: str = Field(default="", alias="Email")
    domain: str = Field(default="", alias="Domain")


class SlackConfig(BaseModel):
    """Slack incoming-webhook token and message presentation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    token: SecretStr = Field(default=SecretStr(""), alias="Token")
    channel: str = Field(default="", alias="Channel")
    emoji: str = Field(default="", alias="Emoji")


class RelayConfig(BaseModel):
    """
    Credentials read from the JSON configuration file.

    File layout:
        {
          "MailjetConfig": {"APIKey": "...", "APISecret": "...", "Email": "...", "Domain": "..."},
          "SlackConfig": {"Token": "...", "Channel": "...", "Emoji": "..."}
        }
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    mailjet: MailjetConfig = Field(default_factory=MailjetConfig, alias="MailjetConfig")
    slack: SlackConfig = Field(default_factory=SlackConfig, alias="SlackConfig")


def load_relay_config(path: str | Path) -> RelayConfig:
    """
    Read and validate the relay configuration file.

    Args:
        path: Location of the JSON configuration file

    Returns:
        RelayConfig: Immutable configuration value

    Raises:
        ConfigError: If the file is missing, unreadable, not JSON, or has the wrong shape
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(path, str(e)) from e

    try:
        return RelayConfig.model_validate(json.loads(raw))
    except json.JSONDecodeError as e:
        raise ConfigError(path, str(e)) from e
    except ValidationError as e:
        raise ConfigError(path, str(e)) from e


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide singleton Settings instance (FastAPI DI-friendly).

    Uses lru_cache to ensure only one Settings instance is created per process.

    Returns:
        Settings: The application settings instance.
    """
    return Settings()
