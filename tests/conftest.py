"""Pytest configuration and shared fixtures.

Provides test settings, a relay configuration, and a fake upstream that
stands in for both Mailjet and Slack through httpx.MockTransport.
"""

import json
from contextlib import contextmanager

import httpx
import pytest
from fastapi.testclient import TestClient

from config import MailjetConfig, RelayConfig, Settings, SlackConfig
from main import create_app

SLACK_HOST = "hooks.slack.com"
MAILJET_HOST = "api.mailjet.com"
SLACK_TOKEN = "T000/B000/XXXX"


class FakeUpstream:
    """
    Records every outbound request and answers as Mailjet or Slack would.

    Args:
        route_exists: Mailjet lookup returns a registered parse route
        lookup_status: Force the Mailjet lookup status (e.g. 500)
        create_status: Status of the Mailjet create call
        slack_status: Status of the Slack webhook call
        fail_hosts: Hosts whose requests raise httpx.ConnectError
        empty_data: Mailjet answers with success but an empty Data list
    """

    def __init__(
        self,
        route_exists: bool = False,
        lookup_status: int | None = None,
        create_status: int = 201,
        slack_status: int = 200,
        fail_hosts: tuple[str, ...] = (),
        empty_data: bool = False,
    ):
        self.route_exists = route_exists
        self.lookup_status = lookup_status
        self.create_status = create_status
        self.slack_status = slack_status
        self.fail_hosts = fail_hosts
        self.empty_data = empty_data
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.host in self.fail_hosts:
            raise httpx.ConnectError("connection refused", request=request)

        if request.url.host == SLACK_HOST:
            return httpx.Response(self.slack_status, text="ok")

        if request.url.host == MAILJET_HOST and request.method == "GET":
            if self.lookup_status is not None:
                return httpx.Response(self.lookup_status, json={"ErrorMessage": "boom"})
            if self.empty_data:
                return httpx.Response(200, json={"Count": 0, "Data": [], "Total": 0})
            if not self.route_exists:
                return httpx.Response(404, json={"ErrorMessage": "Object not found"})
            email = request.url.path.rsplit("/", 1)[-1]
            return httpx.Response(
                200,
                json={
                    "Count": 1,
                    "Data": [
                        {"APIKeyID": 1, "Email": email, "ID": 7, "Url": "http://old.example.com/webhook"}
                    ],
                    "Total": 1,
                },
            )

        if request.url.host == MAILJET_HOST and request.method == "POST":
            if self.create_status >= 400:
                return httpx.Response(self.create_status, json={"ErrorMessage": "rejected"})
            if self.empty_data:
                return httpx.Response(self.create_status, json={"Count": 0, "Data": [], "Total": 0})
            body = json.loads(request.content)
            return httpx.Response(
                self.create_status,
                json={"Count": 1, "Data": [{"APIKeyID": 1, "ID": 8, **body}], "Total": 1},
            )

        raise AssertionError(f"unexpected request: {request.method} {request.url!s}")

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def to_host(self, host: str, method: str | None = None) -> list[httpx.Request]:
        return [
            r for r in self.requests if r.url.host == host and (method is None or r.method == method)
        ]

    @property
    def slack_requests(self) -> list[httpx.Request]:
        return self.to_host(SLACK_HOST)

    @property
    def mailjet_creates(self) -> list[httpx.Request]:
        return self.to_host(MAILJET_HOST, "POST")

    @property
    def mailjet_lookups(self) -> list[httpx.Request]:
        return self.to_host(MAILJET_HOST, "GET")


@pytest.fixture(scope="session")
def test_settings():
    """Create test-specific settings."""
    return Settings(
        app_env="test",
        log_level="ERROR",  # Reduce noise in tests
        port=3000,
        await_route_registration=True,  # Deterministic registration outcome
    )


@pytest.fixture
def relay_config():
    """Relay configuration with recognizable Slack values."""
    return RelayConfig(
        mailjet=MailjetConfig(
            api_key="mj-key",
            api_secret="mj-secret",
            email="inbox@relay.example.com",
            domain="relay.example.com",
        ),
        slack=SlackConfig(token=SLACK_TOKEN, channel="#alerts", emoji=":email:"),
    )


@pytest.fixture
def make_client(relay_config, test_settings):
    """Factory for a TestClient wired to a FakeUpstream, with optional setting overrides."""

    @contextmanager
    def _make(upstream: FakeUpstream, **overrides):
        settings = test_settings.model_copy(update=overrides)
        app = create_app(relay_config=relay_config, settings=settings, transport=upstream.transport())
        with TestClient(app) as client:
            yield client

    return _make


# --- Test Data Factories ---


@pytest.fixture
def sample_inbound_payload():
    """Mailjet Parse API payload as posted to /webhook."""
    return {
        "Sender": "alice@example.com",
        "Recipient": "inbox@relay.example.com",
        "Date": "20240115T103000",
        "From": "Alice",
        "Subject": "Deploy finished",
        "Headers": {
            "Message-ID": "<abc@example.com>",
            "Received": ["from mx1.example.com", "from mx2.example.com"],
        },
        "Parts": [
            {"Headers": {"Content-Type": "text/plain"}, "ContentRef": "Text-part"},
            {"Headers": {"Content-Type": "text/html"}, "ContentRef": "Html-part"},
        ],
        "Text-part": "hello",
        "Html-part": "<p>hello</p>",
        "SpamAssassinScore": 0.4,
        "CustomID": "",
        "Payload": "",
    }
