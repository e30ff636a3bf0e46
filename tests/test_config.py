"""Tests for configuration loading and the command-line entry point."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

import main
from config import ConfigError, RelayConfig, Settings, load_relay_config


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "MailjetConfig": {
                    "APIKey": "mj-key",
                    "APISecret": "mj-secret",
                    "Email": "inbox@relay.example.com",
                    "Domain": "relay.example.com",
                },
                "SlackConfig": {"Token": "T000/B000/XXXX", "Channel": "#alerts", "Emoji": ":email:"},
            }
        )
    )
    return path


class TestLoadRelayConfig:
    """Test reading the JSON configuration file."""

    def test_loads_wire_names(self, config_file):
        config = load_relay_config(config_file)

        assert config.mailjet.api_key.get_secret_value() == "mj-key"
        assert config.mailjet.email == "inbox@relay.example.com"
        assert config.mailjet.domain == "relay.example.com"
        assert config.slack.token.get_secret_value() == "T000/B000/XXXX"
        assert config.slack.channel == "#alerts"
        assert config.slack.emoji == ":email:"

    def test_repr_hides_secrets(self, config_file):
        text = repr(load_relay_config(config_file))

        assert "mj-secret" not in text
        assert "T000/B000/XXXX" not in text
        assert "inbox@relay.example.com" in text

    def test_config_is_immutable(self, config_file):
        config = load_relay_config(config_file)

        with pytest.raises(ValidationError):
            config.slack.channel = "#general"

    def test_missing_sections_default_to_empty(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{}")

        assert load_relay_config(path) == RelayConfig()

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ConfigError, match="Unable to read the config file"):
            load_relay_config(tmp_path / "absent.json")

    @pytest.mark.parametrize("content", ["not json", "[1, 2]", '{"SlackConfig": {"Channel": 5}}'])
    def test_malformed_file_raises(self, tmp_path, content):
        path = tmp_path / "config.json"
        path.write_text(content)

        with pytest.raises(ConfigError) as exc_info:
            load_relay_config(path)

        assert exc_info.value.path == str(path)


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.slack_webhook_base_url == "https://hooks.slack.com/services/"
        assert settings.webhook_error_status_codes is False
        assert settings.strict_route_lookup is False

    def test_public_base_url_defaults_to_domain_and_port(self, relay_config, test_settings):
        assert main.public_base_url(relay_config, test_settings) == "http://relay.example.com:3000"


class TestCommandLine:
    """Test argument parsing and startup failure."""

    def test_default_flags(self):
        args = main.parse_args([])

        assert args.config_file == "config.json"
        assert args.port == 3000

    def test_custom_flags(self):
        args = main.parse_args(["-f", "/etc/relay.json", "-p", "8080"])

        assert args.config_file == "/etc/relay.json"
        assert args.port == 8080

    def test_unreadable_config_exits_with_status_1(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{")

        with pytest.raises(SystemExit) as exc_info:
            main.main(["-f", str(path)])

        assert exc_info.value.code == 1

    def test_valid_config_starts_server(self, config_file, monkeypatch):
        calls = {}

        def fake_run(app, **kwargs):
            calls["app"] = app
            calls.update(kwargs)

        monkeypatch.setattr("uvicorn.run", fake_run)

        main.main(["-f", str(config_file), "-p", "8080"])

        assert calls["host"] == "relay.example.com"
        assert calls["port"] == 8080
        assert calls["app"].state.settings.port == 8080
        assert calls["app"].state.relay_config.slack.channel == "#alerts"
