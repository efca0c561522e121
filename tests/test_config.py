"""Tests for settings and configuration loading."""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from portainer_client import ConfigurationError, PortainerClient, PortainerSettings
from portainer_client.core import config_loader
from portainer_client.core.config_loader import load_settings, load_settings_async


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run from an empty directory with no user config or .env loading."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_loader, "USER_CONFIG_PATH", tmp_path / "missing" / "config.yml")
    with patch("portainer_client.core.config_loader.load_dotenv"):
        yield tmp_path


def test_default_settings(isolated):
    settings = PortainerSettings()

    assert settings.url == ""
    assert settings.environment_id is None
    assert settings.http_timeout == 30.0
    assert settings.verify_ssl is True
    assert settings.poll_interval_ms == 1000
    assert settings.settle_delay_ms == 1000
    assert settings.log_level == "INFO"


def test_settings_from_environment(isolated, monkeypatch):
    monkeypatch.setenv("PORTAINER_URL", "https://portainer.example.com/")
    monkeypatch.setenv("PORTAINER_API_KEY", "ptr_secret")
    monkeypatch.setenv("PORTAINER_ENVIRONMENT_ID", "4")
    monkeypatch.setenv("PORTAINER_VERIFY_SSL", "false")

    settings = PortainerSettings()

    assert settings.url == "https://portainer.example.com"
    assert settings.api_key == "ptr_secret"
    assert settings.environment_id == 4
    assert settings.verify_ssl is False


def test_api_key_not_in_repr():
    settings = PortainerSettings(_env_file=None, PORTAINER_URL="http://p", PORTAINER_API_KEY="ptr_secret")

    assert "ptr_secret" not in repr(settings)


def test_invalid_values_rejected():
    with pytest.raises(ValidationError):
        PortainerSettings(_env_file=None, PORTAINER_HTTP_TIMEOUT=0)
    with pytest.raises(ValidationError):
        PortainerSettings(_env_file=None, PORTAINER_POLL_INTERVAL_MS=-1)


@pytest.mark.parametrize(
    "url,api_key,missing",
    [
        ("", "key", "PORTAINER_URL"),
        ("http://p", "", "PORTAINER_API_KEY"),
        ("", "", "PORTAINER_URL and PORTAINER_API_KEY"),
    ],
)
def test_client_requires_url_and_key(url, api_key, missing):
    settings = PortainerSettings(_env_file=None, PORTAINER_URL=url, PORTAINER_API_KEY=api_key)

    with pytest.raises(ConfigurationError, match=missing):
        PortainerClient(settings)


def test_client_rejects_invalid_environment_id():
    settings = PortainerSettings(
        _env_file=None,
        PORTAINER_URL="http://p",
        PORTAINER_API_KEY="key",
        PORTAINER_ENVIRONMENT_ID=0,
    )

    with pytest.raises(ConfigurationError, match="PORTAINER_ENVIRONMENT_ID"):
        PortainerClient(settings)


class TestLoadSettings:

    def test_yaml_section(self, isolated):
        config_file = isolated / "portainer.yml"
        config_file.write_text(
            "portainer:\n"
            "  url: http://portainer.local:9000\n"
            "  api_key: from-file\n"
            "  environment_id: 2\n"
            "  poll_interval_ms: 250\n"
        )

        settings = load_settings(config_file)

        assert settings.url == "http://portainer.local:9000"
        assert settings.api_key == "from-file"
        assert settings.environment_id == 2
        assert settings.poll_interval_ms == 250

    def test_top_level_env_names(self, isolated):
        config_file = isolated / "portainer.yml"
        config_file.write_text("PORTAINER_URL: http://top-level\nPORTAINER_SETTLE_DELAY_MS: 0\n")

        settings = load_settings(config_file)

        assert settings.url == "http://top-level"
        assert settings.settle_delay_ms == 0

    def test_environment_overrides_file(self, isolated, monkeypatch):
        config_file = isolated / "portainer.yml"
        config_file.write_text("url: http://from-file\napi_key: file-key\n")
        monkeypatch.setenv("PORTAINER_API_KEY", "env-key")

        settings = load_settings(config_file)

        assert settings.url == "http://from-file"
        assert settings.api_key == "env-key"

    def test_project_file_overrides_user_file(self, isolated, monkeypatch):
        user_file = isolated / "user.yml"
        user_file.write_text("url: http://user\nlog_level: DEBUG\n")
        project_file = isolated / "project.yml"
        project_file.write_text("url: http://project\n")
        monkeypatch.setattr(config_loader, "USER_CONFIG_PATH", user_file)

        settings = load_settings(project_file)

        assert settings.url == "http://project"
        assert settings.log_level == "DEBUG"

    def test_config_path_from_environment(self, isolated, monkeypatch):
        config_file = isolated / "custom.yml"
        config_file.write_text("url: http://custom\n")
        monkeypatch.setenv("PORTAINER_CLIENT_CONFIG", str(config_file))

        assert load_settings().url == "http://custom"

    def test_missing_file_uses_defaults(self, isolated):
        settings = load_settings(isolated / "nope.yml")

        assert settings.url == ""
        assert settings.poll_interval_ms == 1000

    def test_invalid_yaml_raises(self, isolated):
        config_file = isolated / "broken.yml"
        config_file.write_text("portainer: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Failed to load config"):
            load_settings(config_file)

    @pytest.mark.asyncio
    async def test_async_loader(self, isolated):
        config_file = isolated / "portainer.yml"
        config_file.write_text("url: http://async\n")

        settings = await load_settings_async(config_file)

        assert settings.url == "http://async"
