"""Tests for configuration loading and resolution."""

import json

import pytest

from dockhand.domain.errors import ConfigurationError
from dockhand.domain.value_objects.environment import Environment
from dockhand.infrastructure.config import (
    CliOverrides,
    DockhandSettings,
    _env_override,
    load_settings,
    resolve_config,
)


def _write(tmp_path, data):
    path = tmp_path / "dockhand.json"
    path.write_text(json.dumps(data) if not isinstance(data, str) else data)
    return str(path)


class TestLoadSettings:
    def test_defaults_without_file(self, tmp_path):
        settings = load_settings(str(tmp_path / "missing.json"), environ={})
        assert settings == DockhandSettings()
        assert settings.registry.account == "sayfops"
        assert settings.server.app_dir == "/opt/sayf-app"
        assert settings.log_level == "INFO"

    def test_load_from_file(self, tmp_path):
        path = _write(tmp_path, {
            "server": {"host": "prod-server.com", "port": 2222, "unknown": "x"},
            "health": {"timeout": 120},
            "log_level": "DEBUG",
        })
        settings = load_settings(path, environ={})
        assert settings.server.host == "prod-server.com"
        assert settings.server.port == 2222
        assert settings.health.timeout == 120
        assert settings.log_level == "DEBUG"

    def test_invalid_json_is_an_error(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Invalid config file"):
            load_settings(_write(tmp_path, "{not json"), environ={})

    def test_non_object_is_an_error(self, tmp_path):
        with pytest.raises(ConfigurationError, match="JSON object"):
            load_settings(_write(tmp_path, "[1, 2]"), environ={})

    def test_env_overrides_file(self, tmp_path):
        path = _write(tmp_path, {"server": {"port": 2222}})
        settings = load_settings(path, environ={
            "DOCKHAND_SERVER_PORT": "2200",
            "DOCKHAND_SERVER_APP_DIR": "/srv/app",
            "DOCKHAND_TELEMETRY_INSECURE": "true",
        })
        assert settings.server.port == 2200
        assert settings.server.app_dir == "/srv/app"
        assert settings.telemetry.insecure is True

    def test_historical_variables_override_prefixed(self, tmp_path):
        settings = load_settings(str(tmp_path / "none.json"), environ={
            "DOCKHAND_SERVER_HOST": "from-prefixed",
            "SERVER_HOST": "from-legacy",
            "SERVER_USER": "deploy",
            "DOCKER_HUB_USERNAME": "acme",
        })
        assert settings.server.host == "from-legacy"
        assert settings.server.user == "deploy"
        assert settings.registry.account == "acme"

    def test_empty_values_count_as_unset(self, tmp_path):
        path = _write(tmp_path, {"server": {"host": "from-file"}})
        settings = load_settings(path, environ={"SERVER_HOST": "", "DOCKHAND_SERVER_HOST": ""})
        assert settings.server.host == "from-file"

    def test_bad_integer(self, tmp_path):
        with pytest.raises(ConfigurationError, match="port must be an integer"):
            load_settings(str(tmp_path / "none.json"), environ={"SERVER_PORT": "ssh"})

    def test_env_override_top_level(self):
        data = _env_override({}, {"DOCKHAND_LOG_LEVEL": "DEBUG", "OTHER": "x"})
        assert data == {"log_level": "DEBUG"}


class TestResolveConfig:
    def test_defaults(self):
        config = resolve_config(DockhandSettings())
        assert config.environment is Environment.DEV
        assert str(config.image) == "sayfops/e-commerce-dev:latest"
        assert config.host == ""
        assert config.user == "ubuntu"
        assert config.port == 22
        assert config.health_timeout == 60

    def test_cli_flags_win(self, tmp_path):
        settings = load_settings(str(tmp_path / "none.json"), environ={
            "SERVER_HOST": "env-host", "SERVER_PORT": "2222",
        })
        config = resolve_config(settings, CliOverrides(
            environment="prod", tag="v1.2.3", host="10.0.0.5", port=22,
            health_timeout=30, rollback=True,
        ))
        assert str(config.image) == "sayfops/e-commerce-prod:v1.2.3"
        assert config.host == "10.0.0.5"
        assert config.port == 22
        assert config.health_timeout == 30
        assert config.rollback is True

    def test_settings_used_when_flags_absent(self, tmp_path):
        settings = load_settings(str(tmp_path / "none.json"), environ={
            "SERVER_HOST": "env-host", "DOCKHAND_COMPOSE_COMMAND": "docker compose",
            "DOCKHAND_SERVER_CHANNEL": "openssh",
        })
        config = resolve_config(settings, CliOverrides(environment="dev"))
        assert config.host == "env-host"
        assert config.compose_command == "docker compose"
        assert config.channel == "openssh"
        assert config.key_filename is None

    def test_invalid_tag(self):
        with pytest.raises(ConfigurationError, match="tag"):
            resolve_config(DockhandSettings(), CliOverrides(tag="bad tag"))

    def test_invalid_port(self):
        with pytest.raises(ConfigurationError, match="Port"):
            resolve_config(DockhandSettings(), CliOverrides(port=0))
