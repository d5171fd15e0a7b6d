"""
Configuration Module

Architectural Intent:
- Centralized configuration loading from an optional JSON file
- Environment variables override file-based config
- Produces the immutable DeploymentConfig once, before any step runs

Design Decisions:
- Settings are frozen dataclasses; nested sections map to sub-dataclasses
- Priority (highest to lowest): CLI flags, the historical variables
  (DOCKER_HUB_USERNAME, SERVER_HOST, SERVER_USER, SERVER_PORT,
  SERVER_APP_DIR), DOCKHAND_SECTION_FIELD variables, config file, defaults
- Empty environment values count as unset
- A config file that exists but cannot be parsed is an error: deploying with
  silently defaulted settings could target the wrong host
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional
import dataclasses
import json
import logging
import os
from dockhand.domain.errors import ConfigurationError
from dockhand.domain.value_objects.deployment_config import (
    DeploymentConfig,
    DEFAULT_ACCOUNT,
    DEFAULT_APP_DIR,
    DEFAULT_COMPOSE_COMMAND,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_HEALTH_TIMEOUT,
    DEFAULT_HEALTH_URL,
    MANIFEST_FILENAME,
)
from dockhand.domain.value_objects.environment import Environment
from dockhand.domain.value_objects.image_reference import ImageReference, DEFAULT_TAG

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "dockhand.json"

LEGACY_ENV = {
    "DOCKER_HUB_USERNAME": ("registry", "account"),
    "SERVER_HOST": ("server", "host"),
    "SERVER_USER": ("server", "user"),
    "SERVER_PORT": ("server", "port"),
    "SERVER_APP_DIR": ("server", "app_dir"),
}


@dataclass(frozen=True)
class RegistryConfig:
    """Image registry configuration."""
    account: str = DEFAULT_ACCOUNT
    host: str = ""


@dataclass(frozen=True)
class ServerConfig:
    """Deployment target configuration."""
    host: str = ""
    user: str = "ubuntu"
    port: int = 22
    app_dir: str = DEFAULT_APP_DIR
    channel: str = "fabric"
    key_filename: str = ""
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT


@dataclass(frozen=True)
class HealthConfig:
    """Post-deploy health check configuration."""
    timeout: int = DEFAULT_HEALTH_TIMEOUT
    url: str = DEFAULT_HEALTH_URL


@dataclass(frozen=True)
class ComposeConfig:
    """Compose manifest and executable."""
    command: str = DEFAULT_COMPOSE_COMMAND
    template: str = MANIFEST_FILENAME


@dataclass(frozen=True)
class TelemetryConfig:
    """OpenTelemetry configuration."""
    endpoint: str = ""
    insecure: bool = False


@dataclass(frozen=True)
class DockhandSettings:
    """Root settings, before CLI overrides."""
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    health: HealthConfig = field(default_factory=HealthConfig)
    compose: ComposeConfig = field(default_factory=ComposeConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    log_level: str = "INFO"


_TOP_LEVEL_FIELDS = {"log_level"}


def _env_override(
    data: dict, environ: Mapping[str, str], prefix: str = "DOCKHAND"
) -> dict:
    """Override config values with environment variables.

    Environment variables follow the pattern DOCKHAND_SECTION_KEY.
    For example: DOCKHAND_SERVER_PORT=2222, DOCKHAND_HEALTH_TIMEOUT=120
    """
    for key, value in environ.items():
        if not key.startswith(f"{prefix}_") or value == "":
            continue
        name = key[len(prefix) + 1:].lower()
        if name in _TOP_LEVEL_FIELDS:
            data[name] = value
            continue
        parts = name.split("_", 1)
        if len(parts) == 2:
            section, field_name = parts
            data.setdefault(section, {})
            data[section][field_name] = value
    return data


def _legacy_env_override(data: dict, environ: Mapping[str, str]) -> dict:
    for key, (section, field_name) in LEGACY_ENV.items():
        value = environ.get(key, "")
        if value:
            data.setdefault(section, {})
            data[section][field_name] = value
    return data


def _parse_config_file(path: Path) -> dict:
    """Parse a JSON config file. A missing file yields an empty dict."""
    try:
        with open(path) as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.debug("Config file not found: %s", path)
        return {}
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object")
    return data


def _build_sub_config(cls, data: Any):
    """Build a sub-config dataclass from a dict, ignoring unknown keys."""
    if not isinstance(data, dict):
        raise ConfigurationError(f"Section for {cls.__name__} must be an object")
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in data.items() if k in valid_fields}

    # Convert string numbers to int/bool
    for f in dataclasses.fields(cls):
        if f.name in filtered and isinstance(filtered[f.name], str):
            if f.type == "int":
                try:
                    filtered[f.name] = int(filtered[f.name])
                except ValueError:
                    raise ConfigurationError(
                        f"{cls.__name__}.{f.name} must be an integer, "
                        f"got {filtered[f.name]!r}"
                    ) from None
            elif f.type == "bool":
                filtered[f.name] = filtered[f.name].lower() in ("true", "1", "yes")

    return cls(**filtered)


def load_settings(
    path: Optional[str] = None,
    env_prefix: str = "DOCKHAND",
    environ: Optional[Mapping[str, str]] = None,
) -> DockhandSettings:
    """Load settings from file and environment variables.

    Args:
        path: Path to config file (JSON). Defaults to dockhand.json in CWD.
        env_prefix: Environment variable prefix. Defaults to DOCKHAND.
        environ: Environment mapping, os.environ by default.
    """
    environ = os.environ if environ is None else environ
    config_path = Path(path) if path else Path(DEFAULT_CONFIG_FILE)
    data = _parse_config_file(config_path)
    data = _env_override(data, environ, env_prefix)
    data = _legacy_env_override(data, environ)

    return DockhandSettings(
        registry=_build_sub_config(RegistryConfig, data.get("registry", {})),
        server=_build_sub_config(ServerConfig, data.get("server", {})),
        health=_build_sub_config(HealthConfig, data.get("health", {})),
        compose=_build_sub_config(ComposeConfig, data.get("compose", {})),
        telemetry=_build_sub_config(TelemetryConfig, data.get("telemetry", {})),
        log_level=str(data.get("log_level", "INFO")),
    )


@dataclass(frozen=True)
class CliOverrides:
    """Values given explicitly on the command line; None means not given."""
    environment: str = "dev"
    tag: Optional[str] = None
    host: Optional[str] = None
    user: Optional[str] = None
    port: Optional[int] = None
    app_dir: Optional[str] = None
    rollback: bool = False
    health_timeout: Optional[int] = None


def _pick(override, fallback):
    return fallback if override is None else override


def resolve_config(
    settings: DockhandSettings, overrides: Optional[CliOverrides] = None
) -> DeploymentConfig:
    """Merge settings and CLI overrides into the run's DeploymentConfig."""
    overrides = overrides or CliOverrides()
    try:
        environment = Environment.parse(overrides.environment)
        image = ImageReference(
            account=settings.registry.account,
            repository=environment.repository,
            tag=_pick(overrides.tag, DEFAULT_TAG),
            registry=settings.registry.host,
        )
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    server = settings.server
    return DeploymentConfig(
        environment=environment,
        image=image,
        host=_pick(overrides.host, server.host),
        user=_pick(overrides.user, server.user),
        port=_pick(overrides.port, server.port),
        app_dir=_pick(overrides.app_dir, server.app_dir),
        rollback=overrides.rollback,
        health_timeout=_pick(overrides.health_timeout, settings.health.timeout),
        health_url=settings.health.url,
        manifest_template=settings.compose.template,
        compose_command=settings.compose.command,
        connect_timeout=server.connect_timeout,
        channel=server.channel,
        key_filename=server.key_filename or None,
    )
