"""
Deployment Configuration Value Object

Architectural Intent:
- The single, immutable configuration of one dockhand invocation
- Resolved once (CLI flags > environment > config file > defaults) by the
  infrastructure config loader, then passed unchanged to every step
- Remote paths are derived here so no step assembles them by hand

Design Decisions:
- host may be empty while resolving; node() enforces it before any
  remote operation is attempted
- The health interval is fixed at 5 seconds; only the timeout is tunable
"""

from __future__ import annotations
import posixpath
from dataclasses import dataclass
from typing import Optional
from dockhand.domain.errors import ConfigurationError
from dockhand.domain.value_objects.environment import Environment
from dockhand.domain.value_objects.image_reference import ImageReference
from dockhand.domain.value_objects.node import Node, DEFAULT_PORT, DEFAULT_USER

MANIFEST_FILENAME = "docker-compose.yml"
BACKUP_DIRNAME = "backups"
IMAGE_PLACEHOLDER = "{{IMAGE_NAME}}"

DEFAULT_ACCOUNT = "sayfops"
DEFAULT_APP_DIR = "/opt/sayf-app"
DEFAULT_HEALTH_TIMEOUT = 60
HEALTH_INTERVAL = 5
DEFAULT_HEALTH_URL = "http://localhost/"
DEFAULT_CONNECT_TIMEOUT = 5
DEFAULT_COMPOSE_COMMAND = "docker-compose"

CHANNEL_KINDS = ("fabric", "openssh")


@dataclass(frozen=True)
class DeploymentConfig:
    environment: Environment
    image: ImageReference
    host: str = ""
    user: str = DEFAULT_USER
    port: int = DEFAULT_PORT
    app_dir: str = DEFAULT_APP_DIR
    rollback: bool = False
    health_timeout: int = DEFAULT_HEALTH_TIMEOUT
    health_interval: int = HEALTH_INTERVAL
    health_url: str = DEFAULT_HEALTH_URL
    manifest_template: str = MANIFEST_FILENAME
    compose_command: str = DEFAULT_COMPOSE_COMMAND
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT
    channel: str = "fabric"
    key_filename: Optional[str] = None

    def __post_init__(self) -> None:
        if not (1 <= self.port <= 65535):
            raise ConfigurationError(f"Port must be 1-65535, got {self.port}")
        if not self.user:
            raise ConfigurationError("Remote user cannot be empty")
        if not self.app_dir or not posixpath.isabs(self.app_dir):
            raise ConfigurationError(
                f"Application directory must be an absolute path, got {self.app_dir!r}"
            )
        if self.health_timeout < 0:
            raise ConfigurationError("Health-check timeout cannot be negative")
        if self.health_interval <= 0:
            raise ConfigurationError("Health-check interval must be positive")
        if self.connect_timeout <= 0:
            raise ConfigurationError("Connect timeout must be positive")
        if self.channel not in CHANNEL_KINDS:
            raise ConfigurationError(
                f"Unknown channel {self.channel!r} (expected one of: {', '.join(CHANNEL_KINDS)})"
            )
        if not self.compose_command.strip():
            raise ConfigurationError("Compose command cannot be empty")

    @property
    def has_host(self) -> bool:
        return bool(self.host.strip())

    def node(self) -> Node:
        """The remote node; fails if no host has been configured."""
        if not self.has_host:
            raise ConfigurationError(
                "Server host is not specified. Use --host or the SERVER_HOST "
                "environment variable"
            )
        try:
            return Node(host=self.host.strip(), user=self.user, port=self.port)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    @property
    def manifest_path(self) -> str:
        return posixpath.join(self.app_dir, MANIFEST_FILENAME)

    @property
    def backup_dir(self) -> str:
        return posixpath.join(self.app_dir, BACKUP_DIRNAME)

    @property
    def max_health_polls(self) -> int:
        """Polls made before giving up: ceil(timeout / interval)."""
        return -(-self.health_timeout // self.health_interval)

    @property
    def application_url(self) -> str:
        return f"http://{self.host}/"
