"""
Docker Compose Backend

Architectural Intent:
- ContainerBackendPort implementation driving docker-compose on the remote node
- Every call goes through the RemoteChannelPort; nothing runs locally
- Lifecycle commands run inside the application directory so compose picks
  up the manifest (and any .env file) sitting next to it

Design Decisions:
- The compose executable is configurable ("docker-compose" or "docker compose")
- Failures are returned as CommandResult; the use case decides severity
"""

import logging
import posixpath
import shlex
from dockhand.domain.ports.remote_channel_port import RemoteChannelPort
from dockhand.domain.value_objects.deployment_config import MANIFEST_FILENAME
from dockhand.domain.value_objects.node import Node
from dockhand.domain.value_objects.remote_command import RemoteCommand, CommandResult

logger = logging.getLogger(__name__)


class DockerComposeBackend:
    def __init__(
        self,
        channel: RemoteChannelPort,
        node: Node,
        app_dir: str,
        compose_command: str = "docker-compose",
    ):
        self.channel = channel
        self.node = node
        self.app_dir = app_dir
        self._compose = tuple(shlex.split(compose_command))

    @property
    def manifest_path(self) -> str:
        return posixpath.join(self.app_dir, MANIFEST_FILENAME)

    def _compose_cmd(self, *args: str) -> RemoteCommand:
        return RemoteCommand.of(*self._compose, *args, cwd=self.app_dir)

    def _compose_file_cmd(self, *args: str) -> RemoteCommand:
        return RemoteCommand.of(*self._compose, "-f", self.manifest_path, *args)

    async def is_installed(self) -> bool:
        result = await self.channel.run(
            self.node, RemoteCommand.of("command", "-v", "docker")
        )
        return result.ok

    async def pull(self) -> CommandResult:
        logger.info("Pulling images on %s", self.node)
        return await self.channel.run(self.node, self._compose_cmd("pull"))

    async def down(self) -> CommandResult:
        logger.info("Stopping existing containers on %s", self.node)
        return await self.channel.run(self.node, self._compose_cmd("down"))

    async def up(self) -> CommandResult:
        logger.info("Starting containers on %s", self.node)
        return await self.channel.run(self.node, self._compose_cmd("up", "-d"))

    async def ps(self) -> CommandResult:
        return await self.channel.run(self.node, self._compose_file_cmd("ps"))

    async def logs(self, tail: int = 10) -> CommandResult:
        return await self.channel.run(
            self.node, self._compose_file_cmd("logs", f"--tail={tail}")
        )
