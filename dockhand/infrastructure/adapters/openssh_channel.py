"""
OpenSSH Channel

Architectural Intent:
- RemoteChannelPort backed by the system `ssh` and `scp` clients
- For operators whose SSH setup (ProxyJump, ControlMaster, certificates in
  ~/.ssh/config) only the OpenSSH client understands

Security:
- BatchMode=yes: never blocks on a password prompt
- Commands are rendered with shlex quoting before reaching the remote shell
"""

import logging
import os
import shutil
import subprocess
import tempfile
from typing import Optional
from dockhand.domain.errors import TransferError
from dockhand.domain.ports.remote_channel_port import RemoteChannelPort
from dockhand.domain.value_objects.node import Node
from dockhand.domain.value_objects.remote_command import RemoteCommand, CommandResult

logger = logging.getLogger(__name__)

COMMAND_NOT_FOUND = 127


class OpenSshChannel(RemoteChannelPort):
    def __init__(self, key_filename: Optional[str] = None, connect_timeout: int = 30):
        self._key_filename = key_filename
        self._connect_timeout = connect_timeout

    def _options(self, timeout: Optional[int]) -> list[str]:
        options = [
            "-o", f"ConnectTimeout={timeout or self._connect_timeout}",
            "-o", "BatchMode=yes",
        ]
        if self._key_filename:
            options += ["-i", os.path.expanduser(self._key_filename)]
        return options

    def is_available(self) -> bool:
        return shutil.which("ssh") is not None and shutil.which("scp") is not None

    async def run(
        self, node: Node, command: RemoteCommand, timeout: Optional[int] = None
    ) -> CommandResult:
        cmd = [
            "ssh",
            *self._options(timeout),
            "-p", str(node.port),
            node.ssh_target,
            command.render(),
        ]
        logger.debug("[%s] $ %s", node, command.render())
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except FileNotFoundError:
            logger.error("ssh client not found")
            return CommandResult(exit_code=COMMAND_NOT_FOUND, stderr="ssh: not found")
        return CommandResult(
            exit_code=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )

    async def put(self, node: Node, content: str, remote_path: str) -> None:
        fd, local_path = tempfile.mkstemp(prefix="dockhand-", suffix=".yml")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            cmd = [
                "scp",
                *self._options(None),
                "-P", str(node.port),
                local_path,
                f"{node.ssh_target}:{remote_path}",
            ]
            try:
                result = subprocess.run(cmd, capture_output=True, text=True)
            except FileNotFoundError:
                raise TransferError("scp client not found") from None
            if result.returncode != 0:
                raise TransferError(
                    f"Failed to copy file to {node}:{remote_path}: {result.stderr.strip()}"
                )
        finally:
            os.unlink(local_path)
