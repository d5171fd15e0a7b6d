"""
Fabric Channel

Architectural Intent:
- Infrastructure adapter implementing RemoteChannelPort via Fabric/SSH
- One short-lived Connection per call; nothing is kept between steps
- Uploads go through SFTP from an in-memory buffer, so no local temp file
  is needed

Security:
- SSH connections use connect_timeout, allow_agent, look_for_keys
- Commands arrive as RemoteCommand values and are rendered with shlex quoting
"""

import io
import logging
import os
from pathlib import Path
from typing import List, Optional
import paramiko
from fabric import Connection
from dockhand.domain.errors import TransferError
from dockhand.domain.ports.remote_channel_port import RemoteChannelPort
from dockhand.domain.value_objects.node import Node
from dockhand.domain.value_objects.remote_command import RemoteCommand, CommandResult

logger = logging.getLogger(__name__)

# Exit status ssh itself uses when the connection cannot be established
CONNECTION_FAILED = 255

_DEFAULT_KEY_NAMES = ("id_ed25519", "id_ecdsa", "id_rsa", "id_dsa")


def _configured_identities(config_path: Path) -> List[Path]:
    """IdentityFile entries of every Host block in an OpenSSH client config."""
    if not config_path.is_file():
        return []
    try:
        ssh_config = paramiko.SSHConfig.from_path(str(config_path))
    except paramiko.ssh_exception.ConfigParseError as e:
        logger.warning("Ignoring unreadable SSH config %s: %s", config_path, e)
        return []
    identities = []
    for pattern in ssh_config.get_hostnames():
        for name in ssh_config.lookup(pattern).get("identityfile", []):
            identities.append(Path(name).expanduser())
    return identities


class FabricChannel(RemoteChannelPort):
    """Adapter implementing RemoteChannelPort via Fabric/SSH."""

    def __init__(self, key_filename: Optional[str] = None, connect_timeout: int = 30):
        self._key_filename = key_filename
        self._connect_timeout = connect_timeout

    def _get_connection(self, node: Node, timeout: Optional[int] = None) -> Connection:
        connect_kwargs = {
            "allow_agent": True,
            "look_for_keys": True,
        }
        if self._key_filename:
            connect_kwargs["key_filename"] = str(Path(self._key_filename).expanduser())
        return Connection(
            host=node.host,
            user=node.user,
            port=node.port,
            connect_timeout=timeout or self._connect_timeout,
            connect_kwargs=connect_kwargs,
        )

    def is_available(self) -> bool:
        if self._key_filename:
            return Path(self._key_filename).expanduser().is_file()
        if os.environ.get("SSH_AUTH_SOCK"):
            return True
        ssh_dir = Path.home() / ".ssh"
        if any((ssh_dir / name).is_file() for name in _DEFAULT_KEY_NAMES):
            return True
        return any(path.is_file() for path in _configured_identities(ssh_dir / "config"))

    async def run(
        self, node: Node, command: RemoteCommand, timeout: Optional[int] = None
    ) -> CommandResult:
        conn = self._get_connection(node, timeout)
        rendered = command.render()
        logger.debug("[%s] $ %s", node, rendered)
        try:
            result = conn.run(rendered, hide=True, warn=True)
            return CommandResult(
                exit_code=result.exited,
                stdout=result.stdout,
                stderr=result.stderr,
            )
        except Exception as e:
            logger.error("Cannot run command on %s: %s", node, e)
            return CommandResult(exit_code=CONNECTION_FAILED, stderr=str(e))
        finally:
            conn.close()

    async def put(self, node: Node, content: str, remote_path: str) -> None:
        conn = self._get_connection(node)
        logger.debug("[%s] upload %d bytes -> %s", node, len(content), remote_path)
        try:
            conn.put(io.BytesIO(content.encode("utf-8")), remote=remote_path)
        except Exception as e:
            raise TransferError(
                f"Failed to copy file to {node}:{remote_path}: {e}"
            ) from e
        finally:
            conn.close()
