"""
Remote Channel Port

Architectural Intent:
- Port interface for the Remote Execution Channel
- Runs typed commands and uploads files on a named node
- Implemented by adapters (Fabric, OpenSSH CLI) and by fakes in tests
"""

from abc import ABC, abstractmethod
from typing import Optional
from dockhand.domain.value_objects.node import Node
from dockhand.domain.value_objects.remote_command import RemoteCommand, CommandResult


class RemoteChannelPort(ABC):
    """
    Port interface for executing commands on, and copying files to, a remote node.
    """

    @abstractmethod
    def is_available(self) -> bool:
        """
        True if this machine can open remote sessions at all
        (client binaries or credentials present). Never touches the network.
        """
        pass

    @abstractmethod
    async def run(
        self, node: Node, command: RemoteCommand, timeout: Optional[int] = None
    ) -> CommandResult:
        """
        Runs a command on the node and returns its result.
        A non-zero exit is reported in the result, not raised; an unreachable
        node is reported with a non-zero exit code as well.
        `timeout` bounds connection setup in seconds.
        """
        pass

    @abstractmethod
    async def put(self, node: Node, content: str, remote_path: str) -> None:
        """
        Writes `content` to `remote_path` on the node.
        Raises TransferError on failure.
        """
        pass
