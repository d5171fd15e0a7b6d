"""
Remote HTTP Probe

Architectural Intent:
- HealthProbePort implementation that asks the deployed node itself to
  fetch the health URL (`curl -f -s`), so the check works even when the
  application port is not reachable from the operator's machine
"""

from dockhand.domain.ports.remote_channel_port import RemoteChannelPort
from dockhand.domain.value_objects.node import Node
from dockhand.domain.value_objects.remote_command import RemoteCommand


class RemoteHttpProbe:
    def __init__(
        self,
        channel: RemoteChannelPort,
        node: Node,
        url: str = "http://localhost/",
        request_timeout: int = 5,
    ):
        self.channel = channel
        self.node = node
        self.url = url
        self.request_timeout = request_timeout

    @property
    def command(self) -> RemoteCommand:
        return RemoteCommand.of(
            "curl", "-f", "-s", "-o", "/dev/null",
            "--max-time", str(self.request_timeout),
            self.url,
        )

    async def check(self) -> bool:
        result = await self.channel.run(self.node, self.command)
        return result.ok
