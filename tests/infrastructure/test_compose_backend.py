"""Infrastructure Tests: DockerComposeBackend and RemoteHttpProbe."""

import pytest

from conftest import FakeChannel
from dockhand.domain.value_objects.node import Node
from dockhand.domain.value_objects.remote_command import RemoteCommand
from dockhand.infrastructure.adapters.compose_backend import DockerComposeBackend
from dockhand.infrastructure.adapters.remote_http_probe import RemoteHttpProbe

NODE = Node(host="10.0.0.5")
APP_DIR = "/opt/sayf-app"


@pytest.mark.asyncio
async def test_lifecycle_commands_run_in_app_dir():
    channel = FakeChannel()
    backend = DockerComposeBackend(channel, NODE, APP_DIR)

    await backend.pull()
    await backend.down()
    await backend.up()

    assert channel.commands == [
        RemoteCommand.of("docker-compose", "pull", cwd=APP_DIR),
        RemoteCommand.of("docker-compose", "down", cwd=APP_DIR),
        RemoteCommand.of("docker-compose", "up", "-d", cwd=APP_DIR),
    ]


@pytest.mark.asyncio
async def test_inspection_commands_name_the_manifest():
    channel = FakeChannel()
    backend = DockerComposeBackend(channel, NODE, APP_DIR)

    ps = await backend.ps()
    logs = await backend.logs(tail=10)

    assert "Up" in ps.stdout
    assert logs.ok
    assert channel.commands[0].render() == (
        "docker-compose -f /opt/sayf-app/docker-compose.yml ps"
    )
    assert channel.commands[1].argv[-1] == "--tail=10"


@pytest.mark.asyncio
async def test_compose_plugin_command():
    channel = FakeChannel()
    backend = DockerComposeBackend(channel, NODE, APP_DIR, compose_command="docker compose")

    await backend.up()

    assert channel.commands[0].argv == ("docker", "compose", "up", "-d")


@pytest.mark.asyncio
async def test_is_installed():
    assert await DockerComposeBackend(FakeChannel(), NODE, APP_DIR).is_installed()
    assert not await DockerComposeBackend(FakeChannel(docker=False), NODE, APP_DIR).is_installed()


@pytest.mark.asyncio
async def test_http_probe_uses_remote_curl():
    channel = FakeChannel(healthy_on=2)
    probe = RemoteHttpProbe(channel, NODE, "http://localhost/")

    assert not await probe.check()
    assert await probe.check()
    assert channel.commands[0].argv == (
        "curl", "-f", "-s", "-o", "/dev/null", "--max-time", "5", "http://localhost/",
    )
