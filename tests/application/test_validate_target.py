"""
Application Layer Tests: ValidateTarget

Every failing precondition must leave the host untouched.
"""

import pytest

from conftest import FakeChannel
from dockhand.application.use_cases.validate_target import ValidateTarget
from dockhand.composition_root import bind_target
from dockhand.domain.errors import PreconditionError


def _validate(channel):
    return ValidateTarget(channel, bind_target(channel))


@pytest.mark.asyncio
async def test_all_checks_pass(make_config):
    channel = FakeChannel()
    preflight = await _validate(channel).execute(make_config())

    assert preflight.ok
    assert preflight.target.node.host == "10.0.0.5"
    assert preflight.template.placeholder_count == 1
    assert [c.program for c in channel.commands] == ["echo", "command"]
    assert channel.writes == []


@pytest.mark.asyncio
async def test_trial_command_uses_connect_timeout(make_config):
    channel = FakeChannel()
    seen = []
    original = channel.run

    async def spy(node, command, timeout=None):
        seen.append((command.program, timeout))
        return await original(node, command, timeout)

    channel.run = spy
    await _validate(channel).execute(make_config(connect_timeout=7))
    assert ("echo", 7) in seen


@pytest.mark.asyncio
async def test_no_ssh_capability(make_config):
    channel = FakeChannel(available=False)
    preflight = await _validate(channel).execute(make_config())

    assert not preflight.ok
    assert "No SSH capability" in preflight.reason
    assert channel.calls == []


@pytest.mark.asyncio
async def test_missing_host(make_config):
    channel = FakeChannel()
    preflight = await _validate(channel).execute(make_config(host=""))

    assert not preflight.ok
    assert "Server host is not specified" in preflight.reason
    assert channel.calls == []


@pytest.mark.asyncio
async def test_missing_template(make_config, tmp_path):
    channel = FakeChannel()
    config = make_config(manifest_template=str(tmp_path / "missing.yml"))
    preflight = await _validate(channel).execute(config)

    assert not preflight.ok
    assert "not found" in preflight.reason
    assert channel.calls == []


@pytest.mark.asyncio
async def test_template_without_placeholder(make_config, tmp_path):
    path = tmp_path / "plain.yml"
    path.write_text("services:\n  web:\n    image: nginx\n")
    channel = FakeChannel()
    preflight = await _validate(channel).execute(make_config(manifest_template=str(path)))

    assert not preflight.ok
    assert "placeholder" in preflight.reason
    assert channel.calls == []


@pytest.mark.asyncio
async def test_template_not_needed_for_rollback(make_config, tmp_path):
    channel = FakeChannel()
    config = make_config(manifest_template=str(tmp_path / "missing.yml"))
    preflight = await _validate(channel).execute(config, require_template=False)

    assert preflight.ok
    assert preflight.template is None


@pytest.mark.asyncio
async def test_unreachable_host(make_config):
    channel = FakeChannel(reachable=False)
    preflight = await _validate(channel).execute(make_config(user="deploy"))

    assert not preflight.ok
    assert preflight.reason == (
        "Cannot connect to server deploy@10.0.0.5:22. Check host, user, and port"
    )
    assert channel.writes == []


@pytest.mark.asyncio
async def test_docker_not_installed(make_config):
    channel = FakeChannel(docker=False)
    preflight = await _validate(channel).execute(make_config())

    assert not preflight.ok
    assert preflight.reason == "Docker is not installed on 10.0.0.5"
    assert channel.writes == []


@pytest.mark.asyncio
async def test_check_raises_on_unreachable_host(make_config):
    channel = FakeChannel(reachable=False)

    with pytest.raises(PreconditionError, match="Cannot connect to server"):
        await _validate(channel).check(make_config())
    assert channel.writes == []


@pytest.mark.asyncio
async def test_check_returns_bound_target(make_config):
    target, template = await _validate(FakeChannel()).check(
        make_config(), require_template=False
    )

    assert target.node.host == "10.0.0.5"
    assert template is None
