"""
Integration Tests: composition root wiring

Builds the real container with an injected FakeChannel and drives full
deploy and rollback runs through the orchestrator.
"""

import logging
from datetime import datetime

import pytest

from conftest import FakeChannel
from dockhand.composition_root import create_channel, create_container
from dockhand.domain.entities.deployment import DeploymentState
from dockhand.infrastructure.adapters.fabric_channel import FabricChannel
from dockhand.infrastructure.adapters.openssh_channel import OpenSshChannel

APP_DIR = "/opt/sayf-app"
MANIFEST = f"{APP_DIR}/docker-compose.yml"


def _container(config, channel, sleeps, now=datetime(2026, 10, 17, 12, 0, 0)):
    return create_container(config, channel=channel, clock=lambda: now, sleep=sleeps)


def test_create_channel_follows_config(make_config):
    assert isinstance(create_channel(make_config()), FabricChannel)
    assert isinstance(create_channel(make_config(channel="openssh")), OpenSshChannel)


def test_container_shares_one_channel(make_config, sleeps):
    channel = FakeChannel()
    container = _container(make_config(), channel, sleeps)

    assert container.channel is channel
    assert container.deploy.channel is channel
    assert container.validate.channel is channel
    assert container.orchestrator.deploy is container.deploy
    assert container.orchestrator.rollback is container.rollback


@pytest.mark.asyncio
async def test_deploy_then_rollback(make_config, sleeps):
    channel = FakeChannel(files={MANIFEST: "image: sayfops/e-commerce-prod:v1.2.2\n"})

    deployed = await _container(make_config(), channel, sleeps).orchestrator.run(make_config())
    assert deployed.state is DeploymentState.HEALTHY
    assert "v1.2.3" in channel.files[MANIFEST]

    rolled = await _container(make_config(rollback=True), channel, sleeps).orchestrator.run(
        make_config(rollback=True)
    )
    assert rolled.state is DeploymentState.ROLLED_BACK
    assert rolled.backup == deployed.backup
    assert channel.files[MANIFEST] == "image: sayfops/e-commerce-prod:v1.2.2\n"


@pytest.mark.asyncio
async def test_two_deploys_in_the_same_second_keep_both_backups(make_config, sleeps):
    channel = FakeChannel(files={MANIFEST: "v0"})

    await _container(make_config(), channel, sleeps).orchestrator.run(make_config(tag="v1"))
    await _container(make_config(), channel, sleeps).orchestrator.run(make_config(tag="v2"))

    backups = sorted(p for p in channel.files if p.startswith(f"{APP_DIR}/backups/"))
    assert len(backups) == 2

    rolled = await _container(make_config(), channel, sleeps).orchestrator.run(
        make_config(rollback=True)
    )
    assert rolled.backup.sequence == 1
    assert "sayfops/e-commerce-prod:v1" in channel.files[MANIFEST]


@pytest.mark.asyncio
async def test_events_reach_audit_log(make_config, sleeps, caplog):
    container = _container(make_config(), FakeChannel(), sleeps)
    with caplog.at_level(logging.INFO, logger="dockhand.audit"):
        result = await container.orchestrator.run(make_config())

    audit = [r for r in caplog.records if r.name == "dockhand.audit"]
    assert len(audit) == len(result.events)
    assert all(r.deployment_id == result.deployment_id for r in audit)
    assert "DeploymentSucceededEvent" in audit[-1].getMessage()


@pytest.mark.asyncio
async def test_outcome_recorded(make_config, sleeps):
    container = _container(make_config(), FakeChannel(healthy_on=None), sleeps)
    await container.orchestrator.run(make_config())

    assert container.tracer.recorded_outcomes == [
        {"mode": "deploy", "state": "unhealthy", "environment": "prod"}
    ]
