"""Global test configuration.

Provides FakeChannel, an in-memory remote host: a tiny filesystem plus
scripted docker, compose and curl behaviour. Every call is recorded so
tests can assert which remote commands were (or were not) issued.
"""

import posixpath
from typing import Optional

import pytest

from dockhand.domain.errors import TransferError
from dockhand.domain.ports.remote_channel_port import RemoteChannelPort
from dockhand.domain.value_objects.deployment_config import DeploymentConfig
from dockhand.domain.value_objects.environment import Environment
from dockhand.domain.value_objects.image_reference import ImageReference
from dockhand.domain.value_objects.remote_command import CommandResult

COMPOSE_VERBS = ("pull", "down", "up", "ps", "logs")
MUTATING_PROGRAMS = ("mkdir", "cp", "mv")
MUTATING_COMPOSE_VERBS = ("pull", "down", "up")

TEMPLATE = """services:
  web:
    image: {{IMAGE_NAME}}
    ports:
      - "80:80"
"""


class FakeChannel(RemoteChannelPort):
    def __init__(
        self,
        available: bool = True,
        reachable: bool = True,
        docker: bool = True,
        healthy_on: Optional[int] = 1,
        files: Optional[dict] = None,
        dirs: Optional[set] = None,
        fail: Optional[dict] = None,
        put_fails: bool = False,
    ):
        self.available = available
        self.reachable = reachable
        self.docker = docker
        self.healthy_on = healthy_on
        self.files = dict(files or {})
        self.dirs = set(dirs or ())
        self.fail = dict(fail or {})
        self.put_fails = put_fails
        self.calls: list = []
        self.health_checks = 0

    # -- inspection helpers -------------------------------------------------

    @property
    def commands(self) -> list:
        return [c for kind, c in self.calls if kind == "run"]

    @property
    def writes(self) -> list:
        """Every call that changes remote state."""
        out = []
        for kind, item in self.calls:
            if kind == "put":
                out.append(item)
                continue
            argv = item.argv
            if argv[0] in MUTATING_PROGRAMS:
                out.append(item)
            elif argv[0] == "docker-compose" and any(
                verb in argv for verb in MUTATING_COMPOSE_VERBS
            ):
                out.append(item)
        return out

    def compose_calls(self) -> list:
        return [
            next(a for a in c.argv if a in COMPOSE_VERBS)
            for c in self.commands
            if c.argv[0] == "docker-compose"
        ]

    # -- RemoteChannelPort --------------------------------------------------

    def is_available(self) -> bool:
        return self.available

    def _failure(self, key: str) -> Optional[CommandResult]:
        if key in self.fail:
            return self.fail[key]
        return None

    async def run(self, node, command, timeout=None) -> CommandResult:
        self.calls.append(("run", command))
        if not self.reachable:
            return CommandResult(255, stderr="ssh: connect to host: Connection refused")

        argv = command.argv
        program = argv[0]
        failure = self._failure(program)
        if program == "docker-compose":
            verb = next(a for a in argv if a in COMPOSE_VERBS)
            failure = self._failure(verb)
        if failure is not None:
            return failure

        if program == "echo":
            return CommandResult(0, stdout=" ".join(argv[1:]) + "\n")
        if program == "command":
            return CommandResult(0, "/usr/bin/docker\n") if self.docker else CommandResult(1)
        if program == "mkdir":
            self.dirs.update(a for a in argv[1:] if not a.startswith("-"))
            return CommandResult(0)
        if program == "test":
            return CommandResult(0 if argv[-1] in self.files else 1)
        if program == "ls":
            directory = argv[-1]
            if directory not in self.dirs:
                return CommandResult(2, stderr=f"ls: cannot access '{directory}'")
            names = sorted(
                posixpath.basename(p)
                for p in self.files
                if posixpath.dirname(p) == directory
            )
            return CommandResult(0, stdout="".join(n + "\n" for n in names))
        if program in ("cp", "mv"):
            src, dst = argv[-2], argv[-1]
            if src not in self.files:
                return CommandResult(1, stderr=f"{program}: cannot stat '{src}'")
            self.files[dst] = self.files[src]
            if program == "mv":
                del self.files[src]
            return CommandResult(0)
        if program == "curl":
            self.health_checks += 1
            healthy = self.healthy_on is not None and self.health_checks >= self.healthy_on
            return CommandResult(0 if healthy else 22)
        if program == "docker-compose":
            verb = next(a for a in argv if a in COMPOSE_VERBS)
            if verb == "ps":
                return CommandResult(0, stdout="web   Up 3 seconds\n")
            if verb == "logs":
                return CommandResult(0, stdout="web | started\n")
            return CommandResult(0)
        return CommandResult(127, stderr=f"{program}: not found")

    async def put(self, node, content, remote_path) -> None:
        self.calls.append(("put", remote_path))
        if self.put_fails or not self.reachable:
            raise TransferError(f"Failed to copy file to {node}:{remote_path}")
        self.files[remote_path] = content


@pytest.fixture
def template_file(tmp_path):
    path = tmp_path / "docker-compose.yml"
    path.write_text(TEMPLATE)
    return path


@pytest.fixture
def make_config(template_file):
    def factory(**overrides) -> DeploymentConfig:
        environment = overrides.pop("environment", Environment.PROD)
        tag = overrides.pop("tag", "v1.2.3")
        values = dict(
            environment=environment,
            image=ImageReference("sayfops", environment.repository, tag),
            host="10.0.0.5",
            user="deploy",
            port=22,
            app_dir="/opt/sayf-app",
            manifest_template=str(template_file),
        )
        values.update(overrides)
        return DeploymentConfig(**values)

    return factory


@pytest.fixture
def sleeps():
    recorded = []

    async def sleep(seconds: float) -> None:
        recorded.append(seconds)

    sleep.recorded = recorded
    return sleep
