"""
Health Polling Service

Architectural Intent:
- The only wait/retry construct in a deployment: fixed-interval polling
  bounded by a hard timeout (no backoff)
- Probe and sleep are injected so the arithmetic is testable without time

Design Decisions:
- elapsed starts at 0 and grows by `interval` after each failed probe; a
  probe runs while elapsed < timeout, so at most ceil(timeout / interval)
  probes are made (12 for the 60s/5s default)
- The loop sleeps after every failed probe, including the last one, which
  matches the wall-clock time an operator expects
- A probe that raises counts as a failed poll
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable
from dockhand.domain.ports.health_probe_port import HealthProbePort

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class HealthReport:
    healthy: bool
    polls: int
    elapsed: int


class HealthPoller:
    def __init__(
        self,
        probe: HealthProbePort,
        timeout: int,
        interval: int,
        sleep: Sleeper = asyncio.sleep,
    ):
        if interval <= 0:
            raise ValueError("Health-check interval must be positive")
        if timeout < 0:
            raise ValueError("Health-check timeout cannot be negative")
        self.probe = probe
        self.timeout = timeout
        self.interval = interval
        self._sleep = sleep

    async def wait_until_healthy(self) -> HealthReport:
        elapsed = 0
        polls = 0
        while elapsed < self.timeout:
            polls += 1
            logger.info(
                "Checking application health (%ds/%ds)...", elapsed, self.timeout
            )
            try:
                healthy = await self.probe.check()
            except Exception as e:
                logger.debug("Health probe raised: %s", e)
                healthy = False
            if healthy:
                logger.info("Application is healthy after %d poll(s)", polls)
                return HealthReport(healthy=True, polls=polls, elapsed=elapsed)
            await self._sleep(self.interval)
            elapsed += self.interval

        logger.warning("Health check failed after %d seconds", self.timeout)
        return HealthReport(healthy=False, polls=polls, elapsed=elapsed)
