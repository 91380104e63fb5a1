"""Background polling for agent registration.

Resolves the elected master and checks its agent list on a fixed interval
until the agent shows up or the loop is asked to stop.

State machine:
    IDLE -> QUERYING -> FOUND
                     -> WAITING_INTERVAL -> QUERYING
                                         -> CANCELLED

The stop signal is only honoured between WAITING_INTERVAL and the next
QUERYING, so a query already in flight always runs to completion.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from mesoswatch.cluster.checker import find_worker
from mesoswatch.cluster.errors import ClusterQueryError
from mesoswatch.cluster.models import Endpoint
from mesoswatch.cluster.resolver import LeaderResolver
from mesoswatch.config import settings

logger = logging.getLogger(__name__)


class LoopState(str, Enum):
    """Polling loop state machine."""

    IDLE = "idle"
    QUERYING = "querying"
    WAITING_INTERVAL = "waiting_interval"
    FOUND = "found"
    CANCELLED = "cancelled"


@dataclass
class PollMetrics:
    """Counters for a single polling run."""

    ticks: int = 0
    matches: int = 0
    errors: dict[str, int] = field(default_factory=dict)

    def record_error(self, kind: str) -> None:
        self.errors[kind] = self.errors.get(kind, 0) + 1

    @property
    def error_count(self) -> int:
        return sum(self.errors.values())

    def to_dict(self) -> dict[str, Any]:
        """Export metrics as dictionary."""
        return {
            "ticks": self.ticks,
            "matches": self.matches,
            "errors": dict(self.errors),
        }


class PollingLoop:
    """Polls the cluster until `target_ip` is registered or a stop is requested.

    Args:
        resolver: Resolves any master to the elected master's snapshot
        endpoint: Instance to start each tick from
        target_ip: Private IP of the agent to look for
        interval: Delay between ticks in seconds
        stop_event: Cooperative stop signal, created if not given
    """

    def __init__(
        self,
        resolver: LeaderResolver,
        endpoint: Endpoint,
        target_ip: str,
        interval: float | None = None,
        stop_event: asyncio.Event | None = None,
    ) -> None:
        self.resolver = resolver
        self.endpoint = endpoint
        self.target_ip = target_ip
        self.interval = interval if interval is not None else settings.poll_interval
        self.metrics = PollMetrics()

        self._stop_event = stop_event or asyncio.Event()
        self._state = LoopState.IDLE

    @property
    def state(self) -> LoopState:
        """Get current loop state."""
        return self._state

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        """Ask the loop to stop at its next check point."""
        self._stop_event.set()

    async def run(self) -> bool:
        """Poll until the agent is found (True) or the loop is stopped (False)."""
        if self._state != LoopState.IDLE:
            raise RuntimeError(f"Polling loop already ran (state: {self._state.value})")

        while True:
            self._state = LoopState.QUERYING
            if await self._tick():
                self._state = LoopState.FOUND
                return True

            self._state = LoopState.WAITING_INTERVAL
            await self._wait_interval()

            if self._stop_event.is_set():
                self._state = LoopState.CANCELLED
                logger.info(f"Exiting polling loop after {self.metrics.ticks} tick(s)")
                return False

    async def _tick(self) -> bool:
        """Run one resolve/check cycle; errors count as no match."""
        self.metrics.ticks += 1

        try:
            snapshot = await self.resolver.resolve(self.endpoint)
        except ClusterQueryError as e:
            self.metrics.record_error(e.kind)
            logger.warning(f"Polling tick {self.metrics.ticks} failed: {e}")
            return False
        except Exception:
            self.metrics.record_error("unexpected")
            logger.exception(f"Unexpected error in polling tick {self.metrics.ticks}")
            return False

        if not snapshot.is_leader:
            logger.warning(
                f"State from {snapshot.pid} is not from the elected master "
                f"(leader: {snapshot.leader!r})"
            )

        worker = find_worker(snapshot, self.target_ip)
        if worker is None:
            logger.info(
                f"Agent {self.target_ip} not registered yet "
                f"({len(snapshot.workers)} agent(s) known), retrying in {self.interval}s"
            )
            return False

        self.metrics.matches += 1
        logger.info(
            f"Agent {self.target_ip} registered as {worker.pid} "
            f"(active: {worker.active}, registered_time: {worker.registered_time})"
        )
        return True

    async def _wait_interval(self) -> None:
        """Sleep for one interval, waking early if a stop is requested."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
        except TimeoutError:
            pass
