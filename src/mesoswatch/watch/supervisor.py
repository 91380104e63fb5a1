"""Bounded wait for agent registration.

Runs the polling loop as a background task and races it against a global
timeout. On timeout the loop is asked to stop and the wait resolves to False
straight away; a query still in flight finishes in the background and the
loop then closes its HTTP client.

Example:
    endpoint = Endpoint("10.0.0.5", 5050, "/state")
    registered = await wait_for_registration(endpoint, "172.31.34.94")
"""

from __future__ import annotations

import asyncio
import logging

from mesoswatch.cluster.models import Endpoint
from mesoswatch.cluster.querier import StateQuerier
from mesoswatch.cluster.resolver import LeaderResolver
from mesoswatch.config import settings
from mesoswatch.observability.logging import LogContext
from mesoswatch.watch.loop import PollingLoop

logger = logging.getLogger(__name__)


class RegistrationSupervisor:
    """Owns one polling run and its timeout.

    Args:
        endpoint: Any master of the cluster
        target_ip: Private IP of the agent to wait for
        global_timeout: Upper bound for the whole wait in seconds
        interval: Delay between polling ticks in seconds
        querier: State querier to use; closed when the loop ends
    """

    def __init__(
        self,
        endpoint: Endpoint,
        target_ip: str,
        global_timeout: float | None = None,
        interval: float | None = None,
        querier: StateQuerier | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.target_ip = target_ip
        self.global_timeout = (
            global_timeout if global_timeout is not None else settings.global_timeout
        )

        self._querier = querier or StateQuerier()
        self.loop = PollingLoop(
            LeaderResolver(self._querier),
            endpoint,
            target_ip,
            interval=interval,
        )
        self._task: asyncio.Task[bool] | None = None

    @property
    def task(self) -> asyncio.Task[bool] | None:
        return self._task

    async def wait(self) -> bool:
        """Wait for the agent; True if it registered before the timeout."""
        if self._task is not None:
            raise RuntimeError("Registration wait already started")

        with LogContext(agent_ip=self.target_ip, endpoint=self.endpoint.url):
            self._task = asyncio.create_task(
                self._run_loop(), name=f"mesoswatch-poll-{self.target_ip}"
            )
            try:
                done, _ = await asyncio.wait({self._task}, timeout=self.global_timeout)
            except asyncio.CancelledError:
                self.loop.stop()
                raise

            if self._task in done and self._outcome(self._task):
                logger.info(f"Found an agent registered with IP: '{self.target_ip}'")
                return True

            self.loop.stop()
            logger.warning(
                f"Couldn't find agent '{self.target_ip}' after {self.global_timeout:g} seconds"
            )
            return False

    async def wait_closed(self) -> None:
        """Wait for the background loop to finish; never raises."""
        if self._task is not None:
            await asyncio.wait({self._task})

    async def _run_loop(self) -> bool:
        try:
            return await self.loop.run()
        finally:
            await self._querier.aclose()

    @staticmethod
    def _outcome(task: asyncio.Task[bool]) -> bool:
        if task.cancelled():
            return False
        error = task.exception()
        if error is not None:
            logger.error(f"Polling loop failed: {error!r}")
            return False
        return task.result()


async def wait_for_registration(
    endpoint: Endpoint,
    target_ip: str,
    global_timeout: float | None = None,
    *,
    interval: float | None = None,
    querier: StateQuerier | None = None,
) -> bool:
    """Wait until `target_ip` is registered with the elected master.

    Args:
        endpoint: Any master of the cluster; followers are resolved to the leader
        target_ip: Private IP of the agent
        global_timeout: Seconds to wait overall (default 90)
        interval: Seconds between polling ticks (default 15)
        querier: State querier to use instead of a fresh HTTP one

    Returns:
        True if the agent registered before the timeout, False otherwise
    """
    supervisor = RegistrationSupervisor(
        endpoint,
        target_ip,
        global_timeout=global_timeout,
        interval=interval,
        querier=querier,
    )
    return await supervisor.wait()
