"""Tests for the registration polling loop."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from mesoswatch.cluster.errors import DecodeError, NetworkError, RedirectParseError
from mesoswatch.cluster.models import ClusterSnapshot, Endpoint
from mesoswatch.watch.loop import LoopState, PollingLoop, PollMetrics


@pytest.fixture
def resolver() -> MagicMock:
    """Resolver with a mocked resolve."""
    resolver = MagicMock()
    resolver.resolve = AsyncMock()
    return resolver


@pytest.fixture
def polling_loop(resolver: MagicMock, endpoint: Endpoint, agent_ip: str) -> PollingLoop:
    """Loop with a short interval."""
    return PollingLoop(resolver, endpoint, agent_ip, interval=0.01)


class TestPollMetrics:
    """Test PollMetrics dataclass."""

    def test_default_values(self) -> None:
        """Counters start at zero."""
        metrics = PollMetrics()
        assert metrics.ticks == 0
        assert metrics.matches == 0
        assert metrics.errors == {}
        assert metrics.error_count == 0

    def test_record_error(self) -> None:
        """Errors are counted per kind."""
        metrics = PollMetrics()
        metrics.record_error("network")
        metrics.record_error("network")
        metrics.record_error("decode")

        assert metrics.errors == {"network": 2, "decode": 1}
        assert metrics.error_count == 3
        assert metrics.to_dict() == {
            "ticks": 0,
            "matches": 0,
            "errors": {"network": 2, "decode": 1},
        }


class TestPollingLoop:
    """Test PollingLoop state machine."""

    def test_initial_state(self, polling_loop: PollingLoop) -> None:
        """Loop starts idle."""
        assert polling_loop.state == LoopState.IDLE
        assert polling_loop.stop_requested is False

    def test_default_interval(self, resolver: MagicMock, endpoint: Endpoint) -> None:
        """Interval defaults to 15 seconds."""
        assert PollingLoop(resolver, endpoint, "10.0.1.7").interval == 15.0

    async def test_found_first_tick(
        self,
        polling_loop: PollingLoop,
        resolver: MagicMock,
        leader_snapshot: ClusterSnapshot,
    ) -> None:
        """A registered agent ends the loop with True."""
        resolver.resolve.return_value = leader_snapshot

        assert await polling_loop.run() is True
        assert polling_loop.state == LoopState.FOUND
        assert polling_loop.metrics.ticks == 1
        assert polling_loop.metrics.matches == 1

    async def test_found_after_retries(
        self,
        polling_loop: PollingLoop,
        resolver: MagicMock,
        empty_leader_snapshot: ClusterSnapshot,
        leader_snapshot: ClusterSnapshot,
    ) -> None:
        """The loop keeps polling until the agent appears."""
        resolver.resolve.side_effect = [
            empty_leader_snapshot,
            empty_leader_snapshot,
            leader_snapshot,
        ]

        assert await polling_loop.run() is True
        assert polling_loop.metrics.ticks == 3

    async def test_errors_do_not_stop_loop(
        self,
        polling_loop: PollingLoop,
        resolver: MagicMock,
        leader_snapshot: ClusterSnapshot,
    ) -> None:
        """Query errors are counted and the next tick retries."""
        resolver.resolve.side_effect = [
            RedirectParseError("10.0.0.2:5050"),
            NetworkError("Connection refused"),
            DecodeError("Response is not valid JSON"),
            leader_snapshot,
        ]

        assert await polling_loop.run() is True
        assert polling_loop.metrics.errors == {"redirect": 1, "network": 1, "decode": 1}
        assert polling_loop.metrics.ticks == 4

    async def test_unexpected_error_does_not_stop_loop(
        self,
        polling_loop: PollingLoop,
        resolver: MagicMock,
        leader_snapshot: ClusterSnapshot,
    ) -> None:
        """Unexpected exceptions are logged and retried like query errors."""
        resolver.resolve.side_effect = [KeyError("boom"), leader_snapshot]

        assert await polling_loop.run() is True
        assert polling_loop.metrics.errors == {"unexpected": 1}

    async def test_follower_snapshot_is_no_match(
        self,
        polling_loop: PollingLoop,
        resolver: MagicMock,
        follower_snapshot: ClusterSnapshot,
        leader_snapshot: ClusterSnapshot,
    ) -> None:
        """An unresolved follower snapshot counts as not registered."""
        resolver.resolve.side_effect = [follower_snapshot, leader_snapshot]

        assert await polling_loop.run() is True
        assert polling_loop.metrics.ticks == 2

    async def test_stop(
        self,
        polling_loop: PollingLoop,
        resolver: MagicMock,
        empty_leader_snapshot: ClusterSnapshot,
    ) -> None:
        """A stop request ends the loop with False and no further queries."""
        resolver.resolve.return_value = empty_leader_snapshot
        task = asyncio.create_task(polling_loop.run())

        while resolver.resolve.await_count < 2:
            await asyncio.sleep(0.005)
        polling_loop.stop()

        assert await asyncio.wait_for(task, timeout=1.0) is False
        assert polling_loop.state == LoopState.CANCELLED

        queries = resolver.resolve.await_count
        await asyncio.sleep(0.05)
        assert resolver.resolve.await_count == queries

    async def test_stop_wakes_interval_wait(
        self,
        resolver: MagicMock,
        endpoint: Endpoint,
        agent_ip: str,
        empty_leader_snapshot: ClusterSnapshot,
    ) -> None:
        """A stop during the interval ends the loop without waiting it out."""
        resolver.resolve.return_value = empty_leader_snapshot
        polling_loop = PollingLoop(resolver, endpoint, agent_ip, interval=60.0)
        task = asyncio.create_task(polling_loop.run())

        while polling_loop.state != LoopState.WAITING_INTERVAL:
            await asyncio.sleep(0.005)
        polling_loop.stop()

        assert await asyncio.wait_for(task, timeout=1.0) is False
        assert resolver.resolve.await_count == 1

    async def test_in_flight_query_completes(
        self,
        resolver: MagicMock,
        endpoint: Endpoint,
        agent_ip: str,
        empty_leader_snapshot: ClusterSnapshot,
    ) -> None:
        """A stop during a query lets it finish, then no new query starts."""
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_resolve(_: Endpoint) -> ClusterSnapshot:
            started.set()
            await release.wait()
            return empty_leader_snapshot

        resolver.resolve.side_effect = slow_resolve
        polling_loop = PollingLoop(resolver, endpoint, agent_ip, interval=0.01)
        task = asyncio.create_task(polling_loop.run())

        await started.wait()
        polling_loop.stop()
        assert polling_loop.state == LoopState.QUERYING

        release.set()
        assert await asyncio.wait_for(task, timeout=1.0) is False
        assert resolver.resolve.await_count == 1
        assert polling_loop.metrics.ticks == 1

    async def test_stop_before_start_still_queries_once(
        self,
        polling_loop: PollingLoop,
        resolver: MagicMock,
        empty_leader_snapshot: ClusterSnapshot,
    ) -> None:
        """The stop signal is only checked after a tick."""
        resolver.resolve.return_value = empty_leader_snapshot
        polling_loop.stop()

        assert await polling_loop.run() is False
        assert resolver.resolve.await_count == 1

    async def test_run_once_only(
        self,
        polling_loop: PollingLoop,
        resolver: MagicMock,
        leader_snapshot: ClusterSnapshot,
    ) -> None:
        """A finished loop cannot be run again."""
        resolver.resolve.return_value = leader_snapshot
        await polling_loop.run()

        with pytest.raises(RuntimeError):
            await polling_loop.run()

    async def test_shared_stop_event(
        self,
        resolver: MagicMock,
        endpoint: Endpoint,
        agent_ip: str,
        empty_leader_snapshot: ClusterSnapshot,
    ) -> None:
        """An externally owned stop event is honoured."""
        resolver.resolve.return_value = empty_leader_snapshot
        stop_event = asyncio.Event()
        polling_loop = PollingLoop(
            resolver, endpoint, agent_ip, interval=0.01, stop_event=stop_event
        )
        stop_event.set()

        assert polling_loop.stop_requested is True
        assert await polling_loop.run() is False
