"""Leader resolution for Mesos state queries.

Any master answers `/state`, but only the elected one reports its agents.
A follower does report the leader's pid, so a follower response is resolved
by querying that address once. The pointer is taken as authoritative for the
moment of the query; a second follower response is returned as is and the
next polling tick tries again.
"""

from __future__ import annotations

import logging

from mesoswatch.cluster.errors import RedirectParseError
from mesoswatch.cluster.models import ClusterSnapshot, Endpoint
from mesoswatch.cluster.querier import StateQuerier

logger = logging.getLogger(__name__)


def parse_leader_pointer(leader: str) -> tuple[str, int]:
    """Split a libprocess pid such as "master@172.31.43.147:5050".

    Returns:
        (host, port) of the leader

    Raises:
        RedirectParseError: No '@' separator, or no usable host:port after it
    """
    _, sep, address = leader.partition("@")
    if not sep:
        raise RedirectParseError(leader)

    host, colon, port_text = address.rpartition(":")
    if not colon or not host:
        raise RedirectParseError(leader, "expected host:port after '@'")

    try:
        port = int(port_text)
    except ValueError:
        raise RedirectParseError(leader, f"invalid port {port_text!r}") from None

    if not 0 < port < 65536:
        raise RedirectParseError(leader, f"port {port} out of range")

    return host, port


class LeaderResolver:
    """Returns the elected master's view of the cluster.

    Args:
        querier: Performs the individual state queries
    """

    def __init__(self, querier: StateQuerier) -> None:
        self.querier = querier
        self.redirects = 0

    async def resolve(self, endpoint: Endpoint) -> ClusterSnapshot:
        """Query `endpoint`, following the leader pointer at most once."""
        snapshot = await self.querier.fetch(endpoint)

        if snapshot.is_leader:
            logger.debug(f"{endpoint.host_port} is the elected master")
            return snapshot

        try:
            host, port = parse_leader_pointer(snapshot.leader)
        except RedirectParseError as e:
            e.endpoint = endpoint
            raise

        leader_endpoint = endpoint.with_address(host, port)
        logger.info(
            f"{snapshot.pid or endpoint.host_port} is not the master, "
            f"querying leader {leader_endpoint.host_port}"
        )
        self.redirects += 1
        return await self.querier.fetch(leader_endpoint)
