"""Errors raised while querying Mesos cluster state.

All of them are scoped to a single polling tick: the watch loop logs them
and tries again on the next tick.
"""

from __future__ import annotations

from mesoswatch.cluster.models import Endpoint


class ClusterQueryError(Exception):
    """Base class for failures of one state query."""

    kind = "query"

    def __init__(self, message: str, endpoint: Endpoint | None = None) -> None:
        super().__init__(message)
        self.endpoint = endpoint


class NetworkError(ClusterQueryError):
    """The request could not be built, sent, or answered in time."""

    kind = "network"


class DecodeError(ClusterQueryError):
    """The response body is not a state document."""

    kind = "decode"


class RedirectParseError(ClusterQueryError):
    """The leader pointer of a follower response is malformed."""

    kind = "redirect"

    def __init__(
        self,
        leader: str,
        reason: str = "missing '@' separator",
        endpoint: Endpoint | None = None,
    ) -> None:
        super().__init__(f"Malformed leader pointer {leader!r}: {reason}", endpoint)
        self.leader = leader
        self.reason = reason
