"""Mesos cluster state access.

Provides:
- Typed snapshots of the `/state` endpoint
- Single queries with bounded timeouts
- One-hop resolution from any master to the elected one
- Agent registration lookup
"""

from mesoswatch.cluster.checker import find_worker, is_registered
from mesoswatch.cluster.errors import (
    ClusterQueryError,
    DecodeError,
    NetworkError,
    RedirectParseError,
)
from mesoswatch.cluster.models import (
    ClusterSnapshot,
    Endpoint,
    WorkerAttributes,
    WorkerRecord,
)
from mesoswatch.cluster.querier import StateQuerier
from mesoswatch.cluster.resolver import LeaderResolver, parse_leader_pointer

__all__ = [
    "ClusterQueryError",
    "ClusterSnapshot",
    "DecodeError",
    "Endpoint",
    "LeaderResolver",
    "NetworkError",
    "RedirectParseError",
    "StateQuerier",
    "WorkerAttributes",
    "WorkerRecord",
    "find_worker",
    "is_registered",
    "parse_leader_pointer",
]
