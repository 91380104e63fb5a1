"""Agent registration lookup within a cluster snapshot."""

from __future__ import annotations

from mesoswatch.cluster.models import ClusterSnapshot, WorkerRecord


def find_worker(snapshot: ClusterSnapshot, target_ip: str) -> WorkerRecord | None:
    """Return the first agent whose private IP is exactly `target_ip`."""
    for worker in snapshot.workers:
        if worker.attributes.privateip == target_ip:
            return worker
    return None


def is_registered(snapshot: ClusterSnapshot, target_ip: str) -> bool:
    """Check whether an agent with `target_ip` is registered.

    Follower snapshots carry no agents and always yield False.
    """
    return find_worker(snapshot, target_ip) is not None
