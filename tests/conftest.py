"""Global pytest configuration and fixtures."""

from __future__ import annotations

import pytest

from mesoswatch.cluster.models import ClusterSnapshot, Endpoint
from tests.payloads import AGENT_IP, follower_payload, leader_payload


@pytest.fixture
def agent_ip() -> str:
    """Private IP of the agent under watch."""
    return AGENT_IP


@pytest.fixture
def endpoint() -> Endpoint:
    """A follower master to start queries from."""
    return Endpoint(host="10.0.0.5", port=5050, path="/state")


@pytest.fixture
def leader_snapshot() -> ClusterSnapshot:
    """Elected master state with the watched agent registered."""
    return ClusterSnapshot.model_validate(leader_payload("10.0.1.7", AGENT_IP))


@pytest.fixture
def empty_leader_snapshot() -> ClusterSnapshot:
    """Elected master state without any agents."""
    return ClusterSnapshot.model_validate(leader_payload())


@pytest.fixture
def follower_snapshot() -> ClusterSnapshot:
    """Non-elected master state pointing at 10.0.0.2:5050."""
    return ClusterSnapshot.model_validate(follower_payload())
