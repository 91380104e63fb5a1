"""Mesos cluster state models.

Only the handful of `/state` fields needed to locate the elected master and
its registered agents are modelled. The endpoint returns many more, and their
set changes between Mesos releases, so unknown fields are ignored.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from pydantic import BaseModel, Field, model_validator


class StateModel(BaseModel):
    """Base model for decoded `/state` payloads."""

    model_config = {
        "extra": "ignore",
        "populate_by_name": True,
        "frozen": True,
    }

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: object) -> object:
        # null decodes as the field default; a null required field stays missing
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


@dataclass(frozen=True, slots=True)
class Endpoint:
    """HTTP target for a state query."""

    host: str
    port: int
    path: str = "/state"

    @property
    def host_port(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def url(self) -> str:
        """Render `http://{host}:{port}/{path}` without doubling the slash."""
        return f"http://{self.host_port}/{self.path.lstrip('/')}"

    def with_address(self, host: str, port: int) -> Endpoint:
        """Return an endpoint on another instance with the same path."""
        return replace(self, host=host, port=port)


class WorkerAttributes(StateModel):
    """Attributes set on the agent through its cloud-config."""

    host: str = ""
    instance_type: str = ""
    publicip: str = ""
    rack: str = ""
    privateip: str = ""


class WorkerRecord(StateModel):
    """A Mesos agent as reported by the master."""

    active: bool = False
    pid: str = ""
    registered_time: float = 0.0
    attributes: WorkerAttributes = Field(default_factory=WorkerAttributes)


class ClusterSnapshot(StateModel):
    """Decoded response of a single state query.

    `leader` is present on every instance and points at the elected master
    (e.g. "master@172.31.43.147:5050"). `pid` identifies the instance that
    answered. `elected_time` and the agent list are only reported by the
    master itself.
    """

    leader: str
    pid: str
    elected_time: float = 0.0
    workers: list[WorkerRecord] = Field(default_factory=list, alias="slaves")

    @property
    def is_leader(self) -> bool:
        """True when the answering instance is the elected master."""
        return self.elected_time != 0.0 and self.leader == self.pid
