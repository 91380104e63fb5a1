from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MESOSWATCH_", env_file=".env", extra="ignore")

    app_name: str = "mesoswatch"

    # Mesos instance to query; does not need to be the elected master.
    # Cluster target variables are unprefixed, shared with other Mesos tooling.
    mesos_host: str | None = Field(default=None, validation_alias="MESOS_HOST")
    mesos_port: int = Field(default=5050, validation_alias="MESOS_PORT")
    mesos_path: str = Field(default="/state", validation_alias="MESOS_STATE_PATH")

    # Private IP of the agent to wait for
    agent_ip: str | None = Field(default=None, validation_alias="MESOS_AGENT_IP")

    # Polling
    poll_interval: float = Field(default=15.0, validation_alias="MESOSWATCH_POLL_INTERVAL")
    global_timeout: float = Field(default=90.0, validation_alias="MESOSWATCH_TIMEOUT")

    # HTTP transport
    connect_timeout: float = Field(default=30.0, validation_alias="MESOSWATCH_CONNECT_TIMEOUT")
    read_timeout: float = Field(default=30.0, validation_alias="MESOSWATCH_READ_TIMEOUT")
    keepalive: float = Field(default=300.0, validation_alias="MESOSWATCH_KEEPALIVE")

    # Observability
    log_level: str = Field(default="INFO", validation_alias="MESOSWATCH_LOG_LEVEL")
    log_format: str = Field(default="console", validation_alias="MESOSWATCH_LOG_FORMAT")


settings = Settings()
