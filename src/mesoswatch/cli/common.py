"""Option handling shared by the CLI commands."""

from __future__ import annotations

import typer

from mesoswatch.cluster.models import Endpoint
from mesoswatch.config import settings
from mesoswatch.observability.logging import configure_logging

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def build_endpoint(mip: str | None, mport: int | None, mapi: str | None) -> Endpoint:
    """Build the queried endpoint from options, falling back to settings."""
    host = mip or settings.mesos_host
    if not host:
        raise typer.BadParameter(
            "mesos instance ip is required (or set MESOS_HOST)", param_hint="--mip"
        )

    port = mport if mport is not None else settings.mesos_port
    if not 0 < port < 65536:
        raise typer.BadParameter(f"{port} is not a valid port", param_hint="--mport")

    return Endpoint(host=host, port=port, path=mapi or settings.mesos_path)


def setup_logging(log_level: str | None, log_format: str | None) -> None:
    level = (log_level or settings.log_level).upper()
    fmt = (log_format or settings.log_format).lower()
    if level not in LOG_LEVELS:
        raise typer.BadParameter(f"unknown log level {level!r}", param_hint="--log-level")
    if fmt not in ("console", "json"):
        raise typer.BadParameter(f"unknown log format {fmt!r}", param_hint="--log-format")
    configure_logging(json_format=fmt == "json", level=level)
