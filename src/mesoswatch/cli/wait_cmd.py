"""CLI command for waiting on agent registration.

Usage:
    mesoswatch wait --mip 52.205.254.68 --sip 172.31.34.94
    mesoswatch wait --mip 52.205.254.68 --mport 5050 --mapi /state --sip 172.31.34.94
    mesoswatch wait --mip 10.0.0.5 --sip 10.0.1.7 --timeout 300 --log-format json

Exits 0 when the agent registered within the timeout, 1 otherwise.
"""

from __future__ import annotations

import asyncio

import typer

from mesoswatch.cli.common import build_endpoint, setup_logging
from mesoswatch.config import settings
from mesoswatch.watch.supervisor import wait_for_registration

app = typer.Typer(help="Wait for a Mesos agent to register with the elected master")


@app.callback(invoke_without_command=True)
def wait(
    mip: str | None = typer.Option(
        None,
        "--mip",
        help="Mesos instance ip; Eg. 172.x.y.z; does not need to be the cluster leader",
    ),
    mport: int | None = typer.Option(
        None,
        "--mport",
        help="Mesos instance port; Eg. 5050",
    ),
    mapi: str | None = typer.Option(
        None,
        "--mapi",
        help="URL path to use for querying mesos state; Eg. '/state'",
    ),
    sip: str | None = typer.Option(
        None,
        "--sip",
        help="Agent private ip to wait for; Eg. 172.x.y.z",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        "-t",
        help="Seconds to wait for the agent overall (default 90)",
    ),
    interval: float | None = typer.Option(
        None,
        "--interval",
        "-i",
        help="Seconds between polls (default 15)",
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Log level: debug, info, warning, error",
    ),
    log_format: str | None = typer.Option(
        None,
        "--log-format",
        help="Log format: console, json",
    ),
) -> None:
    """Wait for a Mesos agent to register.

    Queries the given master, follows it to the elected leader when needed,
    and polls until the agent's private IP shows up or the timeout elapses.
    """
    endpoint = build_endpoint(mip, mport, mapi)

    agent_ip = sip or settings.agent_ip
    if not agent_ip:
        raise typer.BadParameter(
            "agent private ip is required (or set MESOS_AGENT_IP)", param_hint="--sip"
        )

    global_timeout = timeout if timeout is not None else settings.global_timeout
    if global_timeout <= 0:
        raise typer.BadParameter("must be positive", param_hint="--timeout")

    poll_interval = interval if interval is not None else settings.poll_interval
    if poll_interval <= 0:
        raise typer.BadParameter("must be positive", param_hint="--interval")

    setup_logging(log_level, log_format)

    registered = asyncio.run(
        wait_for_registration(
            endpoint,
            agent_ip,
            global_timeout,
            interval=poll_interval,
        )
    )

    typer.echo(f"Slave Exists: {registered}")
    raise typer.Exit(code=0 if registered else 1)
