"""CLI command for inspecting the elected Mesos master.

Usage:
    mesoswatch leader --mip 52.205.254.68
    mesoswatch leader --mip 10.0.0.5 --mport 5050 --mapi /state
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import typer

from mesoswatch.cli.common import build_endpoint, setup_logging
from mesoswatch.cluster.errors import ClusterQueryError
from mesoswatch.cluster.models import ClusterSnapshot, Endpoint
from mesoswatch.cluster.querier import StateQuerier
from mesoswatch.cluster.resolver import LeaderResolver

if TYPE_CHECKING:
    from rich.console import Console

app = typer.Typer(help="Show the elected Mesos master and its registered agents")


async def fetch_leader_state(endpoint: Endpoint) -> ClusterSnapshot:
    """Resolve `endpoint` to the elected master's snapshot once."""
    async with StateQuerier() as querier:
        return await LeaderResolver(querier).resolve(endpoint)


@app.callback(invoke_without_command=True)
def leader(
    mip: str | None = typer.Option(
        None,
        "--mip",
        help="Mesos instance ip; does not need to be the cluster leader",
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
    log_level: str | None = typer.Option(
        "WARNING",
        "--log-level",
        "-l",
        help="Log level: debug, info, warning, error",
    ),
) -> None:
    """Show the elected master and the agents registered with it."""
    from rich.console import Console

    console = Console()
    endpoint = build_endpoint(mip, mport, mapi)
    setup_logging(log_level, None)

    try:
        snapshot = asyncio.run(fetch_leader_state(endpoint))
    except ClusterQueryError as e:
        console.print(f"[red]Query failed:[/red] {e}")
        raise typer.Exit(code=1) from None

    _print_snapshot(snapshot, console)


def _print_snapshot(snapshot: ClusterSnapshot, console: Console) -> None:
    from rich.table import Table

    if not snapshot.is_leader:
        console.print(f"[yellow]Not the elected master:[/yellow] {snapshot.pid}")
        console.print(f"[yellow]Reported leader:[/yellow] {snapshot.leader or 'unknown'}")
        return

    elected = datetime.fromtimestamp(snapshot.elected_time, tz=timezone.utc)
    console.print(f"[green]Leader:[/green] {snapshot.leader}")
    console.print(f"[green]Elected:[/green] {elected.isoformat()}")

    if not snapshot.workers:
        console.print("[yellow]No agents registered[/yellow]")
        return

    table = Table(title=f"Registered agents ({len(snapshot.workers)})")
    table.add_column("Private IP")
    table.add_column("Public IP")
    table.add_column("Host")
    table.add_column("Instance type")
    table.add_column("Rack")
    table.add_column("Active")
    table.add_column("PID")

    for worker in snapshot.workers:
        attrs = worker.attributes
        table.add_row(
            attrs.privateip,
            attrs.publicip,
            attrs.host,
            attrs.instance_type,
            attrs.rack,
            "yes" if worker.active else "no",
            worker.pid,
        )

    console.print(table)
