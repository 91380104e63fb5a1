"""CLI commands for mesoswatch.

Provides command-line interface using Typer:
- mesoswatch wait: Wait for an agent to register with the elected master
- mesoswatch leader: Show the elected master and its registered agents

Usage:
    mesoswatch --help
    mesoswatch wait --mip 52.205.254.68 --mport 5050 --mapi /state --sip 172.31.34.94
    mesoswatch leader --mip 52.205.254.68
"""

import typer

from mesoswatch.cli.leader_cmd import app as leader_app
from mesoswatch.cli.wait_cmd import app as wait_app

# Main CLI application
app = typer.Typer(
    name="mesoswatch",
    help="mesoswatch: wait for Mesos agents to register with the elected master",
    no_args_is_help=True,
)

app.add_typer(wait_app, name="wait")
app.add_typer(leader_app, name="leader")


@app.callback()
def callback() -> None:
    """mesoswatch: wait for Mesos agents to register with the elected master."""
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
