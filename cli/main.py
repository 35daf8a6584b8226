#!/usr/bin/env python3
"""
listlog CLI - Replicated list changelogs

Main entrypoint for the listlog command-line tool.
"""

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from cli.commands import lists, log, replay, watch
from listlog.logging_config import setup_logging

app = typer.Typer(
    name="listlog",
    help="Event-sourced shared lists from the command line",
    add_completion=False,
)

console = Console()

app.add_typer(log.app, name="log", help="Raw changelog operations")
app.add_typer(lists.app, name="lists", help="Manage the user's lists")

app.command("replay")(replay.replay_command)
app.command("watch")(watch.watch_command)


@app.callback()
def configure(
    ctx: typer.Context,
    api_base: Optional[str] = typer.Option(None, "--api-base", help="Log service base URL (or file://DIR)"),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="User whose logs to address"),
    snapshot_dir: Optional[str] = typer.Option(None, "--snapshot-dir", help="Local snapshot directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at INFO instead of WARNING"),
):
    """Global options; anything not given falls back to LISTLOG_* variables."""
    setup_logging(default_level="INFO" if verbose else "WARNING")
    ctx.obj = {"api_base": api_base, "user": user, "snapshot_dir": snapshot_dir}


@app.command()
def version():
    """Show version information."""
    from cli import __version__
    from listlog.domains import list_types

    table = Table(show_header=False, box=None)
    table.add_row("[bold]listlog CLI[/bold]", f"v{__version__}")
    table.add_row("List types", ", ".join(list_types()))

    console.print(table)


def main():
    """Main entrypoint."""
    app()


if __name__ == "__main__":
    main()
