"""
Watch command: poll a list and re-render whenever it changes
"""

from typing import Optional

import typer
from rich.console import Console

from cli.render import render_state
from cli.runtime import get_config, open_store
from listlog.core.errors import ListLogError
from listlog.domains import get_kind
from listlog.sync import Poller, RefreshTask

console = Console()


def watch_command(
    ctx: typer.Context,
    list_type: str = typer.Argument(..., help="List type"),
    list_id: str = typer.Argument(..., help="List id"),
    interval: Optional[float] = typer.Option(None, "--interval", "-i", help="Seconds between polls"),
):
    """
    Poll a list until interrupted, redrawing only when its contents change.

    Examples:
        listlog watch shopping a1B2c3
        listlog watch tennis T3nn1s --interval 2
    """
    try:
        get_kind(list_type)
    except ListLogError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    config = get_config(ctx)
    store = open_store(ctx, list_type, list_id)

    def render(state):
        console.clear()
        console.print(f"[bold]{store.get_metadata().name or list_id}[/bold]  [dim]{store.clock.now_iso()}[/dim]")
        console.print(render_state(list_type, state))

    poller = Poller(RefreshTask(store, render), interval or config.poll_interval_seconds)
    try:
        poller.run_forever()
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped[/dim]")
    finally:
        poller.on_hidden()
        store.close()
