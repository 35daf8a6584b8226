"""
Replay command: load a list's changelog and show the materialized list
"""

import json
from typing import Optional

import typer
from rich.console import Console

from cli.render import render_state
from cli.runtime import open_store
from listlog.core.canonical import canonicalize, content_hash
from listlog.core.errors import ListLogError
from listlog.domains import get_kind

console = Console()


def replay_command(
    ctx: typer.Context,
    list_type: str = typer.Argument(..., help="List type (shopping, planner, tracker, tennis)"),
    list_id: str = typer.Argument(..., help="List id"),
    date: Optional[str] = typer.Option(None, "--date", "-d", help="Day to load for dated lists (YYYY-MM-DD)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Replay a list's changelog and show the result.

    Examples:
        listlog replay shopping a1B2c3
        listlog replay planner k9Xy2Q --date 2024-05-01
        listlog replay tennis T3nn1s --json
    """
    try:
        get_kind(list_type)
    except ListLogError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    with open_store(ctx, list_type, list_id, date=date) as store:
        events = store.load_changelog_from_server()
        state = store.replay()
        meta = store.get_metadata()
        status = store.status

    if json_output:
        output = {
            "list_type": list_type,
            "list_id": list_id,
            "name": meta.name,
            "sync_status": status.value if status else None,
            "events": len(events),
            "state_hash": content_hash(state),
            "state": canonicalize(state),
        }
        print(json.dumps(output, indent=2, ensure_ascii=False))
        raise typer.Exit(0)

    title = meta.name or f"{list_type} {list_id}"
    console.print(f"[bold]{title}[/bold]  [dim]{len(events)} events · {status.value if status else '-'}[/dim]")
    console.print(render_state(list_type, state))
    console.print(f"  State hash: [yellow]{content_hash(state)}[/yellow]")
