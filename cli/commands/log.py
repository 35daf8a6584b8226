"""
Changelog commands: tail, stats, append
"""

import json
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from cli.runtime import open_store
from listlog.core.events import ADDED, PLAYER_ADDED, MATCH_ADDED, known_ops
from listlog.core.ids import generate_id
from listlog.domains.shopping import with_category
from listlog.query import format_event_details, newest_first, op_counts, summarize_events

app = typer.Typer()
console = Console()

# Ops that create an entity get a fresh id when none is given.
_CREATING_OPS = (ADDED, PLAYER_ADDED, MATCH_ADDED)


def _parse_fields(pairs: List[str]) -> dict:
    """``key=value`` arguments; values that parse as JSON are decoded."""
    fields = {}
    for pair in pairs:
        if "=" not in pair:
            raise typer.BadParameter(f"expected key=value, got {pair!r}")
        key, raw = pair.split("=", 1)
        try:
            fields[key] = json.loads(raw)
        except ValueError:
            fields[key] = raw
    return fields


@app.command()
def tail(
    ctx: typer.Context,
    list_type: str = typer.Argument(..., help="List type"),
    list_id: str = typer.Argument(..., help="List id"),
    lines: Optional[int] = typer.Option(None, "--lines", "-n", help="Number of events to show"),
    date: Optional[str] = typer.Option(None, "--date", "-d", help="Day to load for dated lists"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Show a list's changelog, newest first.

    Examples:
        listlog log tail shopping a1B2c3
        listlog log tail shopping a1B2c3 --lines 10
        listlog log tail planner k9Xy2Q --date 2024-05-01 --json
    """
    with open_store(ctx, list_type, list_id, date=date) as store:
        events = newest_first(store.load_changelog_from_server())

    if lines:
        events = events[:lines]

    if json_output:
        print(json.dumps({"events": [ev.to_wire() for ev in events], "count": len(events)}, indent=2, default=str))
        raise typer.Exit(0)

    if not events:
        console.print("[yellow]Changelog is empty[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"Changelog: {list_type}/{list_id}")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Time", style="cyan")
    table.add_column("Op", style="green")
    table.add_column("ID", style="yellow")
    table.add_column("User")
    table.add_column("Details")
    for idx, ev in enumerate(events):
        table.add_row(
            str(len(events) - idx),
            ev.ts or "—",
            ev.op,
            "—" if ev.id is None else str(ev.id),
            ev.user or "—",
            format_event_details(ev),
        )
    console.print(table)


@app.command()
def stats(
    ctx: typer.Context,
    list_type: str = typer.Argument(..., help="List type"),
    list_id: str = typer.Argument(..., help="List id"),
    date: Optional[str] = typer.Option(None, "--date", "-d", help="Day to load for dated lists"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Count events by op."""
    with open_store(ctx, list_type, list_id, date=date) as store:
        events = store.load_changelog_from_server()

    counts = op_counts(events)
    if json_output:
        print(json.dumps({"total": len(events), "ops": dict(counts)}, indent=2))
        raise typer.Exit(0)

    table = Table(title="Event Counts")
    table.add_column("Op", style="green")
    table.add_column("Count", style="cyan", justify="right")
    for op, count in counts:
        table.add_row(op, str(count))
    console.print(table)
    console.print(f"\n[bold]{summarize_events(events)}[/bold]")


@app.command()
def append(
    ctx: typer.Context,
    list_type: str = typer.Argument(..., help="List type"),
    list_id: str = typer.Argument(..., help="List id"),
    op: str = typer.Argument(..., help="Event op, e.g. added, checked, reorder"),
    fields: List[str] = typer.Argument(None, help="Event fields as key=value (JSON values allowed)"),
):
    """
    Append one event and wait for the service to accept it.

    Examples:
        listlog log append shopping a1B2c3 added text=Milk category=dairy
        listlog log append shopping a1B2c3 checked id=Xy12Ab
        listlog log append shopping a1B2c3 reorder 'order=["Xy12Ab","Qw34Er"]'
    """
    if op not in known_ops():
        console.print(f"[yellow]Warning:[/yellow] unknown op {op!r}; it will be stored but ignored by replay")

    data = _parse_fields(fields or [])
    if op in _CREATING_OPS and "id" not in data:
        data["id"] = generate_id()
    if list_type == "shopping" and op == ADDED:
        data = with_category(data)

    with open_store(ctx, list_type, list_id) as store:
        result = store.add_event(op, data)
        posted = result.confirmed()

    if not posted:
        console.print(f"[red]Error:[/red] service did not accept {op} (see log output)")
        raise typer.Exit(1)
    console.print(f"[green]✓ Appended {op}[/green] id={result.event.id}")
