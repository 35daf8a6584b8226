"""
List collection commands: show, create, remove
"""

import json

import typer
from rich.console import Console
from rich.table import Table

from cli.runtime import open_manager
from listlog.core.errors import ListLogError

app = typer.Typer()
console = Console()


@app.command()
def show(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Show the user's lists with their names."""
    with open_manager(ctx) as manager:
        refs = manager.refresh()
        metadata = manager.load_all_metadata()

    if json_output:
        rows = [
            {"id": ref.id, "type": ref.list_type, "name": metadata[ref.id].name, "added": ref.added_ts}
            for ref in refs
        ]
        print(json.dumps({"lists": rows, "count": len(rows)}, indent=2))
        raise typer.Exit(0)

    if not refs:
        console.print("[yellow]No lists yet[/yellow]")
        raise typer.Exit(0)

    table = Table(title="Lists")
    table.add_column("Name", style="green")
    table.add_column("Type", style="cyan")
    table.add_column("ID", style="yellow")
    table.add_column("Added", style="dim")
    for ref in refs:
        table.add_row(metadata[ref.id].name or "(unnamed)", ref.list_type, str(ref.id), ref.added_ts)
    console.print(table)


@app.command()
def create(
    ctx: typer.Context,
    list_type: str = typer.Argument(..., help="List type (shopping, planner, tracker, tennis)"),
    name: str = typer.Argument(..., help="Display name"),
):
    """
    Create a list.

    Writes the reference and the list's init event in parallel. If only one
    of them lands the two logs disagree; the command reports which.
    """
    with open_manager(ctx) as manager:
        try:
            result = manager.create_list(list_type, name)
        except ListLogError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(2)

    if result.ok:
        console.print(f"[green]✓ Created {list_type} list[/green] {name!r} id={result.list_id}")
        raise typer.Exit(0)

    console.print(f"[red]List {result.list_id} only partially created[/red]")
    console.print(f"  Reference on user log: {'ok' if result.reference_posted else 'FAILED'}")
    console.print(f"  list_init on list log: {'ok' if result.init_posted else 'FAILED'}")
    raise typer.Exit(1)


@app.command()
def remove(
    ctx: typer.Context,
    list_id: str = typer.Argument(..., help="List id"),
):
    """Remove a list from the user's collection (its own log is kept)."""
    with open_manager(ctx) as manager:
        posted = manager.remove_list(list_id).confirmed()

    if not posted:
        console.print(f"[red]Error:[/red] service did not accept list_removed for {list_id}")
        raise typer.Exit(1)
    console.print(f"[green]✓ Removed[/green] {list_id}")
