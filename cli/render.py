"""
Rich renderings of materialized lists, one per list type.
"""

from typing import Any, List

from rich.console import Group
from rich.table import Table

from listlog.domains.planner import format_duration, planner_report, schedule
from listlog.domains.shopping import CATEGORIES
from listlog.domains.tennis import position_ids
from listlog.domains.tracker import MAX_PROTOS, status_info


def _shopping(items: List[Any]) -> Table:
    table = Table(title="Shopping")
    table.add_column("", width=3)
    table.add_column("Item", style="green")
    table.add_column("Category", style="cyan")
    table.add_column("ID", style="dim")
    for item in items:
        category = CATEGORIES.get(item.category, CATEGORIES["other"])["name"]
        text = f"[strike]{item.text}[/strike]" if item.checked else item.text
        table.add_row("✓" if item.checked else "·", text, category, str(item.id))
    return table


def _planner(tasks: List[Any]) -> Group:
    table = Table(title="Planner")
    table.add_column("Start", style="cyan")
    table.add_column("Task", style="green")
    table.add_column("Time", justify="right")
    table.add_column("Enjoyment", justify="right")
    table.add_column("ID", style="dim")
    for task, start in schedule(tasks):
        text = f"[strike]{task.text}[/strike]" if task.completed else task.text
        table.add_row(start, text, task.time, str(task.enjoyment), str(task.id))

    report = planner_report(tasks)
    summary = Table(show_header=False, box=None)
    summary.add_row("Tasks completed", f"{report.completed}/{report.total}")
    summary.add_row("Completion rate", f"{report.completion_rate}% ({report.progress_label})")
    summary.add_row("Time invested", f"{format_duration(report.completed_minutes)} of "
                                     f"{format_duration(report.total_minutes)} planned")
    summary.add_row("Time remaining", format_duration(report.remaining_minutes))
    return Group(table, summary)


def _tracker(products: List[Any]) -> Table:
    table = Table(title="Tracker")
    table.add_column("Product", style="green")
    table.add_column("Season")
    table.add_column("Vendor")
    table.add_column("Status")
    table.add_column("Protos", justify="right")
    table.add_column("ID", style="dim")
    for p in products:
        info = status_info(p.status)
        table.add_row(p.name, p.season, p.vendor, f"[{info['color']}]{info['label']}[/]",
                      f"{len(p.protos)}/{MAX_PROTOS}", str(p.id))
    return table


def _tennis(state: Any) -> Group:
    names = {p.id: p.name for p in state.players}

    players = Table(title="Players")
    players.add_column("Name", style="green")
    players.add_column("Email")
    players.add_column("Phone")
    players.add_column("USTA")
    for p in state.players:
        players.add_row(p.name, p.email, p.phone, p.usta)

    matches = Table(title="Matches")
    matches.add_column("Date", style="cyan")
    matches.add_column("Match", style="green")
    matches.add_column("Available")
    matches.add_column("Lineup")
    for m in state.matches:
        available = sorted(names[pid] for pid in state.availability.get(m.id, set()) if pid in names)
        assigned = state.assignments.get(m.id, {})
        lineup = []
        for pos in position_ids(m):
            if pos in assigned:
                who = " / ".join(names.get(pid, "?") for pid in assigned[pos].players)
                lineup.append(f"{pos}: {who}")
        matches.add_row(m.date or "", f"{m.title} @ {m.location}" if m.location else m.title,
                        ", ".join(available), "\n".join(lineup))
    return Group(players, matches)


RENDERERS = {
    "shopping": _shopping,
    "planner": _planner,
    "tracker": _tracker,
    "tennis": _tennis,
}


def render_state(list_type: str, state: Any) -> Any:
    return RENDERERS[list_type](state)
