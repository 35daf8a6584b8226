"""
Daily planner replay and time utilities.

Planner lists are dated: each calendar day has its own changelog segment,
so a day's plan starts empty unless it is seeded.
"""

import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Tuple

from ..core.events import COMPLETED, ENJOYMENT, MOVED, UNCOMPLETED, AddedEvent, EnjoymentEvent, Event, MovedEvent
from ..core.ids import coerce_id, generate_id
from ..core.reducer import Reducer
from ..core.values import nullable
from ..replay.runner import ReplayView, replay_base
from .models import PlannerTask

DEFAULT_ENJOYMENT = 2
DAY_START_MINUTES = 9 * 60

COLORS = [
    "#ff6b35",  # orange
    "#00d9c0",  # teal
    "#ff2e63",  # pink
    "#ffc93c",  # yellow
    "#a855f7",  # purple
    "#4ade80",  # green
    "#38bdf8",  # blue
]

DEFAULT_TASKS = [
    {"text": "Check emails", "time": "15m"},
    {"text": "Process incoming shipments", "time": "45m"},
    {"text": "Update tracking spreadsheet", "time": "30m"},
    {"text": "Schedule outbound pickups", "time": "20m"},
    {"text": "Verify package labels", "time": "30m"},
    {"text": "Follow up on delayed deliveries", "time": "30m"},
]


def _task_from_event(ev: Event) -> PlannerTask:
    fields = ev.fields if isinstance(ev, AddedEvent) else {}
    enjoyment = coerce_id(nullable(fields.get("enjoyment")))
    return PlannerTask(
        id=ev.id,
        text=str(fields.get("text") or ""),
        time=str(fields.get("time") or ""),
        color=str(fields.get("color") or ""),
        completed=False,
        enjoyment=DEFAULT_ENJOYMENT if enjoyment is None else enjoyment,
    )


def _set_completed(value: bool):
    def handler(view: ReplayView, ev: Event) -> None:
        task = view.items.get(ev.id)
        if task is not None:
            task.completed = value
    return handler


def _on_moved(view: ReplayView, ev: MovedEvent) -> None:
    if ev.id in view.order:
        view.order.remove(ev.id)

    if ev.to_index is not None:
        view.order.insert(ev.to_index, ev.id)
    elif ev.after_id is not None:
        # An unknown after_id lands the id at the front.
        after = view.order.index(ev.after_id) if ev.after_id in view.order else -1
        view.order.insert(after + 1, ev.id)
    else:
        view.order.append(ev.id)


def _on_enjoyment(view: ReplayView, ev: EnjoymentEvent) -> None:
    task = view.items.get(ev.id)
    if task is not None:
        task.enjoyment = ev.value


reducer = Reducer()
reducer.register(COMPLETED, _set_completed(True))
reducer.register(UNCOMPLETED, _set_completed(False))
reducer.register(MOVED, _on_moved)
reducer.register(ENJOYMENT, _on_enjoyment)


def replay_planner(events: Iterable[Event]) -> List[PlannerTask]:
    view = replay_base(events, _task_from_event)
    reducer.fold(view, view.sorted_events)
    return view.materialize()


# ---------------------------------------------------------------------------
# Time utilities
# ---------------------------------------------------------------------------

_HOURS_RE = re.compile(r"(\d*\.?\d+)\s*h")
_MINUTES_RE = re.compile(r"(\d+)\s*m")
_NUMBER_RE = re.compile(r"(\d+)")


def parse_time_to_minutes(text: str) -> int:
    """
    Parse an estimate like "1h 30m", "1.5h", "45m" or "20" into minutes.

    Anything unparseable (or zero) counts as 30 minutes.
    """
    s = (text or "").lower().strip()
    minutes = 0.0

    hours = _HOURS_RE.search(s)
    if hours:
        minutes += float(hours.group(1)) * 60
    mins = _MINUTES_RE.search(s)
    if mins:
        minutes += int(mins.group(1))
    if not hours and not mins:
        number = _NUMBER_RE.search(s)
        if number:
            minutes = int(number.group(1))

    return int(round(minutes)) or 30


def format_duration(minutes: int) -> str:
    if minutes >= 60:
        hrs, mins = divmod(int(minutes), 60)
        return f"{hrs}h {mins}m" if mins > 0 else f"{hrs}h"
    return f"{int(minutes)}m"


def format_clock(total_minutes: int) -> str:
    """Minutes since midnight as a 12-hour clock, e.g. 570 -> "9:30 AM"."""
    hours, mins = divmod(int(total_minutes), 60)
    hour12 = hours - 12 if hours > 12 else (12 if hours == 0 else hours)
    ampm = "PM" if hours >= 12 else "AM"
    return f"{hour12}:{mins:02d} {ampm}"


def schedule(tasks: Iterable[PlannerTask], start: int = DAY_START_MINUTES) -> List[Tuple[PlannerTask, str]]:
    """Pair each task with its start time, laying tasks out back to back."""
    current = start
    rows = []
    for task in tasks:
        rows.append((task, format_clock(current)))
        current += parse_time_to_minutes(task.time)
    return rows


@dataclass
class PlannerReport:
    total: int
    completed: int
    completion_rate: int
    total_minutes: int
    completed_minutes: int

    @property
    def remaining_minutes(self) -> int:
        return self.total_minutes - self.completed_minutes

    @property
    def progress_label(self) -> str:
        if self.completion_rate >= 80:
            return "Excellent progress"
        if self.completion_rate >= 50:
            return "Good progress"
        return "In progress"


def planner_report(tasks: Iterable[PlannerTask]) -> PlannerReport:
    tasks = list(tasks)
    done = [t for t in tasks if t.completed]
    rate = int(len(done) * 100 / len(tasks) + 0.5) if tasks else 0
    return PlannerReport(
        total=len(tasks),
        completed=len(done),
        completion_rate=rate,
        total_minutes=sum(parse_time_to_minutes(t.time) for t in tasks),
        completed_minutes=sum(parse_time_to_minutes(t.time) for t in done),
    )


def seed_default_tasks(store: Any) -> List[Any]:
    """
    Post the default task set to an empty day, one event at a time.

    ``store`` is an EventStore bound to a planner list; returns the
    AppendResults in posting order.
    """
    records = [
        {"id": generate_id(), "text": t["text"], "time": t["time"], "color": COLORS[i % len(COLORS)]}
        for i, t in enumerate(DEFAULT_TASKS)
    ]
    return store.add_events_sequentially("added", records)
