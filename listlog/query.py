"""
Read-only helpers for inspecting a changelog (event log viewer).
"""

import json
from typing import Any, Dict, Iterable, List, Tuple

from .core.events import Event

DETAIL_LIMIT = 100


def newest_first(events: Iterable[Event]) -> List[Event]:
    return sorted(events, key=lambda ev: ev.ts or "", reverse=True)


def op_counts(events: Iterable[Event]) -> List[Tuple[str, int]]:
    """(op, count) pairs, most frequent first; ties keep first-seen order."""
    counts: Dict[str, int] = {}
    for ev in events:
        counts[ev.op] = counts.get(ev.op, 0) + 1
    return sorted(counts.items(), key=lambda item: -item[1])


def summarize_events(events: Iterable[Event]) -> str:
    """One-line summary, e.g. ``"5 events total · added: 3 · checked: 2"``."""
    events = list(events)
    parts = [f"{len(events)} events total"]
    parts.extend(f"{op}: {count}" for op, count in op_counts(events))
    return " · ".join(parts)


def _clip(text: str) -> str:
    return text[:DETAIL_LIMIT] + "..." if len(text) > DETAIL_LIMIT else text


def event_details(event: Event) -> Dict[str, Any]:
    """Op-specific fields of an event, empty values left out."""
    return {k: v for k, v in event.payload().items() if v is not None and v != ""}


def format_event_details(event: Event) -> str:
    details = []
    for key, value in event_details(event).items():
        if isinstance(value, (dict, list, tuple)):
            shown = _clip(json.dumps(value, separators=(",", ":"), default=str))
        elif isinstance(value, str):
            shown = _clip(value)
        else:
            shown = str(value)
        details.append(f"{key}: {shown}")
    return ", ".join(details) or "—"
