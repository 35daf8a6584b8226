"""
Per-list-type replay extensions.

Every list type maps to a replay function over its changelog. Dated types
keep one changelog per calendar day next to a perpetual metadata log.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List

from ..core.errors import ListLogError
from ..core.events import Event
from .metadata import extract_metadata
from .planner import replay_planner
from .shopping import replay_shopping
from .tennis import replay_tennis
from .tracker import replay_tracker


@dataclass(frozen=True)
class ListKind:
    name: str
    replay: Callable[[Iterable[Event]], Any]
    dated: bool = False


LIST_KINDS: Dict[str, ListKind] = {
    "shopping": ListKind("shopping", replay_shopping),
    "planner": ListKind("planner", replay_planner, dated=True),
    "tracker": ListKind("tracker", replay_tracker),
    "tennis": ListKind("tennis", replay_tennis),
}


def get_kind(list_type: str) -> ListKind:
    try:
        return LIST_KINDS[list_type]
    except KeyError:
        raise ListLogError(f"Unknown list type: {list_type!r}") from None


def replay_for(list_type: str, events: Iterable[Event]) -> Any:
    return get_kind(list_type).replay(events)


def list_types() -> List[str]:
    return sorted(LIST_KINDS)


__all__ = ["ListKind", "LIST_KINDS", "get_kind", "replay_for", "list_types", "extract_metadata"]
