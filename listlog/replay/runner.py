"""
Replay kernel: fold a changelog into an ordered item map.

The kernel understands only ``added``, ``removed`` and ``reorder``. Domain
replays run it first, then make a second pass over ``sorted_events`` for
their own ops.

Replay depends only on the set of events: they are always re-sorted by
``ts`` first. The sort is a plain string comparison and is stable, so events
with equal timestamps keep their arrival order.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List

from ..core.events import ADDED, REMOVED, REORDER, Event, ReorderEvent, sort_key

ItemFactory = Callable[[Event], Any]


@dataclass
class ReplayView:
    """
    Result of the kernel pass.

    Fields:
        items: id -> materialized item
        order: display order of ids (may reference ids no longer in items)
        sorted_events: the input events sorted by ts
    """
    items: Dict[Any, Any] = field(default_factory=dict)
    order: List[Any] = field(default_factory=list)
    sorted_events: List[Event] = field(default_factory=list)

    def remove(self, entity_id: Any) -> None:
        """Drop an item and the first occurrence of its id in the order."""
        self.items.pop(entity_id, None)
        if entity_id in self.order:
            self.order.remove(entity_id)

    def materialize(self) -> List[Any]:
        """Items in display order, skipping ids with no item."""
        return [self.items[i] for i in self.order if i in self.items]


def sort_events(events: Iterable[Event]) -> List[Event]:
    """Sort by ts (string compare, stable for ties)."""
    return sorted(events, key=sort_key)


def replay_base(events: Iterable[Event], item_factory: ItemFactory) -> ReplayView:
    """
    Run the kernel pass.

    A second ``added`` for an id already present replaces the map entry but
    appends the id to the order again; the duplicate is kept as is.

    Args:
        events: Changelog in any order
        item_factory: Builds a fresh item from an ``added`` event

    Returns:
        ReplayView with items, order and the sorted events
    """
    view = ReplayView(sorted_events=sort_events(events))

    for ev in view.sorted_events:
        if ev.op == ADDED:
            view.items[ev.id] = item_factory(ev)
            view.order.append(ev.id)
        elif ev.op == REMOVED:
            view.remove(ev.id)
        elif ev.op == REORDER and isinstance(ev, ReorderEvent):
            view.order = [i for i in ev.order if i in view.items]

    return view
