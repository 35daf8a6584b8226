"""
Reducer: op handlers for the domain replay pass.

Each list type registers a handler per op it understands. Handlers mutate
the view they are given in place; replay always builds a fresh view, so no
state leaks between runs. Ops without a handler are ignored, which keeps
logs written by newer clients replayable.
"""

from typing import Any, Callable, Dict, Iterable

from .events import Event

# Handler signature: (view, event) -> None
Handler = Callable[[Any, Event], None]


class Reducer:
    """
    Registry of event handlers for one list type.

    Usage:
        reducer = Reducer()
        reducer.register("checked", handle_checked)
        reducer.fold(view, view.sorted_events)
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, Handler] = {}

    def register(self, op: str, handler: Handler) -> None:
        """
        Register event handler.

        Args:
            op: Event op string
            handler: Function (view, event) -> None
        """
        self._handlers[op] = handler

    def apply(self, view: Any, event: Event) -> bool:
        """
        Apply one event to the view.

        Returns:
            True if a handler ran, False if the op is not handled here
        """
        handler = self._handlers.get(event.op)
        if handler is None:
            return False
        handler(view, event)
        return True

    def fold(self, view: Any, events: Iterable[Event]) -> int:
        """Apply events in the given order. Returns the number handled."""
        count = 0
        for ev in events:
            if self.apply(view, ev):
                count += 1
        return count
