"""
Shopping list replay.

Items are added, checked off and cleared in batches. ``clear_completed``
carries the ids that were checked when the user cleared them; replay removes
exactly those ids and never recomputes the set from current state.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..core.events import ADDED, CHECKED, CLEAR_COMPLETED, UNCHECKED, AddedEvent, ClearCompletedEvent, Event
from ..core.ids import generate_id
from ..core.reducer import Reducer
from ..replay.runner import ReplayView, replay_base
from .models import ShoppingItem

CATEGORIES: Dict[str, Dict[str, Any]] = {
    "produce": {"name": "Produce", "keywords": [
        "apple", "banana", "orange", "tomato", "lettuce", "spinach", "carrot", "onion", "garlic",
        "potato", "avocado", "lemon", "lime", "grape", "strawberry", "blueberry", "broccoli",
        "cucumber", "pepper", "mushroom", "celery", "fruit", "vegetable", "salad", "citrus",
    ]},
    "dairy": {"name": "Dairy", "keywords": ["milk", "cheese", "yogurt", "butter", "cream", "egg", "eggs"]},
    "meat": {"name": "Meat & Seafood", "keywords": [
        "chicken", "beef", "pork", "fish", "salmon", "shrimp", "bacon", "sausage", "steak", "turkey", "ham",
    ]},
    "bakery": {"name": "Bakery", "keywords": [
        "bread", "bagel", "muffin", "croissant", "roll", "bun", "cake", "pie", "donut", "pastry",
    ]},
    "frozen": {"name": "Frozen", "keywords": ["ice cream", "frozen", "pizza", "popsicle"]},
    "pantry": {"name": "Pantry", "keywords": [
        "rice", "pasta", "cereal", "oatmeal", "flour", "sugar", "oil", "sauce", "soup", "beans",
        "can", "canned", "nuts", "peanut butter",
    ]},
    "beverages": {"name": "Beverages", "keywords": ["water", "juice", "soda", "coffee", "tea", "beer", "wine", "drink"]},
    "snacks": {"name": "Snacks", "keywords": [
        "chips", "crackers", "cookies", "candy", "chocolate", "popcorn", "pretzel", "granola",
    ]},
    "household": {"name": "Household", "keywords": [
        "soap", "detergent", "paper", "towel", "tissue", "trash", "bag", "cleaner", "sponge",
    ]},
    "other": {"name": "Other", "keywords": []},
}


def detect_category(text: str) -> str:
    """First category with a keyword contained in the text, else "other"."""
    lower = text.lower()
    for key, cat in CATEGORIES.items():
        if any(kw in lower for kw in cat["keywords"]):
            return key
    return "other"


def with_category(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy of ``added`` fields with ``category`` filled in from the text when missing."""
    data = dict(fields)
    if not data.get("category"):
        data["category"] = detect_category(str(data.get("text") or ""))
    return data


def add_item(store: Any, text: str, category: Optional[str] = None) -> Any:
    """
    Append an ``added`` event for a new item.

    ``store`` is an EventStore bound to a shopping list. The category is
    detected from the text unless given.
    """
    fields = {"id": generate_id(), "text": text.strip(), "category": category}
    return store.add_event(ADDED, with_category(fields))


def _item_from_event(ev: Event) -> ShoppingItem:
    fields = ev.fields if isinstance(ev, AddedEvent) else {}
    return ShoppingItem(
        id=ev.id,
        text=str(fields.get("text") or ""),
        category=str(fields.get("category") or "other"),
        checked=False,
    )


def _set_checked(value: bool):
    def handler(view: ReplayView, ev: Event) -> None:
        item = view.items.get(ev.id)
        if item is not None:
            item.checked = value
    return handler


def _on_clear_completed(view: ReplayView, ev: ClearCompletedEvent) -> None:
    for entity_id in ev.ids:
        view.remove(entity_id)


reducer = Reducer()
reducer.register(CHECKED, _set_checked(True))
reducer.register(UNCHECKED, _set_checked(False))
reducer.register(CLEAR_COMPLETED, _on_clear_completed)


def replay_shopping(events: Iterable[Event]) -> List[ShoppingItem]:
    view = replay_base(events, _item_from_event)
    reducer.fold(view, view.sorted_events)
    return view.materialize()


@dataclass
class Suggestion:
    text: str
    count: int = 0


def item_suggestions(events: Iterable[Event], current_items: Iterable[ShoppingItem] = ()) -> List[Suggestion]:
    """
    Rank previously bought items for quick re-adding.

    Every ``checked`` event counts once for the text of the item it checks.
    Items never checked, and texts already on the list, are left out.
    Most-checked first; ties keep first-seen order.
    """
    events = list(events)
    texts: Dict[Any, str] = {}
    for ev in events:
        if isinstance(ev, AddedEvent) and ev.fields.get("text"):
            texts[ev.id] = str(ev.fields["text"]).strip()

    frequencies: Dict[str, Suggestion] = {}
    for ev in events:
        if ev.op == CHECKED and ev.id in texts:
            text = texts[ev.id]
            entry = frequencies.setdefault(text.lower(), Suggestion(text=text))
            entry.count += 1

    on_list = {item.text.lower() for item in current_items}
    ranked = [s for s in frequencies.values() if s.text.lower() not in on_list]
    return sorted(ranked, key=lambda s: -s.count)
