"""
Tests for shopping list replay.
"""

from listlog.core.events import parse_event
from listlog.domains.models import ShoppingItem
from listlog.domains.shopping import add_item, detect_category, item_suggestions, replay_shopping, with_category

T0, T1, T2, T3, T4 = (f"2024-01-01T00:00:0{i}.000Z" for i in range(5))


def ev(op, id=None, ts="", **fields):
    raw = {"op": op, "ts": ts, **fields}
    if id is not None:
        raw["id"] = id
    return parse_event(raw)


def test_scenario_check_one_of_two():
    events = [
        ev("added", "a1", T0, text="Milk"),
        ev("added", "a2", T1, text="Eggs"),
        ev("checked", "a1", T2),
    ]

    items = replay_shopping(events)

    assert [(i.id, i.text, i.checked) for i in items] == [("a1", "Milk", True), ("a2", "Eggs", False)]


def test_factory_defaults():
    item = replay_shopping([ev("added", "a", T0, text="Milk")])[0]

    assert item.category == "other"
    assert item.checked is False


def test_unchecked_reverts():
    events = [ev("added", "a", T0, text="Milk"), ev("checked", "a", T1), ev("unchecked", "a", T2)]

    assert replay_shopping(events)[0].checked is False


def test_clear_completed_removes_fixed_id_set():
    """The ids on the event are removed even if they were unchecked earlier."""
    events = [
        ev("added", 1, T0, text="Milk"),
        ev("added", 2, T0, text="Eggs"),
        ev("added", 3, T0, text="Bread"),
        ev("checked", 1, T1),
        ev("checked", 2, T1),
        ev("unchecked", 2, T2),
        ev("clear_completed", ts=T3, ids="[1, 2]"),
    ]

    items = replay_shopping(events)

    assert [i.id for i in items] == [3]


def test_clear_completed_ids_are_coerced():
    """Ids stored as strings still match numeric item ids."""
    events = [
        ev("added", "7", T0, text="Milk"),
        ev("checked", "7", T1),
        ev("clear_completed", ts=T2, ids='["7"]'),
    ]

    assert replay_shopping(events) == []


def test_check_unknown_id_is_ignored():
    events = [ev("added", "a", T0, text="Milk"), ev("checked", "zzz", T1)]

    assert [i.checked for i in replay_shopping(events)] == [False]


def test_detect_category():
    assert detect_category("Organic Bananas") == "produce"
    assert detect_category("2% milk") == "dairy"
    assert detect_category("Paper towels") == "household"
    assert detect_category("Widgets") == "other"


def test_item_suggestions_ranked_by_checks():
    events = [
        ev("added", "a", T0, text="Milk"),
        ev("checked", "a", T1),
        ev("added", "b", T1, text="Eggs"),
        ev("checked", "b", T2),
        ev("added", "c", T2, text="milk"),
        ev("checked", "c", T3),
        ev("added", "d", T3, text="Caviar"),
    ]

    suggestions = item_suggestions(events)

    assert [(s.text, s.count) for s in suggestions] == [("Milk", 2), ("Eggs", 1)]


def test_item_suggestions_skip_items_on_list():
    events = [ev("added", "a", T0, text="Milk"), ev("checked", "a", T1)]
    current = [ShoppingItem(id="x", text="MILK")]

    assert item_suggestions(events, current) == []


def test_with_category_fills_missing_category():
    assert with_category({"id": "a", "text": "Whole milk"})["category"] == "dairy"
    assert with_category({"id": "a", "text": "Whole milk", "category": "snacks"})["category"] == "snacks"
    assert with_category({"id": "a"})["category"] == "other"


class RecordingStore:
    def __init__(self):
        self.added = []

    def add_event(self, op, data):
        self.added.append((op, data))
        return parse_event({"op": op, **data})


def test_add_item_detects_category():
    store = RecordingStore()

    event = add_item(store, "  Sourdough bread ")

    op, data = store.added[0]
    assert op == "added"
    assert data["text"] == "Sourdough bread"
    assert data["category"] == "bakery"
    assert replay_shopping([event])[0].category == "bakery"
