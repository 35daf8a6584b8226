"""
Product tracker replay.

Products carry a fixed set of known fields plus whatever else an import or a
newer client wrote. ``updated`` events are partial: only the keys they carry
overwrite the product. Prototype history rides along as a JSON blob and always
replaces the whole ``protos`` list.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from ..core.events import STATUS_CHANGED, UPDATED, AddedEvent, Event, StatusChangedEvent, UpdatedEvent
from ..core.reducer import Reducer
from ..replay.runner import ReplayView, replay_base
from .models import Product

MAX_PROTOS = 4

STATUS_OPTIONS = [
    {"value": "pending", "label": "Pending", "color": "#94a3b8"},
    {"value": "ordered", "label": "Ordered", "color": "#60a5fa"},
    {"value": "in_production", "label": "In Production", "color": "#fbbf24"},
    {"value": "shipped", "label": "Shipped", "color": "#a78bfa"},
    {"value": "received", "label": "Received", "color": "#4ade80"},
    {"value": "cancelled", "label": "Cancelled", "color": "#f87171"},
]

_KNOWN_FIELDS = ("name", "imageUrl", "season", "launchMonth", "vendor", "poBulk", "poTop", "notes")

# (field, label, category, description)
DATE_FIELDS = [
    ("tpReleaseDate", "TP Release", "key-dates", "Technical package released to vendor"),
    ("fabricApprovalDate", "Fabric Approved", "materials", "Fabric approved for production"),
    ("colorApprovalDate", "Color Approved", "materials", "Color approved for production"),
    ("trimsApprovalDate", "Trims Approved", "materials", "Trims approved for production"),
    ("photoSampleDueDate", "Photo Sample Due", "key-dates", "Photo sample expected"),
    ("approvalDueDateFabProd", "Approval Due (Fab. Prod.)", "key-dates", "Approval needed for fabric production"),
    ("topDate", "TOP Date", "key-dates", "Top of production"),
    ("passedToRetailDate", "Passed to Retail", "key-dates", "Product passed to retail"),
    ("launchDate", "Launch", "key-dates", "Product launch date"),
    ("cancelDate", "Cancel Date (XF)", "key-dates", "Order cancellation deadline"),
    ("ownDocUpdate", "Own Doc Update", "key-dates", "Documentation updated"),
]


def status_info(status: str) -> Dict[str, str]:
    for option in STATUS_OPTIONS:
        if option["value"] == status:
            return option
    return STATUS_OPTIONS[0]


def _product_from_event(ev: Event) -> Product:
    fields: Dict[str, Any] = dict(ev.fields) if isinstance(ev, AddedEvent) else {}
    data: Dict[str, Any] = {k: v for k, v in fields.items() if k not in _KNOWN_FIELDS and k != "status"}
    for key in _KNOWN_FIELDS:
        data[key] = str(fields.get(key) or "")
    data["status"] = str(fields.get("status") or "pending")
    data["protos"] = list(ev.protos or ()) if isinstance(ev, AddedEvent) else []
    data["id"] = ev.id
    return Product(**data)


def _on_updated(view: ReplayView, ev: UpdatedEvent) -> None:
    product = view.items.get(ev.id)
    if product is None:
        return
    for key, value in ev.fields.items():
        setattr(product, key, value)
    if ev.protos is not None:
        product.protos = list(ev.protos)


def _on_status_changed(view: ReplayView, ev: StatusChangedEvent) -> None:
    product = view.items.get(ev.id)
    if product is not None:
        product.status = ev.status


reducer = Reducer()
reducer.register(UPDATED, _on_updated)
reducer.register(STATUS_CHANGED, _on_status_changed)


def replay_tracker(events: Iterable[Event]) -> List[Product]:
    view = replay_base(events, _product_from_event)
    reducer.fold(view, view.sorted_events)
    return view.materialize()


@dataclass
class Milestone:
    date: str
    label: str
    description: str
    category: str


def product_timeline(product: Product) -> List[Milestone]:
    """
    Collect a product's dated milestones, oldest first.

    Date fields come from the product itself (usually extra keys written by
    an import); every dated proto update adds one more entry.
    """
    data = product.model_dump()
    milestones: List[Milestone] = []

    for key, label, category, description in DATE_FIELDS:
        value = data.get(key)
        if value:
            milestones.append(Milestone(str(value), label, description, category))

    for index, proto in enumerate(product.protos):
        name = proto.name or f"Proto {index + 1}"
        for update in proto.updates:
            if update.date:
                label = f"{name}: {update.type.replace('_', ' ').title()}"
                milestones.append(Milestone(update.date, label, update.notes or "Proto status updated", "protos"))

    return sorted(milestones, key=lambda m: m.date)
