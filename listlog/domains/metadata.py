"""
List metadata: name, type and hero image, folded from the metadata sub-log.
"""

from typing import Iterable

from ..core.events import HERO_IMAGE, LIST_INIT, LIST_RENAMED, Event, HeroImageEvent, ListInitEvent, ListRenamedEvent
from ..core.reducer import Reducer
from ..replay.runner import sort_events
from .models import ListMetadata


def _on_init(meta: ListMetadata, ev: ListInitEvent) -> None:
    meta.name = ev.name
    meta.type = ev.list_type


def _on_renamed(meta: ListMetadata, ev: ListRenamedEvent) -> None:
    meta.name = ev.name


def _on_hero_image(meta: ListMetadata, ev: HeroImageEvent) -> None:
    meta.hero_image = ev.url


reducer = Reducer()
reducer.register(LIST_INIT, _on_init)
reducer.register(LIST_RENAMED, _on_renamed)
reducer.register(HERO_IMAGE, _on_hero_image)


def extract_metadata(events: Iterable[Event]) -> ListMetadata:
    meta = ListMetadata()
    reducer.fold(meta, sort_events(events))
    return meta
