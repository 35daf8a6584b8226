"""
ListManager: a user's collection of lists.

The user's list log holds only references (``list_added`` / ``list_removed``
with the list id and type). Names and hero images live in each list's own
metadata log and are fetched lazily, one list at a time, then cached.

Creating a list writes to two logs in parallel with no transaction: if one
write fails the logs disagree (a referenced list without a ``list_init``, or
an initialized list nobody references). The result reports both outcomes.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from ..config import ListLogConfig
from ..core.errors import ListLogError
from ..core.events import LIST_ADDED, LIST_INIT, LIST_REMOVED, Event, ListAddedEvent, build_event, parse_events
from ..core.ids import coerce_id, generate_id
from ..core.reducer import Reducer
from ..domains import extract_metadata, get_kind
from ..domains.models import ListMetadata, ListRef
from ..log.snapshot import SnapshotStore, snapshot_key
from ..log.store import LogPath, RemoteLog
from ..logging_config import get_logger
from ..replay.runner import ReplayView, sort_events
from .event_store import AppendResult, EventStore, StatusCallback

USER_LOG_NAME = "lists"


def _on_list_added(view: ReplayView, ev: ListAddedEvent) -> None:
    if ev.id not in view.items:
        view.order.append(ev.id)
    view.items[ev.id] = ListRef(id=ev.id, list_type=ev.list_type, added_ts=ev.ts)


def _on_list_removed(view: ReplayView, ev: Event) -> None:
    view.remove(ev.id)


reducer = Reducer()
reducer.register(LIST_ADDED, _on_list_added)
reducer.register(LIST_REMOVED, _on_list_removed)


def replay_list_refs(events: Iterable[Event]) -> List[ListRef]:
    """Lists currently referenced by a user's log, oldest first."""
    view = ReplayView(sorted_events=sort_events(events))
    reducer.fold(view, view.sorted_events)
    return view.materialize()


class UserListsStore(EventStore):
    """The user's reference log, at ``{user}/lists``."""

    def __init__(self, remote: RemoteLog, config: Optional[ListLogConfig] = None, **kwargs: Any) -> None:
        config = config or ListLogConfig.from_env()
        super().__init__(USER_LOG_NAME, config.user, remote, config=config, **kwargs)

    def metadata_path(self) -> LogPath:
        return [self.config.user, USER_LOG_NAME]

    def items_path(self, date_key: Optional[str] = None) -> LogPath:
        return self.metadata_path()

    def snapshot_key(self, date_key: Optional[str] = None) -> str:
        return snapshot_key(USER_LOG_NAME, self.config.user)

    def replay(self) -> List[ListRef]:
        return replay_list_refs(self.cache)


@dataclass(frozen=True)
class CreateListResult:
    list_id: str
    list_type: str
    reference_posted: bool
    init_posted: bool

    @property
    def consistent(self) -> bool:
        return self.reference_posted == self.init_posted

    @property
    def ok(self) -> bool:
        return self.reference_posted and self.init_posted


class ListManager:
    def __init__(
        self,
        remote: RemoteLog,
        config: Optional[ListLogConfig] = None,
        snapshots: Optional[SnapshotStore] = None,
        clock: Optional[Any] = None,
        on_status: Optional[StatusCallback] = None,
        executor: Optional[ThreadPoolExecutor] = None,
    ) -> None:
        self.remote = remote
        self.config = config or ListLogConfig.from_env()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="listlog-lists"
        )
        self.log = UserListsStore(
            remote, config=self.config, snapshots=snapshots, clock=clock,
            on_status=on_status, executor=self._executor,
        )
        self._metadata: Dict[Any, ListMetadata] = {}
        self.logger = get_logger(__name__, self.config.user)

    def refresh(self) -> List[ListRef]:
        """Reload the user's list log and return the current references."""
        self.log.load_changelog_from_server()
        return self.log.replay()

    def lists(self) -> List[ListRef]:
        """Current references from the cached log, no network."""
        return self.log.replay()

    def _find(self, list_id: Any) -> Optional[ListRef]:
        for ref in self.lists():
            if ref.id == list_id:
                return ref
        return None

    def metadata_path(self, list_type: str, list_id: Any) -> LogPath:
        return [self.config.user, list_type, str(list_id)]

    def get_metadata(self, list_id: Any, list_type: Optional[str] = None, refresh: bool = False) -> ListMetadata:
        """
        Metadata for one list, fetched on first use and cached by list id.

        A failed fetch is logged and yields empty metadata without caching,
        so the next call tries again.
        """
        list_id = coerce_id(list_id)
        if not refresh and list_id in self._metadata:
            return self._metadata[list_id]
        if list_type is None:
            ref = self._find(list_id)
            list_type = ref.list_type if ref is not None else ""
        path = self.metadata_path(list_type, list_id)
        try:
            records = self.remote.fetch(path)
        except ListLogError as e:
            self.logger.warning("Failed to load metadata for %s from %s: %s", list_id, self.remote.describe(path), e)
            return ListMetadata(type=list_type)
        meta = extract_metadata(parse_events(records))
        if not meta.type:
            meta.type = list_type
        self._metadata[list_id] = meta
        return meta

    def cached_metadata(self, list_id: Any) -> Optional[ListMetadata]:
        return self._metadata.get(coerce_id(list_id))

    def load_all_metadata(self, refresh: bool = False) -> Dict[Any, ListMetadata]:
        """Fetch metadata for every referenced list in parallel."""
        refs = self.lists()
        futures = {
            ref.id: self._executor.submit(self.get_metadata, ref.id, ref.list_type, refresh)
            for ref in refs
        }
        return {list_id: f.result() for list_id, f in futures.items()}

    def create_list(self, list_type: str, name: str, list_id: Optional[str] = None) -> CreateListResult:
        """
        Create a list: reference it from the user's log and initialize its
        own metadata log, both writes in flight at once.
        """
        get_kind(list_type)
        list_id = list_id or generate_id()
        init = build_event(LIST_INIT, {"id": list_id, "name": name, "type": list_type, "user": self.config.user})
        init_post = self._executor.submit(self._post_init, list_type, list_id, init)
        reference = self.log.add_event(LIST_ADDED, {"id": list_id, "listType": list_type})

        result = CreateListResult(
            list_id=list_id,
            list_type=list_type,
            reference_posted=reference.confirmed(),
            init_posted=init_post.result(),
        )
        if result.init_posted:
            self._metadata[coerce_id(list_id)] = ListMetadata(name=name, type=list_type)
        if not result.consistent:
            self.logger.error("List %s created partially: reference=%s init=%s",
                              list_id, result.reference_posted, result.init_posted)
        return result

    def _post_init(self, list_type: str, list_id: Any, event: Event) -> bool:
        store = EventStore(list_type, list_id, self.remote, config=self.config, executor=self._executor)
        return store.post_event(event)

    def remove_list(self, list_id: Any) -> AppendResult:
        """Drop the reference. The list's own logs are left untouched."""
        self._metadata.pop(coerce_id(list_id), None)
        return self.log.add_event(LIST_REMOVED, {"id": list_id})

    def close(self, wait: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def __enter__(self) -> "ListManager":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
