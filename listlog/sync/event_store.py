"""
EventStore: a per-list handle on a replicated changelog.

The store owns an in-memory cache of the list's events. Local edits are
appended to the cache immediately (optimistic) and posted to the log service
in the background; loads from the service replace the cache wholesale. There
is no outbox: a post that fails stays in the cache and the local snapshot
only until the next successful load replaces them.

Dated list types keep their items in one log per calendar day and their
name/type/hero image in a perpetual metadata log; loads merge both.
"""

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from ..config import ListLogConfig
from ..core.clock import SystemClock
from ..core.errors import ListLogError, NetworkUnavailableError, SnapshotError
from ..core.events import HERO_IMAGE, LIST_RENAMED, METADATA_OPS, Event, build_event, parse_events, to_query_params
from ..domains import LIST_KINDS, extract_metadata, replay_for
from ..domains.models import ListMetadata
from ..log.snapshot import SnapshotStore, snapshot_key
from ..log.store import LogPath, RemoteLog
from ..logging_config import get_logger


class SyncStatus(str, Enum):
    SYNCING = "syncing"
    SYNCED = "synced"
    ERROR = "error"
    OFFLINE = "offline"


StatusCallback = Callable[[SyncStatus], None]


def status_for(error: Exception) -> SyncStatus:
    if isinstance(error, NetworkUnavailableError):
        return SyncStatus.OFFLINE
    return SyncStatus.ERROR


@dataclass(frozen=True)
class AppendResult:
    """
    Result of an optimistic append.

    ``event`` is the cached copy with its client timestamp; ``post`` resolves
    to True once the service accepted the write, False if it failed.
    """

    event: Event
    post: "Future[bool]"

    def confirmed(self, timeout: Optional[float] = None) -> bool:
        return self.post.result(timeout=timeout)


class EventStore:
    """
    Changelog cache for one list, synced with a remote log.

    Usage:
        store = EventStore("shopping", "a1B2c3", remote, config=config)
        store.load_changelog_from_server()
        store.add_event("added", {"id": generate_id(), "text": "Milk"})
        items = store.replay()
    """

    def __init__(
        self,
        list_type: str,
        list_id: Any,
        remote: RemoteLog,
        config: Optional[ListLogConfig] = None,
        snapshots: Optional[SnapshotStore] = None,
        clock: Optional[Any] = None,
        on_status: Optional[StatusCallback] = None,
        executor: Optional[ThreadPoolExecutor] = None,
    ) -> None:
        self.list_type = list_type
        self.list_id = list_id
        self.remote = remote
        self.config = config or ListLogConfig.from_env()
        self.snapshots = snapshots
        self.clock = clock or SystemClock()
        self.on_status = on_status
        self.dated = list_type in LIST_KINDS and LIST_KINDS[list_type].dated

        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="listlog-post"
        )
        self._lock = threading.RLock()
        self._cache: List[Event] = []
        self._syncing = False
        self._status: Optional[SyncStatus] = None
        self.logger = get_logger(__name__, list_id)

    # ------------------------------------------------------------------
    # Addressing
    # ------------------------------------------------------------------

    def metadata_path(self) -> LogPath:
        return [self.config.user, self.list_type, str(self.list_id)]

    def items_path(self, date_key: Optional[str] = None) -> LogPath:
        """Log holding the list's items; dated lists get today's partition."""
        path = list(self.metadata_path())
        if self.dated:
            path.append(date_key or self.clock.today_key())
        return path

    def path_for(self, event: Event) -> LogPath:
        if event.op in METADATA_OPS:
            return self.metadata_path()
        return self.items_path()

    def snapshot_key(self, date_key: Optional[str] = None) -> str:
        if self.dated:
            return snapshot_key(self.list_type, self.list_id, date_key or self.clock.today_key())
        return snapshot_key(self.list_type, self.list_id)

    # ------------------------------------------------------------------
    # Status and cache
    # ------------------------------------------------------------------

    @property
    def status(self) -> Optional[SyncStatus]:
        return self._status

    def _set_status(self, status: SyncStatus) -> None:
        self._status = status
        if self.on_status is not None:
            self.on_status(status)

    @property
    def cache(self) -> List[Event]:
        """Copy of the cached changelog."""
        with self._lock:
            return list(self._cache)

    def _save_snapshot(self, date_key: Optional[str] = None) -> None:
        if self.snapshots is None:
            return
        try:
            self.snapshots.save(self.snapshot_key(date_key), self._cache)
        except SnapshotError as e:
            self.logger.warning("Snapshot not saved: %s", e)

    def begin_sync(self) -> bool:
        """Take the sync latch. Returns False if a sync is already running."""
        with self._lock:
            if self._syncing:
                return False
            self._syncing = True
            return True

    def end_sync(self) -> None:
        with self._lock:
            self._syncing = False

    @property
    def is_syncing(self) -> bool:
        return self._syncing

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _fetch_records(self, date_key: str) -> List[Dict[str, Any]]:
        if not self.dated:
            return self.remote.fetch(self.items_path())
        # Own pool: this may already be running on a pool thread.
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="listlog-fetch") as pool:
            meta = pool.submit(self.remote.fetch, self.metadata_path())
            items = pool.submit(self.remote.fetch, self.items_path(date_key))
            return list(meta.result()) + list(items.result())

    def load_changelog_from_server(self, silent: bool = False) -> List[Event]:
        """
        Replace the cache with the service's copy of the log.

        Never raises for service or network failures: the last snapshot is
        used instead (if there is one) and the best-known changelog returned.

        Args:
            silent: Skip sync status updates (background polling)
        """
        date_key = self.clock.today_key()
        if not silent:
            self._set_status(SyncStatus.SYNCING)
        try:
            events = parse_events(self._fetch_records(date_key))
        except ListLogError as e:
            self.logger.warning("Failed to load changelog from %s: %s",
                                self.remote.describe(self.items_path(date_key)), e)
            self._load_snapshot(date_key)
            if not silent:
                self._set_status(status_for(e))
            return self.cache

        with self._lock:
            self._cache = events
            self._save_snapshot(date_key)
        self.logger.debug("Loaded %d events", len(events))
        if not silent:
            self._set_status(SyncStatus.SYNCED)
        return list(events)

    def _load_snapshot(self, date_key: str) -> None:
        if self.snapshots is None:
            return
        saved = self.snapshots.load(self.snapshot_key(date_key))
        if saved is not None:
            with self._lock:
                self._cache = saved
            self.logger.info("Using local snapshot (%d events)", len(saved))

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def build_event(self, op: str, data: Optional[Mapping[str, Any]] = None) -> Event:
        """Build an event for this list, stamped with the configured user."""
        raw: Dict[str, Any] = dict(data or {})
        if self.config.user:
            raw.setdefault("user", self.config.user)
        return build_event(op, raw)

    def post_event(self, event: Event) -> bool:
        """
        Send one event to the service. Single attempt, no retry.

        Returns:
            True if the service accepted it
        """
        path = self.path_for(event)
        self._set_status(SyncStatus.SYNCING)
        try:
            self.remote.append(path, to_query_params(event))
        except ListLogError as e:
            self.logger.error("Failed to post %s to %s: %s", event.op, self.remote.describe(path), e)
            self._set_status(status_for(e))
            return False
        self._set_status(SyncStatus.SYNCED)
        return True

    def add_event(self, op: str, data: Optional[Mapping[str, Any]] = None) -> AppendResult:
        """
        Append an event optimistically and post it in the background.

        The cached copy carries a client timestamp; the service stamps its
        own when it stores the event, and the next load picks that up.
        """
        event = self.build_event(op, data)
        local = event.with_ts(self.clock.now_iso())
        with self._lock:
            self._cache.append(local)
            self._save_snapshot()
        post = self._executor.submit(self.post_event, event)
        return AppendResult(event=local, post=post)

    def add_events_sequentially(
        self, op: str, rows: Iterable[Mapping[str, Any]], pause: Optional[float] = None
    ) -> List[AppendResult]:
        """
        Bulk write: append each row and wait for its post before the next.

        Sleeps ``pause`` seconds (default: import_pause_seconds) between
        writes to go easy on the service.
        """
        if pause is None:
            pause = self.config.import_pause_seconds
        results: List[AppendResult] = []
        for i, row in enumerate(rows):
            if i and pause > 0:
                time.sleep(pause)
            result = self.add_event(op, row)
            result.confirmed()
            results.append(result)
        return results

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def get_metadata(self) -> ListMetadata:
        return extract_metadata(self.cache)

    def rename(self, name: str) -> AppendResult:
        return self.add_event(LIST_RENAMED, {"name": name})

    def set_hero_image(self, url: str) -> AppendResult:
        return self.add_event(HERO_IMAGE, {"url": url})

    def replay(self) -> Any:
        """Materialize the cached changelog with this list type's replay."""
        return replay_for(self.list_type, self.cache)

    def close(self, wait: bool = True) -> None:
        """Shut down the post executor if this store created it."""
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def __enter__(self) -> "EventStore":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
