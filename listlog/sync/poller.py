"""
Background polling for list changes.

A Poller runs a refresh task on a fixed interval while the list is being
watched. The refresh task pulls the log silently, replays it and re-renders
only when the materialized state actually changed.
"""

import threading
from enum import Enum
from typing import Any, Callable, Optional

from ..core.canonical import content_hash
from ..logging_config import get_logger
from .event_store import EventStore

RenderCallback = Callable[[Any], None]


class PollState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"


class RefreshTask:
    """
    One poll tick for one store.

    Skips the tick while another sync holds the store's latch. Renders are
    gated on the canonical hash of the replayed state.
    """

    def __init__(self, store: EventStore, render: RenderCallback) -> None:
        self.store = store
        self.render = render
        self.last_hash: Optional[str] = None
        self.logger = get_logger(__name__, store.list_id)

    def mark_rendered(self, state: Any) -> None:
        """Record a render done outside the poller (e.g. after a local edit)."""
        self.last_hash = content_hash(state)

    def __call__(self) -> bool:
        """
        Run one tick.

        Returns:
            True if the render callback was called
        """
        if not self.store.begin_sync():
            self.logger.debug("Sync in flight, skipping poll")
            return False
        try:
            self.store.load_changelog_from_server(silent=True)
        finally:
            self.store.end_sync()

        state = self.store.replay()
        digest = content_hash(state)
        if digest == self.last_hash:
            return False
        self.last_hash = digest
        self.render(state)
        return True


class Poller:
    """
    Interval timer driven by visibility.

    on_visible() runs a tick right away and starts the timer; on_hidden()
    stops it. Both are idempotent.
    """

    def __init__(self, task: Callable[[], Any], interval: float) -> None:
        self.task = task
        self.interval = interval
        self._lock = threading.Lock()
        self._stop: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None
        self.logger = get_logger(__name__)

    @property
    def state(self) -> PollState:
        return PollState.POLLING if self._thread is not None else PollState.IDLE

    def _tick(self) -> None:
        try:
            self.task()
        except Exception:
            # A failed tick must not kill the timer.
            self.logger.exception("Poll tick failed")

    def _run(self, stop: threading.Event) -> None:
        while not stop.wait(self.interval):
            self._tick()

    def on_visible(self) -> None:
        with self._lock:
            if self._thread is not None:
                return
            stop = threading.Event()
            thread = threading.Thread(target=self._run, args=(stop,), name="listlog-poller", daemon=True)
            self._stop, self._thread = stop, thread
        self._tick()
        thread.start()

    def on_hidden(self) -> None:
        with self._lock:
            stop, thread = self._stop, self._thread
            self._stop = self._thread = None
        if stop is None:
            return
        stop.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.interval + 1)

    def run_forever(self) -> None:
        """Poll in the calling thread until on_hidden() is called elsewhere."""
        self.on_visible()
        thread = self._thread
        if thread is not None:
            thread.join()
