"""
Sync layer: per-list stores, polling and the user's list collection.
"""

from .event_store import AppendResult, EventStore, SyncStatus
from .poller import PollState, Poller, RefreshTask
from .list_manager import CreateListResult, ListManager, UserListsStore, replay_list_refs

__all__ = [
    "AppendResult",
    "EventStore",
    "SyncStatus",
    "PollState",
    "Poller",
    "RefreshTask",
    "CreateListResult",
    "ListManager",
    "UserListsStore",
    "replay_list_refs",
]
