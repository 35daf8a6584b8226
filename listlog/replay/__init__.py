"""
Replay system for materializing list state.

Replay folds a time-sorted changelog into an ordered item list. It is
deterministic: the same set of events always yields the same list.
"""

from .runner import ReplayView, replay_base, sort_events

__all__ = [
    "ReplayView",
    "replay_base",
    "sort_events",
]
