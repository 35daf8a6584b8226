"""
listlog

Event-sourced list store: append-only changelogs kept on a remote log
service and replayed into shopping lists, daily plans, product trackers and
tennis rosters.
"""

__version__ = "0.1.0"
