"""
listlog CLI - inspect and edit replicated list changelogs

Commands:
- listlog replay TYPE ID - Materialize a list
- listlog log tail/stats/append - Raw changelog operations
- listlog lists show/create/remove - The user's list collection
- listlog watch TYPE ID - Poll a list and re-render on change
"""

__version__ = "0.1.0"
