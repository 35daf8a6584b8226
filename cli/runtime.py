"""
Shared wiring for CLI commands: config, backends and stores.
"""

import dataclasses
from typing import Optional

import typer

from listlog.config import ListLogConfig
from listlog.core.clock import SystemClock
from listlog.log import SnapshotStore, remote_from_config
from listlog.sync import EventStore, ListManager


def get_config(ctx: typer.Context) -> ListLogConfig:
    """Config from the environment with the global CLI overrides applied."""
    config = ListLogConfig.from_env()
    overrides = {k: v for k, v in (ctx.obj or {}).items() if v is not None}
    return dataclasses.replace(config, **overrides)


def open_store(ctx: typer.Context, list_type: str, list_id: str, date: Optional[str] = None) -> EventStore:
    config = get_config(ctx)
    return EventStore(
        list_type,
        list_id,
        remote_from_config(config),
        config=config,
        snapshots=SnapshotStore(config.snapshot_dir),
        clock=SystemClock(date_key=date),
    )


def open_manager(ctx: typer.Context) -> ListManager:
    config = get_config(ctx)
    return ListManager(remote_from_config(config), config=config, snapshots=SnapshotStore(config.snapshot_dir))
