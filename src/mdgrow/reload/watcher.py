"""Filesystem change source publishing to the reload broadcaster."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import watchfiles

from mdgrow.reload.broadcaster import ReloadBroadcaster

LOGGER = logging.getLogger(__name__)


async def watch_root(
    root: Path,
    broadcaster: ReloadBroadcaster,
    *,
    debounce_ms: int = 100,
    stop_event: asyncio.Event | None = None,
) -> None:
    """Publish one change signal per batch of filesystem changes under ``root``."""
    LOGGER.info("Watching %s for changes", root)
    try:
        async for changes in watchfiles.awatch(
            root, debounce=debounce_ms, stop_event=stop_event
        ):
            for change_type, changed_path in changes:
                LOGGER.debug("File change: %s %s", change_type.name, changed_path)
            reached = broadcaster.publish()
            LOGGER.info("Content changed, notified %d browser(s)", reached)
    except asyncio.CancelledError:
        LOGGER.info("Watch loop cancelled")
        raise
