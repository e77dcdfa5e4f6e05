from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Coroutine
from pathlib import Path
from typing import Any

from watchfiles import Change, awatch

logger = logging.getLogger(__name__)


def _is_watched(changed: Path, target: Path) -> bool:
    return changed.resolve() == target


class JsonFileWatcher:
    """Watch one JSON document on disk and hand its new text to a callback.

    The parent directory is watched rather than the file itself so editors that
    save by replacing the file are still picked up. Implements the
    ``DocumentWatcherPort`` protocol.
    """

    def __init__(
        self,
        path: str | Path,
        on_change: Callable[[str], Coroutine[Any, Any, None]],
    ) -> None:
        self._path = Path(path).resolve()
        self._on_change = on_change
        self._task: asyncio.Task[None] | None = None

    @property
    def path(self) -> Path:
        return self._path

    async def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._watch())
        logger.info("Watcher started for %s", self._path)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Watcher stopped for %s", self._path)

    async def _watch(self) -> None:
        async for changes in awatch(self._path.parent):
            touched = any(
                change != Change.deleted and _is_watched(Path(p), self._path) for change, p in changes
            )
            if not touched:
                continue
            try:
                text = self._path.read_text(encoding="utf-8")
            except (FileNotFoundError, UnicodeDecodeError):
                logger.warning("Could not read %s after change", self._path)
                continue
            logger.info("Detected change in %s (%d chars)", self._path.name, len(text))
            try:
                await self._on_change(text)
            except Exception:
                logger.exception("Error in watcher callback")
