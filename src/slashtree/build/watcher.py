"""
Filesystem watcher for the command source directory.

Wraps watchfiles.awatch and reports events by name:
``add``, ``change``, ``unlink``, ``addDir``, ``unlinkDir``.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import os
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Union

from watchfiles import Change, awatch

logger = logging.getLogger(__name__)

EventCallback = Callable[[str, Path], Union[Awaitable[Any], Any]]


class CommandWatcher:
    """Watches a directory tree and forwards each event to a callback.

    With ignore_initial=False, files and directories already present when
    the watcher starts are reported first as ``add``/``addDir`` events.
    Events are delivered one at a time, in order. Removing a directory
    also reports ``unlink`` for every file seen beneath it.
    """

    def __init__(self, path: Path, callback: EventCallback, ignore_initial: bool = False):
        self.path = Path(path)
        self.callback = callback
        self.ignore_initial = ignore_initial
        self._stop = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self._dirs: set[Path] = set()
        self._files: set[Path] = set()

    def start(self) -> asyncio.Task:
        """Start watching in a background task on the running loop."""
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name=f"watch:{self.path}")
        return self._task

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def close(self) -> None:
        """Stop watching and wait for the background task to exit."""
        self._stop.set()
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _run(self) -> None:
        if not self.path.is_dir():
            logger.warning(f"Not watching {self.path}: directory does not exist")
            return

        if not self.ignore_initial:
            for dirpath, dirnames, filenames in os.walk(self.path):
                for name in dirnames:
                    await self._emit("addDir", Path(dirpath, name))
                for name in filenames:
                    await self._emit("add", Path(dirpath, name))

        async for changes in awatch(self.path, stop_event=self._stop, recursive=True):
            for change, raw_path in sorted(changes, key=lambda c: c[1]):
                path = Path(raw_path)
                await self._emit(self.classify(change, path), path)

    def classify(self, change: Change, path: Path) -> str:
        """Map a watchfiles change to an event name."""
        if change == Change.deleted:
            if path in self._dirs:
                return "unlinkDir"
            return "unlink"
        if change == Change.added:
            return "addDir" if path.is_dir() else "add"
        if path.is_dir():
            return "addDir"
        return "change"

    async def _emit(self, event: str, path: Path) -> None:
        if event == "addDir":
            if path in self._dirs:
                return
            self._dirs.add(path)
        elif event == "add":
            self._files.add(path)
        elif event == "unlink":
            self._files.discard(path)
        elif event == "unlinkDir":
            # A moved-out directory arrives as a single deletion; report what was under it
            for file in sorted(f for f in self._files if f.is_relative_to(path)):
                await self._emit("unlink", file)
            nested = [d for d in self._dirs if d != path and d.is_relative_to(path)]
            for directory in sorted(nested, key=lambda d: len(d.parts), reverse=True):
                await self._emit("unlinkDir", directory)
            self._dirs.discard(path)

        try:
            result = self.callback(event, path)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Watch handler failed for {event} {path}: {e}")
