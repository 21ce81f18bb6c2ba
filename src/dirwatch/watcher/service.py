"""Polling directory watcher built on the scanner and delete detector."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

from .deletes import DeleteDetector
from .events import EventChannel, Handler, WatchEvent
from .scanner import DirectoryScanner
from .tree import DirectoryTree

LOGGER = logging.getLogger(__name__)


class DirectoryWatcher:
    """Watch a directory for changes by periodically re-scanning it.

    The watcher is inert until :meth:`start` is called from a running asyncio
    loop. Passes launched by the timer are not serialized: when a pass takes
    longer than the interval, passes overlap and interleave their updates to
    the shared tree.
    """

    def __init__(
        self,
        root: str | Path,
        recursive: bool = False,
        *,
        suppress_initial_events: bool = True,
        channel: Optional[EventChannel] = None,
    ) -> None:
        """Initialize the watcher.

        Args:
            root: Directory to monitor.
            recursive: Whether subdirectories are monitored as well.
            suppress_initial_events: Whether the baseline pass stays silent.
            channel: Optional event channel shared with other components.
        """
        self._root = os.path.abspath(os.fspath(root))
        self._recursive = recursive
        self.suppress_initial_events = suppress_initial_events
        self._channel = channel or EventChannel()
        self._tree = DirectoryTree(self._root)
        self._scanner = DirectoryScanner(
            self._tree,
            self._channel,
            DeleteDetector(self._tree, self._channel),
            recursive=recursive,
        )
        self._timer: Optional[asyncio.TimerHandle] = None
        self._interval_ms = 0
        self._passes: set[asyncio.Task[None]] = set()

    @property
    def root(self) -> str:
        """Return the absolute path of the watched root."""
        return self._root

    @property
    def recursive(self) -> bool:
        """Return whether subdirectories are monitored."""
        return self._recursive

    @property
    def tree(self) -> DirectoryTree:
        """Return the tree of known files and folders (read-only by convention)."""
        return self._tree

    @property
    def is_running(self) -> bool:
        """Return True while the periodic timer is armed."""
        return self._timer is not None

    # ------------------------------------------------------------------ #
    # Events                                                             #
    # ------------------------------------------------------------------ #

    def on(self, event: WatchEvent | str, handler: Handler) -> Handler:
        """Subscribe ``handler`` to ``event``."""
        return self._channel.subscribe(event, handler)

    def off(self, event: WatchEvent | str, handler: Handler) -> None:
        """Unsubscribe ``handler`` from ``event``."""
        self._channel.unsubscribe(event, handler)

    # ------------------------------------------------------------------ #
    # Scanning                                                           #
    # ------------------------------------------------------------------ #

    async def scan(self, suppress_events: bool = False) -> None:
        """Run one full pass over the root; errors propagate to the caller."""
        await self._scanner.scan(self._root, suppress_events)

    async def scan_directory(self, directory: str | Path, suppress_events: bool = False) -> None:
        """Run one pass over ``directory``, which must lie under the root."""
        await self._scanner.scan(os.path.abspath(os.fspath(directory)), suppress_events)

    # ------------------------------------------------------------------ #
    # Scheduling                                                         #
    # ------------------------------------------------------------------ #

    def start(self, interval_ms: Optional[int] = None) -> asyncio.Task[None]:
        """Start polling the root every ``interval_ms`` milliseconds.

        A baseline pass runs immediately using ``suppress_initial_events``.
        A zero or missing interval leaves the watcher stopped after that pass.

        Returns:
            asyncio.Task[None]: The baseline pass, which callers may await.

        Raises:
            RuntimeError: If no asyncio event loop is running.
        """
        loop = asyncio.get_running_loop()
        self.stop()
        if interval_ms and interval_ms > 0:
            self._interval_ms = interval_ms
            self._timer = loop.call_later(interval_ms / 1000, self._tick)
            LOGGER.debug("Watching %s every %d ms", self._root, interval_ms)
        return self._launch(self.suppress_initial_events)

    def stop(self) -> None:
        """Cancel the periodic timer; passes already in flight still finish."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            LOGGER.debug("Stopped watching %s", self._root)

    async def join(self) -> None:
        """Wait for every in-flight pass to finish."""
        while self._passes:
            await asyncio.gather(*self._passes, return_exceptions=True)

    def _tick(self) -> None:
        if self._timer is None:
            return
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._interval_ms / 1000, self._tick)
        self._launch(False)

    def _launch(self, suppress_events: bool) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(self.scan(suppress_events))
        self._passes.add(task)
        task.add_done_callback(self._pass_finished)
        return task

    def _pass_finished(self, task: asyncio.Task[None]) -> None:
        self._passes.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.error("Scan pass over %s failed: %s", self._root, exc)


__all__ = ["DirectoryWatcher"]
