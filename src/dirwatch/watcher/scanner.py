"""Single-directory scan passes."""

from __future__ import annotations

import asyncio
import logging
import os
import stat
from typing import Callable

from .deletes import DeleteDetector
from .errors import ScanError
from .events import EventChannel, WatchEvent
from .models import FileDetail
from .tree import DirectoryNode, DirectoryTree, NodeKind

LOGGER = logging.getLogger(__name__)


class CompletionCounter:
    """Count outstanding entries of a directory and fire once all are done."""

    def __init__(self, total: int, on_complete: Callable[[], None]) -> None:
        self._remaining = total
        self._on_complete = on_complete
        self._fired = False
        if total == 0:
            self._fire()

    @property
    def remaining(self) -> int:
        """Return the number of entries still being processed."""
        return self._remaining

    def done(self) -> None:
        """Mark one entry as processed."""
        self._remaining -= 1
        if self._remaining == 0:
            self._fire()

    def _fire(self) -> None:
        if self._fired:
            return
        self._fired = True
        self._on_complete()


class DirectoryScanner:
    """Scan directories and record added or changed files in the tree."""

    def __init__(
        self,
        tree: DirectoryTree,
        channel: EventChannel,
        deletes: DeleteDetector,
        *,
        recursive: bool,
    ) -> None:
        self.recursive = recursive
        self._tree = tree
        self._channel = channel
        self._deletes = deletes

    async def scan(self, directory: str, suppress_events: bool) -> None:
        """Run one pass over ``directory``.

        Every immediate entry is stat'ed and recorded; subdirectories are
        scanned as nested passes in recursive mode. ``scannedDirectory`` fires
        once all entries are processed, then deletions are reconciled.

        Args:
            directory: Directory at or below the watched root.
            suppress_events: When True, update the tree without emitting.

        A subdirectory that cannot be listed is logged and skipped; its
        siblings and the rest of the pass still run.

        Raises:
            ScanError: If ``directory`` itself cannot be listed.
        """
        directory = os.path.normpath(directory)
        try:
            names = await asyncio.to_thread(os.listdir, directory)
        except OSError as exc:
            raise ScanError(directory, f"Unable to list {directory}: {exc}") from exc

        self._materialize(directory, suppress_events)
        LOGGER.debug("Scanning %s (%d entries)", directory, len(names))

        def _finished() -> None:
            if not suppress_events:
                self._channel.emit(WatchEvent.SCANNED_DIRECTORY, directory)

        counter = CompletionCounter(len(names), _finished)
        await asyncio.gather(
            *(self._process_entry(directory, name, suppress_events, counter) for name in names)
        )
        await self._deletes.detect(directory, suppress_events)

    async def _process_entry(
        self,
        directory: str,
        name: str,
        suppress_events: bool,
        counter: CompletionCounter,
    ) -> None:
        path = os.path.join(directory, name)
        try:
            stats = await asyncio.to_thread(os.stat, path)
        except OSError as exc:
            # Usually a delete race; the delete detector reconciles it.
            LOGGER.debug("Skipping %s: %s", path, exc)
        else:
            if stat.S_ISREG(stats.st_mode):
                self._record_file(directory, path, stats, suppress_events)
            elif stat.S_ISDIR(stats.st_mode):
                if self.recursive:
                    await self._scan_subdirectory(path, suppress_events)
                else:
                    self._drop_file(directory, name, suppress_events)
        counter.done()

    async def _scan_subdirectory(self, path: str, suppress_events: bool) -> None:
        # Listing failures below the requested directory only skip that subtree.
        try:
            await self.scan(path, suppress_events)
        except ScanError as exc:
            LOGGER.warning("Skipping subtree %s: %s", exc.path, exc)

    def _record_file(
        self,
        directory: str,
        path: str,
        stats: os.stat_result,
        suppress_events: bool,
    ) -> None:
        detail = FileDetail.from_stat(path, stats)
        node = self._materialize(directory, suppress_events)
        existing = node.child(detail.file_name)

        if existing is not None and existing.kind is NodeKind.FILE:
            comparison = existing.detail.compare_to(detail)
            if not comparison.different:
                return
            node.set_file(detail)
            if not suppress_events:
                self._channel.emit(WatchEvent.FILE_CHANGED, detail, comparison.differences)
            return

        node.set_file(detail)
        if suppress_events:
            return
        if existing is not None:
            self._channel.emit(WatchEvent.FOLDER_REMOVED, existing.path)
        self._channel.emit(WatchEvent.FILE_ADDED, detail)

    def _drop_file(self, directory: str, name: str, suppress_events: bool) -> None:
        """Forget a tracked file whose name now belongs to an unwatched directory."""
        node = self._tree.find(directory)
        existing = node.child(name) if node is not None else None
        if existing is None or existing.kind is not NodeKind.FILE:
            return
        node.discard(name, existing)
        if not suppress_events:
            self._channel.emit(WatchEvent.FILE_REMOVED, existing.detail.full_path)

    def _materialize(self, directory: str, suppress_events: bool) -> DirectoryNode:
        if suppress_events:
            return self._tree.materialize(directory)
        return self._tree.materialize(
            directory,
            on_created=lambda path: self._channel.emit(WatchEvent.FOLDER_ADDED, path),
            on_displaced=lambda detail: self._channel.emit(
                WatchEvent.FILE_REMOVED, detail.full_path
            ),
        )


__all__ = ["CompletionCounter", "DirectoryScanner"]
