"""Detection of files and folders that disappeared since the last pass."""

from __future__ import annotations

import asyncio
import logging
import os

from .events import EventChannel, WatchEvent
from .tree import DirectoryNode, DirectoryTree, Node, NodeKind

LOGGER = logging.getLogger(__name__)


class DeleteDetector:
    """Reconcile a directory's recorded children against the filesystem."""

    def __init__(self, tree: DirectoryTree, channel: EventChannel) -> None:
        self._tree = tree
        self._channel = channel

    async def detect(self, directory: str, suppress_events: bool) -> None:
        """Remove children of ``directory`` that no longer exist.

        A vanished folder is reported once and its whole subtree is dropped;
        descendants do not get their own removal events.

        Args:
            directory: Directory whose tracked children are checked.
            suppress_events: When True, prune the tree without emitting.
        """
        node = self._tree.find(directory)
        if node is None:
            return
        await asyncio.gather(
            *(
                self._check(node, name, child, suppress_events)
                for name, child in list(node.children.items())
            )
        )

    async def _check(
        self, parent: DirectoryNode, name: str, child: Node, suppress_events: bool
    ) -> None:
        if child.kind is NodeKind.FILE:
            path = child.detail.full_path
            event = WatchEvent.FILE_REMOVED
        else:
            path = child.path
            event = WatchEvent.FOLDER_REMOVED

        if await asyncio.to_thread(os.path.exists, path):
            return

        # Another pass may have replaced the entry while the check was pending.
        if not parent.discard(name, child):
            return
        LOGGER.debug("Detected removal of %s", path)
        if not suppress_events:
            self._channel.emit(event, path)


__all__ = ["DeleteDetector"]
