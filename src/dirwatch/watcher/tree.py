"""In-memory directory tree tracked by a watcher."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, ClassVar, Iterator, Optional, Union

from .models import FileDetail


class NodeKind(str, Enum):
    """Discriminator for tree nodes."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass(slots=True)
class FileEntry:
    """Leaf node holding the latest snapshot of a file."""

    kind: ClassVar[NodeKind] = NodeKind.FILE

    detail: FileDetail


@dataclass(slots=True)
class DirectoryNode:
    """Interior node mapping child names to file entries or directories."""

    kind: ClassVar[NodeKind] = NodeKind.DIRECTORY

    path: str
    children: dict[str, "Node"] = field(default_factory=dict)

    def child(self, name: str) -> Optional["Node"]:
        """Return the child stored under ``name``, if any."""
        return self.children.get(name)

    def set_file(self, detail: FileDetail) -> FileEntry:
        """Insert or replace the entry for ``detail.file_name``.

        A directory node stored under the same name is dropped with its subtree.
        """
        entry = FileEntry(detail)
        self.children[detail.file_name] = entry
        return entry

    def discard(self, name: str, expected: "Node") -> bool:
        """Remove ``name`` only while it still refers to ``expected``.

        Returns:
            bool: True when the child was removed.
        """
        if self.children.get(name) is not expected:
            return False
        del self.children[name]
        return True


Node = Union[FileEntry, DirectoryNode]


class DirectoryTree:
    """Hierarchical record of the files and folders known under a root.

    Only directories that a scan pass has visited (or that hold a recorded
    file) ever receive a node.
    """

    def __init__(self, root: str) -> None:
        self._root = os.path.normpath(root)
        self._root_node = DirectoryNode(path=self._root)

    @property
    def root(self) -> str:
        """Return the normalized root path."""
        return self._root

    def find(self, directory: str) -> Optional[DirectoryNode]:
        """Return the node for ``directory`` without creating anything."""
        node: Node = self._root_node
        for segment in self._segments(directory):
            if node.kind is not NodeKind.DIRECTORY:
                return None
            child = node.child(segment)
            if child is None:
                return None
            node = child
        return node if node.kind is NodeKind.DIRECTORY else None

    def materialize(
        self,
        directory: str,
        on_created: Callable[[str], None] | None = None,
        on_displaced: Callable[[FileDetail], None] | None = None,
    ) -> DirectoryNode:
        """Return the node for ``directory``, creating missing ancestors.

        Args:
            directory: Directory at or below the root.
            on_created: Invoked with the path of every newly created node, outermost first.
            on_displaced: Invoked with the snapshot of a file entry that a new
                directory node replaces.

        Returns:
            DirectoryNode: Node representing ``directory``.
        """
        node = self._root_node
        for segment in self._segments(directory):
            child = node.child(segment)
            if child is None or child.kind is not NodeKind.DIRECTORY:
                if child is not None and on_displaced is not None:
                    on_displaced(child.detail)
                child = DirectoryNode(path=os.path.join(node.path, segment))
                node.children[segment] = child
                if on_created is not None:
                    on_created(child.path)
            node = child
        return node

    def iter_files(self) -> Iterator[FileDetail]:
        """Yield every tracked file snapshot."""
        for node in self._walk(self._root_node):
            if node.kind is NodeKind.FILE:
                yield node.detail

    def iter_directories(self) -> Iterator[str]:
        """Yield the paths of every tracked directory below the root."""
        for node in self._walk(self._root_node):
            if node.kind is NodeKind.DIRECTORY:
                yield node.path

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        path = os.path.normpath(os.fspath(path))
        if path == self._root:
            return True
        try:
            parent = self.find(os.path.dirname(path))
        except ValueError:
            return False
        return parent is not None and parent.child(os.path.basename(path)) is not None

    def __len__(self) -> int:
        return sum(1 for _ in self.iter_files())

    def _segments(self, directory: str) -> list[str]:
        relative = os.path.relpath(os.path.normpath(directory), self._root)
        if relative == os.curdir:
            return []
        segments = relative.split(os.sep)
        if segments[0] == os.pardir:
            raise ValueError(f"{directory} is outside of {self._root}")
        return segments

    def _walk(self, node: DirectoryNode) -> Iterator[Node]:
        for child in list(node.children.values()):
            yield child
            if child.kind is NodeKind.DIRECTORY:
                yield from self._walk(child)


__all__ = ["NodeKind", "FileEntry", "DirectoryNode", "Node", "DirectoryTree"]
