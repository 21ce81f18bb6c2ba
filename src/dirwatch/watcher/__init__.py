"""Polling-based directory change detection."""

from .deletes import DeleteDetector
from .errors import ScanError, WatchError
from .events import EventChannel, WatchEvent
from .models import FieldDifference, FileComparison, FileDetail
from .scanner import CompletionCounter, DirectoryScanner
from .service import DirectoryWatcher
from .tree import DirectoryNode, DirectoryTree, FileEntry, NodeKind

__all__ = [
    "CompletionCounter",
    "DeleteDetector",
    "DirectoryNode",
    "DirectoryScanner",
    "DirectoryTree",
    "DirectoryWatcher",
    "EventChannel",
    "FieldDifference",
    "FileComparison",
    "FileDetail",
    "FileEntry",
    "NodeKind",
    "ScanError",
    "WatchError",
    "WatchEvent",
]
