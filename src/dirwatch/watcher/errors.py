"""Watcher errors."""

from __future__ import annotations


class WatchError(Exception):
    """Base exception for directory watching."""


class ScanError(WatchError):
    """Raised when a directory cannot be listed during a scan pass."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(message)
        self.path = path
