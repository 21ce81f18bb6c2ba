"""Shared fixtures and helpers for watcher tests."""

from __future__ import annotations

from typing import Any

import pytest

from dirwatch.watcher import DirectoryWatcher, WatchEvent


class EventRecorder:
    """Collect every event emitted by a watcher, in emission order."""

    def __init__(self, watcher: DirectoryWatcher) -> None:
        self.events: list[tuple[WatchEvent, tuple[Any, ...]]] = []
        for event in WatchEvent:
            watcher.on(event, self._handler_for(event))

    def _handler_for(self, event: WatchEvent):
        def _record(*payload: Any) -> None:
            self.events.append((event, payload))

        return _record

    def of(self, event: WatchEvent) -> list[tuple[Any, ...]]:
        """Return the payloads recorded for ``event``."""
        return [payload for kind, payload in self.events if kind is event]

    def kinds(self) -> set[WatchEvent]:
        """Return the distinct event kinds recorded so far."""
        return {kind for kind, _ in self.events}

    def clear(self) -> None:
        self.events.clear()


@pytest.fixture
def record():
    """Return a factory attaching an :class:`EventRecorder` to a watcher."""
    return EventRecorder
