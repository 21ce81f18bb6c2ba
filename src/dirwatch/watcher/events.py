"""Publish/subscribe channel for watcher notifications."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, List

LOGGER = logging.getLogger(__name__)

Handler = Callable[..., Any]


class WatchEvent(str, Enum):
    """Notifications emitted by a directory watcher.

    Payloads:
        FILE_ADDED: ``FileDetail``
        FILE_CHANGED: ``FileDetail``, ``dict[str, FieldDifference]``
        FILE_REMOVED: full path
        FOLDER_ADDED: full path
        FOLDER_REMOVED: full path
        SCANNED_DIRECTORY: directory path
    """

    FILE_ADDED = "fileAdded"
    FILE_CHANGED = "fileChanged"
    FILE_REMOVED = "fileRemoved"
    FOLDER_ADDED = "folderAdded"
    FOLDER_REMOVED = "folderRemoved"
    SCANNED_DIRECTORY = "scannedDirectory"


class EventChannel:
    """Fan out watcher events to subscribed handlers.

    Handlers run synchronously, in subscription order, inside the step that
    emits the event.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[WatchEvent, List[Handler]] = {}

    def subscribe(self, event: WatchEvent | str, handler: Handler) -> Handler:
        """Attach ``handler`` to ``event`` and return it unchanged."""
        handlers = self._subscribers.setdefault(WatchEvent(event), [])
        if handler not in handlers:
            handlers.append(handler)
        return handler

    def unsubscribe(self, event: WatchEvent | str, handler: Handler) -> None:
        """Detach ``handler`` from ``event`` if it is attached."""
        handlers = self._subscribers.get(WatchEvent(event), [])
        if handler in handlers:
            handlers.remove(handler)

    def handlers(self, event: WatchEvent | str) -> list[Handler]:
        """Return a copy of the handlers attached to ``event``."""
        return list(self._subscribers.get(WatchEvent(event), []))

    def emit(self, event: WatchEvent, *payload: Any) -> None:
        """Invoke every handler for ``event`` with ``payload``.

        A failing handler is logged and does not stop the remaining handlers.
        """
        for handler in self.handlers(event):
            try:
                handler(*payload)
            except Exception:
                LOGGER.exception("Handler %r failed for %s", handler, event.value)


__all__ = ["WatchEvent", "EventChannel", "Handler"]
