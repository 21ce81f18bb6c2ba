"""Tests for the watcher event channel."""

from __future__ import annotations

import logging

import pytest

from dirwatch.watcher import EventChannel, WatchEvent


def test_handlers_run_in_subscription_order() -> None:
    """Ensure handlers run in the order they subscribed."""
    channel = EventChannel()
    calls: list[str] = []
    channel.subscribe(WatchEvent.FILE_REMOVED, lambda path: calls.append(f"first:{path}"))
    channel.subscribe("fileRemoved", lambda path: calls.append(f"second:{path}"))

    channel.emit(WatchEvent.FILE_REMOVED, "/tmp/a")

    assert calls == ["first:/tmp/a", "second:/tmp/a"]


def test_unsubscribe_detaches_handler() -> None:
    """Ensure an unsubscribed handler is no longer called."""
    channel = EventChannel()
    calls: list[str] = []
    handler = channel.subscribe(WatchEvent.FOLDER_ADDED, calls.append)

    channel.unsubscribe(WatchEvent.FOLDER_ADDED, handler)
    channel.emit(WatchEvent.FOLDER_ADDED, "/tmp/a")

    assert calls == []
    assert channel.handlers(WatchEvent.FOLDER_ADDED) == []


def test_unknown_event_name_is_rejected() -> None:
    """Ensure subscribing to an unknown event name fails."""
    with pytest.raises(ValueError):
        EventChannel().subscribe("fileRenamed", print)


def test_failing_handler_does_not_block_others(caplog: pytest.LogCaptureFixture) -> None:
    """Ensure a raising handler is logged and later handlers still run."""
    channel = EventChannel()
    calls: list[str] = []

    def _boom(path: str) -> None:
        raise RuntimeError("handler failure")

    channel.subscribe(WatchEvent.SCANNED_DIRECTORY, _boom)
    channel.subscribe(WatchEvent.SCANNED_DIRECTORY, calls.append)

    with caplog.at_level(logging.ERROR, logger="dirwatch.watcher.events"):
        channel.emit(WatchEvent.SCANNED_DIRECTORY, "/tmp")

    assert calls == ["/tmp"]
    assert "scannedDirectory" in caplog.text
