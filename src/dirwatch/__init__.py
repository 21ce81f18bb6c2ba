"""Top-level package for dirwatch."""

from importlib import metadata as _metadata

from dirwatch.watcher import DirectoryWatcher, FileDetail, ScanError, WatchError, WatchEvent

__all__ = [
    "__version__",
    "DirectoryWatcher",
    "FileDetail",
    "ScanError",
    "WatchError",
    "WatchEvent",
]


def __getattr__(name: str):
    if name == "__version__":
        return _metadata.version("dirwatch")
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__():
    return sorted(list(globals().keys()) + ["__version__"])
