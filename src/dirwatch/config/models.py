"""Configuration models describing dirwatch settings."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DirwatchBaseModel(BaseModel):
    """Shared configuration for dirwatch Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class WatchSettings(DirwatchBaseModel):
    """Polling behavior for directory watchers.

    Attributes:
        interval_ms: Milliseconds between scan passes; zero disables polling.
        recursive: Whether subdirectories are scanned and tracked.
        suppress_initial_events: Whether the baseline pass stays silent.
    """

    interval_ms: int = Field(default=500, ge=0)
    recursive: bool = False
    suppress_initial_events: bool = True


class LoggingSettings(DirwatchBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class CLIOptions(DirwatchBaseModel):
    """CLI behavior defaults.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
    """

    quiet_default: bool = False


class DirwatchConfig(DirwatchBaseModel):
    """Top-level configuration struct for dirwatch.

    Attributes:
        watch: Polling settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    watch: WatchSettings = Field(default_factory=WatchSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "DirwatchBaseModel",
    "WatchSettings",
    "LoggingSettings",
    "CLIOptions",
    "DirwatchConfig",
]
