"""File metadata snapshots and their comparison results."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict


@dataclass(frozen=True, slots=True)
class FieldDifference:
    """Previous and current value of a single changed field."""

    base_value: Any
    compared_value: Any


@dataclass(slots=True)
class FileComparison:
    """Outcome of comparing two snapshots of the same path.

    Attributes:
        different: True when at least one field differs.
        differences: Changed field names mapped to their old and new values.
    """

    different: bool = False
    differences: dict[str, FieldDifference] = field(default_factory=dict)


def _normalize(value: Any) -> Any:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    return value


class FileDetail(BaseModel):
    """Metadata observed for one file during a scan pass.

    Attributes:
        directory: Parent directory of the file.
        full_path: Directory and file name joined; the identity key.
        file_name: Base name of the file.
        size: Size in bytes.
        extension: Extension including the leading dot, or an empty string.
        accessed: Last access time.
        modified: Last modification time.
        created: Creation time (inode change time where birth time is unavailable).
    """

    model_config = ConfigDict(frozen=True)

    directory: str
    full_path: str
    file_name: str
    size: int
    extension: str
    accessed: datetime
    modified: datetime
    created: datetime

    @classmethod
    def from_stat(cls, path: str, stats: os.stat_result) -> "FileDetail":
        """Build a snapshot from ``os.stat`` output for ``path``."""
        created = getattr(stats, "st_birthtime", None)
        if created is None:
            created = stats.st_ctime
        return cls(
            directory=os.path.dirname(path),
            full_path=path,
            file_name=os.path.basename(path),
            size=stats.st_size,
            extension=os.path.splitext(path)[1],
            accessed=datetime.fromtimestamp(stats.st_atime, tz=timezone.utc),
            modified=datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc),
            created=datetime.fromtimestamp(created, tz=timezone.utc),
        )

    def compare_to(self, other: "FileDetail") -> FileComparison:
        """Compare every field of this snapshot against ``other``.

        Timestamps are compared as UTC instants; everything else by value.
        """
        result = FileComparison()
        for name in type(self).model_fields:
            base = getattr(self, name)
            compared = getattr(other, name)
            if _normalize(base) != _normalize(compared):
                result.differences[name] = FieldDifference(base_value=base, compared_value=compared)
        result.different = bool(result.differences)
        return result


__all__ = ["FileDetail", "FileComparison", "FieldDifference"]
