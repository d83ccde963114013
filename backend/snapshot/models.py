"""
FSPoll Snapshot Data Models.

Per-path metadata, the snapshot index type and the change events
produced by diffing two snapshots.
Requires Python 3.11+.
"""

import os
import stat
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, TypeAlias


class EventKind(str, Enum):
    """Kinds of filesystem change events."""

    CREATED = "created"
    DELETED = "deleted"
    MODIFIED = "modified"


@dataclass(frozen=True, slots=True)
class PathMetadata:
    """Metadata of one filesystem entry at scan time."""

    is_directory: bool
    file_type: int
    modified_time_ns: int
    permission_bits: int
    size_bytes: int

    @classmethod
    def from_stat(cls, st: os.stat_result) -> "PathMetadata":
        """Build metadata from an ``os.stat`` / ``os.lstat`` result."""
        return cls(
            is_directory=stat.S_ISDIR(st.st_mode),
            file_type=stat.S_IFMT(st.st_mode),
            modified_time_ns=st.st_mtime_ns,
            permission_bits=stat.S_IMODE(st.st_mode),
            size_bytes=st.st_size,
        )

    @property
    def modified_time(self) -> datetime:
        """Modification time as an aware UTC datetime (microsecond precision)."""
        return datetime.fromtimestamp(self.modified_time_ns / 1e9, tz=timezone.utc)

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_directory": self.is_directory,
            "file_type": oct(self.file_type),
            "modified_time": self.modified_time.isoformat(),
            "permission_bits": oct(self.permission_bits),
            "size_bytes": self.size_bytes,
        }


# path -> metadata; None marks an entry whose metadata could not be read
SnapshotIndex: TypeAlias = dict[str, PathMetadata | None]


def _metadata_dict(metadata: PathMetadata | None) -> dict[str, Any] | None:
    return metadata.to_dict() if metadata is not None else None


@dataclass(frozen=True, slots=True)
class Created:
    """A path appeared since the previous poll."""

    kind: ClassVar[EventKind] = EventKind.CREATED

    path: str
    metadata: PathMetadata

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "path": self.path,
            "metadata": self.metadata.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class Deleted:
    """
    A path disappeared since the previous poll.

    ``previous_metadata`` is None only when the path was recorded without
    metadata by an initial scan that keeps unreadable entries.
    """

    kind: ClassVar[EventKind] = EventKind.DELETED

    path: str
    previous_metadata: PathMetadata | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "path": self.path,
            "previous_metadata": _metadata_dict(self.previous_metadata),
        }


@dataclass(frozen=True, slots=True)
class Modified:
    """A path's metadata changed since the previous poll."""

    kind: ClassVar[EventKind] = EventKind.MODIFIED

    path: str
    metadata: PathMetadata
    previous_metadata: PathMetadata | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "path": self.path,
            "metadata": self.metadata.to_dict(),
            "previous_metadata": _metadata_dict(self.previous_metadata),
        }


FSEvent: TypeAlias = Created | Deleted | Modified
