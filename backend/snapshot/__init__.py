"""
FSPoll Snapshot Package.

Tree snapshots and the diff passes that turn two snapshots into events.
Requires Python 3.11+.
"""

from snapshot.models import (
    EventKind,
    PathMetadata,
    SnapshotIndex,
    Created,
    Deleted,
    Modified,
    FSEvent,
)
from snapshot.walk import WalkFunction, read_metadata, walk_tree
from snapshot.index import build_index
from snapshot.diff import (
    diff_created,
    diff_deleted,
    diff_modified,
    diff_snapshot,
    metadata_changed,
)

__all__ = [
    # Models
    "EventKind",
    "PathMetadata",
    "SnapshotIndex",
    "Created",
    "Deleted",
    "Modified",
    "FSEvent",
    # Primitives
    "WalkFunction",
    "read_metadata",
    "walk_tree",
    "build_index",
    # Diff
    "metadata_changed",
    "diff_deleted",
    "diff_created",
    "diff_modified",
    "diff_snapshot",
]
