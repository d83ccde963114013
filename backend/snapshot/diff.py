"""
FSPoll Snapshot Diff.

Three-pass comparison of a retained index against a fresh snapshot.
Requires Python 3.11+.

Each pass is a generator that updates the retained index for a path
before yielding that path's event, so a consumer that has seen an event
can rely on the index already reflecting it. Fully consuming
``diff_snapshot`` leaves the index equal to the candidate.
"""

from collections.abc import Iterator

from snapshot.models import (
    Created,
    Deleted,
    FSEvent,
    Modified,
    PathMetadata,
    SnapshotIndex,
)


def metadata_changed(old: PathMetadata | None, new: PathMetadata) -> bool:
    """
    Compare two metadata records field by field.

    Timestamps are compared exactly. A missing old record always counts
    as a change.
    """
    if old is None:
        return True
    return (
        old.is_directory != new.is_directory
        or old.file_type != new.file_type
        or old.modified_time_ns != new.modified_time_ns
        or old.permission_bits != new.permission_bits
        or old.size_bytes != new.size_bytes
    )


def diff_deleted(
    index: SnapshotIndex, candidate: dict[str, PathMetadata]
) -> Iterator[Deleted]:
    """Yield Deleted for indexed paths missing from the candidate."""
    for path in [p for p in index if p not in candidate]:
        previous = index.pop(path)
        yield Deleted(path=path, previous_metadata=previous)


def diff_created(
    index: SnapshotIndex, candidate: dict[str, PathMetadata]
) -> Iterator[Created]:
    """Yield Created for candidate paths missing from the index."""
    for path, metadata in candidate.items():
        if path not in index:
            index[path] = metadata
            yield Created(path=path, metadata=metadata)


def diff_modified(
    index: SnapshotIndex, candidate: dict[str, PathMetadata]
) -> Iterator[Modified]:
    """Yield Modified for paths in both whose metadata differs."""
    for path, metadata in candidate.items():
        if path not in index:
            continue
        previous = index[path]
        if metadata_changed(previous, metadata):
            index[path] = metadata
            yield Modified(path=path, metadata=metadata, previous_metadata=previous)


def diff_snapshot(
    index: SnapshotIndex, candidate: dict[str, PathMetadata]
) -> Iterator[FSEvent]:
    """
    Run the delete, create and modify passes in that order.

    Args:
        index: Retained index, updated in place
        candidate: Freshly scanned snapshot (no metadata-less entries)

    Yields:
        Events in pass order
    """
    yield from diff_deleted(index, candidate)
    yield from diff_created(index, candidate)
    yield from diff_modified(index, candidate)
