"""
FSPoll Snapshot Index.

Builds the path -> metadata mapping for a tree.
Requires Python 3.11+.
"""

from snapshot.models import SnapshotIndex
from snapshot.walk import WalkFunction, walk_tree
from utils.errors import ScanError
from utils.logger import get_logger

log = get_logger(__name__)


def build_index(
    root: str,
    *,
    walk: WalkFunction = walk_tree,
    keep_unreadable: bool = False,
) -> SnapshotIndex:
    """
    Walk ``root`` and index every entry by path.

    Entries whose metadata could not be read are skipped unless
    ``keep_unreadable`` is set, in which case they are stored with a
    ``None`` value.

    Args:
        root: Canonical absolute root path
        walk: Walk primitive yielding (path, metadata-or-None) pairs
        keep_unreadable: Record metadata-less entries instead of skipping them

    Returns:
        A new SnapshotIndex

    Raises:
        ScanError: If the walk fails as a whole
    """
    index: SnapshotIndex = {}
    skipped = 0

    try:
        for path, metadata in walk(root):
            if metadata is None and not keep_unreadable:
                skipped += 1
                continue
            index[path] = metadata
    except OSError as e:
        raise ScanError(f"walk of {root} failed: {e}") from e

    log.debug(
        "snapshot_built",
        root=root,
        entries=len(index),
        skipped=skipped,
        kept_unreadable=keep_unreadable,
    )
    return index
