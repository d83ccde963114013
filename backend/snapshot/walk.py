"""
FSPoll Tree Walk.

Default walk and metadata primitives used to build snapshots.
Requires Python 3.11+.
"""

import os
from collections.abc import Callable, Iterable, Iterator

from snapshot.models import PathMetadata
from utils.errors import MetadataError, ScanError
from utils.logger import get_logger

log = get_logger(__name__)

# Any callable with this shape can stand in for walk_tree
WalkFunction = Callable[[str], Iterable[tuple[str, PathMetadata | None]]]


def read_metadata(path: str) -> PathMetadata:
    """
    Read metadata for a single path without following symlinks.

    Args:
        path: Absolute path to inspect

    Returns:
        PathMetadata for the entry

    Raises:
        MetadataError: If the entry cannot be stat'ed
    """
    try:
        st = os.lstat(path)
    except OSError as e:
        raise MetadataError(path, e.strerror or str(e)) from e
    return PathMetadata.from_stat(st)


def _list_dir(path: str) -> list[str]:
    with os.scandir(path) as entries:
        return sorted(entry.name for entry in entries)


def _walk_children(
    directory: str, names: list[str]
) -> Iterator[tuple[str, PathMetadata | None]]:
    # One (directory, remaining names) frame per open level, no recursion
    stack: list[tuple[str, Iterator[str]]] = [(directory, iter(names))]

    while stack:
        parent, remaining = stack[-1]
        name = next(remaining, None)
        if name is None:
            stack.pop()
            continue

        path = os.path.join(parent, name)
        try:
            metadata = read_metadata(path)
        except MetadataError as e:
            log.debug("metadata_unavailable", path=path, reason=e.reason)
            yield path, None
            continue

        yield path, metadata

        if metadata.is_directory:
            try:
                children = _list_dir(path)
            except OSError as e:
                # Vanished or unreadable below the root: skip the subtree
                log.debug("directory_unreadable", path=path, error=str(e))
                continue
            stack.append((path, iter(children)))


def walk_tree(root: str) -> Iterator[tuple[str, PathMetadata | None]]:
    """
    Walk the tree rooted at ``root``, root included.

    Entries are yielded depth-first, parents before children and siblings
    in name order. Directory symlinks are not descended. An entry whose
    metadata cannot be read is yielded with ``None``.

    Args:
        root: Absolute path of the tree root

    Yields:
        (path, metadata-or-None) pairs

    Raises:
        ScanError: If the root cannot be stat'ed or listed
    """
    try:
        root_metadata = read_metadata(root)
    except MetadataError as e:
        raise ScanError(f"cannot read root {root}: {e.reason}") from e

    yield root, root_metadata

    if not root_metadata.is_directory:
        return

    try:
        names = _list_dir(root)
    except OSError as e:
        raise ScanError(f"cannot list root {root}: {e.strerror or e}") from e

    yield from _walk_children(root, names)
