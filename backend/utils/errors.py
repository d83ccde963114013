"""
FSPoll Error Types.

Exception hierarchy shared by the snapshot and watcher packages.
Requires Python 3.11+.
"""


class FSPollError(Exception):
    """Base class for all FSPoll errors."""


class InvalidInterval(FSPollError, ValueError):
    """The poll interval is not a strictly positive duration."""


class PathResolutionError(FSPollError):
    """The watched path could not be resolved to an existing absolute path."""


class ScanError(FSPollError):
    """
    A tree walk failed as a whole.

    Raised when the root vanished or cannot be read. Fatal to construction,
    and terminates a running watcher.
    """


class MetadataError(FSPollError):
    """Metadata for a single entry could not be retrieved."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"cannot read metadata for {path}: {reason}")
        self.path = path
        self.reason = reason


class ChannelClosed(FSPollError):
    """The event channel is closed and has no more events to deliver."""
