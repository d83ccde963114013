"""
FSPoll File Watcher.

Polling-based change detection for a directory tree.
Requires Python 3.11+.
"""

import asyncio
import math
import threading
from collections import Counter
from collections.abc import AsyncIterator, Iterable, Iterator
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Any

from snapshot.diff import diff_snapshot
from snapshot.index import build_index
from snapshot.models import FSEvent, SnapshotIndex
from snapshot.walk import WalkFunction, walk_tree
from utils.config import get_settings
from utils.errors import (
    ChannelClosed,
    InvalidInterval,
    PathResolutionError,
    ScanError,
)
from utils.logger import LoggerMixin
from watcher.channel import EventChannel

# How long each worker-thread receive waits during async iteration
_ASYNC_RECEIVE_TIMEOUT = 0.1


class WatcherState(str, Enum):
    """Lifecycle states of a FileWatcher."""

    ACTIVE = "active"
    STOPPING = "stopping"
    STOPPED = "stopped"


def _interval_seconds(interval: float | timedelta) -> float:
    """Convert an interval to seconds, rejecting non-positive values."""
    if isinstance(interval, timedelta):
        seconds = interval.total_seconds()
    elif isinstance(interval, bool):
        raise InvalidInterval(f"interval must be a duration, got {interval!r}")
    else:
        try:
            seconds = float(interval)
        except (TypeError, ValueError) as e:
            raise InvalidInterval(f"interval must be a duration, got {interval!r}") from e

    if not seconds > 0 or math.isinf(seconds):
        raise InvalidInterval(f"interval must be > 0, got {interval!r}")
    return seconds


def _resolve_root(path: str | Path) -> str:
    """Resolve the watched path to a canonical absolute path."""
    try:
        return str(Path(path).expanduser().resolve(strict=True))
    except (OSError, RuntimeError) as e:
        raise PathResolutionError(f"cannot resolve {path}: {e}") from e


class FileWatcher(LoggerMixin):
    """
    Watches a directory tree by periodic re-scanning.

    Construction scans the tree once, then starts a background thread that
    re-scans every ``interval`` and sends Deleted, Created and Modified
    events (in that order) on a blocking channel. A consumer that does not
    keep up holds back the poll loop.

    Usage:
        with FileWatcher("/srv/data", interval=0.5) as watcher:
            for event in watcher:
                print(event.kind.value, event.path)
    """

    def __init__(
        self,
        path: str | Path,
        interval: float | timedelta | None = None,
        *,
        buffer_size: int | None = None,
        walk: WalkFunction | None = None,
        keep_unreadable: bool | None = None,
        stop_timeout: float | None = None,
    ) -> None:
        """
        Initialize the watcher and start polling.

        Args:
            path: Root of the tree to watch
            interval: Poll interval in seconds or as a timedelta
            buffer_size: Event channel capacity, 0 for rendezvous
            walk: Walk primitive, defaults to walk_tree
            keep_unreadable: Keep metadata-less entries from the initial scan
            stop_timeout: Seconds stop() waits for the poll loop to exit

        Raises:
            InvalidInterval: If interval is not strictly positive
            PathResolutionError: If path cannot be resolved
            ScanError: If the initial scan fails
        """
        settings = get_settings().watcher

        if interval is None:
            interval = settings.interval_seconds
        self._interval = _interval_seconds(interval)
        self._root = _resolve_root(path)

        self._walk = walk or walk_tree
        self._keep_unreadable = (
            settings.keep_unreadable if keep_unreadable is None else keep_unreadable
        )
        self._stop_timeout = (
            settings.stop_timeout if stop_timeout is None else stop_timeout
        )

        self._index: SnapshotIndex = build_index(
            self._root, walk=self._walk, keep_unreadable=self._keep_unreadable
        )

        self._channel: EventChannel[FSEvent] = EventChannel(
            settings.buffer_size if buffer_size is None else buffer_size
        )
        self._error: ScanError | None = None
        self._state = WatcherState.ACTIVE
        self._state_lock = threading.Lock()
        self._wakeup = threading.Event()

        self._thread = threading.Thread(
            target=self._run,
            name=f"FileWatcher({self._root})",
            daemon=True,
        )
        self._thread.start()

        self.log.info(
            "file_watcher_started",
            path=self._root,
            interval=self._interval,
            buffer_size=self._channel.capacity,
            entries=len(self._index),
        )

    @property
    def root(self) -> str:
        """Canonical absolute path of the watched tree."""
        return self._root

    @property
    def interval(self) -> float:
        """Poll interval in seconds."""
        return self._interval

    @property
    def buffer_size(self) -> int:
        return self._channel.capacity

    @property
    def state(self) -> WatcherState:
        with self._state_lock:
            return self._state

    @property
    def is_running(self) -> bool:
        """Check if the poll loop is active."""
        return self.state is WatcherState.ACTIVE

    @property
    def error(self) -> ScanError | None:
        """The re-scan failure that terminated the watcher, if any."""
        return self._error

    @property
    def index(self) -> SnapshotIndex:
        """Copy of the retained index."""
        return self._index.copy()

    def _is_active(self) -> bool:
        with self._state_lock:
            return self._state is WatcherState.ACTIVE

    def _run(self) -> None:
        """Poll loop, runs on the watcher thread."""
        try:
            while self._is_active():
                candidate = build_index(self._root, walk=self._walk)

                if not self._publish(diff_snapshot(self._index, candidate)):
                    return

                if self._wakeup.wait(self._interval):
                    return
        except ScanError as e:
            self._error = e
            self.log.error("rescan_failed", path=self._root, error=str(e))
        except Exception as e:
            self._error = ScanError(f"rescan of {self._root} failed: {e!r}")
            self._error.__cause__ = e
            self.log.exception("rescan_crashed", path=self._root)
        finally:
            with self._state_lock:
                self._state = WatcherState.STOPPED
            self._channel.close()
            self.log.debug("poll_loop_exited", path=self._root)

    def _publish(self, events: Iterable[FSEvent]) -> bool:
        """
        Send one iteration's events.

        Returns:
            False if the watcher stopped before all events were sent
        """
        counts: Counter[str] = Counter()
        for event in events:
            if not self._is_active():
                return False
            if not self._channel.send(event):
                return False
            counts[event.kind.value] += 1

        self.log.debug("poll_completed", path=self._root, **counts)
        return True

    def stop(self) -> None:
        """
        Stop polling and close the event stream.

        Safe to call more than once and from any thread. Waits up to
        ``stop_timeout`` seconds for the poll loop to exit.
        """
        with self._state_lock:
            if self._state is not WatcherState.ACTIVE:
                self.log.debug("file_watcher_already_stopped", state=self._state.value)
                return
            self._state = WatcherState.STOPPING

        self._wakeup.set()
        self._channel.close()

        if threading.current_thread() is not self._thread:
            self._thread.join(timeout=self._stop_timeout)
            if self._thread.is_alive():
                self.log.warning(
                    "file_watcher_stop_timeout",
                    path=self._root,
                    timeout=self._stop_timeout,
                )
                return

        self.log.info("file_watcher_stopped", path=self._root)

    def receive(self, timeout: float | None = None) -> FSEvent:
        """
        Receive the next event.

        Args:
            timeout: Seconds to wait, None to wait indefinitely

        Raises:
            ChannelClosed: If the watcher was stopped and all events are drained
            ScanError: If the watcher terminated because a re-scan failed
            TimeoutError: If no event arrived in time
        """
        try:
            return self._channel.receive(timeout)
        except ChannelClosed:
            if self._error is None:
                raise
        raise self._error

    def __iter__(self) -> Iterator[FSEvent]:
        while True:
            try:
                yield self.receive()
            except ChannelClosed:
                return

    async def __aiter__(self) -> AsyncIterator[FSEvent]:
        """
        Iterate events from asyncio code without blocking the event loop.

        Each receive runs in a worker thread with a short timeout. An event
        taken by a worker whose consumer was cancelled is lost.
        """
        while True:
            try:
                yield await asyncio.to_thread(self.receive, _ASYNC_RECEIVE_TIMEOUT)
            except TimeoutError:
                continue
            except ChannelClosed:
                return

    def __enter__(self) -> "FileWatcher":
        return self

    def __exit__(self, *args: Any) -> None:
        self.stop()

    def __repr__(self) -> str:
        return (
            f"FileWatcher(root={self._root!r}, interval={self._interval}, "
            f"state={self.state.value})"
        )
