"""
FSPoll Watcher Package.

Background polling loop and the channel it delivers events on.
Requires Python 3.11+.
"""

from watcher.channel import EventChannel
from watcher.file_watcher import FileWatcher, WatcherState

__all__ = ["EventChannel", "FileWatcher", "WatcherState"]
