"""
FSPoll Utilities Package.

Configuration, logging and error types shared across all packages.
Requires Python 3.11+.
"""

from utils.config import Settings, get_settings
from utils.errors import (
    ChannelClosed,
    FSPollError,
    InvalidInterval,
    MetadataError,
    PathResolutionError,
    ScanError,
)
from utils.logger import configure_logging, get_logger, LoggerMixin

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    "LoggerMixin",
    # Errors
    "FSPollError",
    "InvalidInterval",
    "PathResolutionError",
    "ScanError",
    "MetadataError",
    "ChannelClosed",
]
