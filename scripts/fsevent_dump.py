#!/usr/bin/env python3
"""
FSPoll Event Dump Script.

Watches a file or directory and prints every change event.
Requires Python 3.11+.

Usage:
    python scripts/fsevent_dump.py /path/to/watch
    python scripts/fsevent_dump.py /path/to/watch --interval-ms 200 --json
"""

import argparse
import json
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from snapshot.models import FSEvent
from utils.config import get_settings
from utils.errors import FSPollError
from utils.logger import configure_logging, get_logger
from watcher.file_watcher import FileWatcher


configure_logging()
logger = get_logger("fsevent_dump")


def format_event(event: FSEvent, as_json: bool = False) -> str:
    """Render one event as a line of output."""
    if as_json:
        return json.dumps(event.to_dict())
    return f"{event.path} {event.kind.value}"


def main() -> int:
    """Main entry point."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Print filesystem change events detected by polling"
    )
    parser.add_argument("path", type=Path, help="File or directory to watch")
    parser.add_argument(
        "--interval-ms",
        type=int,
        default=200,
        help="Milliseconds between polls (default: 200)",
    )
    parser.add_argument(
        "--buffer-size",
        type=int,
        default=settings.watcher.buffer_size,
        help="Event buffer size, 0 for unbuffered (default: from settings)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print events as JSON objects",
    )

    args = parser.parse_args()

    try:
        watcher = FileWatcher(
            args.path,
            args.interval_ms / 1000.0,
            buffer_size=args.buffer_size,
        )
    except FSPollError as e:
        print(f"Error: {e}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1

    try:
        for event in watcher:
            print(format_event(event, as_json=args.json), flush=True)
    except KeyboardInterrupt:
        logger.info("interrupted")
    except FSPollError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        watcher.stop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
