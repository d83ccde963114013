"""
FSPoll Test Configuration.

Pytest fixtures and configuration.
Requires Python 3.11+.
"""

import os
import stat
import sys
import threading
import time
from collections.abc import Callable, Generator, Mapping
from pathlib import Path

import pytest

from snapshot.models import PathMetadata
from utils.config import get_settings


@pytest.hookimpl(wrapper=True, tryfirst=True)
def pytest_sessionfinish(session: pytest.Session) -> Generator[None, None, None]:
    """Let pytest's recursive tmp_path cleanup remove test_deep_tree's nesting."""
    limit = sys.getrecursionlimit()
    sys.setrecursionlimit(max(limit, 10_000))
    try:
        return (yield)
    finally:
        sys.setrecursionlimit(limit)


class ScriptedWalk:
    """
    Walk primitive replaying prepared snapshots.

    Each call returns the next snapshot and the last one repeats forever.
    An exception in the script is raised instead of returning entries.
    """

    def __init__(self, *snapshots: Mapping[str, PathMetadata | None] | Exception) -> None:
        self._snapshots = list(snapshots)
        self._lock = threading.Lock()
        self.calls = 0

    def __call__(self, root: str) -> list[tuple[str, PathMetadata | None]]:
        with self._lock:
            step = self._snapshots[min(self.calls, len(self._snapshots) - 1)]
            self.calls += 1
        if isinstance(step, Exception):
            raise step
        return list(step.items())


@pytest.fixture(autouse=True)
def fresh_settings() -> Generator[None, None, None]:
    """Make every test read settings from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_metadata() -> Callable[..., PathMetadata]:
    """Factory for metadata records with sensible defaults."""

    def _make(
        size: int = 0,
        mtime_ns: int = 1_700_000_000_000_000_000,
        mode: int = 0o644,
        is_directory: bool = False,
    ) -> PathMetadata:
        return PathMetadata(
            is_directory=is_directory,
            file_type=stat.S_IFDIR if is_directory else stat.S_IFREG,
            modified_time_ns=mtime_ns,
            permission_bits=mode,
            size_bytes=size,
        )

    return _make


@pytest.fixture
def root(tmp_path: Path) -> str:
    """Canonical path of an empty directory to use as a watch root."""
    path = tmp_path / "root"
    path.mkdir()
    return str(path.resolve())


@pytest.fixture
def sample_tree(root: str) -> str:
    """
    Create a small tree:

        root/
            a.txt      (10 bytes)
            b.txt
            sub/
                c.txt
    """
    base = Path(root)
    (base / "a.txt").write_bytes(b"0123456789")
    (base / "b.txt").write_text("bee")
    (base / "sub").mkdir()
    (base / "sub" / "c.txt").write_text("sea")
    return root


@pytest.fixture
def scripted_walk() -> type[ScriptedWalk]:
    """The ScriptedWalk class, for building deterministic poll sequences."""
    return ScriptedWalk


@pytest.fixture
def wait_until() -> Callable[..., None]:
    """Poll a condition until it holds or fail the test."""

    def _wait(condition: Callable[[], bool], timeout: float = 5.0) -> None:
        deadline = time.monotonic() + timeout
        while not condition():
            if time.monotonic() > deadline:
                pytest.fail("condition not met in time")
            time.sleep(0.01)

    return _wait


@pytest.fixture
def place_file(tmp_path: Path) -> Callable[[Path, bytes], None]:
    """Write a file outside the root, then move it in atomically."""
    staging = tmp_path / "staging"
    staging.mkdir()

    def _place(target: Path, content: bytes) -> None:
        temp = staging / target.name
        temp.write_bytes(content)
        os.replace(temp, target)

    return _place
