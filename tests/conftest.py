"""
Shared pytest fixtures for kiln tests.

- clock: strictly increasing fake timestamps, safe across worker threads
- make_file: create a file with an explicit modification time
- reset_container: isolate the global service container between tests
"""

import threading
from collections.abc import Callable
from pathlib import Path

import pytest

from kiln.core import bootstrap
from kiln.graph.fingerprint import touch


class FakeClock:
    """Hands out strictly increasing nanosecond timestamps."""

    def __init__(self, start: int = 1_700_000_000 * 10**9, step: int = 10**9) -> None:
        self._now = start
        self._step = step
        self._lock = threading.Lock()

    @property
    def now(self) -> int:
        return self._now

    def tick(self) -> int:
        with self._lock:
            self._now += self._step
            return self._now


@pytest.fixture
def clock() -> FakeClock:
    """A fake clock for file timestamps."""
    return FakeClock()


@pytest.fixture
def make_file(tmp_path: Path, clock: FakeClock) -> Callable[..., Path]:
    """
    Create a file under tmp_path.

    The file gets the next clock tick as its modification time unless an
    explicit ``mtime_ns`` is given.
    """

    def _make(name: str, content: str = "", mtime_ns: int | None = None) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        touch(path, clock.tick() if mtime_ns is None else mtime_ns)
        return path

    return _make


@pytest.fixture(autouse=True)
def reset_container():
    """Reset the service container so no test sees another's registrations."""
    bootstrap.reset()
    yield
    bootstrap.reset()
