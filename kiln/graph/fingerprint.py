"""
Filesystem queries behind node staleness.

A fingerprint is the file's last-modified time in nanoseconds, or 0 when the
file does not exist. Comparisons use ``>=`` so that a dependency written in
the same timestamp tick as its target still counts as newer.
"""

from __future__ import annotations

import os
import time
from pathlib import Path

MISSING = 0


def exists(path: str | os.PathLike) -> bool:
    """Whether the path currently exists."""
    return os.path.exists(path)


def last_write_time(path: str | os.PathLike) -> int:
    """
    Last-modified time of ``path`` in nanoseconds.

    Raises:
        FileNotFoundError: If the path does not exist
    """
    return os.stat(path).st_mtime_ns


def fingerprint(path: str | os.PathLike) -> int:
    """Fingerprint of ``path``: its mtime in nanoseconds, or MISSING."""
    try:
        return last_write_time(path)
    except (FileNotFoundError, NotADirectoryError):
        return MISSING


def is_stale_against(target: int, dependency: int) -> bool:
    """
    Compare two fingerprints.

    A missing target is always stale; a missing dependency makes its target
    stale too, since nothing guarantees the target was built from it.
    """
    if target == MISSING or dependency == MISSING:
        return True
    return dependency >= target


def touch(path: str | os.PathLike, mtime_ns: int | None = None) -> int:
    """
    Create ``path`` if needed and set its modification time.

    Args:
        path: File to touch; parent directories are created
        mtime_ns: Explicit timestamp in nanoseconds (defaults to now)

    Returns:
        The file's new fingerprint
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.touch(exist_ok=True)
    stamp = time.time_ns() if mtime_ns is None else mtime_ns
    os.utime(target, ns=(stamp, stamp))
    return fingerprint(target)
