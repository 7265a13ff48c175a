"""Transaction isolation levels and the BEGIN modes they map to."""

from __future__ import annotations

import enum

__all__ = ["IsolationLevel", "begin_mode"]


class IsolationLevel(enum.IntEnum):
    """Isolation levels a caller may request when starting a transaction."""

    DEFAULT = 0
    READ_UNCOMMITTED = 1
    READ_COMMITTED = 2
    WRITE_COMMITTED = 3
    REPEATABLE_READ = 4
    SNAPSHOT = 5
    SERIALIZABLE = 6
    LINEARIZABLE = 7


_ISOLATION_MODES = {
    IsolationLevel.DEFAULT: "",
    IsolationLevel.READ_UNCOMMITTED: " ISOLATION LEVEL READ UNCOMMITTED",
    IsolationLevel.READ_COMMITTED: " ISOLATION LEVEL READ COMMITTED",
    IsolationLevel.REPEATABLE_READ: " ISOLATION LEVEL REPEATABLE READ",
    IsolationLevel.SERIALIZABLE: " ISOLATION LEVEL SERIALIZABLE",
}


def begin_mode(isolation=IsolationLevel.DEFAULT, read_only=False) -> str:
    """Return the text that follows BEGIN for the given options.

    Levels the server has no counterpart for raise ValueError.
    """
    try:
        level = IsolationLevel(isolation)
    except ValueError:
        level = None
    if level not in _ISOLATION_MODES:
        raise ValueError(f"pq: isolation level not supported: {int(isolation)}")
    mode = _ISOLATION_MODES[level]
    return mode + (" READ ONLY" if read_only else " READ WRITE")