"""
Logical block clock.

Deadlines and the price oracle read time from here; nothing advances it
except the caller.
"""

from __future__ import annotations


class BlockClock:
    """Monotonic logical timestamp in seconds."""

    def __init__(self, timestamp: int = 0) -> None:
        if timestamp < 0:
            raise ValueError(f"timestamp must be non-negative: {timestamp}")
        self._timestamp = timestamp

    def now(self) -> int:
        return self._timestamp

    def advance(self, seconds: int) -> int:
        """Move forward by ``seconds`` and return the new timestamp."""
        if seconds < 0:
            raise ValueError(f"cannot move the clock backwards: {seconds}")
        self._timestamp += seconds
        return self._timestamp

    def set(self, timestamp: int) -> None:
        if timestamp < self._timestamp:
            raise ValueError(f"cannot move the clock backwards: {timestamp} < {self._timestamp}")
        self._timestamp = timestamp

    def __repr__(self) -> str:
        return f"BlockClock({self._timestamp})"
