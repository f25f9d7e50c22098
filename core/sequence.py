"""Thread-safe monotonic ID counters for orders and invoices."""

from __future__ import annotations

import threading


class IdSequence:
    """
    Hands out increasing integer IDs starting at ``start``.

    Safe to share between threads. ``reset()`` exists for test isolation
    only; production code never rewinds a sequence.
    """

    def __init__(self, start: int):
        self._start = start
        self._next = start
        self._lock = threading.Lock()

    @property
    def start(self) -> int:
        return self._start

    def next_id(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
            return value

    def peek(self) -> int:
        """The ID the next call to next_id() will return."""
        with self._lock:
            return self._next

    def advance_past(self, used_id: int) -> None:
        """Make sure ``used_id`` is never handed out again (used on reload)."""
        with self._lock:
            if used_id >= self._next:
                self._next = used_id + 1

    def reset(self) -> None:
        with self._lock:
            self._next = self._start
