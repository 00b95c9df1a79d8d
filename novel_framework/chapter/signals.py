"""
Edge-triggered signals written by the input layer and read by the interpreter.
"""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class AdvanceSignal:
    """
    The coalesced "player wants to proceed" flag.

    Requests do not queue: any number of request() calls before the next
    consume() count as one.
    """

    def __init__(self):
        self._pending = False

    def request(self) -> None:
        self._pending = True

    def consume(self) -> bool:
        """Return whether an advance was pending, and reset it."""
        pending = self._pending
        self._pending = False
        return pending

    def clear(self) -> None:
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending


class Latch(Generic[T]):
    """A one-value cell: set() by the UI, take() once by the interpreter."""

    def __init__(self):
        self._value: Optional[T] = None
        self._is_set = False

    def set(self, value: T) -> None:
        self._value = value
        self._is_set = True

    def take(self) -> Optional[T]:
        """Return the value and reset, or None if nothing was set."""
        if not self._is_set:
            return None
        value = self._value
        self.clear()
        return value

    def clear(self) -> None:
        self._value = None
        self._is_set = False

    @property
    def is_set(self) -> bool:
        return self._is_set
