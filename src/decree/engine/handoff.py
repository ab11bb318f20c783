"""Single-slot blocking handoff between the turn loop and its consumer.

A Handoff behaves like an unbuffered channel: `put` does not return until a
receiver has taken the item, and `get` waits until an item is offered. At most
one item is ever outstanding, which throttles the producer to the consumer's
pace. Waiting uses a condition variable; nothing polls.

Closing a handoff wakes every waiter. A blocked or later `put` returns False,
and `get` raises HandoffClosed once the slot is empty.
"""

from __future__ import annotations

import threading
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class HandoffClosed(Exception):
    """Raised by Handoff.get when the handoff is closed and holds no item."""


class HandoffTimeout(Exception):
    """Raised by Handoff.get when no item arrived within the timeout."""


class Handoff(Generic[T]):
    """Blocking rendezvous point for a single item at a time."""

    def __init__(self, name: str = "handoff") -> None:
        self.name = name
        self._cond = threading.Condition()
        self._item: Optional[T] = None
        self._full = False
        self._taken = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def put(self, item: T) -> bool:
        """Offer an item and block until a receiver takes it.

        Returns:
            True if the item was taken, False if the handoff was closed first.
        """
        with self._cond:
            while self._full and not self._closed:
                self._cond.wait()
            if self._closed:
                return False
            self._item = item
            self._full = True
            ticket = self._taken + 1
            self._cond.notify_all()
            while self._taken < ticket and not self._closed:
                self._cond.wait()
            if self._taken >= ticket:
                return True
            # Closed before anyone took it.
            self._item = None
            self._full = False
            return False

    def get(self, timeout: Optional[float] = None) -> T:
        """Block until an item is offered and take it.

        Args:
            timeout: Seconds to wait; None waits forever

        Raises:
            HandoffClosed: If the handoff is closed and empty.
            HandoffTimeout: If the timeout expired first.
        """
        with self._cond:
            if not self._cond.wait_for(lambda: self._full or self._closed, timeout):
                raise HandoffTimeout(f"No item on '{self.name}' within {timeout}s")
            if not self._full:
                raise HandoffClosed(f"Handoff '{self.name}' is closed")
            item = self._item
            self._item = None
            self._full = False
            self._taken += 1
            self._cond.notify_all()
            return item  # type: ignore[return-value]

    def close(self) -> None:
        """Close the handoff and wake every waiter. Idempotent."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __repr__(self) -> str:
        return f"Handoff(name={self.name!r}, closed={self._closed})"
