"""Unit tests for decree.engine.handoff.

Tests cover:
- Rendezvous: put blocks until a receiver takes the item
- Single slot: one outstanding item at a time
- Close semantics for blocked and later put/get calls
- Timeouts
"""

import threading

import pytest

from decree.engine.handoff import Handoff, HandoffClosed, HandoffTimeout

WAIT = 5.0


def start_put(handoff: Handoff, item, results: list) -> threading.Thread:
    thread = threading.Thread(target=lambda: results.append(handoff.put(item)), daemon=True)
    thread.start()
    return thread


class TestRendezvous:
    """put and get meet in the middle."""

    def test_put_blocks_until_taken(self) -> None:
        handoff: Handoff[str] = Handoff("test")
        results: list = []
        thread = start_put(handoff, "world", results)

        thread.join(0.1)
        assert thread.is_alive()
        assert results == []

        assert handoff.get(WAIT) == "world"
        thread.join(WAIT)
        assert results == [True]

    def test_get_blocks_until_put(self) -> None:
        handoff: Handoff[int] = Handoff("test")
        received: list = []
        thread = threading.Thread(target=lambda: received.append(handoff.get(WAIT)), daemon=True)
        thread.start()

        thread.join(0.1)
        assert thread.is_alive()

        assert handoff.put(7) is True
        thread.join(WAIT)
        assert received == [7]

    def test_items_delivered_one_at_a_time(self) -> None:
        handoff: Handoff[int] = Handoff("test")
        results: list = []
        threads = [start_put(handoff, i, results) for i in range(3)]

        received = sorted(handoff.get(WAIT) for _ in range(3))
        for thread in threads:
            thread.join(WAIT)

        assert received == [0, 1, 2]
        assert results == [True, True, True]

    def test_sequential_items_keep_order(self) -> None:
        handoff: Handoff[int] = Handoff("test")
        items = list(range(5))
        producer = threading.Thread(target=lambda: [handoff.put(i) for i in items], daemon=True)
        producer.start()

        received = [handoff.get(WAIT) for _ in items]
        producer.join(WAIT)

        assert received == items


class TestClose:
    """Closing wakes and fails waiters."""

    def test_get_on_closed_raises(self) -> None:
        handoff: Handoff[int] = Handoff("test")
        handoff.close()
        with pytest.raises(HandoffClosed):
            handoff.get(WAIT)

    def test_put_on_closed_returns_false(self) -> None:
        handoff: Handoff[int] = Handoff("test")
        handoff.close()
        assert handoff.put(1) is False

    def test_close_releases_blocked_put(self) -> None:
        handoff: Handoff[int] = Handoff("test")
        results: list = []
        thread = start_put(handoff, 1, results)
        thread.join(0.1)

        handoff.close()
        thread.join(WAIT)

        assert results == [False]
        with pytest.raises(HandoffClosed):
            handoff.get(WAIT)

    def test_close_releases_blocked_get(self) -> None:
        handoff: Handoff[int] = Handoff("test")
        errors: list = []

        def receive() -> None:
            try:
                handoff.get(WAIT)
            except HandoffClosed as e:
                errors.append(e)

        thread = threading.Thread(target=receive, daemon=True)
        thread.start()
        thread.join(0.1)

        handoff.close()
        thread.join(WAIT)

        assert len(errors) == 1

    def test_close_is_idempotent(self) -> None:
        handoff: Handoff[int] = Handoff("test")
        handoff.close()
        handoff.close()
        assert handoff.closed


class TestTimeout:
    """Optional timeouts on get."""

    def test_get_times_out(self) -> None:
        handoff: Handoff[int] = Handoff("test")
        with pytest.raises(HandoffTimeout):
            handoff.get(0.05)
