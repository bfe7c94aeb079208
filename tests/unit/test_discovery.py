"""Tests for the discovery stack."""

import pytest

from wire_trace.records import Terminal
from wire_trace.tracing import DiscoveryStack

A = Terminal("1", "AA", "A01")
B = Terminal("2", "BB", "B01")
C = Terminal("3", "CC", "C01")


class TestPush:
    def test_push_creates_entry(self) -> None:
        stack = DiscoveryStack()
        stack.push(B, 2)
        assert len(stack) == 1
        assert stack.peek_pending_summary() == [(B, 2)]

    def test_push_same_terminal_sums_counts(self) -> None:
        stack = DiscoveryStack()
        stack.push(B, 2)
        stack.push(B, 3)
        assert len(stack) == 1
        assert stack.peek_pending_summary() == [(B, 5)]

    def test_push_matches_normalized_terminal(self) -> None:
        stack = DiscoveryStack()
        stack.push(B, 1)
        stack.push(Terminal(" 2", "bb", "b01"), 1)
        assert len(stack) == 1
        assert stack.count_for(B) == 2

    def test_repush_moves_to_top(self) -> None:
        stack = DiscoveryStack()
        stack.push(A, 1)
        stack.push(B, 1)
        stack.push(A, 1)
        assert stack.peek_pending_summary() == [(A, 2), (B, 1)]

    @pytest.mark.parametrize("count", [0, -1])
    def test_push_requires_positive_count(self, count: int) -> None:
        stack = DiscoveryStack()
        with pytest.raises(ValueError):
            stack.push(A, count)


class TestPopNext:
    def test_empty(self) -> None:
        stack = DiscoveryStack()
        assert stack.pop_next() is None
        assert stack.current is None

    def test_lifo_order(self) -> None:
        stack = DiscoveryStack()
        stack.push(A, 1)
        stack.push(B, 1)
        stack.push(C, 1)
        assert stack.pop_next() == C
        stack.decrement_current()
        assert stack.pop_next() == B
        stack.decrement_current()
        assert stack.pop_next() == A
        stack.decrement_current()
        assert stack.pop_next() is None

    def test_pop_makes_entry_current(self) -> None:
        stack = DiscoveryStack()
        stack.push(B, 2)
        assert stack.pop_next() == B
        assert stack.current is not None
        assert stack.current.terminal == B
        assert stack.current.count == 2
        assert stack.peek_pending_summary() == []

    def test_consecutive_pops_are_lifo(self) -> None:
        stack = DiscoveryStack()
        stack.push(A, 1)
        stack.push(B, 1)
        assert stack.pop_next() == B
        assert stack.pop_next() == A
        # the unfinished thread is not lost
        assert stack.peek_pending_summary() == [(B, 1)]


class TestDecrement:
    def test_without_current(self) -> None:
        stack = DiscoveryStack()
        assert stack.decrement_current() is None

    def test_counts_down_in_place_until_zero(self) -> None:
        stack = DiscoveryStack()
        stack.push(A, 1)
        stack.push(B, 2)
        stack.pop_next()
        assert stack.decrement_current() == 1
        assert stack.current is None
        assert stack.peek_pending_summary() == [(B, 1), (A, 1)]
        stack.pop_next()
        assert stack.decrement_current() == 0
        assert stack.peek_pending_summary() == [(A, 1)]

    def test_resumed_thread_stays_below_newer_entries(self) -> None:
        stack = DiscoveryStack()
        stack.push(B, 2)
        assert stack.pop_next() == B
        stack.push(C, 3)
        assert stack.decrement_current() == 1
        assert stack.peek_pending_summary() == [(C, 3), (B, 1)]
        assert stack.pop_next() == C

    def test_popping_again_keeps_previous_thread_in_place(self) -> None:
        stack = DiscoveryStack()
        stack.push(A, 1)
        stack.push(B, 1)
        stack.push(C, 1)
        assert stack.pop_next() == C
        assert stack.pop_next() == B
        assert stack.peek_pending_summary() == [(C, 1), (A, 1)]

    def test_merges_with_new_push_for_same_terminal(self) -> None:
        stack = DiscoveryStack()
        stack.push(B, 2)
        stack.pop_next()
        stack.push(B, 3)
        stack.decrement_current()
        assert stack.peek_pending_summary() == [(B, 4)]


class TestReleaseAndState:
    def test_release_current(self) -> None:
        stack = DiscoveryStack()
        stack.push(A, 1)
        stack.push(B, 2)
        stack.pop_next()
        stack.release_current()
        assert stack.current is None
        assert stack.peek_pending_summary() == [(B, 2), (A, 1)]

    def test_release_without_current(self) -> None:
        stack = DiscoveryStack()
        stack.release_current()
        assert len(stack) == 0

    def test_snapshot_restore(self) -> None:
        stack = DiscoveryStack()
        stack.push(A, 1)
        stack.push(B, 2)
        stack.pop_next()
        state = stack.snapshot()
        stack.decrement_current()
        stack.push(C, 4)
        stack.restore(state)
        assert stack.current is not None and stack.current.terminal == B
        assert stack.current.count == 2
        assert stack.peek_pending_summary() == [(A, 1)]
        assert len(stack) == 1

    def test_clear(self) -> None:
        stack = DiscoveryStack()
        stack.push(A, 1)
        stack.pop_next()
        stack.push(B, 1)
        stack.clear()
        assert len(stack) == 0
        assert stack.current is None
        assert not stack

    def test_entry_to_dict(self) -> None:
        stack = DiscoveryStack()
        stack.push(B, 2)
        entry = stack.snapshot().entries[0]
        assert entry.to_dict() == {"panel": "2", "device": "BB", "terminal": "B01", "count": 2}
