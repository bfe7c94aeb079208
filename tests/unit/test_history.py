"""Tests for the bounded undo history."""

import pytest

from wire_trace.tracing import HistoryManager, HistorySnapshot, PartialEdge, Phase, StackState


def _snap(label: str, phase: Phase = Phase.DEST_PANEL) -> HistorySnapshot:
    return HistorySnapshot(
        records=(),
        phase=phase,
        stack=StackState(),
        draft=PartialEdge(),
        label=label,
    )


class TestHistoryManager:
    def test_default_capacity(self) -> None:
        assert HistoryManager().capacity == 50

    def test_invalid_capacity(self) -> None:
        with pytest.raises(ValueError):
            HistoryManager(capacity=0)

    def test_undo_empty(self) -> None:
        history = HistoryManager()
        assert history.undo() is None
        assert not history.can_undo

    def test_undo_is_lifo(self) -> None:
        history = HistoryManager()
        history.snapshot(_snap("first"))
        history.snapshot(_snap("second"))
        assert history.undo().label == "second"
        assert history.undo().label == "first"
        assert history.undo() is None

    def test_fifty_one_snapshots_keep_fifty(self) -> None:
        history = HistoryManager()
        for i in range(51):
            history.snapshot(_snap(f"s{i}"))
        assert len(history) == 50
        assert history.evicted == 1
        labels = []
        while history.can_undo:
            labels.append(history.undo().label)
        assert labels[0] == "s50"
        assert labels[-1] == "s1"
        assert "s0" not in labels

    def test_small_capacity(self) -> None:
        history = HistoryManager(capacity=2)
        for label in ("a", "b", "c"):
            history.snapshot(_snap(label))
        assert len(history) == 2
        assert history.peek().label == "c"
        assert history.evicted == 1

    def test_snapshots_are_immutable(self) -> None:
        snap = _snap("x")
        with pytest.raises(AttributeError):
            snap.phase = Phase.IDLE  # type: ignore[misc]

    def test_clear(self) -> None:
        history = HistoryManager()
        history.snapshot(_snap("x"))
        history.clear()
        assert len(history) == 0
        assert history.peek() is None
