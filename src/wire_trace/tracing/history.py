"""Bounded undo history over the whole tracing interaction."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple

from wire_trace.config import DEFAULT_HISTORY_CAPACITY

if TYPE_CHECKING:
    from wire_trace.records.record import Record, Terminal
    from wire_trace.tracing.discovery import StackState
    from wire_trace.tracing.engine import PartialEdge, Phase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistorySnapshot:
    """Everything the engine needs to return to an earlier prompt.

    Records are immutable, so the record tuple is shared with the store
    rather than deep-copied.
    """

    records: Tuple[Record, ...]
    phase: Phase
    stack: StackState
    draft: PartialEdge
    origin: Optional[Terminal] = None
    label: str = ""


class HistoryManager:
    """Ring buffer of snapshots: oldest evicted first, newest restored first."""

    def __init__(self, capacity: int = DEFAULT_HISTORY_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"History capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._snapshots: deque[HistorySnapshot] = deque(maxlen=capacity)
        self._evicted = 0

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def can_undo(self) -> bool:
        return bool(self._snapshots)

    @property
    def evicted(self) -> int:
        """How many snapshots have fallen off the oldest end."""
        return self._evicted

    def snapshot(self, state: HistorySnapshot) -> None:
        if len(self._snapshots) == self.capacity:
            self._evicted += 1
            logger.debug("History full (%d), evicting oldest snapshot", self.capacity)
        self._snapshots.append(state)

    def undo(self) -> Optional[HistorySnapshot]:
        """Pop the most recent snapshot, or None when there is nothing to undo."""
        if not self._snapshots:
            return None
        return self._snapshots.pop()

    def peek(self) -> Optional[HistorySnapshot]:
        return self._snapshots[-1] if self._snapshots else None

    def clear(self) -> None:
        self._snapshots.clear()
