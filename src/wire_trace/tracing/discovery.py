"""Discovery stack — terminals deferred for circle-back tracing.

A terminal lands here when a committed wire reports more undiscovered
wires at its destination. Entries come back out most-recently-deferred
first (LIFO): the technician finishes the nearest open thread before
returning to older ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from wire_trace.records.record import Terminal, TerminalKey


@dataclass(frozen=True)
class PendingTerminal:
    """A terminal with *count* wires still to trace."""

    terminal: Terminal
    count: int

    def to_dict(self) -> dict[str, object]:
        return {
            "panel": self.terminal.panel,
            "device": self.terminal.device,
            "terminal": self.terminal.terminal,
            "count": self.count,
        }


@dataclass(frozen=True)
class StackState:
    """Immutable copy of the stack, used by history snapshots."""

    entries: tuple[PendingTerminal, ...] = ()
    current: Optional[TerminalKey] = None


class DiscoveryStack:
    """LIFO store of terminals with pending wire counts.

    ``pop_next`` marks the top pending entry as the *current* thread
    without moving it. The entry keeps its place in the stack while it is
    being resumed: :meth:`decrement_current` lowers its count where it
    sits and drops it at zero, and :meth:`release_current` (cancel) or a
    further ``pop_next`` simply makes it pending again.
    """

    def __init__(self) -> None:
        self._entries: list[PendingTerminal] = []  # top of stack is the end
        self._current: Optional[TerminalKey] = None

    def __len__(self) -> int:
        return len(self._pending())

    def __bool__(self) -> bool:
        return bool(self._pending())

    @property
    def current(self) -> Optional[PendingTerminal]:
        """The thread being resumed, if the current origin came from the stack."""
        position = self._current_position()
        return None if position is None else self._entries[position]

    def push(self, terminal: Terminal, count: int) -> None:
        """Defer *terminal* with *count* wires left; counts for a known terminal add up."""
        if count <= 0:
            raise ValueError(f"Pending wire count must be positive, got {count}")
        for position, existing in enumerate(self._entries):
            if existing.terminal.key == terminal.key:
                del self._entries[position]
                self._entries.append(PendingTerminal(existing.terminal, existing.count + count))
                return
        self._entries.append(PendingTerminal(terminal, count))

    def pop_next(self) -> Optional[Terminal]:
        """Take the most recently deferred terminal as the current thread."""
        pending = self._pending()
        if not pending:
            return None
        entry = pending[-1]
        self._current = entry.terminal.key
        return entry.terminal

    def decrement_current(self) -> Optional[int]:
        """Count one wire of the current thread as traced.

        Returns the remaining count, or None if no thread is current.
        """
        position = self._current_position()
        self._current = None
        if position is None:
            return None
        entry = self._entries[position]
        remaining = entry.count - 1
        if remaining > 0:
            self._entries[position] = PendingTerminal(entry.terminal, remaining)
        else:
            del self._entries[position]
        return remaining

    def release_current(self) -> None:
        """Leave an unfinished current thread pending where it sits."""
        self._current = None

    def peek_pending_summary(self) -> list[tuple[Terminal, int]]:
        """Deferred terminals in the order ``pop_next`` would return them."""
        return [(entry.terminal, entry.count) for entry in reversed(self._pending())]

    def count_for(self, terminal: Terminal) -> int:
        for entry in self._pending():
            if entry.terminal.key == terminal.key:
                return entry.count
        return 0

    def clear(self) -> None:
        self._entries.clear()
        self._current = None

    def snapshot(self) -> StackState:
        return StackState(entries=tuple(self._entries), current=self._current)

    def restore(self, state: StackState) -> None:
        self._entries = list(state.entries)
        self._current = state.current

    def _pending(self) -> list[PendingTerminal]:
        return [e for e in self._entries if e.terminal.key != self._current]

    def _current_position(self) -> Optional[int]:
        if self._current is None:
            return None
        for position, entry in enumerate(self._entries):
            if entry.terminal.key == self._current:
                return position
        return None
