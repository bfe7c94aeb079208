"""Trace engine — the prompt-by-prompt state machine for verifying wires.

Each operator input answers the prompt of the current :class:`Phase`.
A pass collects one directed wire::

    IDLE -> SEED_PANEL -> SEED_DEVICE -> SEED_TERMINAL
         -> DEST_PANEL -> DEST_DEVICE -> DEST_TERMINAL -> CONFIRM_FOUND
    yes: -> STATUS_ASSIGN -> REMAINING_COUNT -> COMMIT
    no:  -> UNCONFIRMED_COMMIT -> COMMIT

after which tracing loops back to DEST_PANEL with a new origin. Every
accepted input is checkpointed in the session history before anything
is mutated, so :meth:`TraceEngine.undo` steps back exactly one input.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Deque, Dict, Optional

from wire_trace.codec.tabular import CodecWarning, ParseResult, TabularCodec
from wire_trace.config import ContinuationPolicy, TraceConfig
from wire_trace.records.record import Record, Terminal, WireStatus
from wire_trace.tracing.discovery import DiscoveryStack
from wire_trace.tracing.history import HistorySnapshot
from wire_trace.tracing.session import TraceSession

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    IDLE = "IDLE"
    SEED_PANEL = "SEED_PANEL"
    SEED_DEVICE = "SEED_DEVICE"
    SEED_TERMINAL = "SEED_TERMINAL"
    DEST_PANEL = "DEST_PANEL"
    DEST_DEVICE = "DEST_DEVICE"
    DEST_TERMINAL = "DEST_TERMINAL"
    CONFIRM_FOUND = "CONFIRM_FOUND"
    STATUS_ASSIGN = "STATUS_ASSIGN"
    REMAINING_COUNT = "REMAINING_COUNT"
    UNCONFIRMED_COMMIT = "UNCONFIRMED_COMMIT"
    COMMIT = "COMMIT"


# Passed through within a single input; never left as the current phase.
AUTOMATIC_PHASES = frozenset(
    {Phase.STATUS_ASSIGN, Phase.UNCONFIRMED_COMMIT, Phase.COMMIT}
)

EVENT_LOG_LIMIT = 1000
PHASE_TRAIL_LIMIT = 1000

# phase -> (draft attribute, next phase, field label)
_FIELD_PHASES: Dict[Phase, tuple[str, Phase, str]] = {
    Phase.SEED_PANEL: ("seed_panel", Phase.SEED_DEVICE, "Panel"),
    Phase.SEED_DEVICE: ("seed_device", Phase.SEED_TERMINAL, "Device"),
    Phase.SEED_TERMINAL: ("seed_terminal", Phase.DEST_PANEL, "Terminal"),
    Phase.DEST_PANEL: ("to_panel", Phase.DEST_DEVICE, "Destination panel"),
    Phase.DEST_DEVICE: ("to_device", Phase.DEST_TERMINAL, "Destination device"),
    Phase.DEST_TERMINAL: ("to_terminal", Phase.CONFIRM_FOUND, "Destination terminal"),
}

PROMPTS: Dict[Phase, str] = {
    Phase.IDLE: "Not tracing. Start a trace to begin.",
    Phase.SEED_PANEL: "Starting panel?",
    Phase.SEED_DEVICE: "Starting device on panel {draft.seed_panel}?",
    Phase.SEED_TERMINAL: "Starting terminal on {draft.seed_panel}/{draft.seed_device}?",
    Phase.DEST_PANEL: "Wire from {origin} lands on which panel?",
    Phase.DEST_DEVICE: "Which device on panel {draft.to_panel}?",
    Phase.DEST_TERMINAL: "Which terminal on {draft.to_panel}/{draft.to_device}?",
    Phase.CONFIRM_FOUND: "Wire {origin} -> {destination} found? (y/n)",
    Phase.STATUS_ASSIGN: "Marking wire confirmed.",
    Phase.REMAINING_COUNT: "How many more wires at {destination} still to trace?",
    Phase.UNCONFIRMED_COMMIT: "Recording wire as unconfirmed.",
    Phase.COMMIT: "Saving wire.",
}


@dataclass(frozen=True)
class PartialEdge:
    """Fields collected so far for the wire being traced."""

    seed_panel: str = ""
    seed_device: str = ""
    seed_terminal: str = ""
    to_panel: str = ""
    to_device: str = ""
    to_terminal: str = ""
    status: Optional[WireStatus] = None

    @property
    def seed(self) -> Terminal:
        return Terminal(self.seed_panel, self.seed_device, self.seed_terminal)

    @property
    def destination(self) -> Terminal:
        return Terminal(self.to_panel, self.to_device, self.to_terminal)

    def with_field(self, name: str, value: str) -> PartialEdge:
        return replace(self, **{name: value})


@dataclass(frozen=True)
class InputOutcome:
    """What happened to one operator command."""

    accepted: bool
    phase: Phase
    message: str = ""
    record: Optional[Record] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "accepted": self.accepted,
            "phase": self.phase.value,
            "message": self.message,
            "record": self.record.to_dict() if self.record else None,
        }


class TraceEngine:
    """Drives one operator through wire verification.

    The engine owns no state of its own beyond the phase, the partial
    edge, and the current origin; records, the discovery stack, and the
    undo history live in the injected :class:`TraceSession`.
    """

    def __init__(
        self,
        session: TraceSession | None = None,
        config: TraceConfig | None = None,
        codec: TabularCodec | None = None,
    ) -> None:
        self.config = config or TraceConfig()
        self.session = session or TraceSession.create(self.config.history_capacity)
        self.codec = codec or TabularCodec.from_config(self.config)
        self._phase = Phase.IDLE
        self._draft = PartialEdge()
        self._origin: Optional[Terminal] = None
        self._last_import_warnings: list[CodecWarning] = []
        self._event_log: Deque[dict[str, Any]] = deque(maxlen=EVENT_LOG_LIMIT)
        self._trail: Deque[Phase] = deque([Phase.IDLE], maxlen=PHASE_TRAIL_LIMIT)

        handlers: Dict[Phase, Callable[[str], InputOutcome]] = {
            phase: self._collect_field for phase in _FIELD_PHASES
        }
        handlers[Phase.CONFIRM_FOUND] = self._answer_found
        handlers[Phase.REMAINING_COUNT] = self._answer_remaining
        self._handlers = handlers

    # ------------------------------------------------------------------
    # Output surface
    # ------------------------------------------------------------------

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def prompt(self) -> str:
        return PROMPTS[self._phase].format(
            draft=self._draft,
            origin=self._origin or "",
            destination=self._draft.destination,
        )

    @property
    def draft(self) -> PartialEdge:
        return self._draft

    @property
    def current_origin(self) -> Optional[Terminal]:
        return self._origin

    @property
    def records(self) -> tuple[Record, ...]:
        return self.session.store.all()

    @property
    def stack(self) -> DiscoveryStack:
        return self.session.stack

    @property
    def pending_summary(self) -> list[tuple[Terminal, int]]:
        return self.session.stack.peek_pending_summary()

    @property
    def last_import_warnings(self) -> list[CodecWarning]:
        return list(self._last_import_warnings)

    @property
    def event_log(self) -> list[dict[str, Any]]:
        """Audit trail of the most recent commands that changed the session."""
        return list(self._event_log)

    @property
    def phase_trail(self) -> tuple[Phase, ...]:
        """Recently entered phases, oldest first, including automatic ones."""
        return tuple(self._trail)

    # ------------------------------------------------------------------
    # Command surface
    # ------------------------------------------------------------------

    def start(self, origin: Terminal | None = None) -> InputOutcome:
        """Begin tracing, prompting for a seed terminal unless *origin* is given."""
        if self._phase is not Phase.IDLE:
            return self._reject("A trace is already in progress")
        self._checkpoint("start")
        self._begin(origin)
        return self._accept()

    def submit(self, text: str) -> InputOutcome:
        """Answer the current prompt with one line of operator input.

        Input while idle starts a new trace and is taken as the starting
        panel; one undo takes back both.
        """
        value = text.strip()
        if self._phase is Phase.IDLE:
            if not value:
                return self.start()
            self._checkpoint(f"start at panel {value!r}")
            self._begin(None)
            return self._store_field(value)
        return self._handlers[self._phase](value)

    def undo(self) -> InputOutcome:
        """Restore the state captured before the last accepted command."""
        snapshot = self.session.history.undo()
        if snapshot is None:
            return self._reject("Nothing to undo")
        self.session.store.restore(snapshot.records)
        self.session.stack.restore(snapshot.stack)
        self._draft = snapshot.draft
        self._origin = snapshot.origin
        self._transition(snapshot.phase)
        self._emit_event("undo", undone=snapshot.label)
        return self._accept(f"Undid {snapshot.label}")

    def cancel(self) -> InputOutcome:
        """Stop tracing; partial fields are dropped, committed wires are kept."""
        if self._phase is Phase.IDLE:
            return self._reject("Not tracing")
        self._checkpoint("cancel")
        self.session.stack.release_current()
        self._draft = PartialEdge()
        self._origin = None
        self._transition(Phase.IDLE)
        self._emit_event("trace_cancelled")
        return self._accept("Trace cancelled")

    def circle_back(self) -> InputOutcome:
        """Leave the current thread and resume the most recently deferred terminal."""
        self._checkpoint("circle back")
        stack = self.session.stack
        terminal = stack.pop_next()
        if terminal is None and stack.current is not None:
            terminal = stack.current.terminal
        self._draft = PartialEdge()
        self._origin = terminal
        if terminal is None:
            self._transition(Phase.SEED_PANEL)
            return self._accept("No deferred terminals; enter a new starting point")
        self._transition(Phase.DEST_PANEL)
        self._emit_event("circled_back", origin=terminal)
        return self._accept(f"Resuming at {terminal}")

    def import_text(self, text: str) -> ParseResult:
        """Replace the session records with the contents of a wiring file."""
        result = self.codec.parse(text)
        self._checkpoint("import")
        self.session.store.replace_all(result.records)
        self.session.stack.clear()
        self._draft = PartialEdge()
        self._origin = None
        self._last_import_warnings = list(result.warnings)
        self._transition(Phase.IDLE)
        self._emit_event(
            "imported", records=len(result.records), warnings=len(result.warnings)
        )
        return result

    def export_text(self) -> str:
        text = self.codec.serialize(self.session.store.all())
        self._emit_event("exported", records=len(self.session.store))
        return text

    # ------------------------------------------------------------------
    # Phase handlers
    # ------------------------------------------------------------------

    def _collect_field(self, value: str) -> InputOutcome:
        attribute, next_phase, label = _FIELD_PHASES[self._phase]
        if not value:
            return self._reject(f"{label} is required")
        self._checkpoint(f"{label.lower()} {value!r}")
        return self._store_field(value)

    def _store_field(self, value: str) -> InputOutcome:
        attribute, next_phase, _ = _FIELD_PHASES[self._phase]
        self._draft = self._draft.with_field(attribute, value)
        if self._phase is Phase.SEED_TERMINAL:
            self._origin = self._draft.seed
        self._transition(next_phase)
        return self._accept()

    def _answer_found(self, value: str) -> InputOutcome:
        answer = value.casefold()
        if answer in self.config.affirmative:
            self._checkpoint("confirmation")
            self._transition(Phase.STATUS_ASSIGN)
            self._draft = replace(self._draft, status=WireStatus.CONFIRMED)
            self._transition(Phase.REMAINING_COUNT)
            return self._accept()
        if answer in self.config.negative:
            self._checkpoint(f"unconfirmed wire to {self._draft.destination}")
            self._transition(Phase.UNCONFIRMED_COMMIT)
            self._draft = replace(self._draft, status=WireStatus.UNCONFIRMED)
            record = self._commit(remaining=0)
            return self._accept(record=record)
        return self._reject("Please answer yes or no")

    def _answer_remaining(self, value: str) -> InputOutcome:
        # ASCII digits only
        if not (value.isascii() and value.isdigit()):
            return self._reject("Enter a whole number of wires (0 or more)")
        remaining = int(value)
        self._checkpoint(f"wire to {self._draft.destination}")
        record = self._commit(remaining)
        return self._accept(record=record)

    def _commit(self, remaining: int) -> Record:
        """Store the drafted wire and choose where tracing goes next.

        Callers checkpoint first; nothing here may run before the
        snapshot is taken.
        """
        self._transition(Phase.COMMIT)
        store = self.session.store
        stack = self.session.stack
        origin = self._origin
        if origin is None:
            raise RuntimeError("Cannot commit a wire without an origin terminal")
        destination = self._draft.destination
        status = self._draft.status or WireStatus.PENDING

        record, created = store.upsert(Record.wire(origin, destination, status))
        if remaining > 0:
            stack.push(destination, remaining)
        thread_left = stack.decrement_current()
        self._emit_event(
            "wire_committed" if created else "wire_updated",
            origin=origin,
            destination=destination,
            status=status.code,
            remaining=remaining,
            thread_left=thread_left,
        )

        next_origin = destination
        if self.config.continuation is ContinuationPolicy.RESUME_PENDING and stack:
            resumed = stack.pop_next()
            if resumed is not None:
                next_origin = resumed
                self._emit_event("circled_back", origin=resumed)
        self._origin = next_origin
        self._draft = PartialEdge()
        self._transition(Phase.DEST_PANEL)
        return record

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _begin(self, origin: Terminal | None) -> None:
        self._draft = PartialEdge()
        self._origin = origin
        self._transition(Phase.SEED_PANEL if origin is None else Phase.DEST_PANEL)
        self._emit_event("trace_started", origin=origin)

    def _checkpoint(self, label: str) -> None:
        self.session.history.snapshot(
            HistorySnapshot(
                records=self.session.store.snapshot(),
                phase=self._phase,
                stack=self.session.stack.snapshot(),
                draft=self._draft,
                origin=self._origin,
                label=label,
            )
        )

    def _transition(self, new_phase: Phase) -> None:
        logger.debug("Phase %s -> %s", self._phase.value, new_phase.value)
        self._phase = new_phase
        self._trail.append(new_phase)

    def _accept(self, message: str = "", record: Record | None = None) -> InputOutcome:
        return InputOutcome(True, self._phase, message or self.prompt, record)

    def _reject(self, message: str) -> InputOutcome:
        return InputOutcome(False, self._phase, message)

    def _emit_event(self, event_type: str, **kwargs: Any) -> None:
        entry: dict[str, Any] = {
            "event": event_type,
            "timestamp": time.time(),
            "phase": self._phase.value,
        }
        for key, value in kwargs.items():
            entry[key] = str(value) if isinstance(value, Terminal) else value
        self._event_log.append(entry)
        logger.info("trace event: %s", entry)
