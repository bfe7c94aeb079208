"""Trace engine — phase machine, discovery stack, and undo history."""

from wire_trace.tracing.discovery import DiscoveryStack, PendingTerminal, StackState
from wire_trace.tracing.engine import (
    AUTOMATIC_PHASES,
    PROMPTS,
    InputOutcome,
    PartialEdge,
    Phase,
    TraceEngine,
)
from wire_trace.tracing.history import HistoryManager, HistorySnapshot
from wire_trace.tracing.session import TraceSession

__all__ = [
    "AUTOMATIC_PHASES",
    "DiscoveryStack",
    "HistoryManager",
    "HistorySnapshot",
    "InputOutcome",
    "PROMPTS",
    "PartialEdge",
    "PendingTerminal",
    "Phase",
    "StackState",
    "TraceEngine",
    "TraceSession",
]
