"""Session state owned by one operator."""

from __future__ import annotations

from dataclasses import dataclass, field

from wire_trace.records.store import RecordStore
from wire_trace.tracing.discovery import DiscoveryStack
from wire_trace.tracing.history import DEFAULT_HISTORY_CAPACITY, HistoryManager


@dataclass
class TraceSession:
    """The mutable state of a tracing session, passed to the engine explicitly."""

    store: RecordStore = field(default_factory=RecordStore)
    stack: DiscoveryStack = field(default_factory=DiscoveryStack)
    history: HistoryManager = field(default_factory=HistoryManager)

    @classmethod
    def create(cls, history_capacity: int = DEFAULT_HISTORY_CAPACITY) -> TraceSession:
        return cls(history=HistoryManager(capacity=history_capacity))
