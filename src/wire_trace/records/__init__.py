"""Wire records — immutable rows and the ordered store that owns them."""

from wire_trace.records.record import (
    WIRE_ROW_TYPE,
    EdgeKey,
    Record,
    Terminal,
    TerminalKey,
    WireStatus,
    edge_key,
    normalize_key,
)
from wire_trace.records.store import RecordNotFoundError, RecordStore

__all__ = [
    "EdgeKey",
    "Record",
    "RecordNotFoundError",
    "RecordStore",
    "Terminal",
    "TerminalKey",
    "WIRE_ROW_TYPE",
    "WireStatus",
    "edge_key",
    "normalize_key",
]
