"""Tabular codec — the 14-column wiring file format."""

from wire_trace.codec.tabular import (
    COLUMNS,
    CodecWarning,
    ParseResult,
    TabularCodec,
    WarningCode,
    read_records,
    write_records,
)

__all__ = [
    "COLUMNS",
    "CodecWarning",
    "ParseResult",
    "TabularCodec",
    "WarningCode",
    "read_records",
    "write_records",
]
