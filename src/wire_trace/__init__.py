"""wire-trace — guided verification of physical wiring, one wire at a time.

wire-trace walks a field technician through a panel's wiring terminal by
terminal and keeps a structured record of what was checked:

Core concepts
-------------
* **Record** — one directed wire between two terminals, with a status of
  CONFIRMED, UNCONFIRMED or PENDING.  A terminal is the triple
  (panel, device, terminal), compared trimmed and case-insensitively.

* **Trace engine** — a prompt-by-prompt state machine.  Each pass asks
  for a destination, whether the wire was found, and how many more wires
  sit at the destination, then commits the wire.

* **Discovery stack** — terminals that still have untraced wires.  The
  most recently deferred terminal is resumed first ("circle back").

* **Undo history** — every accepted input is snapshotted first, so any
  step can be taken back (the last 50 by default).

* **Tabular codec** — reads and writes the 14-column wiring file with
  per-row warnings instead of hard failures.

Quick start::

    from wire_trace import TraceEngine

    engine = TraceEngine()
    for answer in ["1", "AA", "A01", "2", "BB", "B01", "y", "0"]:
        engine.submit(answer)
    print(engine.export_text())
"""

from wire_trace.codec.tabular import CodecWarning, ParseResult, TabularCodec
from wire_trace.config import TraceConfig, load_config
from wire_trace.records.record import Record, Terminal, WireStatus
from wire_trace.records.store import RecordStore
from wire_trace.tracing.engine import Phase, TraceEngine
from wire_trace.tracing.session import TraceSession

__all__ = [
    "CodecWarning",
    "ParseResult",
    "Phase",
    "Record",
    "RecordStore",
    "TabularCodec",
    "Terminal",
    "TraceConfig",
    "TraceEngine",
    "TraceSession",
    "WireStatus",
    "load_config",
]

__version__ = "0.1.0"
