"""Wire record models — immutable rows of the 14-column wiring schema."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Tuple

WIRE_ROW_TYPE = "wire"

TerminalKey = Tuple[str, str, str]
EdgeKey = Tuple[TerminalKey, TerminalKey]


def normalize_key(value: str | None) -> str:
    """Normalize an identifier for comparison (trim + case-fold).

    This is the only normalization applied anywhere: store lookups,
    discovery stack keys, and codec identity checks all go through it.
    """
    if value is None:
        return ""
    return value.strip().casefold()


class WireStatus(Enum):
    """Verification status of a wire."""

    CONFIRMED = "C"
    UNCONFIRMED = "U"
    PENDING = "?"

    @property
    def code(self) -> str:
        return self.value

    @classmethod
    def from_code(cls, code: str) -> WireStatus | None:
        """Map a file status code to a status, or None if unrecognized."""
        cleaned = code.strip().upper()
        for status in cls:
            if status.value == cleaned:
                return status
        return None


@dataclass(frozen=True)
class Terminal:
    """A connection point: (panel, device, terminal), as entered."""

    panel: str
    device: str
    terminal: str

    @property
    def key(self) -> TerminalKey:
        return (
            normalize_key(self.panel),
            normalize_key(self.device),
            normalize_key(self.terminal),
        )

    @property
    def is_empty(self) -> bool:
        return not any(self.key)

    def __str__(self) -> str:
        return f"{self.panel}/{self.device}/{self.terminal}"


@dataclass(frozen=True)
class Record:
    """One directed wire edge with its verification status.

    Field order matches the file column order. Descriptive fields
    (terminal kind, element id, device part, cable, signal, remarks)
    are carried through untouched.
    """

    row_type: str = WIRE_ROW_TYPE
    from_panel: str = ""
    from_device: str = ""
    from_terminal: str = ""
    terminal_kind: str = ""
    element_id: str = ""
    device_part: str = ""
    to_panel: str = ""
    to_device: str = ""
    to_terminal: str = ""
    cable_id: str = ""
    status: WireStatus = WireStatus.PENDING
    signal_id: str = ""
    remarks: str = ""

    @classmethod
    def wire(
        cls,
        origin: Terminal,
        destination: Terminal,
        status: WireStatus,
        **extra: str,
    ) -> Record:
        """Build a wire row between two terminals."""
        return cls(
            row_type=extra.pop("row_type", WIRE_ROW_TYPE),
            from_panel=origin.panel,
            from_device=origin.device,
            from_terminal=origin.terminal,
            to_panel=destination.panel,
            to_device=destination.device,
            to_terminal=destination.terminal,
            status=status,
            **extra,
        )

    @property
    def origin(self) -> Terminal:
        return Terminal(self.from_panel, self.from_device, self.from_terminal)

    @property
    def destination(self) -> Terminal:
        return Terminal(self.to_panel, self.to_device, self.to_terminal)

    @property
    def key(self) -> EdgeKey:
        return (self.origin.key, self.destination.key)

    @property
    def is_wire(self) -> bool:
        return normalize_key(self.row_type) == WIRE_ROW_TYPE

    @property
    def has_identity(self) -> bool:
        """True when every origin identity field is non-empty."""
        return all(self.origin.key)

    def with_status(self, status: WireStatus) -> Record:
        return replace(self, status=status)

    def to_dict(self) -> dict[str, Any]:
        return {
            "row_type": self.row_type,
            "from_panel": self.from_panel,
            "from_device": self.from_device,
            "from_terminal": self.from_terminal,
            "terminal_kind": self.terminal_kind,
            "element_id": self.element_id,
            "device_part": self.device_part,
            "to_panel": self.to_panel,
            "to_device": self.to_device,
            "to_terminal": self.to_terminal,
            "cable_id": self.cable_id,
            "status": self.status.code,
            "signal_id": self.signal_id,
            "remarks": self.remarks,
        }


def edge_key(origin: Terminal, destination: Terminal) -> EdgeKey:
    """Normalized directed-edge key for a pair of terminals."""
    return (origin.key, destination.key)
