"""Ordered record store — the single source of truth for a session."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, Optional, Tuple

from wire_trace.records.record import EdgeKey, Record, Terminal, WireStatus, edge_key

logger = logging.getLogger(__name__)


class RecordNotFoundError(KeyError):
    """Raised when a status update targets an edge that is not stored."""

    def __init__(self, key: EdgeKey) -> None:
        self.key = key
        super().__init__(f"No wire record for edge {key[0]} -> {key[1]}")


class RecordStore:
    """Ordered collection of wire records.

    Insertion order is documentation order. Records are immutable, so
    :meth:`snapshot` hands out a tuple that shares them, and every
    mutation replaces list slots instead of editing records in place.
    Only wire rows are indexed for edge lookups; other row types are
    carried along in order.
    """

    def __init__(self, records: Iterable[Record] = ()) -> None:
        self._records: list[Record] = []
        self._index: Dict[EdgeKey, int] = {}
        self.replace_all(records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(tuple(self._records))

    # -- contract ------------------------------------------------------------

    def append(self, record: Record) -> None:
        self._records.append(record)
        if record.is_wire:
            self._index.setdefault(record.key, len(self._records) - 1)

    def find_by_key(self, origin: Terminal, destination: Terminal) -> Optional[Record]:
        """Return the stored wire for a directed terminal pair, if any."""
        position = self._index.get(edge_key(origin, destination))
        if position is None:
            return None
        return self._records[position]

    def update_status(self, key: EdgeKey, status: WireStatus) -> Record:
        """Replace the status of an existing edge and return the new record."""
        position = self._index.get(key)
        if position is None:
            raise RecordNotFoundError(key)
        updated = self._records[position].with_status(status)
        self._records[position] = updated
        return updated

    def all(self) -> Tuple[Record, ...]:
        """Read-only view of every record, in order."""
        return tuple(self._records)

    def replace_all(self, records: Iterable[Record]) -> None:
        self._records = []
        self._index = {}
        for record in records:
            self.append(record)

    # -- helpers ---------------------------------------------------------------

    def upsert(self, record: Record) -> Tuple[Record, bool]:
        """Append *record*, or update the status of its existing edge.

        Returns the stored record and whether it was newly created.
        """
        if record.key in self._index:
            return self.update_status(record.key, record.status), False
        self.append(record)
        return record, True

    def snapshot(self) -> Tuple[Record, ...]:
        return tuple(self._records)

    def restore(self, records: Tuple[Record, ...]) -> None:
        self.replace_all(records)

    def counts_by_status(self) -> Dict[WireStatus, int]:
        counts = {status: 0 for status in WireStatus}
        for record in self._records:
            if record.is_wire:
                counts[record.status] += 1
        return counts
