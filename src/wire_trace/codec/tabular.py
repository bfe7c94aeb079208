"""Tabular wiring file codec — parse, validate, and serialize 14-column rows.

The file is delimited text with a header row. Parsing is best-effort: a
malformed row never aborts the import, it produces a :class:`CodecWarning`
and is either fixed or left out, so every dropped or altered row is
reported.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable, Iterator, Optional, Sequence

from wire_trace.config import ShapePolicy
from wire_trace.records.record import Record, WireStatus, normalize_key

if TYPE_CHECKING:
    from wire_trace.config import TraceConfig

logger = logging.getLogger(__name__)

COLUMNS: tuple[str, ...] = (
    "ROW_TYPE",
    "PANEL",
    "DEVICE_TAG",
    "TERMINAL",
    "TERM_KIND",
    "ELEM_ID",
    "DEVICE_PART",
    "TO_PANEL",
    "TO_DEVICE",
    "TO_TERMINAL",
    "CABLE_ID",
    "STATUS",
    "SIGNAL_ID",
    "REMARKS",
)

# Record attribute for each column, same order.
RECORD_FIELDS: tuple[str, ...] = (
    "row_type",
    "from_panel",
    "from_device",
    "from_terminal",
    "terminal_kind",
    "element_id",
    "device_part",
    "to_panel",
    "to_device",
    "to_terminal",
    "cable_id",
    "status",
    "signal_id",
    "remarks",
)

STATUS_COLUMN = COLUMNS.index("STATUS")


class WarningCode(Enum):
    """Kinds of import problems."""

    MISSING_HEADER = "missing_header"
    HEADER_MISMATCH = "header_mismatch"
    SHORT_ROW = "short_row"
    LONG_ROW = "long_row"
    INVALID_STATUS = "invalid_status"
    MISSING_IDENTITY = "missing_identity"
    DUPLICATE_EDGE = "duplicate_edge"
    MALFORMED_ROW = "malformed_row"


@dataclass(frozen=True)
class CodecWarning:
    """A non-fatal problem found while importing."""

    line: int
    code: WarningCode
    message: str

    def __str__(self) -> str:
        return f"line {self.line}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {"line": self.line, "code": self.code.value, "message": self.message}


@dataclass
class ParseResult:
    """Records recovered from a file plus every warning raised on the way."""

    records: list[Record] = field(default_factory=list)
    warnings: list[CodecWarning] = field(default_factory=list)
    rows_read: int = 0
    rows_skipped: int = 0

    @property
    def ok(self) -> bool:
        return not self.warnings

    def warnings_for(self, code: WarningCode) -> list[CodecWarning]:
        return [w for w in self.warnings if w.code is code]

    def to_dict(self) -> dict[str, Any]:
        return {
            "records": [r.to_dict() for r in self.records],
            "warnings": [w.to_dict() for w in self.warnings],
            "rows_read": self.rows_read,
            "rows_skipped": self.rows_skipped,
        }


class TabularCodec:
    """Converts between wire records and the fixed 14-column file format."""

    def __init__(
        self,
        delimiter: str = ",",
        shape_policy: ShapePolicy = ShapePolicy.FIX,
    ) -> None:
        self.delimiter = delimiter
        self.shape_policy = shape_policy

    @classmethod
    def from_config(cls, config: TraceConfig) -> TabularCodec:
        return cls(delimiter=config.delimiter, shape_policy=config.shape_policy)

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse(self, source: str | Iterable[str]) -> ParseResult:
        """Parse raw file text (or an iterable of lines) into records."""
        lines = io.StringIO(source, newline="").readlines() if isinstance(source, str) else list(source)
        result = ParseResult()
        rows = self._read_rows(lines, result)

        header = next(((line, row) for line, row in rows if not _is_blank(row)), None)
        if header is None:
            self._warn(result, 0, WarningCode.MISSING_HEADER, "File is empty; header row is missing")
            return result
        order = self._column_order(header[1], header[0], result)

        seen: set = set()
        for line, row in rows:
            if _is_blank(row):
                continue
            result.rows_read += 1

            fields = self.fit_row(row, line, result)
            if fields is None:
                result.rows_skipped += 1
                continue
            if order is not None:
                fields = [fields[i] for i in order]

            record = self._to_record(fields, line, result)
            if record.is_wire:
                if not record.has_identity:
                    self._warn(
                        result,
                        line,
                        WarningCode.MISSING_IDENTITY,
                        "Wire row is missing PANEL, DEVICE_TAG or TERMINAL; row excluded",
                    )
                    result.rows_skipped += 1
                    continue
                if record.key in seen:
                    self._warn(
                        result,
                        line,
                        WarningCode.DUPLICATE_EDGE,
                        f"Wire {record.origin} -> {record.destination} appears more than once",
                    )
                seen.add(record.key)
            result.records.append(record)

        logger.debug(
            "Parsed %d records from %d rows (%d warnings)",
            len(result.records), result.rows_read, len(result.warnings),
        )
        return result

    def _read_rows(
        self, lines: list[str], result: ParseResult
    ) -> Iterator[tuple[int, list[str]]]:
        """Yield ``(line, row)`` pairs, stepping over rows the csv reader rejects.

        A rejected row (stray quote, unterminated quoted field, oversized
        field) is warned about and skipped, and reading restarts on the
        physical line after the one where that row began.
        """
        start = 0
        while start < len(lines):
            reader = csv.reader(lines[start:], delimiter=self.delimiter, strict=True)
            consumed = 0
            try:
                for row in reader:
                    consumed = reader.line_num
                    yield start + consumed, row
                return
            except csv.Error as exc:
                line = start + consumed + 1
                self._warn(
                    result, line, WarningCode.MALFORMED_ROW,
                    f"Row could not be read ({exc}); row skipped",
                )
                result.rows_read += 1
                result.rows_skipped += 1
                start = line

    def fit_row(
        self, row: Sequence[str], line: int, result: ParseResult
    ) -> Optional[list[str]]:
        """Bring *row* to exactly 14 fields per the shape policy.

        Returns None when the policy is to skip a malformed row. Either
        way a warning is recorded for the row.
        """
        width = len(COLUMNS)
        count = len(row)
        if count == width:
            return list(row)

        fixing = self.shape_policy is ShapePolicy.FIX
        if count < width:
            action = f"padded with {width - count} empty field(s)" if fixing else "row skipped"
            self._warn(
                result, line, WarningCode.SHORT_ROW,
                f"Expected {width} fields, found {count}; {action}",
            )
            return list(row) + [""] * (width - count) if fixing else None

        action = f"{count - width} extra field(s) dropped" if fixing else "row skipped"
        self._warn(
            result, line, WarningCode.LONG_ROW,
            f"Expected {width} fields, found {count}; {action}",
        )
        return list(row[:width]) if fixing else None

    def _column_order(
        self, header: Sequence[str], line: int, result: ParseResult
    ) -> Optional[list[int]]:
        """Map file columns onto the schema; None means positional."""
        names = [normalize_key(h.lstrip("\ufeff")) for h in header]
        expected = [normalize_key(c) for c in COLUMNS]
        if names == expected:
            return None
        if sorted(names) == sorted(expected):
            logger.debug("Header columns reordered; mapping by name")
            return [names.index(name) for name in expected]
        self._warn(
            result,
            line,
            WarningCode.HEADER_MISMATCH,
            f"Header does not match the expected columns; reading fields by position. "
            f"Line {line} was taken as the header and not imported as a row",
        )
        return None

    def _to_record(self, fields: list[str], line: int, result: ParseResult) -> Record:
        raw_status = fields[STATUS_COLUMN]
        status = WireStatus.from_code(raw_status)
        if status is None:
            self._warn(
                result,
                line,
                WarningCode.INVALID_STATUS,
                f"Unknown status {raw_status!r}; treated as pending",
            )
            status = WireStatus.PENDING
        values: dict[str, Any] = dict(zip(RECORD_FIELDS, fields))
        values["status"] = status
        return Record(**values)

    @staticmethod
    def _next_row(reader: Any) -> Optional[list[str]]:
        for row in reader:
            if not _is_blank(row):
                return row
        return None

    @staticmethod
    def _warn(result: ParseResult, line: int, code: WarningCode, message: str) -> None:
        warning = CodecWarning(line=line, code=code, message=message)
        result.warnings.append(warning)
        logger.warning("Import warning: %s", warning)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def serialize(self, records: Iterable[Record]) -> str:
        """Render records as file text, header first."""
        buffer = io.StringIO()
        writer = csv.writer(
            buffer,
            delimiter=self.delimiter,
            quoting=csv.QUOTE_MINIMAL,
            lineterminator="\r\n",
        )
        writer.writerow(COLUMNS)
        for record in records:
            writer.writerow(self.to_fields(record))
        return buffer.getvalue()

    @staticmethod
    def to_fields(record: Record) -> list[str]:
        fields = []
        for name in RECORD_FIELDS:
            value = getattr(record, name)
            fields.append(value.code if isinstance(value, WireStatus) else value)
        return fields


def _is_blank(row: Sequence[str]) -> bool:
    return not row or (len(row) == 1 and not row[0].strip())


def read_records(path: str | Path, codec: TabularCodec | None = None) -> ParseResult:
    """Parse a wiring file from disk."""
    codec = codec or TabularCodec()
    with open(Path(path), encoding="utf-8-sig", newline="") as f:
        return codec.parse(f.read())


def write_records(
    path: str | Path, records: Iterable[Record], codec: TabularCodec | None = None
) -> Path:
    """Write records to disk and return the path written."""
    codec = codec or TabularCodec()
    path = Path(path)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(codec.serialize(records))
    return path
