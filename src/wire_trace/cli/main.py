"""
wire-trace CLI — command-line interface for wire verification.

Usage:
    python -m wire_trace.cli trace --file panel.csv --out panel.csv
    python -m wire_trace.cli validate panel.csv
    python -m wire_trace.cli summary panel.csv
    python -m wire_trace.cli version
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional

import yaml

from wire_trace import __version__
from wire_trace.codec.tabular import TabularCodec, read_records, write_records
from wire_trace.config import load_config
from wire_trace.records.store import RecordStore
from wire_trace.tracing.engine import InputOutcome, TraceEngine

TRACE_HELP = """Commands:
  :undo     take back the last step
  :cancel   stop the current trace
  :back     circle back to the most recently deferred terminal
  :pending  list terminals with wires still to trace
  :save     write records to the output file
  :quit     leave (saves first when --out is given)
Anything else answers the prompt."""


def cli(args: Optional[List[str]] = None, input_func: Callable[[str], str] = input) -> int:
    """Main CLI entry point. Returns exit code."""
    parser = argparse.ArgumentParser(
        prog="wire-trace",
        description="Guided verification of physical wiring connections",
    )
    parser.add_argument(
        "--log-level",
        default="ERROR",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("version", help="Show version")

    validate_parser = subparsers.add_parser("validate", help="Check a wiring file")
    validate_parser.add_argument("file", help="Wiring file to check")
    validate_parser.add_argument("--config", help="YAML config file")

    summary_parser = subparsers.add_parser("summary", help="Count wires by status")
    summary_parser.add_argument("file", help="Wiring file to summarize")
    summary_parser.add_argument("--config", help="YAML config file")

    trace_parser = subparsers.add_parser("trace", help="Trace wires interactively")
    trace_parser.add_argument("--file", help="Wiring file to continue from")
    trace_parser.add_argument("--out", help="Where to save records")
    trace_parser.add_argument("--config", help="YAML config file")

    parsed = parser.parse_args(args)
    logging.basicConfig(
        level=getattr(logging, str(parsed.log_level).upper(), logging.ERROR),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if parsed.command == "version":
        print(f"wire-trace {__version__}")
        return 0

    if parsed.command in ("validate", "summary", "trace"):
        try:
            config = load_config(parsed.config)
        except (OSError, ValueError, yaml.YAMLError) as exc:
            print(f"Cannot load config: {exc}", file=sys.stderr)
            return 2
        codec = TabularCodec.from_config(config)

        if parsed.command == "trace":
            engine = TraceEngine(config=config, codec=codec)
            if parsed.file:
                try:
                    text = Path(parsed.file).read_text(encoding="utf-8-sig")
                except OSError as exc:
                    print(f"Cannot read {parsed.file}: {exc}", file=sys.stderr)
                    return 2
                result = engine.import_text(text)
                print(f"Loaded {len(result.records)} records from {parsed.file}")
                for warning in result.warnings:
                    print(f"  warning: {warning}")
            return _run_trace(engine, parsed.out, input_func)

        try:
            result = read_records(parsed.file, codec)
        except OSError as exc:
            print(f"Cannot read {parsed.file}: {exc}", file=sys.stderr)
            return 2

        if parsed.command == "validate":
            for warning in result.warnings:
                print(f"warning: {warning}")
            print(
                f"{len(result.records)} records, {len(result.warnings)} warnings, "
                f"{result.rows_skipped} rows skipped"
            )
            return 0 if result.ok else 1

        counts = RecordStore(result.records).counts_by_status()
        print(f"records: {len(result.records)}")
        for status, count in counts.items():
            print(f"{status.name.lower()}: {count}")
        return 0

    parser.print_help()
    return 1


def _run_trace(engine: TraceEngine, out: Optional[str], input_func: Callable[[str], str]) -> int:
    print(TRACE_HELP)
    print(engine.prompt)
    while True:
        try:
            line = input_func(f"[{engine.phase.value}] > ")
        except EOFError:
            break
        command = line.strip().lower()

        if command == ":quit":
            break
        if command == ":pending":
            _print_pending(engine)
            continue
        if command == ":save":
            _save(engine, out)
            continue
        if command == ":undo":
            outcome = engine.undo()
        elif command == ":cancel":
            outcome = engine.cancel()
        elif command == ":back":
            outcome = engine.circle_back()
        else:
            outcome = engine.submit(line)
        _print_outcome(outcome)

    if out:
        _save(engine, out)
    return 0


def _print_outcome(outcome: InputOutcome) -> None:
    if outcome.record is not None:
        record = outcome.record
        print(
            f"Recorded {record.origin} -> {record.destination} "
            f"[{record.status.name.lower()}]"
        )
    prefix = "" if outcome.accepted else "! "
    print(f"{prefix}{outcome.message}")


def _print_pending(engine: TraceEngine) -> None:
    current = engine.stack.current
    if current is not None:
        print(f"  resuming {current.terminal}: {current.count} wire(s)")
    summary = engine.pending_summary
    if not summary and current is None:
        print("  nothing pending")
    for terminal, count in summary:
        print(f"  {terminal}: {count} wire(s) remaining")


def _save(engine: TraceEngine, out: Optional[str]) -> None:
    if not out:
        print("! No output file; pass --out to save")
        return
    try:
        path = write_records(out, engine.records, engine.codec)
    except OSError as exc:
        print(f"! Cannot write {out}: {exc}")
        return
    print(f"Saved {len(engine.records)} records to {path}")


if __name__ == "__main__":
    sys.exit(cli())
