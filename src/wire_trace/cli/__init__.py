"""Command-line interface for wire-trace."""

from wire_trace.cli.main import cli

__all__ = ["cli"]
