import sys

from wire_trace.cli.main import cli

sys.exit(cli())
