import sys

from commandhub.presentation.cli import run_cli

sys.exit(run_cli())
