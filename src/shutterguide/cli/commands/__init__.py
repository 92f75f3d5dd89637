"""CLI command handlers."""

from shutterguide.cli.commands.info import run_info
from shutterguide.cli.commands.replay import run_replay

__all__ = [
    "run_info",
    "run_replay",
]
