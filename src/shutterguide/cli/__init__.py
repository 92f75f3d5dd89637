"""Command-line interface for shutterguide."""

import sys
import argparse
import logging


def _add_trace_args(parser):
    """Add --trace, --trace-output args to a parser."""
    parser.add_argument("--trace", choices=["off", "minimal", "normal", "verbose"], default="off")
    parser.add_argument("--trace-output", type=str, help="Output file for trace records (JSONL)")


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="shutterguide",
        description="ShutterGuide - Capture guidance and auto-shutter decisions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  shutterguide info                                  # Capture angle table
  shutterguide info --angle vertex                   # One angle in detail
  shutterguide replay session.jsonl --angle front    # Replay a recorded session
  shutterguide replay session.jsonl --trace normal --trace-output trace.jsonl
""",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # info command
    info_parser = subparsers.add_parser(
        "info",
        help="Show capture angles and thresholds",
        description="Display the capture sequence and per-angle targets.",
    )
    info_parser.add_argument("--angle", type=str, help="Show one angle in detail")
    info_parser.add_argument("--config", type=str, metavar="PATH", help="Engine config YAML file")

    # replay command
    replay_parser = subparsers.add_parser(
        "replay",
        help="Replay a recorded session through the engine",
        description="Feed recorded sensor/face/region/lighting events (JSONL) to the engine.",
    )
    replay_parser.add_argument("path", help="Path to session file (JSONL)")
    replay_parser.add_argument("--angle", type=str, default="front", help="Capture angle (default: front)")
    replay_parser.add_argument("--config", type=str, metavar="PATH", help="Engine config YAML file")
    replay_parser.add_argument("--json", action="store_true", help="Print the final state as JSON")
    _add_trace_args(replay_parser)

    args = parser.parse_args(argv)

    if getattr(args, "verbose", False):
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)

    from shutterguide.cli import commands

    if args.command == "info":
        return commands.run_info(args)

    elif args.command == "replay":
        return commands.run_replay(args)

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    sys.exit(main())
