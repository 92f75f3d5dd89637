"""Shared helpers for the shutterguide commands."""

import logging
import sys
from typing import Optional

from shutterguide.config import EngineConfig
from shutterguide.errors import ConfigurationError
from shutterguide.observability import ConsoleSink, FileSink, ObservabilityHub, TraceLevel

logger = logging.getLogger(__name__)


def load_config(path: Optional[str]) -> EngineConfig:
    """EngineConfig from YAML, or the defaults when no path is given.

    Exits with status 2 on an unreadable or invalid file.
    """
    if not path:
        return EngineConfig()
    try:
        return EngineConfig.from_yaml(path)
    except (OSError, ConfigurationError) as e:
        print(f"Error: cannot load config {path}: {e}", file=sys.stderr)
        sys.exit(2)


def start_tracing(level_name: str, output: Optional[str] = None) -> Optional[ObservabilityHub]:
    """Route engine trace records to stderr and, optionally, a JSONL file.

    Tick lines only reach the console at verbose level. Returns the
    configured hub, or None when tracing is off.
    """
    level = TraceLevel.from_string(level_name)
    if level == TraceLevel.OFF:
        return None

    sinks = [ConsoleSink(show_ticks=level >= TraceLevel.VERBOSE)]
    if output:
        sinks.append(FileSink(output))

    hub = ObservabilityHub.get_instance()
    hub.configure(level=level, sinks=sinks)
    suffix = f", output={output}" if output else ""
    print(f"Observability: level={level.name.lower()}{suffix}")
    return hub


def stop_tracing(hub: Optional[ObservabilityHub]) -> None:
    """Flush and close every sink; the hub is left disabled."""
    if hub is None:
        return
    hub.flush()
    hub.shutdown()
    logger.debug("Tracing stopped")
