"""Observability system for shutterguide.

Provides tracing infrastructure to track:
- Shutter phase transitions
- Capture fires
- Per-tick confidence and blockers
- Adaptive validator flips

Trace Levels:
- OFF: No tracing (production default)
- MINIMAL: Phase changes and captures only
- NORMAL: Tick summaries + validity changes
- VERBOSE: Every condition and confidence component

Example:
    >>> from shutterguide.observability import ObservabilityHub, TraceLevel
    >>> hub = ObservabilityHub.get_instance()
    >>> hub.configure(level=TraceLevel.NORMAL)
    >>> hub.add_sink(FileSink("/tmp/trace.jsonl"))
    >>>
    >>> # In engine code:
    >>> if hub.enabled:
    ...     hub.emit(PhaseChangeRecord(...))
"""

from shutterguide.observability.hub import ObservabilityHub
from shutterguide.observability.records import TraceLevel, TraceRecord
from shutterguide.observability.sinks import (
    ConsoleSink,
    FileSink,
    MemorySink,
    NullSink,
    Sink,
)

__all__ = [
    # Core
    "TraceLevel",
    "Sink",
    "ObservabilityHub",
    # Records
    "TraceRecord",
    # Sinks
    "FileSink",
    "ConsoleSink",
    "MemorySink",
    "NullSink",
]
