"""Trace output sinks for observability.

Sinks receive trace records and handle their output to various destinations:
- FileSink: JSONL file output
- ConsoleSink: Formatted console output
- MemorySink: In-memory buffer for testing/analysis
- NullSink: Discards everything
"""

import sys
import threading
from abc import ABC, abstractmethod
from collections import deque
from typing import Deque, List, Optional, TextIO, Type

from shutterguide.observability.records import (
    CaptureFireRecord,
    PhaseChangeRecord,
    TickRecord,
    TraceRecord,
    ValidityChangeRecord,
)


class Sink(ABC):
    """Destination for trace records."""

    @abstractmethod
    def write(self, record: TraceRecord) -> None:
        ...

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.flush()


class FileSink(Sink):
    """Appends records as JSON lines.

    Args:
        path: Output file, truncated on open.
        buffer_size: Records held in memory before a write.
    """

    def __init__(self, path: str, buffer_size: int = 100):
        self.path = path
        self._buffer_size = max(1, buffer_size)
        self._buffer: List[str] = []
        self._lock = threading.Lock()
        self._file: Optional[TextIO] = open(path, "w", encoding="utf-8")

    def write(self, record: TraceRecord) -> None:
        with self._lock:
            self._buffer.append(record.to_json())
            if len(self._buffer) >= self._buffer_size:
                self._flush_locked()

    def flush(self) -> None:
        with self._lock:
            self._flush_locked()

    def close(self) -> None:
        with self._lock:
            self._flush_locked()
            if self._file is not None:
                self._file.close()
                self._file = None

    def _flush_locked(self) -> None:
        if self._file is None or not self._buffer:
            return
        self._file.write("\n".join(self._buffer) + "\n")
        self._file.flush()
        self._buffer.clear()


class ConsoleSink(Sink):
    """Human-readable one-line output for phase and capture records.

    Tick records are only printed when ``show_ticks`` is set.
    """

    COLORS = {
        "red": "\033[31m",
        "green": "\033[32m",
        "yellow": "\033[33m",
        "blue": "\033[34m",
        "magenta": "\033[35m",
        "cyan": "\033[36m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        color: bool = True,
        show_ticks: bool = False,
    ):
        self._stream = stream or sys.stderr
        self._color = color
        self._show_ticks = show_ticks

    def write(self, record: TraceRecord) -> None:
        line = self._format_record(record)
        if line is not None:
            self._stream.write(line + "\n")

    def flush(self) -> None:
        self._stream.flush()

    def _colorize(self, text: str, color: str) -> str:
        if not self._color or color not in self.COLORS:
            return text
        return f"{self.COLORS[color]}{text}{self.RESET}"

    def _format_record(self, record: TraceRecord) -> Optional[str]:
        if isinstance(record, CaptureFireRecord):
            return self._format_capture(record)
        elif isinstance(record, PhaseChangeRecord):
            return self._format_phase_change(record)
        elif isinstance(record, ValidityChangeRecord):
            return self._format_validity(record)
        elif isinstance(record, TickRecord) and self._show_ticks:
            return self._format_tick(record)
        return None

    def _format_capture(self, record: CaptureFireRecord) -> str:
        tag = self._colorize("[CAPTURE]", "green")
        angle = self._colorize(record.angle, "cyan")
        return (
            f"{tag} {angle} t={record.t_ns / 1e9:.3f}s "
            f"confidence={record.confidence:.2f} ({record.level}) "
            f"stable {record.stable_ns / 1e6:.0f}ms"
        )

    def _format_phase_change(self, record: PhaseChangeRecord) -> str:
        tag = self._colorize("[PHASE]", "blue")
        color = "green" if record.new_phase in ("ready", "captured") else "yellow"
        new_phase = self._colorize(record.new_phase, color)
        reason = f" ({record.reason})" if record.reason else ""
        return (
            f"{tag} {record.angle} t={record.t_ns / 1e9:.3f}s: "
            f"{record.old_phase} -> {new_phase}{reason}"
        )

    def _format_validity(self, record: ValidityChangeRecord) -> str:
        tag = self._colorize("[VALID]", "magenta")
        state = self._colorize("valid", "green") if record.is_valid else self._colorize("invalid", "red")
        return f"{tag} {record.angle} t={record.t_ns / 1e9:.3f}s: {state} accuracy={record.accuracy}"

    def _format_tick(self, record: TickRecord) -> str:
        blockers = ",".join(record.blockers) or "-"
        return (
            f"[TICK] {record.angle} t={record.t_ns / 1e9:.3f}s {record.phase} "
            f"confidence={record.confidence:.2f} blockers={blockers}"
        )


class MemorySink(Sink):
    """Keeps records in memory, optionally only the newest ``max_records``."""

    def __init__(self, max_records: Optional[int] = None):
        self._records: Deque[TraceRecord] = deque(maxlen=max_records)
        self._lock = threading.Lock()

    def write(self, record: TraceRecord) -> None:
        with self._lock:
            self._records.append(record)

    def get_records(self) -> List[TraceRecord]:
        with self._lock:
            return list(self._records)

    def get_by_type(self, record_cls: Type[TraceRecord]) -> List[TraceRecord]:
        return [r for r in self.get_records() if isinstance(r, record_cls)]

    def get_phase_changes(self) -> List[PhaseChangeRecord]:
        return self.get_by_type(PhaseChangeRecord)

    def get_captures(self) -> List[CaptureFireRecord]:
        return self.get_by_type(CaptureFireRecord)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        return len(self._records)


class NullSink(Sink):
    """Discards all records."""

    def write(self, record: TraceRecord) -> None:
        pass


__all__ = ["Sink", "FileSink", "ConsoleSink", "MemorySink", "NullSink"]
