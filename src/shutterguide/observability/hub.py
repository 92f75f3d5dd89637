"""Process-wide trace dispatcher."""

import logging
import threading
from typing import List, Optional, Sequence

from shutterguide.observability.records import TraceLevel, TraceRecord
from shutterguide.observability.sinks import Sink

logger = logging.getLogger(__name__)


class ObservabilityHub:
    """Routes trace records to sinks when tracing is enabled.

    The hub is a singleton so engines can cache it at import time.
    ``reset_instance`` resets the shared instance in place, which keeps
    those cached references valid.

    Example:
        >>> hub = ObservabilityHub.get_instance()
        >>> hub.configure(level=TraceLevel.NORMAL, sinks=[MemorySink()])
        >>> if hub.enabled:
        ...     hub.emit(TickRecord(...))
    """

    _instance: Optional["ObservabilityHub"] = None
    _instance_lock = threading.Lock()

    def __init__(self):
        self._level = TraceLevel.OFF
        self._sinks: List[Sink] = []
        self._lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> "ObservabilityHub":
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Disable tracing and drop all sinks (without closing them)."""
        with cls._instance_lock:
            if cls._instance is not None:
                with cls._instance._lock:
                    cls._instance._level = TraceLevel.OFF
                    cls._instance._sinks = []

    @property
    def level(self) -> TraceLevel:
        return self._level

    @property
    def enabled(self) -> bool:
        return self._level > TraceLevel.OFF

    def configure(self, level: TraceLevel, sinks: Optional[Sequence[Sink]] = None) -> None:
        with self._lock:
            self._level = TraceLevel(level)
            if sinks is not None:
                self._sinks.extend(sinks)
        logger.debug("Tracing level set to %s", self._level.name)

    def is_level_enabled(self, level: TraceLevel) -> bool:
        return level <= self._level

    def add_sink(self, sink: Sink) -> None:
        with self._lock:
            self._sinks.append(sink)

    def remove_sink(self, sink: Sink) -> None:
        with self._lock:
            if sink in self._sinks:
                self._sinks.remove(sink)

    def clear_sinks(self) -> None:
        with self._lock:
            self._sinks = []

    def emit(self, record: TraceRecord) -> None:
        if not self.enabled or record.min_level > self._level:
            return
        with self._lock:
            sinks = list(self._sinks)
        for sink in sinks:
            sink.write(record)

    def flush(self) -> None:
        with self._lock:
            sinks = list(self._sinks)
        for sink in sinks:
            sink.flush()

    def shutdown(self) -> None:
        """Close every sink and disable tracing."""
        with self._lock:
            sinks, self._sinks = self._sinks, []
            self._level = TraceLevel.OFF
        for sink in sinks:
            sink.close()
