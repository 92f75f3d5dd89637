"""Trace record data classes for shutter observability.

Record Categories:
- Phase records: shutter phase transitions and capture fires (MINIMAL)
- Tick records: per-evaluation summaries and validator flips (NORMAL)
- Detail records: every condition and confidence component (VERBOSE)
"""

import json
import time
from dataclasses import asdict, dataclass, field
from enum import IntEnum
from typing import Any, Dict, List


class TraceLevel(IntEnum):
    """Tracing verbosity, ordered so levels compare with ``<``."""

    OFF = 0
    MINIMAL = 1
    NORMAL = 2
    VERBOSE = 3

    @classmethod
    def from_string(cls, name: str) -> "TraceLevel":
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown trace level: {name!r}") from None


@dataclass
class TraceRecord:
    """Base trace record.

    ``min_level`` is the lowest hub level at which the record is emitted;
    it is internal and never serialized.
    """

    record_type: str = field(default="base", init=False)
    timestamp_ns: int = field(default_factory=time.time_ns)
    min_level: TraceLevel = field(default=TraceLevel.NORMAL, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop("min_level", None)
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


# =============================================================================
# Phase Records
# =============================================================================


@dataclass
class PhaseChangeRecord(TraceRecord):
    """Shutter phase transition."""

    record_type: str = field(default="phase_change", init=False)
    min_level: TraceLevel = field(default=TraceLevel.MINIMAL, repr=False)

    t_ns: int = 0
    angle: str = ""
    old_phase: str = ""
    new_phase: str = ""
    confidence: float = 0.0

    # First failed condition when falling back, empty otherwise
    reason: str = ""


@dataclass
class CaptureFireRecord(TraceRecord):
    """Auto-shutter fired (countdown elapsed)."""

    record_type: str = field(default="capture_fire", init=False)
    min_level: TraceLevel = field(default=TraceLevel.MINIMAL, repr=False)

    t_ns: int = 0
    angle: str = ""
    confidence: float = 0.0
    level: str = ""

    # Time from first all-conditions-met tick to fire
    stable_ns: int = 0
    countdown_s: int = 0


# =============================================================================
# Tick Records
# =============================================================================


@dataclass
class TickRecord(TraceRecord):
    """Summary of one evaluation."""

    record_type: str = field(default="tick", init=False)

    t_ns: int = 0
    angle: str = ""
    phase: str = ""
    ready: bool = False
    all_met: bool = False
    confidence: float = 0.0
    level: str = ""
    blockers: List[str] = field(default_factory=list)
    feedback: str = ""


@dataclass
class ValidityChangeRecord(TraceRecord):
    """Adaptive validator flipped its hysteresis state."""

    record_type: str = field(default="validity_change", init=False)

    t_ns: int = 0
    angle: str = ""
    is_valid: bool = False
    accuracy: int = 0
    failure_reasons: List[str] = field(default_factory=list)


# =============================================================================
# Detail Records
# =============================================================================


@dataclass
class ConditionDetailRecord(TraceRecord):
    """Every input behind one evaluation."""

    record_type: str = field(default="condition_detail", init=False)
    min_level: TraceLevel = field(default=TraceLevel.VERBOSE, repr=False)

    t_ns: int = 0
    angle: str = ""
    conditions: Dict[str, bool] = field(default_factory=dict)
    components: Dict[str, float] = field(default_factory=dict)

    head: Dict[str, float] = field(default_factory=dict)
    phone: Dict[str, float] = field(default_factory=dict)
    distance_cm: float = 0.0
    iou: float = 0.0
    lighting_score: int = 0


__all__ = [
    "TraceLevel",
    "TraceRecord",
    "PhaseChangeRecord",
    "CaptureFireRecord",
    "TickRecord",
    "ValidityChangeRecord",
    "ConditionDetailRecord",
]
