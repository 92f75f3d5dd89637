"""Auto-shutter decision engine.

Combines phone attitude, head pose, distance, region alignment and
lighting into seven capture conditions and a weighted confidence, then
runs the stabilize/countdown/capture phase machine.
"""

from shutterguide.shutter.conditions import TickInputs, evaluate_conditions
from shutterguide.shutter.confidence import classify_confidence, combine, score_confidence
from shutterguide.shutter.engine import AutoShutterEngine
from shutterguide.shutter.output import (
    AngleConfidenceScore,
    AutoShutterState,
    CaptureConditions,
    ConfidenceLevel,
    ShutterPhase,
)
from shutterguide.shutter.session import AutoShutterSession

__all__ = [
    "AutoShutterEngine",
    "AutoShutterSession",
    "AutoShutterState",
    "AngleConfidenceScore",
    "CaptureConditions",
    "ConfidenceLevel",
    "ShutterPhase",
    "TickInputs",
    "evaluate_conditions",
    "score_confidence",
    "combine",
    "classify_confidence",
]
