"""Hysteresis-based validity decision for the capture countdown."""

from shutterguide.validator.output import (
    AxisTarget,
    BufferStats,
    ValidationCriteria,
    ValidationResult,
    ValidatorConfig,
    WindowTarget,
)
from shutterguide.validator.validator import (
    AdaptiveValidator,
    axis_score,
    floor_score,
    window_score,
)

__all__ = [
    "AdaptiveValidator",
    "ValidatorConfig",
    "ValidationCriteria",
    "ValidationResult",
    "BufferStats",
    "AxisTarget",
    "WindowTarget",
    "axis_score",
    "window_score",
    "floor_score",
]
