"""Phone orientation from gyroscope and accelerometer samples."""

from shutterguide.orientation.calibration import SensorCalibrator
from shutterguide.orientation.filter import OrientationFilter, accel_tilt
from shutterguide.orientation.kalman import ScalarKalman
from shutterguide.orientation.output import (
    CalibrationResult,
    OrientationConfig,
    PhoneOrientation,
)

__all__ = [
    "OrientationFilter",
    "OrientationConfig",
    "PhoneOrientation",
    "ScalarKalman",
    "SensorCalibrator",
    "CalibrationResult",
    "accel_tilt",
]
