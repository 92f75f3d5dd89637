"""shutterguide - Capture guidance and auto-shutter decisions.

Quick Start:
    >>> import shutterguide as sg
    >>> engine = sg.AutoShutterEngine("front")
    >>> engine.update_sensor(sample)
    >>> engine.update_face(face, 1080, 1920)
    >>> engine.update_lighting(histogram)
    >>> state = engine.evaluate()
    >>> print(state.phase, state.feedback)

Full five-angle session:
    >>> session = sg.AutoShutterSession()
    >>> state = session.evaluate()
    >>> if state.fire:
    ...     session.advance()

Configuration:
    >>> config = sg.EngineConfig.from_yaml("shutter.yaml")
    >>> engine = sg.AutoShutterEngine("vertex", config)
"""

__version__ = "0.1.0"

from shutterguide.angles import (
    ANGLE_CONFIGS,
    CAPTURE_SEQUENCE,
    AngleConfig,
    CaptureAngle,
    FaceDetectionConfig,
    SensorOnlyConfig,
    get_angle_config,
)
from shutterguide.config import EngineConfig, ShutterConfig
from shutterguide.errors import ConfigurationError, SessionError, ShutterGuideError
from shutterguide.shutter import (
    AutoShutterEngine,
    AutoShutterSession,
    AutoShutterState,
    ConfidenceLevel,
    ShutterPhase,
)
from shutterguide.types import BoundingBox, DetectedFace, Landmark, RawSensorSample, Vec3

__all__ = [
    "__version__",
    # Engine
    "AutoShutterEngine",
    "AutoShutterSession",
    "AutoShutterState",
    "ShutterPhase",
    "ConfidenceLevel",
    # Angles
    "CaptureAngle",
    "AngleConfig",
    "FaceDetectionConfig",
    "SensorOnlyConfig",
    "ANGLE_CONFIGS",
    "CAPTURE_SEQUENCE",
    "get_angle_config",
    # Configuration
    "EngineConfig",
    "ShutterConfig",
    # Inputs
    "RawSensorSample",
    "Vec3",
    "BoundingBox",
    "Landmark",
    "DetectedFace",
    # Errors
    "ShutterGuideError",
    "ConfigurationError",
    "SessionError",
]
