"""Per-angle capture requirements for the five-angle sequence.

Face angles (FRONT, RIGHT_45, LEFT_45) validate the head pose reported by
face detection. Scalp angles (VERTEX, BACK_DONOR) have no visible face and
validate the phone attitude plus a scalp region check instead.

    FRONT      -> RIGHT_45 -> LEFT_45 -> VERTEX -> BACK_DONOR
    head 0°       head +45°   head -45°  phone down  phone behind
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from shutterguide.distance.output import DistanceRange
from shutterguide.errors import ConfigurationError
from shutterguide.region.output import ScalpRegion, TemplateSpec
from shutterguide.region.templates import BACK_DONOR_TEMPLATE, FACE_TEMPLATE, VERTEX_TEMPLATE


class CaptureAngle(str, Enum):
    FRONT = "front"
    RIGHT_45 = "right_45"
    LEFT_45 = "left_45"
    VERTEX = "vertex"
    BACK_DONOR = "back_donor"


class ValidationStrategy(str, Enum):
    FACE_DETECTION = "face_detection"
    SENSOR_ONLY = "sensor_only"


@dataclass(frozen=True)
class AngleRange:
    """Inclusive window in degrees."""

    min: float
    max: float

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    @property
    def center(self) -> float:
        return (self.min + self.max) / 2.0

    @property
    def half_width(self) -> float:
        return (self.max - self.min) / 2.0


@dataclass(frozen=True)
class PhoneTarget:
    """Target phone attitude.

    Without ``pitch_max`` pitch must lie within ``tolerance`` of ``pitch``;
    with it, pitch must lie between ``pitch`` and ``pitch_max``. Roll is
    always checked against ``tolerance``. Yaw is informational only since
    the filter can only report it relative to the session start.
    """

    pitch: float = 0.0
    roll: float = 0.0
    yaw: float = 0.0
    tolerance: float = 5.0
    pitch_max: Optional[float] = None

    @property
    def pitch_window(self) -> AngleRange:
        if self.pitch_max is None:
            return AngleRange(self.pitch - self.tolerance, self.pitch + self.tolerance)
        return AngleRange(min(self.pitch, self.pitch_max), max(self.pitch, self.pitch_max))

    @property
    def roll_window(self) -> AngleRange:
        return AngleRange(self.roll - self.tolerance, self.roll + self.tolerance)

    def pitch_error(self, pitch: float) -> float:
        """Signed distance outside the pitch window; 0 inside."""
        window = self.pitch_window
        if pitch < window.min:
            return pitch - window.min
        if pitch > window.max:
            return pitch - window.max
        return 0.0

    def roll_error(self, roll: float) -> float:
        """Signed distance outside the roll window; 0 inside."""
        window = self.roll_window
        if roll < window.min:
            return roll - window.min
        if roll > window.max:
            return roll - window.max
        return 0.0

    def contains(self, pitch: float, roll: float) -> bool:
        return self.pitch_window.contains(pitch) and self.roll_window.contains(roll)


@dataclass(frozen=True)
class FaceDetectionConfig:
    """Capture step validated against the detected face.

    ``centering_tolerance`` is the largest centroid offset allowed on each
    axis, as a fraction of the template size.
    """

    angle: CaptureAngle
    title: str
    instructions: str
    yaw_range: AngleRange
    pitch_range: AngleRange
    roll_range: AngleRange
    phone: PhoneTarget
    distance: DistanceRange
    template: TemplateSpec = FACE_TEMPLATE
    iou_threshold: float = 0.55
    stability_ms: float = 1000.0
    centering_tolerance: float = 0.15
    min_eyes_open: float = 80.0

    @property
    def strategy(self) -> ValidationStrategy:
        return ValidationStrategy.FACE_DETECTION

    @property
    def region_required(self) -> bool:
        return False

    def head_pose_valid(self, yaw: float, pitch: float, roll: float) -> bool:
        return (
            self.yaw_range.contains(yaw)
            and self.pitch_range.contains(pitch)
            and self.roll_range.contains(roll)
        )


@dataclass(frozen=True)
class SensorOnlyConfig:
    """Capture step without a visible face.

    The head angle check is replaced by the phone attitude, and the
    observed box comes from an external scalp segmenter.
    """

    angle: CaptureAngle
    title: str
    instructions: str
    phone: PhoneTarget
    distance: DistanceRange
    required_region: ScalpRegion
    template: TemplateSpec
    min_region_confidence: float = 0.85
    iou_threshold: float = 0.55
    stability_ms: float = 1000.0
    centering_tolerance: float = 0.15

    @property
    def strategy(self) -> ValidationStrategy:
        return ValidationStrategy.SENSOR_ONLY

    @property
    def region_required(self) -> bool:
        return True


AngleConfig = Union[FaceDetectionConfig, SensorOnlyConfig]


ANGLE_CONFIGS: Dict[CaptureAngle, AngleConfig] = {
    CaptureAngle.FRONT: FaceDetectionConfig(
        angle=CaptureAngle.FRONT,
        title="Front face",
        instructions="Hold the phone level and look straight at the camera.",
        yaw_range=AngleRange(-4.0, 4.0),
        pitch_range=AngleRange(-6.0, 6.0),
        roll_range=AngleRange(-3.0, 3.0),
        phone=PhoneTarget(pitch=0.0, roll=0.0, yaw=0.0, tolerance=5.0),
        distance=DistanceRange(25.0, 40.0),
        iou_threshold=0.75,
        stability_ms=1200.0,
    ),
    CaptureAngle.RIGHT_45: FaceDetectionConfig(
        angle=CaptureAngle.RIGHT_45,
        title="Right 45° profile",
        instructions="Turn your head 45° to the right and keep the phone level.",
        yaw_range=AngleRange(40.0, 50.0),
        pitch_range=AngleRange(-5.0, 5.0),
        roll_range=AngleRange(-5.0, 5.0),
        phone=PhoneTarget(pitch=0.0, roll=0.0, yaw=0.0, tolerance=5.0),
        distance=DistanceRange(20.0, 35.0),
        stability_ms=1000.0,
    ),
    CaptureAngle.LEFT_45: FaceDetectionConfig(
        angle=CaptureAngle.LEFT_45,
        title="Left 45° profile",
        instructions="Turn your head 45° to the left and keep the phone level.",
        yaw_range=AngleRange(-50.0, -40.0),
        pitch_range=AngleRange(-5.0, 5.0),
        roll_range=AngleRange(-5.0, 5.0),
        phone=PhoneTarget(pitch=0.0, roll=0.0, yaw=0.0, tolerance=5.0),
        distance=DistanceRange(20.0, 35.0),
        stability_ms=1000.0,
    ),
    CaptureAngle.VERTEX: SensorOnlyConfig(
        angle=CaptureAngle.VERTEX,
        title="Vertex",
        instructions="Hold the phone above your head with the camera facing down.",
        phone=PhoneTarget(pitch=-85.0, roll=0.0, yaw=0.0, tolerance=5.0, pitch_max=-95.0),
        distance=DistanceRange(30.0, 50.0),
        required_region=ScalpRegion.VERTEX,
        template=VERTEX_TEMPLATE,
        min_region_confidence=0.85,
        stability_ms=1000.0,
        centering_tolerance=0.10,
    ),
    CaptureAngle.BACK_DONOR: SensorOnlyConfig(
        angle=CaptureAngle.BACK_DONOR,
        title="Back donor area",
        instructions="Hold the phone behind your head with the camera facing your nape.",
        phone=PhoneTarget(pitch=-85.0, roll=0.0, yaw=180.0, tolerance=10.0, pitch_max=-100.0),
        distance=DistanceRange(30.0, 50.0),
        required_region=ScalpRegion.OCCIPITAL,
        template=BACK_DONOR_TEMPLATE,
        min_region_confidence=0.85,
        stability_ms=800.0,
        centering_tolerance=0.20,
    ),
}

CAPTURE_SEQUENCE: Tuple[CaptureAngle, ...] = (
    CaptureAngle.FRONT,
    CaptureAngle.RIGHT_45,
    CaptureAngle.LEFT_45,
    CaptureAngle.VERTEX,
    CaptureAngle.BACK_DONOR,
)


def parse_angle(name: Union[str, CaptureAngle]) -> CaptureAngle:
    """Angle from its enum value or member name, case-insensitive.

    Raises:
        ConfigurationError: On an unknown angle name.
    """
    if isinstance(name, CaptureAngle):
        return name
    key = str(name).strip().lower()
    for angle in CaptureAngle:
        if key in (angle.value, angle.name.lower()):
            return angle
    raise ConfigurationError(f"Unknown capture angle: {name!r}")


def get_angle_config(angle: Union[str, CaptureAngle]) -> AngleConfig:
    return ANGLE_CONFIGS[parse_angle(angle)]


def next_angle(angle: Union[str, CaptureAngle]) -> Optional[CaptureAngle]:
    """Following angle in ``CAPTURE_SEQUENCE``, or None after the last."""
    index = CAPTURE_SEQUENCE.index(parse_angle(angle))
    if index + 1 < len(CAPTURE_SEQUENCE):
        return CAPTURE_SEQUENCE[index + 1]
    return None


def _check_range(name: str, low: float, high: float) -> None:
    if low > high:
        raise ConfigurationError(f"{name}: min {low} exceeds max {high}")


def validate_angle_config(config: AngleConfig) -> AngleConfig:
    """Check an angle config for internal consistency.

    Returns the config unchanged so it can be used inline.

    Raises:
        ConfigurationError: On inverted ranges or out-of-range thresholds.
    """
    if not isinstance(config, (FaceDetectionConfig, SensorOnlyConfig)):
        raise ConfigurationError(f"Not an angle config: {type(config).__name__}")

    if config.phone.tolerance < 0:
        raise ConfigurationError("phone tolerance must be non-negative")
    _check_range("distance", config.distance.min_cm, config.distance.max_cm)
    if config.distance.min_cm < 0:
        raise ConfigurationError("distance must be non-negative")
    if not 0.0 <= config.iou_threshold <= 1.0:
        raise ConfigurationError(f"iou_threshold {config.iou_threshold} outside [0, 1]")
    if config.stability_ms < 0:
        raise ConfigurationError("stability_ms must be non-negative")
    if not 0.0 < config.centering_tolerance <= 1.0:
        raise ConfigurationError(
            f"centering_tolerance {config.centering_tolerance} outside (0, 1]"
        )
    if config.template.width_fraction <= 0 or config.template.height_factor <= 0:
        raise ConfigurationError("template proportions must be positive")

    if isinstance(config, FaceDetectionConfig):
        _check_range("yaw_range", config.yaw_range.min, config.yaw_range.max)
        _check_range("pitch_range", config.pitch_range.min, config.pitch_range.max)
        _check_range("roll_range", config.roll_range.min, config.roll_range.max)
    else:
        if config.required_region is ScalpRegion.UNKNOWN:
            raise ConfigurationError("required_region cannot be UNKNOWN")
        if not 0.0 <= config.min_region_confidence <= 1.0:
            raise ConfigurationError(
                f"min_region_confidence {config.min_region_confidence} outside [0, 1]"
            )
    return config


__all__ = [
    "CaptureAngle",
    "ValidationStrategy",
    "AngleRange",
    "PhoneTarget",
    "FaceDetectionConfig",
    "SensorOnlyConfig",
    "AngleConfig",
    "ANGLE_CONFIGS",
    "CAPTURE_SEQUENCE",
    "parse_angle",
    "get_angle_config",
    "next_angle",
    "validate_angle_config",
]
