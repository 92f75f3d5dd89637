"""Shared input types for the capture engine.

Coordinates:
    Every bounding box and landmark in the package is expressed in
    normalized screen fractions: x grows to the right, y grows downward,
    (0, 0) is the top-left corner of the preview and (1, 1) the
    bottom-right. Pixel values only appear at the distance estimator
    boundary via ``FaceMetrics``.

Time:
    Timestamps are monotonic nanoseconds (``t_ns``).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class Vec3:
    """Three-axis vector (gyro rad/s or accelerometer m/s²)."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def magnitude(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def __sub__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def to_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class RawSensorSample:
    """One gyroscope + accelerometer reading.

    Attributes:
        gyro: Angular rate in rad/s (x drives pitch, y roll, z yaw).
        accel: Acceleration in m/s², gravity included.
        t_ns: Monotonic timestamp in nanoseconds.
    """

    gyro: Vec3
    accel: Vec3
    t_ns: int = 0


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in normalized screen fractions."""

    x: float
    y: float
    width: float
    height: float

    @property
    def area(self) -> float:
        return max(0.0, self.width) * max(0.0, self.height)

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def is_empty(self) -> bool:
        return self.width <= 0.0 or self.height <= 0.0

    def to_pixels(self, image_width: int, image_height: int) -> Tuple[int, int, int, int]:
        """Convert to integer (x, y, w, h) pixels."""
        return (
            int(round(self.x * image_width)),
            int(round(self.y * image_height)),
            int(round(self.width * image_width)),
            int(round(self.height * image_height)),
        )

    @classmethod
    def from_center(cls, cx: float, cy: float, width: float, height: float) -> "BoundingBox":
        return cls(cx - width / 2.0, cy - height / 2.0, width, height)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class Landmark:
    """2-D facial landmark in normalized screen fractions."""

    x: float
    y: float


# Landmark names the surface-normal pose method reads.
LEFT_EYE = "left_eye"
RIGHT_EYE = "right_eye"
NOSE_BASE = "nose_base"


@dataclass
class DetectedFace:
    """Face reported by the external detector for one frame.

    Attributes:
        bounds: Face bounding box.
        landmarks: Named 2-D landmarks (``left_eye``, ``right_eye``,
            ``nose_base`` and any others the detector returns).
        yaw: Detector head yaw in degrees (positive = turned right).
        pitch: Detector head pitch in degrees (positive = chin up).
        roll: Detector head roll in degrees.
        left_eye_open_probability: Optional classifier output [0, 1].
        right_eye_open_probability: Optional classifier output [0, 1].
        smiling_probability: Optional classifier output [0, 1].
        frame_aspect: Frame height / width in pixels. Scales normalized y
            into x units for landmark geometry.
    """

    bounds: BoundingBox
    landmarks: Dict[str, Landmark] = field(default_factory=dict)
    yaw: float = 0.0
    pitch: float = 0.0
    roll: float = 0.0
    left_eye_open_probability: Optional[float] = None
    right_eye_open_probability: Optional[float] = None
    smiling_probability: Optional[float] = None
    frame_aspect: float = 1.0

    @property
    def eyes_open_percent(self) -> Optional[float]:
        """Mean eyes-open probability as a percentage, if classified."""
        probs = [
            p for p in (self.left_eye_open_probability, self.right_eye_open_probability)
            if p is not None
        ]
        if not probs:
            return None
        return 100.0 * sum(probs) / len(probs)


@dataclass(frozen=True)
class FaceMetrics:
    """Bounding box plus the pixel size of the frame it was measured in."""

    bounds: BoundingBox
    image_width_px: int
    image_height_px: int

    @property
    def width_px(self) -> float:
        return self.bounds.width * self.image_width_px

    @property
    def height_px(self) -> float:
        return self.bounds.height * self.image_height_px


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp ``value`` to [low, high]; NaN collapses to ``low``."""
    if value != value:
        return low
    return max(low, min(high, value))


def normalize_degrees(angle: float) -> float:
    """Wrap an angle into (-180, 180]."""
    angle = math.fmod(angle, 360.0)
    if angle <= -180.0:
        angle += 360.0
    elif angle > 180.0:
        angle -= 360.0
    return angle


__all__ = [
    "Vec3",
    "RawSensorSample",
    "BoundingBox",
    "Landmark",
    "DetectedFace",
    "FaceMetrics",
    "LEFT_EYE",
    "RIGHT_EYE",
    "NOSE_BASE",
    "clamp",
    "normalize_degrees",
]
