"""Output and config types for head pose estimation."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from shutterguide.types import BoundingBox


class PoseMethod(str, Enum):
    LANDMARK = "landmark"
    SURFACE_NORMAL = "surface_normal"
    HYBRID = "hybrid"


@dataclass(frozen=True)
class HeadPoseConfig:
    """Head pose fusion and stabilization constants.

    Face model ratios are in interocular units: the nose base sits
    ``nose_depth_ratio`` in front of the eye plane and ``nose_drop_ratio``
    below the eye line.
    """

    landmark_weight: float = 0.4
    surface_normal_weight: float = 0.6

    landmark_full_count: int = 10
    landmark_max_confidence: float = 0.8
    surface_normal_confidence: float = 0.85

    nose_depth_ratio: float = 0.35
    nose_drop_ratio: float = 0.75

    # Optical-flow stabilizer
    smoothing_factor: float = 0.3
    window_ms: float = 500.0
    max_jitter_deg: float = 2.0
    min_stable_frames: int = 15
    stable_confidence_boost: float = 1.1


@dataclass(frozen=True)
class HeadPoseEstimate:
    """Head angles in degrees.

    Sign conventions: positive yaw moves the nose toward +x in the frame,
    positive pitch lifts the chin, positive roll rotates the eye line
    clockwise on screen.
    """

    yaw: float
    pitch: float
    roll: float
    confidence: float
    method: PoseMethod
    bounds: Optional[BoundingBox] = None

    def to_dict(self) -> dict:
        return {
            "yaw": self.yaw,
            "pitch": self.pitch,
            "roll": self.roll,
            "confidence": self.confidence,
            "method": self.method.value,
        }
