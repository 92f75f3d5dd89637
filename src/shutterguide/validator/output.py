"""Output and config types for the adaptive validator."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class AxisTarget:
    """Triangular score: 100 at ``target``, 0 at ``tolerance`` away."""

    target: float
    tolerance: float


@dataclass(frozen=True)
class WindowTarget:
    """Sinusoidal score inside [min, max], peaking mid-window; 0 outside."""

    min: float
    max: float


@dataclass(frozen=True)
class ValidatorConfig:
    """Scoring targets, weights and anti-flicker parameters.

    Scores are on a 0-100 scale. Distances are in cm, face width and
    centering offsets in percent of the frame, brightness and contrast on
    the 0-255 luminance scale, sharpness on the 0-100 sharpness score.
    """

    pitch: AxisTarget = AxisTarget(90.0, 5.0)
    roll: AxisTarget = AxisTarget(0.0, 5.0)
    yaw: AxisTarget = AxisTarget(0.0, 10.0)
    distance: WindowTarget = WindowTarget(35.0, 45.0)
    face_width: WindowTarget = WindowTarget(30.0, 50.0)
    brightness: WindowTarget = WindowTarget(80.0, 150.0)
    min_sharpness: float = 75.0
    min_contrast: float = 40.0
    min_eyes_open: float = 80.0
    center_tolerance: float = 15.0

    weight_pitch: float = 0.20
    weight_roll: float = 0.20
    weight_yaw: float = 0.10
    weight_distance: float = 0.15
    weight_face_width: float = 0.10
    weight_image_quality: float = 0.10
    weight_centering: float = 0.05
    weight_eyes: float = 0.10

    # Hysteresis: valid->invalid below threshold - band,
    # invalid->valid above threshold + band.
    valid_threshold: float = 60.0
    hysteresis_band: float = 5.0

    buffer_size: int = 30
    baseline_ratio: float = 0.66
    countdown_accuracy: float = 75.0

    # Partial scores below this produce a failure reason
    failure_score: float = 50.0


@dataclass(frozen=True)
class ValidationCriteria:
    """One frame of measurements.

    ``None`` marks a measurement the capture step does not have (for
    example eyes on a vertex shot). Missing criteria drop out of the
    weighted accuracy instead of scoring 0.
    """

    pitch: Optional[float] = None
    roll: Optional[float] = None
    yaw: Optional[float] = None
    distance: Optional[float] = None
    face_width_percent: Optional[float] = None
    sharpness: Optional[float] = None
    brightness: Optional[float] = None
    contrast: Optional[float] = None
    eyes_open_percent: Optional[float] = None
    face_center_x: Optional[float] = None
    face_center_y: Optional[float] = None


@dataclass(frozen=True)
class ValidationResult:
    """Validator verdict for one frame.

    ``scores`` holds the rounded partial scores that were computed,
    keyed by criterion (``image_quality`` and ``centering`` are the
    grouped means).
    """

    is_valid: bool
    accuracy: int
    should_countdown: bool
    failure_reasons: List[str] = field(default_factory=list)
    scores: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "accuracy": self.accuracy,
            "should_countdown": self.should_countdown,
            "failure_reasons": list(self.failure_reasons),
            "scores": dict(self.scores),
        }


@dataclass(frozen=True)
class BufferStats:
    total_frames: int
    valid_frames: int
    invalid_frames: int
    validity_percentage: int
