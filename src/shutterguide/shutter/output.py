"""Output types for the auto-shutter engine."""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Dict, List, Optional

from shutterguide.angles import CaptureAngle
from shutterguide.distance.output import DistanceEstimate
from shutterguide.head_pose.output import HeadPoseEstimate
from shutterguide.lighting.output import LightingAnalysis
from shutterguide.orientation.output import PhoneOrientation
from shutterguide.region.output import IoUResult
from shutterguide.validator.output import ValidationResult


class ShutterPhase(str, Enum):
    """Engine phases.

    IDLE -> CONDITIONS_PENDING -> ALL_CONDITIONS_MET -> STABILIZING
         -> READY -> CAPTURED

    CAPTURED is terminal until ``reset()``; any regression before it drops
    straight back to CONDITIONS_PENDING (or ALL_CONDITIONS_MET when only
    the confidence fell).
    """

    IDLE = "idle"
    CONDITIONS_PENDING = "conditions_pending"
    ALL_CONDITIONS_MET = "all_conditions_met"
    STABILIZING = "stabilizing"
    READY = "ready"
    CAPTURED = "captured"


class ConfidenceLevel(str, Enum):
    PERFECT = "perfect"
    AUTO_CAPTURE = "auto_capture"
    USER_GUIDANCE = "user_guidance"
    REJECT = "reject"


@dataclass(frozen=True)
class CaptureConditions:
    """The seven capture gates.

    Field order is the feedback priority order.
    """

    region_correct: bool = False
    head_angle_valid: bool = False
    phone_angle_valid: bool = False
    distance_valid: bool = False
    lighting_ok: bool = False
    mask_stable: bool = False
    angle_jitter_low: bool = False

    @property
    def all_met(self) -> bool:
        return all(getattr(self, f.name) for f in fields(self))

    def failed(self) -> List[str]:
        """Names of failed conditions, highest priority first."""
        return [f.name for f in fields(self) if not getattr(self, f.name)]

    def to_dict(self) -> Dict[str, bool]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class AngleConfidenceScore:
    """Weighted capture confidence.

    Attributes:
        overall: Weighted sum in [0, 1].
        components: Raw component scores in [0, 1] (pose, phone,
            centering, distance, region, quality).
        weighted: Each component multiplied by its weight.
        level: Discrete level of ``overall``.
    """

    overall: float
    components: Dict[str, float] = field(default_factory=dict)
    weighted: Dict[str, float] = field(default_factory=dict)
    level: ConfidenceLevel = ConfidenceLevel.REJECT

    @property
    def percentage(self) -> float:
        return self.overall * 100.0

    def to_dict(self) -> dict:
        return {
            "overall": self.overall,
            "components": dict(self.components),
            "weighted": dict(self.weighted),
            "level": self.level.value,
        }


@dataclass(frozen=True)
class AutoShutterState:
    """Engine output for one evaluation tick.

    ``ready`` is True while the capture lock is engaged and the countdown
    runs; ``fire`` is True on exactly one tick, when the countdown
    elapses. ``countdown`` is the whole seconds left (None outside READY).
    """

    t_ns: int
    angle: CaptureAngle
    phase: ShutterPhase
    ready: bool
    countdown: Optional[int]
    conditions: CaptureConditions
    confidence: AngleConfidenceScore
    blockers: List[str] = field(default_factory=list)
    feedback: str = ""
    stability_progress: float = 0.0
    fire: bool = False

    head_pose: Optional[HeadPoseEstimate] = None
    phone: Optional[PhoneOrientation] = None
    distance: Optional[DistanceEstimate] = None
    iou: Optional[IoUResult] = None
    lighting: Optional[LightingAnalysis] = None
    validation: Optional[ValidationResult] = None

    def to_dict(self) -> dict:
        return {
            "t_ns": self.t_ns,
            "angle": self.angle.value,
            "phase": self.phase.value,
            "ready": self.ready,
            "countdown": self.countdown,
            "fire": self.fire,
            "conditions": self.conditions.to_dict(),
            "confidence": self.confidence.to_dict(),
            "blockers": list(self.blockers),
            "feedback": self.feedback,
            "stability_progress": self.stability_progress,
            "head_pose": self.head_pose.to_dict() if self.head_pose else None,
            "phone": self.phone.to_dict() if self.phone else None,
            "distance": self.distance.to_dict() if self.distance else None,
            "iou": self.iou.to_dict() if self.iou else None,
            "lighting": self.lighting.to_dict() if self.lighting else None,
            "validation": self.validation.to_dict() if self.validation else None,
        }
