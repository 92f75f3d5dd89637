"""Output and config types for region matching and scalp region classification."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from shutterguide.types import BoundingBox


class MatchQuality(str, Enum):
    PERFECT = "perfect"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    POOR = "poor"


class ScalpRegion(str, Enum):
    VERTEX = "vertex"
    OCCIPITAL = "occipital"
    PARIETAL = "parietal"
    TEMPORAL = "temporal"
    FRONTAL = "frontal"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RegionConfig:
    """IoU tiers, centroid guidance and scalp classification constants."""

    iou_perfect: float = 0.70
    iou_good: float = 0.55
    iou_acceptable: float = 0.45

    # |offset| above this (fraction of template size) yields a direction
    direction_threshold: float = 0.15

    # Scalp region classifier (phone angles in degrees)
    region_min_confidence: float = 0.85
    vertex_pitch_range: Tuple[float, float] = (-110.0, -70.0)
    vertex_pitch_center: float = -90.0
    vertex_pitch_span: float = 20.0
    occipital_pitch_range: Tuple[float, float] = (60.0, 110.0)
    occipital_pitch_center: float = 85.0
    occipital_pitch_span: float = 25.0
    frontal_pitch_limit: float = 10.0
    parietal_roll_min: float = 30.0
    parietal_pitch_limit: float = 45.0
    temporal_yaw_min: float = 30.0
    roll_span: float = 15.0


@dataclass(frozen=True)
class TemplateSpec:
    """Target silhouette as a centered box.

    ``width_fraction`` is relative to screen width; ``height_factor``
    scales the width in pixels to get the height.
    """

    width_fraction: float
    height_factor: float = 1.0


@dataclass(frozen=True)
class IoUResult:
    iou: float
    quality: MatchQuality
    aligned: bool

    def to_dict(self) -> dict:
        return {"iou": self.iou, "quality": self.quality.value, "aligned": self.aligned}


@dataclass(frozen=True)
class RegionMatch:
    """IoU plus directional guidance against a per-angle template."""

    result: IoUResult
    template: BoundingBox
    offset_x: float = 0.0
    offset_y: float = 0.0
    centered: bool = False
    hint: Optional[str] = None


@dataclass(frozen=True)
class RegionDetection:
    region: ScalpRegion
    confidence: float

    def is_acceptable(self, min_confidence: float) -> bool:
        return self.region is not ScalpRegion.UNKNOWN and self.confidence >= min_confidence
