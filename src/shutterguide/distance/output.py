"""Output and config types for distance estimation."""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class DistanceMethod(str, Enum):
    OPTICAL = "optical"
    DEPTH = "depth"
    FUSION = "fusion"


@dataclass(frozen=True)
class DistanceConfig:
    """Camera model and fusion constants.

    The depth buckets are a heuristic stand-in for an on-device depth
    model: (width ratio lower bound, distance cm), checked in order, with
    ``depth_far_cm`` as the fallback.
    """

    head_width_cm: float = 16.5
    head_height_cm: float = 22.0
    focal_length_mm: float = 4.0
    sensor_width_mm: float = 5.76

    optical_confidence: float = 0.9
    small_area_ratio: float = 0.05
    small_area_penalty: float = 0.6
    large_area_ratio: float = 0.7
    large_area_penalty: float = 0.7
    sane_min_cm: float = 10.0
    sane_max_cm: float = 100.0
    out_of_range_penalty: float = 0.5

    depth_buckets: Tuple[Tuple[float, float], ...] = ((0.5, 25.0), (0.3, 40.0), (0.15, 60.0))
    depth_far_cm: float = 80.0
    depth_confidence: float = 0.75

    optical_weight: float = 0.6
    depth_weight: float = 0.4
    disagreement_high_cm: float = 10.0
    disagreement_high_penalty: float = 0.8
    disagreement_low_cm: float = 5.0
    disagreement_low_penalty: float = 0.9

    recommendation_margin_cm: float = 5.0


@dataclass(frozen=True)
class DistanceRange:
    """Acceptable camera-to-head distance window in cm."""

    min_cm: float
    max_cm: float

    def contains(self, distance_cm: float) -> bool:
        return self.min_cm <= distance_cm <= self.max_cm


@dataclass(frozen=True)
class DistanceEstimate:
    distance_cm: float
    confidence: float
    method: DistanceMethod
    is_in_range: bool = False
    recommendation: str = ""

    def to_dict(self) -> dict:
        return {
            "distance_cm": self.distance_cm,
            "confidence": self.confidence,
            "method": self.method.value,
            "is_in_range": self.is_in_range,
            "recommendation": self.recommendation,
        }
