"""Camera-to-head distance from a bounding box.

Optical:
    focal_px = focal_mm * image_width_px / sensor_width_mm
    distance = head_width_cm * focal_px / bbox_width_px

Depth:
    Bucketed lookup on bbox-width / frame-width. This is a heuristic
    placeholder for a real depth model and must keep its bucket behavior.

Fusion:
    0.6 * optical + 0.4 * depth, confidence max(optical, depth) penalized
    when the two disagree.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from shutterguide.distance.output import (
    DistanceConfig,
    DistanceEstimate,
    DistanceMethod,
    DistanceRange,
)
from shutterguide.types import FaceMetrics, clamp

logger = logging.getLogger(__name__)

MSG_NO_SUBJECT = "No head detected"
MSG_MOVE_BACK = "Move the camera back"
MSG_MOVE_BACK_SLIGHTLY = "Move the camera back slightly"
MSG_MOVE_CLOSER = "Bring the camera closer"
MSG_MOVE_CLOSER_SLIGHTLY = "Bring the camera slightly closer"
MSG_PERFECT = "Perfect distance"


def _no_subject() -> DistanceEstimate:
    return DistanceEstimate(
        distance_cm=0.0,
        confidence=0.0,
        method=DistanceMethod.FUSION,
        is_in_range=False,
        recommendation=MSG_NO_SUBJECT,
    )


class DistanceEstimator:
    """Optical + depth-heuristic distance fusion.

    Stateless: every call is independent.

    Example:
        >>> estimator = DistanceEstimator()
        >>> est = estimator.estimate(metrics, DistanceRange(25, 40))
        >>> est.distance_cm, est.is_in_range
    """

    def __init__(self, config: Optional[DistanceConfig] = None):
        self.config = config or DistanceConfig()

    def focal_length_px(self, image_width_px: int) -> float:
        cfg = self.config
        return cfg.focal_length_mm * image_width_px / cfg.sensor_width_mm

    def optical(self, metrics: FaceMetrics) -> Optional[DistanceEstimate]:
        cfg = self.config
        width_px = metrics.width_px
        if width_px <= 0.0 or metrics.image_width_px <= 0:
            return None

        distance = cfg.head_width_cm * self.focal_length_px(metrics.image_width_px) / width_px

        confidence = cfg.optical_confidence
        area_ratio = max(0.0, metrics.bounds.area)
        if area_ratio < cfg.small_area_ratio:
            confidence *= cfg.small_area_penalty
        elif area_ratio > cfg.large_area_ratio:
            confidence *= cfg.large_area_penalty
        if distance < cfg.sane_min_cm or distance > cfg.sane_max_cm:
            confidence *= cfg.out_of_range_penalty

        return DistanceEstimate(
            distance_cm=distance,
            confidence=clamp(confidence),
            method=DistanceMethod.OPTICAL,
        )

    def depth(self, metrics: FaceMetrics) -> Optional[DistanceEstimate]:
        cfg = self.config
        width_ratio = metrics.bounds.width
        if width_ratio <= 0.0:
            return None

        distance = cfg.depth_far_cm
        for lower, bucket_cm in cfg.depth_buckets:
            if width_ratio > lower:
                distance = bucket_cm
                break

        return DistanceEstimate(
            distance_cm=distance,
            confidence=cfg.depth_confidence,
            method=DistanceMethod.DEPTH,
        )

    def fuse(self, optical: DistanceEstimate, depth: DistanceEstimate) -> Tuple[float, float]:
        """Fused (distance_cm, confidence) of two independent estimates."""
        cfg = self.config
        distance = optical.distance_cm * cfg.optical_weight + depth.distance_cm * cfg.depth_weight
        confidence = max(optical.confidence, depth.confidence)

        gap = abs(optical.distance_cm - depth.distance_cm)
        if gap > cfg.disagreement_high_cm:
            confidence *= cfg.disagreement_high_penalty
        elif gap > cfg.disagreement_low_cm:
            confidence *= cfg.disagreement_low_penalty

        return distance, clamp(confidence)

    def recommend(self, distance_cm: float, target: DistanceRange) -> str:
        margin = self.config.recommendation_margin_cm
        if distance_cm < target.min_cm - margin:
            return MSG_MOVE_BACK
        if distance_cm < target.min_cm:
            return MSG_MOVE_BACK_SLIGHTLY
        if distance_cm > target.max_cm + margin:
            return MSG_MOVE_CLOSER
        if distance_cm > target.max_cm:
            return MSG_MOVE_CLOSER_SLIGHTLY
        return MSG_PERFECT

    def estimate(self, metrics: Optional[FaceMetrics], target: DistanceRange) -> DistanceEstimate:
        """Fused distance for one bounding box.

        A missing or zero-width box yields distance 0 and confidence 0.
        """
        if metrics is None:
            return _no_subject()

        optical = self.optical(metrics)
        depth = self.depth(metrics)
        if optical is None or depth is None:
            logger.debug("Degenerate bounding box %s, distance unavailable", metrics.bounds)
            return _no_subject()

        distance, confidence = self.fuse(optical, depth)
        return DistanceEstimate(
            distance_cm=distance,
            confidence=confidence,
            method=DistanceMethod.FUSION,
            is_in_range=target.contains(distance),
            recommendation=self.recommend(distance, target),
        )
