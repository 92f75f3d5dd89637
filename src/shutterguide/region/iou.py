"""Intersection-over-union and centroid guidance.

IoU answers how far off the framing is; the signed centroid offset
answers which way to move.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from shutterguide.errors import ConfigurationError
from shutterguide.region.output import IoUResult, MatchQuality, RegionConfig
from shutterguide.types import BoundingBox, clamp

_DEFAULT_CONFIG = RegionConfig()

HINT_CAMERA_LEFT = "Move the camera left"
HINT_CAMERA_RIGHT = "Move the camera right"
HINT_CAMERA_UP = "Move the camera up"
HINT_CAMERA_DOWN = "Move the camera down"


def box_iou(a: BoundingBox, b: BoundingBox) -> float:
    """IoU of two axis-aligned boxes; 0 for disjoint or degenerate boxes."""
    ix = min(a.right, b.right) - max(a.x, b.x)
    iy = min(a.bottom, b.bottom) - max(a.y, b.y)
    if ix <= 0.0 or iy <= 0.0:
        return 0.0
    intersection = ix * iy
    # Areas from the same edge coordinates so IoU(a, a) is exactly 1.
    area_a = (a.right - a.x) * (a.bottom - a.y)
    area_b = (b.right - b.x) * (b.bottom - b.y)
    union = area_a + area_b - intersection
    if union <= 0.0:
        return 0.0
    return clamp(intersection / union)


def mask_iou(a: np.ndarray, b: np.ndarray) -> float:
    """IoU of two boolean masks of the same shape.

    Raises:
        ConfigurationError: If the mask shapes differ.
    """
    if a.shape != b.shape:
        raise ConfigurationError(f"Mask shapes differ: {a.shape} vs {b.shape}")
    a = a.astype(bool)
    b = b.astype(bool)
    union = int(np.logical_or(a, b).sum())
    if union == 0:
        return 0.0
    intersection = int(np.logical_and(a, b).sum())
    return clamp(intersection / union)


def classify_iou(iou: float, config: RegionConfig = _DEFAULT_CONFIG) -> MatchQuality:
    if iou >= config.iou_perfect:
        return MatchQuality.PERFECT
    if iou >= config.iou_good:
        return MatchQuality.GOOD
    if iou >= config.iou_acceptable:
        return MatchQuality.ACCEPTABLE
    return MatchQuality.POOR


def match_iou(
    observed: BoundingBox,
    template: BoundingBox,
    aligned_threshold: Optional[float] = None,
    config: RegionConfig = _DEFAULT_CONFIG,
) -> IoUResult:
    """IoU of ``observed`` against ``template`` with quality tier.

    Args:
        aligned_threshold: Per-angle IoU needed for ``aligned``; defaults
            to the GOOD tier.
    """
    iou = box_iou(observed, template)
    threshold = config.iou_good if aligned_threshold is None else aligned_threshold
    return IoUResult(iou=iou, quality=classify_iou(iou, config), aligned=iou >= threshold)


def centroid_offset(observed: BoundingBox, template: BoundingBox) -> Tuple[float, float]:
    """Signed center offset normalized by template size, clamped to [-1, 1].

    Negative x means the subject sits left of the target, negative y above.
    """
    if template.is_empty():
        return (0.0, 0.0)
    ocx, ocy = observed.center
    tcx, tcy = template.center
    dx = clamp((ocx - tcx) / template.width, -1.0, 1.0)
    dy = clamp((ocy - tcy) / template.height, -1.0, 1.0)
    return (dx, dy)


def direction_hint(
    offset_x: float,
    offset_y: float,
    threshold: float = _DEFAULT_CONFIG.direction_threshold,
) -> Optional[str]:
    """Camera move that recenters the subject, or None when centered.

    The larger of the two offsets wins.
    """
    ax, ay = abs(offset_x), abs(offset_y)
    if ax <= threshold and ay <= threshold:
        return None
    if ax >= ay:
        return HINT_CAMERA_LEFT if offset_x < 0 else HINT_CAMERA_RIGHT
    return HINT_CAMERA_UP if offset_y < 0 else HINT_CAMERA_DOWN
