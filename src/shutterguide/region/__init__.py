"""Region and silhouette matching, scalp region classification."""

from shutterguide.region.classifier import ScalpRegionClassifier
from shutterguide.region.iou import (
    box_iou,
    centroid_offset,
    classify_iou,
    direction_hint,
    mask_iou,
    match_iou,
)
from shutterguide.region.matcher import RegionMatcher
from shutterguide.region.output import (
    IoUResult,
    MatchQuality,
    RegionConfig,
    RegionDetection,
    RegionMatch,
    ScalpRegion,
    TemplateSpec,
)
from shutterguide.region.templates import (
    BACK_DONOR_TEMPLATE,
    FACE_TEMPLATE,
    VERTEX_TEMPLATE,
    build_template,
)

__all__ = [
    "RegionMatcher",
    "ScalpRegionClassifier",
    "RegionConfig",
    "IoUResult",
    "MatchQuality",
    "RegionMatch",
    "RegionDetection",
    "ScalpRegion",
    "TemplateSpec",
    "FACE_TEMPLATE",
    "VERTEX_TEMPLATE",
    "BACK_DONOR_TEMPLATE",
    "build_template",
    "box_iou",
    "mask_iou",
    "match_iou",
    "classify_iou",
    "centroid_offset",
    "direction_hint",
]
