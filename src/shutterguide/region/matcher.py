"""Framing check of an observed box against a target silhouette."""

from __future__ import annotations

from typing import Optional

from shutterguide.region.iou import centroid_offset, direction_hint, match_iou
from shutterguide.region.output import RegionConfig, RegionMatch, TemplateSpec
from shutterguide.region.templates import build_template
from shutterguide.types import BoundingBox


class RegionMatcher:
    """Combines IoU, centroid offset and a direction hint.

    Example:
        >>> matcher = RegionMatcher(screen_aspect=16 / 9)
        >>> m = matcher.match(face.bounds, FACE_TEMPLATE, iou_threshold=0.75,
        ...                   centering_tolerance=0.15)
        >>> m.result.aligned, m.hint
    """

    def __init__(self, config: Optional[RegionConfig] = None, screen_aspect: float = 16.0 / 9.0):
        self.config = config or RegionConfig()
        self.screen_aspect = screen_aspect

    def template(self, spec: TemplateSpec) -> BoundingBox:
        return build_template(spec, self.screen_aspect)

    def match(
        self,
        observed: BoundingBox,
        spec: TemplateSpec,
        iou_threshold: float,
        centering_tolerance: float,
    ) -> RegionMatch:
        """Match one observation.

        Args:
            observed: Detected face or scalp region box.
            spec: Target silhouette for the capture step.
            iou_threshold: IoU needed for ``aligned``.
            centering_tolerance: Max |offset| (fraction of template size)
                on both axes for ``centered``.
        """
        template = self.template(spec)
        result = match_iou(observed, template, iou_threshold, self.config)
        dx, dy = centroid_offset(observed, template)
        centered = abs(dx) <= centering_tolerance and abs(dy) <= centering_tolerance
        hint = direction_hint(dx, dy, self.config.direction_threshold)
        return RegionMatch(
            result=result,
            template=template,
            offset_x=dx,
            offset_y=dy,
            centered=centered,
            hint=hint,
        )
