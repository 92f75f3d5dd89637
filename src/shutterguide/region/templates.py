"""Per-angle target silhouettes in normalized screen fractions."""

from __future__ import annotations

from shutterguide.errors import ConfigurationError
from shutterguide.region.output import TemplateSpec
from shutterguide.types import BoundingBox

# Face angles: 40% of screen width, portrait face proportions. A face
# filling it sits inside the face-angle distance windows.
FACE_TEMPLATE = TemplateSpec(width_fraction=0.40, height_factor=1.3)
# Top of head: 35% square.
VERTEX_TEMPLATE = TemplateSpec(width_fraction=0.35, height_factor=1.0)
# Back of head: 40%, slightly taller than wide.
BACK_DONOR_TEMPLATE = TemplateSpec(width_fraction=0.40, height_factor=1.1)


def build_template(spec: TemplateSpec, screen_aspect: float = 16.0 / 9.0) -> BoundingBox:
    """Centered template box.

    Args:
        spec: Template proportions.
        screen_aspect: Screen height / width in pixels (portrait > 1).

    Raises:
        ConfigurationError: If the aspect or width is not positive.
    """
    if screen_aspect <= 0.0 or spec.width_fraction <= 0.0:
        raise ConfigurationError(
            f"Invalid template: width={spec.width_fraction} aspect={screen_aspect}"
        )
    width = spec.width_fraction
    # Height in pixels is width_px * factor; convert to a height fraction.
    height = spec.width_fraction * spec.height_factor / screen_aspect
    return BoundingBox.from_center(0.5, 0.5, width, height)
