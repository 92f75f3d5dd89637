"""Angle confidence score.

    overall = pose * 0.35 + phone * 0.25 + centering * 0.15
            + distance * 0.10 + region * 0.10 + quality * 0.05

The score is independent of the seven boolean conditions: the booleans
gate the shutter, the score measures how good the framing is.
"""

from typing import Dict

from shutterguide.angles import AngleConfig, SensorOnlyConfig
from shutterguide.config import ShutterConfig
from shutterguide.shutter.conditions import TickInputs
from shutterguide.shutter.output import AngleConfidenceScore, ConfidenceLevel
from shutterguide.types import clamp

COMPONENTS = ("pose", "phone", "centering", "distance", "region", "quality")


def weights(config: ShutterConfig) -> Dict[str, float]:
    return {
        "pose": config.weight_pose,
        "phone": config.weight_phone,
        "centering": config.weight_centering,
        "distance": config.weight_distance,
        "region": config.weight_region,
        "quality": config.weight_quality,
    }


def component_scores(angle: AngleConfig, inputs: TickInputs, config: ShutterConfig) -> Dict[str, float]:
    """Per-component scores in [0, 1]; missing inputs score 0."""
    if isinstance(angle, SensorOnlyConfig):
        pose = inputs.region_confidence or 0.0
    else:
        pose = inputs.head_pose.confidence if inputs.head_pose is not None else 0.0

    phone = inputs.phone.confidence if inputs.phone is not None else 0.0

    if inputs.region is None:
        centering = config.centering_fallback
        region = config.region_default
    else:
        framed = inputs.region.centered and inputs.region.result.aligned
        centering = 1.0 if framed else config.centering_fallback
        region = inputs.region.result.iou

    if inputs.distance is None:
        distance = 0.0
    elif inputs.distance.is_in_range:
        distance = inputs.distance.confidence
    else:
        distance = config.distance_out_of_range

    quality = inputs.lighting.score / 100.0 if inputs.lighting is not None else 0.0

    return {
        "pose": clamp(pose),
        "phone": clamp(phone),
        "centering": clamp(centering),
        "distance": clamp(distance),
        "region": clamp(region),
        "quality": clamp(quality),
    }


def classify_confidence(overall: float, config: ShutterConfig) -> ConfidenceLevel:
    if overall >= config.perfect_threshold:
        return ConfidenceLevel.PERFECT
    if overall >= config.auto_capture_threshold:
        return ConfidenceLevel.AUTO_CAPTURE
    if overall >= config.guidance_threshold:
        return ConfidenceLevel.USER_GUIDANCE
    return ConfidenceLevel.REJECT


def combine(components: Dict[str, float], config: ShutterConfig) -> AngleConfidenceScore:
    """Weighted sum of clamped components."""
    w = weights(config)
    weighted = {name: clamp(components.get(name, 0.0)) * w[name] for name in COMPONENTS}
    overall = clamp(sum(weighted.values()))
    return AngleConfidenceScore(
        overall=overall,
        components={name: clamp(components.get(name, 0.0)) for name in COMPONENTS},
        weighted=weighted,
        level=classify_confidence(overall, config),
    )


def score_confidence(angle: AngleConfig, inputs: TickInputs, config: ShutterConfig) -> AngleConfidenceScore:
    return combine(component_scores(angle, inputs, config), config)
