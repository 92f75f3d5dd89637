"""The seven capture conditions.

    region_correct     IoU aligned, plus face centered on face angles
                       or required region confirmed on scalp angles
    head_angle_valid   head yaw/pitch/roll inside the angle's ranges
                       (phone attitude stands in on scalp angles)
    phone_angle_valid  phone pitch/roll inside the target window
    distance_valid     fused distance inside the angle's range
    lighting_ok        lighting score >= 70
    mask_stable        IoU quality above POOR
    angle_jitter_low   head pose stable (phone steady on scalp angles)
"""

from dataclasses import dataclass
from typing import Optional

from shutterguide.angles import AngleConfig, FaceDetectionConfig, SensorOnlyConfig
from shutterguide.config import ShutterConfig
from shutterguide.distance.output import DistanceEstimate
from shutterguide.head_pose.output import HeadPoseEstimate
from shutterguide.lighting.output import LightingAnalysis
from shutterguide.orientation.output import PhoneOrientation
from shutterguide.region.output import MatchQuality, RegionMatch
from shutterguide.shutter.output import CaptureConditions


@dataclass(frozen=True)
class TickInputs:
    """Latest estimates gathered for one evaluation.

    Any estimate may be None when its input never arrived (or went
    stale); the matching conditions are then False.
    """

    head_pose: Optional[HeadPoseEstimate] = None
    phone: Optional[PhoneOrientation] = None
    distance: Optional[DistanceEstimate] = None
    region: Optional[RegionMatch] = None
    region_confidence: Optional[float] = None
    lighting: Optional[LightingAnalysis] = None
    jitter_low: bool = False


def _phone_valid(angle: AngleConfig, phone: Optional[PhoneOrientation]) -> bool:
    if phone is None or phone.confidence <= 0.0:
        return False
    return angle.phone.contains(phone.pitch, phone.roll)


def _head_valid(angle: AngleConfig, inputs: TickInputs) -> bool:
    if isinstance(angle, SensorOnlyConfig):
        return True
    pose = inputs.head_pose
    if pose is None:
        return False
    return angle.head_pose_valid(pose.yaw, pose.pitch, pose.roll)


def _region_correct(angle: AngleConfig, inputs: TickInputs) -> bool:
    if inputs.region is None or not inputs.region.result.aligned:
        return False
    if isinstance(angle, FaceDetectionConfig):
        return inputs.region.centered
    confidence = inputs.region_confidence or 0.0
    return confidence >= angle.min_region_confidence


def evaluate_conditions(
    angle: AngleConfig,
    inputs: TickInputs,
    config: ShutterConfig,
) -> CaptureConditions:
    region = inputs.region
    return CaptureConditions(
        region_correct=_region_correct(angle, inputs),
        head_angle_valid=_head_valid(angle, inputs),
        phone_angle_valid=_phone_valid(angle, inputs.phone),
        distance_valid=inputs.distance is not None and inputs.distance.is_in_range,
        lighting_ok=inputs.lighting is not None and inputs.lighting.score >= config.lighting_ok_score,
        mask_stable=region is not None and region.result.quality is not MatchQuality.POOR,
        angle_jitter_low=inputs.jitter_low,
    )
