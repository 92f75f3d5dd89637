"""One corrective sentence per tick.

Only the highest-priority problem is reported:

    centering > head angle > phone angle > distance > lighting
    > mask stability > jitter

Several simultaneous instructions are unusable while holding a pose.
"""

from typing import List, Optional

from shutterguide.angles import AngleConfig, FaceDetectionConfig, SensorOnlyConfig
from shutterguide.distance.estimator import MSG_NO_SUBJECT
from shutterguide.shutter.conditions import TickInputs
from shutterguide.shutter.output import AngleConfidenceScore, CaptureConditions

MSG_CENTER = "Center the subject in the frame"
MSG_REGION = "Point the camera at the {region} area"
MSG_FIT_OUTLINE = "Fit your face inside the outline"
MSG_NO_FACE = "No face detected, look at the camera"
MSG_TURN_RIGHT = "Turn your head a little to the right"
MSG_TURN_LEFT = "Turn your head a little to the left"
MSG_CHIN_UP = "Lift your chin slightly"
MSG_CHIN_DOWN = "Lower your chin slightly"
MSG_HEAD_LEVEL = "Keep your head level"
MSG_NO_SENSOR = "Waiting for motion sensors"
MSG_TILT_UP = "Tilt the phone up"
MSG_TILT_DOWN = "Tilt the phone down"
MSG_PHONE_LEVEL = "Level the phone"
MSG_NO_LIGHTING = "Checking the lighting"
MSG_MASK = "Hold the framing steady"
MSG_JITTER = "Too much movement, hold still"
MSG_LOW_QUALITY = "Hold the position, quality is still too low"
MSG_CHECKING = "Checking position"
MSG_STABILIZING = "Great, hold still"
MSG_COUNTDOWN = "Hold still, capturing in {n}"
MSG_CAPTURED = "Photo captured"


def centering_message(angle: AngleConfig, inputs: TickInputs, region_correct: bool) -> Optional[str]:
    """Directional hint when the subject is off-center or misaligned."""
    region = inputs.region
    if region is None and isinstance(angle, FaceDetectionConfig):
        # No face: the head angle blocker says so
        return None
    if region is not None and region.hint and (not region.centered or not region_correct):
        return region.hint
    if region is not None and not region.centered:
        return MSG_CENTER
    if not region_correct:
        if region is not None and region.result.aligned and isinstance(angle, SensorOnlyConfig):
            return MSG_REGION.format(region=angle.required_region.value)
        if region is not None and isinstance(angle, FaceDetectionConfig):
            return MSG_FIT_OUTLINE
        return MSG_CENTER
    return None


def head_message(angle: AngleConfig, inputs: TickInputs) -> str:
    pose = inputs.head_pose
    if pose is None or not isinstance(angle, FaceDetectionConfig):
        return MSG_NO_FACE
    if pose.yaw < angle.yaw_range.min:
        return MSG_TURN_RIGHT
    if pose.yaw > angle.yaw_range.max:
        return MSG_TURN_LEFT
    if pose.pitch < angle.pitch_range.min:
        return MSG_CHIN_UP
    if pose.pitch > angle.pitch_range.max:
        return MSG_CHIN_DOWN
    return MSG_HEAD_LEVEL


def phone_message(angle: AngleConfig, inputs: TickInputs) -> str:
    phone = inputs.phone
    if phone is None or phone.confidence <= 0.0:
        return MSG_NO_SENSOR
    error = angle.phone.pitch_error(phone.pitch)
    if error < 0:
        return MSG_TILT_UP
    if error > 0:
        return MSG_TILT_DOWN
    return MSG_PHONE_LEVEL


def condition_message(name: str, angle: AngleConfig, inputs: TickInputs) -> str:
    if name == "region_correct":
        if inputs.region is None and isinstance(angle, FaceDetectionConfig):
            return MSG_NO_FACE
        return centering_message(angle, inputs, region_correct=False) or MSG_CENTER
    if name == "head_angle_valid":
        return head_message(angle, inputs)
    if name == "phone_angle_valid":
        return phone_message(angle, inputs)
    if name == "distance_valid":
        return inputs.distance.recommendation if inputs.distance is not None else MSG_NO_SUBJECT
    if name == "lighting_ok":
        return inputs.lighting.recommendation if inputs.lighting is not None else MSG_NO_LIGHTING
    if name == "mask_stable":
        return MSG_MASK
    return MSG_JITTER


def blocker_messages(
    conditions: CaptureConditions,
    angle: AngleConfig,
    inputs: TickInputs,
    confidence: AngleConfidenceScore,
    confident: bool,
) -> List[str]:
    """All blockers in priority order, one message per failed condition.

    Conditions sharing a cause (no face fails both region and head
    angle) are reported once.
    """
    blockers: List[str] = []
    for name in conditions.failed():
        message = condition_message(name, angle, inputs)
        if message not in blockers:
            blockers.append(message)
    if not blockers and not confident:
        blockers.append(MSG_LOW_QUALITY)
    return blockers


def select_feedback(
    conditions: CaptureConditions,
    angle: AngleConfig,
    inputs: TickInputs,
    blockers: List[str],
) -> str:
    """The single most important instruction."""
    centering = centering_message(angle, inputs, conditions.region_correct)
    if centering is not None:
        return centering
    if blockers:
        return blockers[0]
    return MSG_CHECKING
