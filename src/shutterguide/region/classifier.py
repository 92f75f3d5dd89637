"""Rule-based scalp region classification from phone and head angles.

Used on capture steps that photograph the scalp without a visible face
(vertex, back donor), where the required region must be confirmed before
the shutter can fire.

Phone yaw is never used: it is gyro-integrated and only meaningful as a
relative angle.
"""

from __future__ import annotations

from typing import Optional

from shutterguide.head_pose.output import HeadPoseEstimate
from shutterguide.orientation.output import PhoneOrientation
from shutterguide.region.output import RegionConfig, RegionDetection, ScalpRegion
from shutterguide.types import clamp


def _falloff(deviation: float, span: float) -> float:
    return max(0.0, 1.0 - deviation / span)


class ScalpRegionClassifier:
    """Maps phone attitude (and head pose when a face is visible) to a region."""

    def __init__(self, config: Optional[RegionConfig] = None):
        self.config = config or RegionConfig()

    def classify(
        self,
        phone: PhoneOrientation,
        head_pose: Optional[HeadPoseEstimate] = None,
    ) -> RegionDetection:
        """Most likely region, checked in fixed rule order."""
        cfg = self.config
        pitch, roll = phone.pitch, phone.roll

        lo, hi = cfg.vertex_pitch_range
        if lo <= pitch <= hi:
            return RegionDetection(ScalpRegion.VERTEX, self._vertex(phone))

        lo, hi = cfg.occipital_pitch_range
        if lo <= pitch <= hi:
            return RegionDetection(ScalpRegion.OCCIPITAL, self._occipital(phone))

        if head_pose is not None and abs(pitch) <= cfg.frontal_pitch_limit:
            return RegionDetection(ScalpRegion.FRONTAL, self._frontal(phone, head_pose))

        if abs(roll) > cfg.parietal_roll_min and abs(pitch) < cfg.parietal_pitch_limit:
            return RegionDetection(ScalpRegion.PARIETAL, self._parietal(phone))

        if head_pose is not None and abs(head_pose.yaw) > cfg.temporal_yaw_min:
            return RegionDetection(ScalpRegion.TEMPORAL, self._temporal(head_pose))

        return RegionDetection(ScalpRegion.UNKNOWN, 0.0)

    def confidence_for(
        self,
        region: ScalpRegion,
        phone: PhoneOrientation,
        head_pose: Optional[HeadPoseEstimate] = None,
    ) -> float:
        """Confidence that the camera is framing ``region``.

        Unlike ``classify`` this scores the requested region directly, so
        overlapping pitch windows do not shadow each other.
        """
        if region is ScalpRegion.VERTEX:
            return self._vertex(phone)
        if region is ScalpRegion.OCCIPITAL:
            return self._occipital(phone)
        if region is ScalpRegion.PARIETAL:
            return self._parietal(phone)
        if region is ScalpRegion.FRONTAL:
            return self._frontal(phone, head_pose) if head_pose is not None else 0.0
        if region is ScalpRegion.TEMPORAL:
            return self._temporal(head_pose) if head_pose is not None else 0.0
        return 0.0

    def _vertex(self, phone: PhoneOrientation) -> float:
        cfg = self.config
        pitch_score = _falloff(abs(phone.pitch - cfg.vertex_pitch_center), cfg.vertex_pitch_span)
        roll_score = _falloff(abs(phone.roll), cfg.roll_span)
        return clamp(pitch_score * 0.7 + roll_score * 0.3)

    def _occipital(self, phone: PhoneOrientation) -> float:
        cfg = self.config
        # Pointing at the back of the head reads as a steep pitch of either sign
        # depending on how the phone is turned.
        deviation = abs(abs(phone.pitch) - cfg.occipital_pitch_center)
        pitch_score = _falloff(deviation, cfg.occipital_pitch_span)
        roll_score = _falloff(abs(phone.roll), cfg.roll_span)
        return clamp(pitch_score * (2.0 / 3.0) + roll_score * (1.0 / 3.0))

    def _frontal(self, phone: PhoneOrientation, head_pose: HeadPoseEstimate) -> float:
        phone_score = _falloff(abs(phone.pitch) + abs(phone.roll), 20.0)
        face_score = _falloff(abs(head_pose.yaw), 15.0)
        return clamp(phone_score * 0.5 + face_score * 0.5)

    def _parietal(self, phone: PhoneOrientation) -> float:
        abs_roll = abs(phone.roll)
        deviation = min(abs(abs_roll - 45.0), abs(abs_roll - 30.0), abs(abs_roll - 60.0))
        roll_score = _falloff(deviation, 20.0)
        pitch_score = _falloff(abs(phone.pitch), 30.0)
        return clamp(roll_score * 0.7 + pitch_score * 0.3)

    def _temporal(self, head_pose: HeadPoseEstimate) -> float:
        yaw_score = _falloff(abs(abs(head_pose.yaw) - 45.0), 20.0)
        pitch_score = _falloff(abs(head_pose.pitch), 15.0)
        return clamp(yaw_score * 0.7 + pitch_score * 0.3)
