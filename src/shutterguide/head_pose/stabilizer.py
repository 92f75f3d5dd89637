"""Temporal stabilization of per-frame head pose estimates.

Raw per-frame poses oscillate by a few degrees even for a motionless
subject. The stabilizer smooths them with an EMA and measures jitter over
a short time window of raw poses; low jitter raises confidence and gates
``is_stable()``.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from shutterguide.head_pose.output import HeadPoseConfig, HeadPoseEstimate
from shutterguide.motion import JitterWindow

logger = logging.getLogger(__name__)


class OpticalFlowStabilizer:
    """EMA smoother plus jitter window over raw head poses."""

    def __init__(self, config: Optional[HeadPoseConfig] = None):
        self.config = config or HeadPoseConfig()
        self._window = JitterWindow(
            window_ns=int(self.config.window_ms * 1_000_000),
            max_jitter_deg=self.config.max_jitter_deg,
            min_frames=self.config.min_stable_frames,
        )
        self._previous: Optional[HeadPoseEstimate] = None

    @property
    def jitter(self) -> float:
        return self._window.jitter()

    @property
    def frame_count(self) -> int:
        return len(self._window)

    def is_stable(self) -> bool:
        return self._window.is_stable()

    def reset(self) -> None:
        self._window.clear()
        self._previous = None

    def stabilize(self, pose: HeadPoseEstimate, t_ns: int) -> HeadPoseEstimate:
        self._window.add(t_ns, pose.yaw, pose.pitch, pose.roll)

        if self._previous is None:
            self._previous = pose
            return pose

        a = self.config.smoothing_factor
        prev = self._previous
        confidence = pose.confidence
        if self._window.is_low():
            confidence = min(1.0, confidence * self.config.stable_confidence_boost)

        smoothed = replace(
            pose,
            yaw=a * pose.yaw + (1.0 - a) * prev.yaw,
            pitch=a * pose.pitch + (1.0 - a) * prev.pitch,
            roll=a * pose.roll + (1.0 - a) * prev.roll,
            confidence=confidence,
        )
        self._previous = smoothed
        return smoothed
