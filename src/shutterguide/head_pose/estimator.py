"""Hybrid head pose estimation.

Two independent estimates are blended per axis:

- Landmark: the detector's own yaw/pitch/roll, with confidence growing
  with the number of landmarks returned.
- Surface normal: the face-plane normal recovered from the eyes and nose
  base. The eyes lie on the face plane, the nose base sits a fixed depth
  in front of it, so its displacement in the eye frame reveals how the
  plane is turned. Weighted higher because it degrades less at steep
  angles.

The blend then passes through ``OpticalFlowStabilizer``.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np

from shutterguide.head_pose.output import HeadPoseConfig, HeadPoseEstimate, PoseMethod
from shutterguide.head_pose.stabilizer import OpticalFlowStabilizer
from shutterguide.types import LEFT_EYE, NOSE_BASE, RIGHT_EYE, DetectedFace, Landmark

logger = logging.getLogger(__name__)

_FORWARD = np.array([0.0, 0.0, 1.0])


def landmark_pose(face: DetectedFace, config: HeadPoseConfig) -> HeadPoseEstimate:
    """Pose straight from the detector output."""
    n = len(face.landmarks)
    confidence = min(1.0, n / config.landmark_full_count) * config.landmark_max_confidence
    return HeadPoseEstimate(
        yaw=face.yaw,
        pitch=face.pitch,
        roll=face.roll,
        confidence=confidence,
        method=PoseMethod.LANDMARK,
        bounds=face.bounds,
    )


def facial_normal(
    left_eye: Landmark,
    right_eye: Landmark,
    nose_base: Landmark,
    depth_ratio: float,
    drop_ratio: float,
    aspect: float = 1.0,
) -> Optional[np.ndarray]:
    """Unit normal of the face plane in camera coordinates.

    Camera frame: x right, y down, z toward the camera. The nose
    displacement is measured in the roll-corrected eye frame, in
    interocular units; it lifts the eye edge and the vertical facial edge
    into 3-D and their cross product is the normal.

    Returns None when the eyes coincide.
    """
    ex = right_eye.x - left_eye.x
    ey = (right_eye.y - left_eye.y) * aspect
    eye_dist = math.hypot(ex, ey)
    if eye_dist == 0.0:
        return None
    ux, uy = ex / eye_dist, ey / eye_dist

    mid_x = (left_eye.x + right_eye.x) / 2.0
    mid_y = (left_eye.y + right_eye.y) * aspect / 2.0
    px = nose_base.x - mid_x
    py = nose_base.y * aspect - mid_y
    along = (px * ux + py * uy) / eye_dist
    down = (-px * uy + py * ux) / eye_dist

    # Pure yaw: along = depth * tan(yaw) once the eye line is foreshortened.
    yaw = math.atan2(along, depth_ratio)
    # Pure pitch: down = drop * cos(p) - depth * sin(p) = r * cos(p + beta).
    r = math.hypot(drop_ratio, depth_ratio)
    beta = math.atan2(depth_ratio, drop_ratio)
    pitch = math.acos(max(-1.0, min(1.0, down / r))) - beta

    eye_edge = np.array([math.cos(yaw), 0.0, -math.sin(yaw)])
    vertical_edge = np.array([
        math.sin(pitch) * math.sin(yaw),
        math.cos(pitch),
        math.sin(pitch) * math.cos(yaw),
    ])
    normal = np.cross(eye_edge, vertical_edge)
    norm = float(np.linalg.norm(normal))
    if norm == 0.0:
        return _FORWARD.copy()
    return normal / norm


def surface_normal_pose(face: DetectedFace, config: HeadPoseConfig) -> HeadPoseEstimate:
    """Pose from the face-plane normal; falls back to landmarks."""
    left = face.landmarks.get(LEFT_EYE)
    right = face.landmarks.get(RIGHT_EYE)
    nose = face.landmarks.get(NOSE_BASE)
    if left is None or right is None or nose is None:
        return landmark_pose(face, config)

    normal = facial_normal(
        left, right, nose,
        config.nose_depth_ratio, config.nose_drop_ratio, face.frame_aspect,
    )
    if normal is None:
        logger.debug("Coincident eye landmarks, surface normal unavailable")
        return landmark_pose(face, config)

    nx, ny, nz = (float(v) for v in normal)
    return HeadPoseEstimate(
        yaw=math.degrees(math.atan2(nx, nz)),
        pitch=math.degrees(math.asin(max(-1.0, min(1.0, -ny)))),
        roll=face.roll,
        confidence=config.surface_normal_confidence,
        method=PoseMethod.SURFACE_NORMAL,
        bounds=face.bounds,
    )


def hybrid_pose(face: DetectedFace, config: HeadPoseConfig) -> HeadPoseEstimate:
    """Per-axis weighted blend of the landmark and surface-normal poses."""
    lm = landmark_pose(face, config)
    sn = surface_normal_pose(face, config)
    if sn.method is not PoseMethod.SURFACE_NORMAL:
        return lm

    wl, ws = config.landmark_weight, config.surface_normal_weight
    return HeadPoseEstimate(
        yaw=lm.yaw * wl + sn.yaw * ws,
        pitch=lm.pitch * wl + sn.pitch * ws,
        roll=lm.roll * wl + sn.roll * ws,
        confidence=max(lm.confidence, sn.confidence),
        method=PoseMethod.HYBRID,
        bounds=face.bounds,
    )


class HeadPoseEstimator:
    """Hybrid estimator with per-session stabilization state.

    Example:
        >>> estimator = HeadPoseEstimator()
        >>> pose = estimator.estimate(face, t_ns)
        >>> estimator.is_stable()
    """

    def __init__(self, config: Optional[HeadPoseConfig] = None):
        self.config = config or HeadPoseConfig()
        self._stabilizer = OpticalFlowStabilizer(self.config)
        self._last: Optional[HeadPoseEstimate] = None

    @property
    def last_estimate(self) -> Optional[HeadPoseEstimate]:
        return self._last

    @property
    def jitter(self) -> float:
        return self._stabilizer.jitter

    def estimate(self, face: Optional[DetectedFace], t_ns: int) -> Optional[HeadPoseEstimate]:
        """Estimate and stabilize the head pose for one frame.

        Returns None when no face was detected; stabilization history is
        left untouched so a brief detection dropout does not reset it.
        """
        if face is None:
            self._last = None
            return None
        pose = self._stabilizer.stabilize(hybrid_pose(face, self.config), t_ns)
        self._last = pose
        return pose

    def is_stable(self) -> bool:
        return self._stabilizer.is_stable()

    def reset_stabilization(self) -> None:
        self._stabilizer.reset()
        self._last = None
