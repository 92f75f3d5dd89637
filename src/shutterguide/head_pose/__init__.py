"""Hybrid head pose estimation with optical-flow stabilization."""

from shutterguide.head_pose.estimator import (
    HeadPoseEstimator,
    facial_normal,
    hybrid_pose,
    landmark_pose,
    surface_normal_pose,
)
from shutterguide.head_pose.output import HeadPoseConfig, HeadPoseEstimate, PoseMethod
from shutterguide.head_pose.stabilizer import OpticalFlowStabilizer

__all__ = [
    "HeadPoseEstimator",
    "HeadPoseConfig",
    "HeadPoseEstimate",
    "PoseMethod",
    "OpticalFlowStabilizer",
    "facial_normal",
    "hybrid_pose",
    "landmark_pose",
    "surface_normal_pose",
]
