"""Distance estimation from head bounding boxes."""

from shutterguide.distance.estimator import DistanceEstimator
from shutterguide.distance.output import (
    DistanceConfig,
    DistanceEstimate,
    DistanceMethod,
    DistanceRange,
)

__all__ = [
    "DistanceEstimator",
    "DistanceConfig",
    "DistanceEstimate",
    "DistanceMethod",
    "DistanceRange",
]
