"""Gyroscope bias calibration from stationary samples."""

from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np

from shutterguide.orientation.output import CalibrationResult, OrientationConfig
from shutterguide.types import RawSensorSample, Vec3

logger = logging.getLogger(__name__)


class SensorCalibrator:
    """Estimates and removes a constant gyro bias.

    The device is expected to rest while samples are collected. Once
    ``calibrate()`` succeeds, ``apply()`` subtracts the averaged gyro
    reading from every subsequent sample; before that it is a no-op.

    Example:
        >>> calibrator = SensorCalibrator()
        >>> for sample in resting_samples:
        ...     calibrator.add_sample(sample)
        >>> result = calibrator.calibrate()
        >>> corrected = calibrator.apply(live_sample)
    """

    def __init__(self, config: Optional[OrientationConfig] = None):
        self.config = config or OrientationConfig()
        self._samples: List[Vec3] = []
        self._result: Optional[CalibrationResult] = None

    @property
    def is_calibrated(self) -> bool:
        return self._result is not None

    @property
    def result(self) -> Optional[CalibrationResult]:
        return self._result

    @property
    def sample_count(self) -> int:
        return len(self._samples)

    def add_sample(self, sample: RawSensorSample) -> None:
        self._samples.append(sample.gyro)

    def calibrate(self) -> Optional[CalibrationResult]:
        """Average collected gyro readings into a bias estimate.

        Returns:
            The calibration, or None when fewer than
            ``calibration_min_samples`` samples were collected.
        """
        n = len(self._samples)
        if n < self.config.calibration_min_samples:
            logger.warning(
                "Calibration needs %d samples, have %d",
                self.config.calibration_min_samples, n,
            )
            return None

        gyro = np.array([s.to_tuple() for s in self._samples], dtype=np.float64)
        offsets = gyro.mean(axis=0)
        spread = float(gyro.std(axis=0).max())
        steady = spread <= self.config.calibration_max_gyro_std
        if not steady:
            logger.warning(
                "Device moved during calibration (gyro std %.3f rad/s)", spread
            )

        self._result = CalibrationResult(
            gyro_offset_x=float(offsets[0]),
            gyro_offset_y=float(offsets[1]),
            gyro_offset_z=float(offsets[2]),
            sample_count=n,
            steady=steady,
        )
        logger.info(
            "Gyro bias calibrated from %d samples: (%.4f, %.4f, %.4f)",
            n, offsets[0], offsets[1], offsets[2],
        )
        return self._result

    def apply(self, sample: RawSensorSample) -> RawSensorSample:
        if self._result is None:
            return sample
        r = self._result
        bias = Vec3(r.gyro_offset_x, r.gyro_offset_y, r.gyro_offset_z)
        return RawSensorSample(gyro=sample.gyro - bias, accel=sample.accel, t_ns=sample.t_ns)

    def reset(self) -> None:
        self._samples = []
        self._result = None
