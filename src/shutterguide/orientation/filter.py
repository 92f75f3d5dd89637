"""Complementary + Kalman fusion of gyroscope and accelerometer samples.

Pitch and roll:
    gyro estimate   = previous fused angle + rate * dt
    accel estimate  = tilt of the normalized gravity vector
    fused           = 0.7 * gyro + 0.3 * accel
    output          = scalar Kalman(fused)

Yaw has no absolute reference (no magnetometer). It is integrated from
the gyro alone, drifts over time and is only meaningful as a relative
angle over short windows.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

from shutterguide.motion import JitterWindow
from shutterguide.orientation.calibration import SensorCalibrator
from shutterguide.orientation.kalman import ScalarKalman
from shutterguide.orientation.output import OrientationConfig, PhoneOrientation
from shutterguide.types import RawSensorSample, Vec3, clamp, normalize_degrees

logger = logging.getLogger(__name__)


def accel_tilt(accel: Vec3) -> Optional[Tuple[float, float]]:
    """Pitch and roll in degrees from a gravity vector.

    Returns None for a zero-magnitude vector.
    """
    mag = accel.magnitude()
    if mag == 0.0:
        return None
    ax, ay, az = accel.x / mag, accel.y / mag, accel.z / mag
    pitch = math.degrees(math.atan2(-ax, math.sqrt(ay * ay + az * az)))
    roll = math.degrees(math.atan2(ay, az))
    return pitch, roll


def _blend_angles(a: float, b: float, weight_a: float) -> float:
    """Weighted blend of two angles along the short arc."""
    return normalize_degrees(b + weight_a * normalize_degrees(a - b))


class OrientationFilter:
    """Owns the fusion state for one capture session.

    Args:
        config: Fusion constants.
        calibrator: Optional gyro bias calibrator applied to each sample.

    Example:
        >>> f = OrientationFilter()
        >>> orientation = f.fuse(sample)
        >>> orientation.pitch, orientation.confidence
    """

    def __init__(
        self,
        config: Optional[OrientationConfig] = None,
        calibrator: Optional[SensorCalibrator] = None,
    ):
        self.config = config or OrientationConfig()
        self.calibrator = calibrator
        cfg = self.config
        self._kalman = {
            axis: ScalarKalman(
                cfg.kalman_process_noise,
                cfg.kalman_measurement_noise,
                cfg.kalman_initial_error,
            )
            for axis in ("pitch", "roll", "yaw")
        }
        self._steady = JitterWindow(
            window_ns=int(cfg.steady_window_ms * 1_000_000),
            max_jitter_deg=cfg.steady_max_jitter_deg,
            min_frames=cfg.steady_min_samples,
        )
        self._fused: Optional[Tuple[float, float, float]] = None
        self._last_t_ns: Optional[int] = None
        self._orientation = PhoneOrientation()

    @property
    def orientation(self) -> PhoneOrientation:
        return self._orientation

    @property
    def has_data(self) -> bool:
        return self._fused is not None

    @property
    def last_t_ns(self) -> Optional[int]:
        return self._last_t_ns

    def reset(self) -> None:
        for k in self._kalman.values():
            k.reset()
        self._steady.clear()
        self._fused = None
        self._last_t_ns = None
        self._orientation = PhoneOrientation()

    def is_steady(self) -> bool:
        """True when recent fused angles moved less than the jitter limit."""
        return self._steady.is_stable()

    def fuse(self, sample: RawSensorSample) -> PhoneOrientation:
        cfg = self.config
        if self.calibrator is not None:
            sample = self.calibrator.apply(sample)

        tilt = accel_tilt(sample.accel)
        confidence = self._confidence(sample)

        if self._fused is None:
            if tilt is None:
                logger.debug("Zero accelerometer vector on first sample, waiting")
                self._orientation = PhoneOrientation(confidence=0.0)
                return self._orientation
            pitch, roll = tilt
            yaw = 0.0
        else:
            prev_pitch, prev_roll, prev_yaw = self._fused
            dt = 0.0
            if self._last_t_ns is not None and sample.t_ns > self._last_t_ns:
                dt = (sample.t_ns - self._last_t_ns) / 1e9

            gyro_pitch = prev_pitch + math.degrees(sample.gyro.x) * dt
            gyro_roll = prev_roll + math.degrees(sample.gyro.y) * dt
            yaw = normalize_degrees(prev_yaw + math.degrees(sample.gyro.z) * dt)

            if tilt is None:
                # No gravity reference this sample: keep the gyro path.
                pitch, roll = normalize_degrees(gyro_pitch), normalize_degrees(gyro_roll)
            else:
                pitch = _blend_angles(gyro_pitch, tilt[0], cfg.gyro_weight)
                roll = _blend_angles(gyro_roll, tilt[1], cfg.gyro_weight)

        self._fused = (pitch, roll, yaw)
        self._last_t_ns = sample.t_ns

        out_pitch = self._kalman["pitch"].update(pitch)
        out_roll = self._kalman["roll"].update(roll)
        out_yaw = self._kalman["yaw"].update(yaw)
        self._steady.add(sample.t_ns, out_yaw, out_pitch, out_roll)

        self._orientation = PhoneOrientation(
            pitch=out_pitch,
            roll=out_roll,
            yaw=out_yaw,
            confidence=confidence,
        )
        return self._orientation

    def _confidence(self, sample: RawSensorSample) -> float:
        cfg = self.config
        accel_mag = sample.accel.magnitude()
        if accel_mag == 0.0:
            return 0.0

        confidence = 1.0
        deviation = abs(accel_mag - cfg.gravity)
        if deviation > cfg.accel_deviation_high:
            confidence -= cfg.accel_penalty_high
        elif deviation > cfg.accel_deviation_low:
            confidence -= cfg.accel_penalty_low

        if sample.gyro.magnitude() > cfg.gyro_rate_max:
            confidence -= cfg.gyro_penalty

        return clamp(confidence)
