"""Output and config types for the orientation filter."""

from dataclasses import dataclass


@dataclass(frozen=True)
class OrientationConfig:
    """Sensor fusion constants.

    Complementary weights apply to pitch and roll only; yaw has no
    absolute reference and is integrated from the gyro alone.
    """

    gyro_weight: float = 0.7
    accel_weight: float = 0.3

    # Scalar Kalman per axis
    kalman_process_noise: float = 0.001
    kalman_measurement_noise: float = 0.01
    kalman_initial_error: float = 1.0

    # Confidence penalties
    gravity: float = 9.81
    accel_deviation_high: float = 2.0     # m/s² away from 1 g
    accel_deviation_low: float = 1.0
    accel_penalty_high: float = 0.3
    accel_penalty_low: float = 0.1
    gyro_rate_max: float = 1.0            # rad/s
    gyro_penalty: float = 0.2

    # Steadiness window on fused angles (sensor-only capture steps)
    steady_window_ms: float = 500.0
    steady_max_jitter_deg: float = 2.0
    steady_min_samples: int = 15

    # Gyro bias calibration
    calibration_min_samples: int = 50
    calibration_max_gyro_std: float = 0.05  # rad/s


@dataclass(frozen=True)
class PhoneOrientation:
    """Fused phone attitude in degrees, normalized to (-180, 180]."""

    pitch: float = 0.0
    roll: float = 0.0
    yaw: float = 0.0
    confidence: float = 0.0

    def to_dict(self) -> dict:
        return {
            "pitch": self.pitch,
            "roll": self.roll,
            "yaw": self.yaw,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class CalibrationResult:
    """Gyro bias estimated from stationary samples."""

    gyro_offset_x: float = 0.0
    gyro_offset_y: float = 0.0
    gyro_offset_z: float = 0.0
    sample_count: int = 0
    steady: bool = False
