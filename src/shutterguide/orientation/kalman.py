"""Single-state Kalman filter for one angle axis."""

from __future__ import annotations

from typing import Optional

from shutterguide.types import normalize_degrees


class ScalarKalman:
    """Constant-state Kalman filter over an angle in degrees.

    The innovation is wrapped to (-180, 180] so that an estimate near
    +179 and a measurement near -179 are treated as 2 degrees apart.

    Args:
        process_noise: Q, added to the error estimate on every predict.
        measurement_noise: R.
        initial_error: P before the first update.
    """

    def __init__(
        self,
        process_noise: float = 0.001,
        measurement_noise: float = 0.01,
        initial_error: float = 1.0,
    ):
        self._q = process_noise
        self._r = measurement_noise
        self._p0 = initial_error
        self._x: Optional[float] = None
        self._p = initial_error

    @property
    def value(self) -> Optional[float]:
        return self._x

    @property
    def error(self) -> float:
        return self._p

    def update(self, measurement: float) -> float:
        if self._x is None:
            self._x = normalize_degrees(measurement)
            return self._x

        self._p += self._q
        gain = self._p / (self._p + self._r)
        innovation = normalize_degrees(measurement - self._x)
        self._x = normalize_degrees(self._x + gain * innovation)
        self._p *= 1.0 - gain
        return self._x

    def reset(self) -> None:
        self._x = None
        self._p = self._p0
