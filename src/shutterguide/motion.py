"""Time-bounded angle history used to measure jitter.

Shared by the head pose stabilizer (face angles) and the orientation
filter (phone angles on sensor-only capture steps).
"""

from __future__ import annotations

from collections import deque
from typing import Deque, Tuple

from shutterguide.types import normalize_degrees

# (t_ns, yaw, pitch, roll)
_Entry = Tuple[int, float, float, float]


class JitterWindow:
    """Rolling window of angle triples with a mean frame-to-frame delta.

    Args:
        window_ns: Entries older than this relative to the newest are
            dropped.
        max_jitter_deg: Jitter strictly below this counts as steady.
        min_frames: Minimum buffered entries before ``is_stable`` can be
            true.
    """

    def __init__(self, window_ns: int, max_jitter_deg: float, min_frames: int):
        self._window_ns = window_ns
        self._max_jitter = max_jitter_deg
        self._min_frames = min_frames
        self._history: Deque[_Entry] = deque()

    def add(self, t_ns: int, yaw: float, pitch: float, roll: float) -> None:
        if self._history and t_ns < self._history[-1][0]:
            # Out-of-order sample: the window is rebuilt from here.
            self._history.clear()
        self._history.append((t_ns, yaw, pitch, roll))
        cutoff = t_ns - self._window_ns
        while self._history and self._history[0][0] < cutoff:
            self._history.popleft()

    def jitter(self) -> float:
        """Mean over consecutive entries of (|Δyaw| + |Δpitch| + |Δroll|) / 3.

        Deltas are wrapped into (-180, 180] so crossing ±180 is not a jump.
        """
        if len(self._history) < 2:
            return 0.0
        total = 0.0
        prev = None
        for entry in self._history:
            if prev is not None:
                total += (
                    abs(normalize_degrees(entry[1] - prev[1]))
                    + abs(normalize_degrees(entry[2] - prev[2]))
                    + abs(normalize_degrees(entry[3] - prev[3]))
                ) / 3.0
            prev = entry
        return total / (len(self._history) - 1)

    def is_low(self) -> bool:
        return self.jitter() < self._max_jitter

    def is_stable(self) -> bool:
        return len(self._history) >= self._min_frames and self.is_low()

    def clear(self) -> None:
        self._history.clear()

    def __len__(self) -> int:
        return len(self._history)


__all__ = ["JitterWindow"]
