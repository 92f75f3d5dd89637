"""Weighted accuracy with hysteresis and a rolling validity buffer.

A raw threshold on accuracy would flip ready/not-ready every time sensor
noise pushes the score across it. The validator instead keeps a boolean
state that only changes when accuracy leaves a dead band around the
threshold, and only recommends a countdown once most of the recent
frames were valid.

    accuracy = round(sum(score_i * w_i) / sum(w_i))  over present criteria
    valid    : leaves True  when accuracy < threshold - band
               leaves False when accuracy > threshold + band
    countdown: valid and baseline and accuracy >= 75
"""

from __future__ import annotations

import dataclasses
import logging
import math
from collections import deque
from typing import Deque, Dict, List, Optional

from shutterguide.errors import ConfigurationError
from shutterguide.validator.output import (
    AxisTarget,
    BufferStats,
    ValidationCriteria,
    ValidationResult,
    ValidatorConfig,
    WindowTarget,
)

logger = logging.getLogger(__name__)

MSG_TILT_UP = "Tilt the phone up"
MSG_TILT_DOWN = "Tilt the phone down"
MSG_ROTATE_LEFT = "Rotate the phone left"
MSG_ROTATE_RIGHT = "Rotate the phone right"
MSG_HEAD_ANGLE = "Keep your head at the guided angle"
MSG_MOVE_BACK = "Too close, move back"
MSG_COME_CLOSER = "Too far, come closer"
MSG_FACE_LARGER = "Bring the face closer to fill the frame"
MSG_FACE_SMALLER = "Face too large in frame"
MSG_CENTER = "Center the subject in the frame"
MSG_HOLD_STEADY = "Hold the phone steady"
MSG_BRIGHTER = "Move to a brighter place"
MSG_SHADE = "Move into the shade"
MSG_CONTRAST = "Find a spot with better contrast"
MSG_EYES = "Open your eyes"

_THRESHOLD_FIELDS = ("valid_threshold", "hysteresis_band", "countdown_accuracy", "baseline_ratio")
_TARGET_FIELDS = {
    "pitch": AxisTarget,
    "roll": AxisTarget,
    "yaw": AxisTarget,
    "distance": WindowTarget,
    "face_width": WindowTarget,
    "brightness": WindowTarget,
    "min_sharpness": (int, float),
    "min_contrast": (int, float),
    "min_eyes_open": (int, float),
    "center_tolerance": (int, float),
}


def axis_score(value: float, target: AxisTarget) -> float:
    if target.tolerance <= 0:
        return 100.0 if value == target.target else 0.0
    dev = abs(value - target.target)
    if dev > target.tolerance:
        return 0.0
    return (target.tolerance - dev) / target.tolerance * 100.0


def window_score(value: float, window: WindowTarget) -> float:
    if value < window.min or value > window.max or window.max <= window.min:
        return 0.0
    norm = (value - window.min) / (window.max - window.min)
    return math.sin(norm * math.pi) * 100.0


def floor_score(value: float, minimum: float) -> float:
    return 0.0 if value < minimum else min(100.0, value)


def _mean(values: List[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


class AdaptiveValidator:
    """Anti-flicker validity decision over per-frame criteria.

    Example:
        >>> validator = AdaptiveValidator()
        >>> result = validator.validate(ValidationCriteria(pitch=90, roll=0, ...))
        >>> result.is_valid, result.should_countdown
    """

    def __init__(self, config: Optional[ValidatorConfig] = None):
        self.config = config or ValidatorConfig()
        self._buffer: Deque[bool] = deque(maxlen=self.config.buffer_size)
        self._valid = False

    @property
    def is_valid(self) -> bool:
        return self._valid

    def validate(self, criteria: ValidationCriteria) -> ValidationResult:
        cfg = self.config
        scores = self._partial_scores(criteria)

        quality = _mean([scores[k] for k in ("sharpness", "brightness", "contrast") if k in scores])
        centering = _mean([scores[k] for k in ("face_center_x", "face_center_y") if k in scores])

        weighted = [
            (scores.get("pitch"), cfg.weight_pitch),
            (scores.get("roll"), cfg.weight_roll),
            (scores.get("yaw"), cfg.weight_yaw),
            (scores.get("distance"), cfg.weight_distance),
            (scores.get("face_width"), cfg.weight_face_width),
            (quality, cfg.weight_image_quality),
            (centering, cfg.weight_centering),
            (scores.get("eyes"), cfg.weight_eyes),
        ]
        present = [(s, w) for s, w in weighted if s is not None]
        total_weight = sum(w for _, w in present)
        accuracy = round(sum(s * w for s, w in present) / total_weight) if total_weight > 0 else 0

        reasons = self._failure_reasons(criteria, scores)
        is_valid = self._apply_hysteresis(accuracy)
        self._buffer.append(is_valid)
        baseline = self._baseline_met()

        report = {k: int(round(v)) for k, v in scores.items()}
        if quality is not None:
            report["image_quality"] = int(round(quality))
        if centering is not None:
            report["centering"] = int(round(centering))

        return ValidationResult(
            is_valid=is_valid,
            accuracy=int(accuracy),
            should_countdown=is_valid and baseline and accuracy >= cfg.countdown_accuracy,
            failure_reasons=reasons,
            scores=report,
        )

    def reset(self) -> None:
        self._buffer.clear()
        self._valid = False

    def set_thresholds(self, **kwargs: float) -> None:
        """Override hysteresis and countdown thresholds.

        Raises:
            ConfigurationError: On an unknown threshold name.
        """
        unknown = set(kwargs) - set(_THRESHOLD_FIELDS)
        if unknown:
            raise ConfigurationError(f"Unknown validator thresholds: {sorted(unknown)}")
        self.config = dataclasses.replace(self.config, **kwargs)

    def set_targets(self, **kwargs) -> None:
        """Retarget scoring, e.g. ``set_targets(pitch=AxisTarget(0, 5))``.

        Keeps the hysteresis state and buffer.

        Raises:
            ConfigurationError: On an unknown target or a wrong target type.
        """
        for name, value in kwargs.items():
            expected = _TARGET_FIELDS.get(name)
            if expected is None:
                raise ConfigurationError(f"Unknown validator target: {name}")
            if not isinstance(value, expected) or isinstance(value, bool):
                raise ConfigurationError(f"Invalid value for target {name}: {value!r}")
        self.config = dataclasses.replace(self.config, **kwargs)

    def buffer_stats(self) -> BufferStats:
        total = len(self._buffer)
        valid = sum(1 for v in self._buffer if v)
        return BufferStats(
            total_frames=total,
            valid_frames=valid,
            invalid_frames=total - valid,
            validity_percentage=0 if total == 0 else int(round(valid / total * 100)),
        )

    def _partial_scores(self, c: ValidationCriteria) -> Dict[str, float]:
        cfg = self.config
        scores: Dict[str, float] = {}
        if c.pitch is not None:
            scores["pitch"] = axis_score(c.pitch, cfg.pitch)
        if c.roll is not None:
            scores["roll"] = axis_score(c.roll, cfg.roll)
        if c.yaw is not None:
            scores["yaw"] = axis_score(c.yaw, cfg.yaw)
        if c.distance is not None:
            scores["distance"] = window_score(c.distance, cfg.distance)
        if c.face_width_percent is not None:
            scores["face_width"] = window_score(c.face_width_percent, cfg.face_width)
        if c.sharpness is not None:
            scores["sharpness"] = floor_score(c.sharpness, cfg.min_sharpness)
        if c.brightness is not None:
            scores["brightness"] = window_score(c.brightness, cfg.brightness)
        if c.contrast is not None:
            scores["contrast"] = floor_score(c.contrast, cfg.min_contrast)
        if c.eyes_open_percent is not None:
            scores["eyes"] = floor_score(c.eyes_open_percent, cfg.min_eyes_open)
        center = AxisTarget(0.0, cfg.center_tolerance)
        if c.face_center_x is not None:
            scores["face_center_x"] = axis_score(c.face_center_x, center)
        if c.face_center_y is not None:
            scores["face_center_y"] = axis_score(c.face_center_y, center)
        return scores

    def _apply_hysteresis(self, accuracy: float) -> bool:
        cfg = self.config
        if self._valid:
            if accuracy < cfg.valid_threshold - cfg.hysteresis_band:
                self._valid = False
                logger.debug("Validity lost at accuracy %s", accuracy)
        elif accuracy > cfg.valid_threshold + cfg.hysteresis_band:
            self._valid = True
            logger.debug("Validity gained at accuracy %s", accuracy)
        return self._valid

    def _baseline_met(self) -> bool:
        size = self.config.buffer_size
        if len(self._buffer) < size / 2:
            return False
        valid = sum(1 for v in self._buffer if v)
        return valid >= math.floor(size * self.config.baseline_ratio)

    def _failure_reasons(self, c: ValidationCriteria, scores: Dict[str, float]) -> List[str]:
        reasons = []
        for message in (
            self._angle_message(c, scores),
            self._position_message(c, scores),
            self._quality_message(c, scores),
        ):
            if message:
                reasons.append(message)
        return reasons

    def _failing(self, scores: Dict[str, float], key: str) -> bool:
        return key in scores and scores[key] < self.config.failure_score

    def _angle_message(self, c: ValidationCriteria, scores: Dict[str, float]) -> Optional[str]:
        cfg = self.config
        if self._failing(scores, "pitch"):
            return MSG_TILT_UP if c.pitch < cfg.pitch.target else MSG_TILT_DOWN
        if self._failing(scores, "roll"):
            return MSG_ROTATE_LEFT if c.roll > cfg.roll.target else MSG_ROTATE_RIGHT
        if self._failing(scores, "yaw"):
            return MSG_HEAD_ANGLE
        return None

    def _position_message(self, c: ValidationCriteria, scores: Dict[str, float]) -> Optional[str]:
        cfg = self.config
        if self._failing(scores, "distance"):
            mid = (cfg.distance.min + cfg.distance.max) / 2.0
            return MSG_MOVE_BACK if c.distance < mid else MSG_COME_CLOSER
        if self._failing(scores, "face_width"):
            mid = (cfg.face_width.min + cfg.face_width.max) / 2.0
            return MSG_FACE_LARGER if c.face_width_percent < mid else MSG_FACE_SMALLER
        if self._failing(scores, "face_center_x") or self._failing(scores, "face_center_y"):
            return MSG_CENTER
        return None

    def _quality_message(self, c: ValidationCriteria, scores: Dict[str, float]) -> Optional[str]:
        cfg = self.config
        if self._failing(scores, "sharpness"):
            return MSG_HOLD_STEADY
        if self._failing(scores, "brightness"):
            mid = (cfg.brightness.min + cfg.brightness.max) / 2.0
            return MSG_BRIGHTER if c.brightness < mid else MSG_SHADE
        if self._failing(scores, "contrast"):
            return MSG_CONTRAST
        if self._failing(scores, "eyes"):
            return MSG_EYES
        return None
