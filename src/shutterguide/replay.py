"""Replay recorded capture sessions through the engine.

A session file is JSON Lines, one event per line, ordered by ``t_ns``::

    {"type": "sensor", "t_ns": 0, "gyro": [0, 0, 0], "accel": [0, 0, 9.81]}
    {"type": "face", "t_ns": 0, "image_width": 1080, "image_height": 1920,
     "bounds": {"x": 0.3, "y": 0.3, "width": 0.36, "height": 0.26},
     "landmarks": {"left_eye": [0.42, 0.38], ...}, "yaw": 0, "pitch": 0,
     "roll": 0, "left_eye_open": 0.95, "right_eye_open": 0.93}
    {"type": "face", "t_ns": 20000000, "bounds": null}
    {"type": "region", "t_ns": 0, "bounds": {...}, "image_width": 1080,
     "image_height": 1920}
    {"type": "lighting", "t_ns": 0, "histogram": [0, 0, ...]}
    {"type": "tick", "t_ns": 40000000}

The engine is evaluated after every event, with the event time as clock.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from shutterguide.errors import SessionError
from shutterguide.lighting.analyzer import HISTOGRAM_BINS
from shutterguide.shutter.engine import AutoShutterEngine
from shutterguide.shutter.output import AutoShutterState, ShutterPhase
from shutterguide.types import BoundingBox, DetectedFace, Landmark, RawSensorSample, Vec3

logger = logging.getLogger(__name__)

EVENT_TYPES = ("sensor", "face", "region", "lighting", "tick")


@dataclass
class ReplayResult:
    """Outcome of one replayed session."""

    events: int = 0
    final_state: Optional[AutoShutterState] = None
    phase_changes: List[AutoShutterState] = field(default_factory=list)
    fired_at_ns: Optional[int] = None

    @property
    def captured(self) -> bool:
        return self.fired_at_ns is not None


def _vec3(value: Any, name: str, line: int) -> Vec3:
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise SessionError(f"'{name}' must be a list of 3 numbers", line)
    try:
        return Vec3(*(float(v) for v in value))
    except (TypeError, ValueError):
        raise SessionError(f"'{name}' must be a list of 3 numbers", line) from None


def _box(value: Any, line: int) -> Optional[BoundingBox]:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise SessionError("'bounds' must be an object or null", line)
    try:
        return BoundingBox(
            x=float(value["x"]),
            y=float(value["y"]),
            width=float(value["width"]),
            height=float(value["height"]),
        )
    except KeyError as e:
        raise SessionError(f"'bounds' is missing {e}", line) from None
    except (TypeError, ValueError):
        raise SessionError("'bounds' values must be numbers", line) from None


def _optional_float(event: Dict[str, Any], key: str, line: int) -> Optional[float]:
    value = event.get(key)
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise SessionError(f"'{key}' must be a number", line) from None


def _image_size(event: Dict[str, Any], line: int, required: bool) -> tuple:
    width = event.get("image_width")
    height = event.get("image_height")
    if width is None and height is None and not required:
        return None, None
    if not isinstance(width, int) or not isinstance(height, int) or width <= 0 or height <= 0:
        raise SessionError("'image_width' and 'image_height' must be positive integers", line)
    return width, height


def parse_face(event: Dict[str, Any], line: int = 0) -> Optional[DetectedFace]:
    bounds = _box(event.get("bounds"), line)
    if bounds is None:
        return None
    landmarks = {}
    for name, point in (event.get("landmarks") or {}).items():
        if not isinstance(point, (list, tuple)) or len(point) != 2:
            raise SessionError(f"landmark '{name}' must be [x, y]", line)
        landmarks[name] = Landmark(float(point[0]), float(point[1]))
    width, height = _image_size(event, line, required=True)
    return DetectedFace(
        bounds=bounds,
        landmarks=landmarks,
        yaw=_optional_float(event, "yaw", line) or 0.0,
        pitch=_optional_float(event, "pitch", line) or 0.0,
        roll=_optional_float(event, "roll", line) or 0.0,
        left_eye_open_probability=_optional_float(event, "left_eye_open", line),
        right_eye_open_probability=_optional_float(event, "right_eye_open", line),
        smiling_probability=_optional_float(event, "smiling", line),
        frame_aspect=height / width,
    )


def read_events(lines: Iterable[str]) -> Iterator[Dict[str, Any]]:
    """Parse and check JSON Lines events; blank lines are skipped.

    Raises:
        SessionError: On invalid JSON, an unknown event type, a missing
            or non-integer ``t_ns``, or time going backwards.
    """
    last_t = None
    for number, raw in enumerate(lines, start=1):
        raw = raw.strip()
        if not raw:
            continue
        try:
            event = json.loads(raw)
        except json.JSONDecodeError as e:
            raise SessionError(f"invalid JSON: {e.msg}", number) from None
        if not isinstance(event, dict):
            raise SessionError("event must be a JSON object", number)
        kind = event.get("type")
        if kind not in EVENT_TYPES:
            raise SessionError(f"unknown event type {kind!r}", number)
        t_ns = event.get("t_ns")
        if not isinstance(t_ns, int) or isinstance(t_ns, bool):
            raise SessionError("'t_ns' must be an integer", number)
        if last_t is not None and t_ns < last_t:
            raise SessionError(f"t_ns went backwards ({t_ns} < {last_t})", number)
        last_t = t_ns
        event["_line"] = number
        yield event


def load_events(path: Union[str, Path]) -> List[Dict[str, Any]]:
    with open(path, "r", encoding="utf-8") as f:
        return list(read_events(f))


def apply_event(engine: AutoShutterEngine, event: Dict[str, Any]) -> None:
    """Feed one parsed event into the engine."""
    line = event.get("_line", 0)
    kind = event["type"]
    t_ns = event["t_ns"]

    if kind == "sensor":
        engine.update_sensor(RawSensorSample(
            gyro=_vec3(event.get("gyro"), "gyro", line),
            accel=_vec3(event.get("accel"), "accel", line),
            t_ns=t_ns,
        ))
    elif kind == "face":
        face = parse_face(event, line)
        width, height = _image_size(event, line, required=face is not None)
        engine.update_face(face, width or 0, height or 0, t_ns=t_ns)
    elif kind == "region":
        width, height = _image_size(event, line, required=False)
        engine.update_region(_box(event.get("bounds"), line), width, height)
    elif kind == "lighting":
        histogram = event.get("histogram")
        if not isinstance(histogram, list):
            raise SessionError("'histogram' must be a list", line)
        if len(histogram) != HISTOGRAM_BINS:
            raise SessionError(
                f"'histogram' must have {HISTOGRAM_BINS} bins, got {len(histogram)}", line
            )
        try:
            engine.update_lighting(histogram)
        except (TypeError, ValueError) as e:
            # ConfigurationError is a ValueError (negative counts)
            raise SessionError(f"invalid 'histogram': {e}", line) from None


def replay(engine: AutoShutterEngine, events: Iterable[Dict[str, Any]]) -> ReplayResult:
    """Run events through ``engine``, evaluating after each one."""
    result = ReplayResult()
    last_phase = engine.phase
    for event in events:
        apply_event(engine, event)
        state = engine.evaluate(event["t_ns"])
        result.events += 1
        result.final_state = state
        if state.phase is not last_phase:
            result.phase_changes.append(state)
            last_phase = state.phase
        if state.fire:
            result.fired_at_ns = state.t_ns
    if result.final_state is not None and result.final_state.phase is ShutterPhase.CAPTURED:
        logger.debug("Replay captured after %d events", result.events)
    return result


__all__ = [
    "EVENT_TYPES",
    "ReplayResult",
    "read_events",
    "load_events",
    "parse_face",
    "apply_event",
    "replay",
]
