"""Shared test helpers for shutterguide tests."""

import json
import math
from typing import List, Optional

import numpy as np

from shutterguide.head_pose.output import HeadPoseConfig
from shutterguide.region.output import TemplateSpec
from shutterguide.region.templates import FACE_TEMPLATE, build_template
from shutterguide.types import (
    LEFT_EYE,
    NOSE_BASE,
    RIGHT_EYE,
    BoundingBox,
    DetectedFace,
    Landmark,
    RawSensorSample,
    Vec3,
)

GRAVITY = 9.81
FRAME_WIDTH = 1080
FRAME_HEIGHT = 1920
SCREEN_ASPECT = 16.0 / 9.0
TICK_NS = 20_000_000  # 50 Hz


def ms(value: float) -> int:
    return int(value * 1_000_000)


def flat_sample(t_ns: int = 0, gyro: Optional[Vec3] = None) -> RawSensorSample:
    """Phone lying flat, screen up: pitch 0, roll 0."""
    return RawSensorSample(gyro=gyro or Vec3(), accel=Vec3(0.0, 0.0, GRAVITY), t_ns=t_ns)


def tilted_sample(pitch_deg: float, roll_deg: float = 0.0, t_ns: int = 0) -> RawSensorSample:
    """Stationary sample whose gravity vector reads as the given tilt."""
    p = math.radians(pitch_deg)
    r = math.radians(roll_deg)
    accel = Vec3(
        -GRAVITY * math.sin(p),
        GRAVITY * math.cos(p) * math.sin(r),
        GRAVITY * math.cos(p) * math.cos(r),
    )
    return RawSensorSample(gyro=Vec3(), accel=accel, t_ns=t_ns)


def face_down_sample(t_ns: int = 0) -> RawSensorSample:
    """Camera pointing straight down on the crown: pitch -90."""
    return RawSensorSample(gyro=Vec3(), accel=Vec3(GRAVITY, 0.0, 0.0), t_ns=t_ns)


def template_box(spec: TemplateSpec = FACE_TEMPLATE, scale: float = 1.0,
                 dx: float = 0.0, dy: float = 0.0) -> BoundingBox:
    """Template box scaled about its center and shifted by (dx, dy)."""
    t = build_template(spec, SCREEN_ASPECT)
    cx, cy = t.center
    return BoundingBox.from_center(cx + dx, cy + dy, t.width * scale, t.height * scale)


def nose_position_for(yaw_deg: float, pitch_deg: float, left: Landmark, right: Landmark,
                      config: HeadPoseConfig = HeadPoseConfig(), aspect: float = 1.0) -> Landmark:
    """Nose base landmark that the surface-normal method reads as (yaw, pitch)."""
    depth, drop = config.nose_depth_ratio, config.nose_drop_ratio
    yaw = math.radians(yaw_deg)
    pitch = math.radians(pitch_deg)
    r = math.hypot(drop, depth)
    beta = math.atan2(depth, drop)
    along = depth * math.tan(yaw)
    down = r * math.cos(pitch + beta)

    eye_dist = math.hypot(right.x - left.x, (right.y - left.y) * aspect)
    mid_x = (left.x + right.x) / 2.0
    mid_y = (left.y + right.y) * aspect / 2.0
    return Landmark(mid_x + along * eye_dist, (mid_y + down * eye_dist) / aspect)


def make_face(bounds: Optional[BoundingBox] = None, yaw: float = 0.0, pitch: float = 0.0,
              roll: float = 0.0, eyes_open: Optional[float] = 0.95,
              extra_landmarks: int = 7) -> DetectedFace:
    """Face whose detector angles and landmark geometry agree.

    By default carries ten landmarks so the landmark estimate reaches
    full confidence.
    """
    bounds = bounds or template_box(scale=0.894)
    cx, cy = bounds.center
    half = bounds.width * 0.2
    left = Landmark(cx - half, cy - bounds.height * 0.1)
    right = Landmark(cx + half, cy - bounds.height * 0.1)
    landmarks = {
        LEFT_EYE: left,
        RIGHT_EYE: right,
        NOSE_BASE: nose_position_for(yaw, pitch, left, right),
    }
    for i in range(extra_landmarks):
        landmarks[f"contour_{i}"] = Landmark(bounds.x + bounds.width * i / 10.0, bounds.bottom)
    return DetectedFace(
        bounds=bounds,
        landmarks=landmarks,
        yaw=yaw,
        pitch=pitch,
        roll=roll,
        left_eye_open_probability=eyes_open,
        right_eye_open_probability=eyes_open,
    )


def good_histogram() -> np.ndarray:
    """Flat histogram over 80..226: mean 0.6, contrast ~0.17, no clipping."""
    hist = np.zeros(256, dtype=np.int64)
    hist[80:227] = 100
    return hist


def dark_histogram() -> np.ndarray:
    hist = np.zeros(256, dtype=np.int64)
    hist[20] = 10000
    return hist


def face_event(t_ns: int) -> dict:
    """Recorded frontal face event, landmarks placed for the portrait frame."""
    face = make_face()
    landmarks = dict(face.landmarks)
    landmarks[NOSE_BASE] = nose_position_for(
        0.0, 0.0, landmarks[LEFT_EYE], landmarks[RIGHT_EYE], aspect=FRAME_HEIGHT / FRAME_WIDTH,
    )
    b = face.bounds
    return {
        "type": "face",
        "t_ns": t_ns,
        "image_width": FRAME_WIDTH,
        "image_height": FRAME_HEIGHT,
        "bounds": {"x": b.x, "y": b.y, "width": b.width, "height": b.height},
        "landmarks": {name: [p.x, p.y] for name, p in landmarks.items()},
        "yaw": 0.0,
        "pitch": 0.0,
        "roll": 0.0,
        "left_eye_open": 0.95,
        "right_eye_open": 0.95,
    }


def front_session(end_ms: float) -> List[str]:
    """JSON lines for a motionless, well-framed FRONT capture."""
    lines = [json.dumps({"type": "lighting", "t_ns": 0, "histogram": good_histogram().tolist()})]
    t = 0
    while t <= ms(end_ms):
        lines.append(json.dumps({"type": "sensor", "t_ns": t, "gyro": [0, 0, 0], "accel": [0, 0, GRAVITY]}))
        lines.append(json.dumps(face_event(t)))
        t += TICK_NS
    return lines
