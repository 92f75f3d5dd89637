"""Frame-level measurements with OpenCV.

Luminance uses BT.709 weights (0.2126 R + 0.7152 G + 0.0722 B).
"""

from __future__ import annotations

from typing import Optional

import cv2
import numpy as np

from shutterguide.errors import ConfigurationError
from shutterguide.lighting.output import FrameQuality, LightingConfig


# cv2.transform matrices: one output channel, one column per input channel.
_BT709_BGR = np.array([[0.0722, 0.7152, 0.2126]], dtype=np.float32)
_BT709_RGB = np.array([[0.2126, 0.7152, 0.0722]], dtype=np.float32)


def luminance_plane(image: np.ndarray, color_order: str = "bgr") -> np.ndarray:
    """8-bit luminance plane of a gray, BGR(A) or RGB(A) frame.

    Raises:
        ConfigurationError: If the frame layout or color order is unknown.
    """
    if image.ndim == 2:
        return image.astype(np.uint8, copy=False)
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ConfigurationError(f"Unsupported frame shape {image.shape}")
    if color_order not in ("bgr", "rgb"):
        raise ConfigurationError(f"Unknown color order {color_order!r}")

    color = image[:, :, :3]
    if color.dtype != np.uint8:
        color = np.clip(color, 0, 255).astype(np.uint8)
    weights = _BT709_BGR if color_order == "bgr" else _BT709_RGB
    luma = cv2.transform(np.ascontiguousarray(color), weights)
    return luma.reshape(image.shape[:2])


def luminance_histogram(image: np.ndarray, color_order: str = "bgr") -> np.ndarray:
    """256-bin luminance histogram (int64 counts)."""
    luma = luminance_plane(image, color_order)
    hist = cv2.calcHist([luma], [0], None, [256], [0, 256])
    return hist.ravel().astype(np.int64)


def measure_frame(
    image: np.ndarray,
    color_order: str = "bgr",
    config: Optional[LightingConfig] = None,
) -> FrameQuality:
    """Sharpness (Laplacian variance), brightness and contrast."""
    cfg = config or LightingConfig()
    gray = luminance_plane(image, color_order)
    if gray.size == 0:
        return FrameQuality(sharpness=0.0, sharpness_score=0.0, brightness=0.0, contrast=0.0)

    sharpness = float(cv2.Laplacian(gray, cv2.CV_64F).var())
    score = min(100.0, 100.0 * sharpness / cfg.blur_reference) if cfg.blur_reference > 0 else 0.0
    return FrameQuality(
        sharpness=sharpness,
        sharpness_score=score,
        brightness=float(np.mean(gray)),
        contrast=float(np.std(gray)),
    )
