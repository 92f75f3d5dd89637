"""Output and config types for lighting analysis."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class LightingQuality(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


@dataclass(frozen=True)
class LightingConfig:
    """Histogram thresholds and score deductions.

    Brightness, highlight, shadow and contrast values are fractions in
    [0, 1]; bin thresholds are 8-bit luminance levels.
    """

    highlight_level: int = 240
    shadow_level: int = 40

    min_brightness: float = 0.3
    max_brightness: float = 0.9
    ideal_brightness: float = 0.6
    ideal_band: float = 0.1
    max_highlight: float = 0.10
    max_shadow: float = 0.40
    min_contrast: float = 0.15
    max_contrast: float = 0.5

    dark_penalty: int = 30
    bright_penalty: int = 25
    off_ideal_penalty: int = 10
    highlight_penalty: int = 25
    shadow_penalty: int = 20
    low_contrast_penalty: int = 15
    high_contrast_penalty: int = 10

    excellent_score: int = 90
    good_score: int = 70
    fair_score: int = 50

    # Laplacian variance mapped to a 100-point sharpness score
    blur_reference: float = 100.0


@dataclass(frozen=True)
class LightingAnalysis:
    """Lighting measurements and a deduction-based 0-100 score.

    ``issues`` is ordered by priority (exposure first).
    """

    brightness: float
    median: float
    highlight_saturation: float
    shadow_size: float
    contrast: float
    score: int
    quality: LightingQuality
    issues: List[str] = field(default_factory=list)
    recommendation: str = ""

    def to_dict(self) -> dict:
        return {
            "brightness": self.brightness,
            "median": self.median,
            "highlight_saturation": self.highlight_saturation,
            "shadow_size": self.shadow_size,
            "contrast": self.contrast,
            "score": self.score,
            "quality": self.quality.value,
            "issues": list(self.issues),
            "recommendation": self.recommendation,
        }


@dataclass(frozen=True)
class HistogramShape:
    skewness: float
    kurtosis: float
    balanced: bool


@dataclass(frozen=True)
class FrameQuality:
    """Image statistics on the 0-255 luminance scale.

    ``sharpness`` is the raw Laplacian variance; ``sharpness_score`` maps
    it onto 0-100.
    """

    sharpness: float
    sharpness_score: float
    brightness: float
    contrast: float
