"""Lighting quality from a 256-bin luminance histogram.

Score starts at 100 and loses a fixed penalty per violated rule:

    too dark (-30) | too bright (-25) | off ideal brightness (-10)
    highlight clipping (-25)
    shadow coverage (-20)
    low contrast (-15) | high contrast (-10)
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Union

import numpy as np

from shutterguide.errors import ConfigurationError
from shutterguide.lighting.output import (
    HistogramShape,
    LightingAnalysis,
    LightingConfig,
    LightingQuality,
)

logger = logging.getLogger(__name__)

ISSUE_NO_DATA = "No image data"
ISSUE_TOO_DARK = "Too dark"
ISSUE_TOO_BRIGHT = "Too bright"
ISSUE_HIGHLIGHTS = "Overexposed highlights"
ISSUE_SHADOWS = "Too much shadow"
ISSUE_LOW_CONTRAST = "Low contrast"
ISSUE_HIGH_CONTRAST = "High contrast"

HistogramLike = Union[Sequence[int], np.ndarray]

HISTOGRAM_BINS = 256

_LEVELS = np.arange(HISTOGRAM_BINS, dtype=np.float64) / 255.0


def _as_histogram(histogram: HistogramLike) -> np.ndarray:
    hist = np.asarray(histogram, dtype=np.float64).ravel()
    if hist.shape != (HISTOGRAM_BINS,):
        raise ConfigurationError(f"Luminance histogram must have {HISTOGRAM_BINS} bins, got {hist.shape[0]}")
    if np.any(hist < 0):
        raise ConfigurationError("Luminance histogram has negative counts")
    return hist


def recommend(issues: List[str]) -> str:
    """One corrective sentence for the most critical issue."""
    if not issues:
        return "Lighting is perfect"
    if ISSUE_NO_DATA in issues:
        return "Point the camera at the subject"
    if ISSUE_TOO_DARK in issues:
        return "Move to a brighter spot"
    if ISSUE_TOO_BRIGHT in issues or ISSUE_HIGHLIGHTS in issues:
        return "Too much light, move somewhere less bright"
    if ISSUE_SHADOWS in issues:
        return "Shadows are covering the area, change your position"
    if ISSUE_LOW_CONTRAST in issues:
        return "Contrast is low, adjust the light sources"
    return "Improve the lighting"


class LightingAnalyzer:
    """Scores lighting from a luminance histogram.

    Example:
        >>> analyzer = LightingAnalyzer()
        >>> analysis = analyzer.analyze(luminance_histogram(frame))
        >>> analysis.score, analysis.issues
    """

    def __init__(self, config: Optional[LightingConfig] = None):
        self.config = config or LightingConfig()

    def analyze(self, histogram: HistogramLike) -> LightingAnalysis:
        cfg = self.config
        hist = _as_histogram(histogram)
        total = float(hist.sum())
        if total <= 0.0:
            logger.debug("Empty luminance histogram")
            return LightingAnalysis(
                brightness=0.0,
                median=0.0,
                highlight_saturation=0.0,
                shadow_size=0.0,
                contrast=0.0,
                score=0,
                quality=LightingQuality.POOR,
                issues=[ISSUE_NO_DATA],
                recommendation=recommend([ISSUE_NO_DATA]),
            )

        brightness = float((_LEVELS * hist).sum() / total)
        cumulative = np.cumsum(hist)
        median = float(np.searchsorted(cumulative, total / 2.0)) / 255.0
        highlight = float(hist[cfg.highlight_level:].sum() / total)
        shadow = float(hist[: cfg.shadow_level + 1].sum() / total)
        contrast = float(np.sqrt(((_LEVELS - brightness) ** 2 * hist).sum() / total))

        issues: List[str] = []
        score = 100
        if brightness < cfg.min_brightness:
            issues.append(ISSUE_TOO_DARK)
            score -= cfg.dark_penalty
        elif brightness > cfg.max_brightness:
            issues.append(ISSUE_TOO_BRIGHT)
            score -= cfg.bright_penalty
        elif abs(brightness - cfg.ideal_brightness) > cfg.ideal_band:
            score -= cfg.off_ideal_penalty

        if highlight > cfg.max_highlight:
            issues.append(ISSUE_HIGHLIGHTS)
            score -= cfg.highlight_penalty
        if shadow > cfg.max_shadow:
            issues.append(ISSUE_SHADOWS)
            score -= cfg.shadow_penalty

        if contrast < cfg.min_contrast:
            issues.append(ISSUE_LOW_CONTRAST)
            score -= cfg.low_contrast_penalty
        elif contrast > cfg.max_contrast:
            issues.append(ISSUE_HIGH_CONTRAST)
            score -= cfg.high_contrast_penalty

        score = max(0, min(100, score))
        return LightingAnalysis(
            brightness=min(1.0, max(0.0, brightness)),
            median=min(1.0, max(0.0, median)),
            highlight_saturation=highlight,
            shadow_size=shadow,
            contrast=min(1.0, contrast),
            score=score,
            quality=self.classify(score),
            issues=issues,
            recommendation=recommend(issues),
        )

    def classify(self, score: int) -> LightingQuality:
        cfg = self.config
        if score >= cfg.excellent_score:
            return LightingQuality.EXCELLENT
        if score >= cfg.good_score:
            return LightingQuality.GOOD
        if score >= cfg.fair_score:
            return LightingQuality.FAIR
        return LightingQuality.POOR


def histogram_shape(histogram: HistogramLike) -> HistogramShape:
    """Skewness and excess kurtosis of a luminance histogram.

    A histogram is balanced when |skewness| < 0.5 and |kurtosis| < 1.
    Flat or empty histograms have no shape and are never balanced.
    """
    hist = _as_histogram(histogram)
    total = float(hist.sum())
    if total <= 0.0:
        return HistogramShape(skewness=0.0, kurtosis=0.0, balanced=False)

    mean = (_LEVELS * hist).sum() / total
    diff = _LEVELS - mean
    m2 = float((diff ** 2 * hist).sum() / total)
    if m2 < 1e-12:
        return HistogramShape(skewness=0.0, kurtosis=0.0, balanced=False)
    m3 = float((diff ** 3 * hist).sum() / total)
    m4 = float((diff ** 4 * hist).sum() / total)

    skewness = m3 / m2 ** 1.5
    kurtosis = m4 / m2 ** 2 - 3.0
    return HistogramShape(
        skewness=skewness,
        kurtosis=kurtosis,
        balanced=abs(skewness) < 0.5 and abs(kurtosis) < 1.0,
    )
