"""Lighting and frame quality analysis."""

from shutterguide.lighting.analyzer import LightingAnalyzer, histogram_shape, recommend
from shutterguide.lighting.frame import luminance_histogram, luminance_plane, measure_frame
from shutterguide.lighting.output import (
    FrameQuality,
    HistogramShape,
    LightingAnalysis,
    LightingConfig,
    LightingQuality,
)

__all__ = [
    "LightingAnalyzer",
    "LightingConfig",
    "LightingAnalysis",
    "LightingQuality",
    "HistogramShape",
    "FrameQuality",
    "histogram_shape",
    "recommend",
    "luminance_histogram",
    "luminance_plane",
    "measure_frame",
]
