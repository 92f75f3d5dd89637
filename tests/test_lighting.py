"""Tests for histogram lighting analysis and frame measurements."""

import cv2
import numpy as np
import pytest

from helpers import dark_histogram, good_histogram

from shutterguide.errors import ConfigurationError
from shutterguide.lighting import (
    LightingAnalyzer,
    LightingQuality,
    histogram_shape,
    luminance_histogram,
    luminance_plane,
    measure_frame,
)
from shutterguide.lighting.analyzer import (
    ISSUE_HIGHLIGHTS,
    ISSUE_LOW_CONTRAST,
    ISSUE_NO_DATA,
    ISSUE_SHADOWS,
    ISSUE_TOO_BRIGHT,
    ISSUE_TOO_DARK,
)


def _checkerboard(value: int = 200, cell: int = 20) -> np.ndarray:
    image = np.zeros((240, 320, 3), dtype=np.uint8)
    for i in range(0, 240, cell):
        for j in range(0, 320, cell):
            if (i // cell + j // cell) % 2 == 0:
                image[i:i + cell, j:j + cell] = value
    return image


class TestLightingAnalyzer:
    def setup_method(self):
        self.analyzer = LightingAnalyzer()

    def test_good_lighting(self):
        a = self.analyzer.analyze(good_histogram())
        assert a.brightness == pytest.approx(0.6, abs=0.01)
        assert a.score == 100
        assert a.quality is LightingQuality.EXCELLENT
        assert a.issues == []
        assert a.recommendation == "Lighting is perfect"

    def test_dark(self):
        a = self.analyzer.analyze(dark_histogram())
        # -30 dark, -20 shadows, -15 flat
        assert a.score == 35
        assert a.quality is LightingQuality.POOR
        assert a.issues == [ISSUE_TOO_DARK, ISSUE_SHADOWS, ISSUE_LOW_CONTRAST]
        assert a.recommendation == "Move to a brighter spot"

    def test_bright_with_clipping(self):
        hist = np.zeros(256)
        hist[250] = 1000
        a = self.analyzer.analyze(hist)
        assert a.issues[:2] == [ISSUE_TOO_BRIGHT, ISSUE_HIGHLIGHTS]
        assert a.score == 100 - 25 - 25 - 15

    def test_off_ideal_brightness_has_no_issue(self):
        hist = np.zeros(256)
        hist[60:140] = 10   # mean ~0.39, narrow spread
        a = self.analyzer.analyze(hist)
        assert a.issues == [ISSUE_LOW_CONTRAST]
        assert a.score == 100 - 10 - 15
        assert a.quality is LightingQuality.GOOD

    def test_empty_histogram(self):
        a = self.analyzer.analyze(np.zeros(256))
        assert a.score == 0
        assert a.issues == [ISSUE_NO_DATA]

    def test_wrong_bin_count(self):
        with pytest.raises(ConfigurationError):
            self.analyzer.analyze([1, 2, 3])

    def test_negative_counts(self):
        hist = good_histogram()
        hist[0] = -1
        with pytest.raises(ConfigurationError):
            self.analyzer.analyze(hist)

    def test_score_bounds(self):
        for hist in (good_histogram(), dark_histogram(), np.ones(256)):
            assert 0 <= self.analyzer.analyze(hist).score <= 100


class TestHistogramShape:
    def test_symmetric_histogram_is_balanced(self):
        hist = np.zeros(256)
        hist[100:157] = 10
        hist[120:137] = 30
        shape = histogram_shape(hist)
        assert shape.skewness == pytest.approx(0.0, abs=1e-6)
        assert shape.balanced

    def test_single_bin_has_no_shape(self):
        assert not histogram_shape(dark_histogram()).balanced


class TestFrameMeasurements:
    def test_gray_passthrough(self):
        gray = np.full((4, 4), 77, dtype=np.uint8)
        assert luminance_plane(gray) is gray

    def test_bt709_weights(self):
        green = np.zeros((2, 2, 3), dtype=np.uint8)
        green[:, :, 1] = 255
        assert luminance_plane(green, "bgr")[0, 0] == pytest.approx(182, abs=1)

    def test_color_order(self):
        red_rgb = np.zeros((2, 2, 3), dtype=np.uint8)
        red_rgb[:, :, 0] = 255
        assert luminance_plane(red_rgb, "rgb")[0, 0] == pytest.approx(54, abs=1)
        assert luminance_plane(red_rgb, "bgr")[0, 0] == pytest.approx(18, abs=1)

    def test_unknown_layout(self):
        with pytest.raises(ConfigurationError):
            luminance_plane(np.zeros((2, 2, 2), dtype=np.uint8))
        with pytest.raises(ConfigurationError):
            luminance_plane(np.zeros((2, 2, 3), dtype=np.uint8), "hsv")

    def test_histogram_counts_pixels(self):
        image = np.full((10, 20), 128, dtype=np.uint8)
        hist = luminance_histogram(image)
        assert hist.shape == (256,)
        assert hist.sum() == 200
        assert hist[128] == 200

    def test_sharp_vs_blurred(self):
        sharp = _checkerboard()
        blurred = cv2.GaussianBlur(sharp, (51, 51), 0)
        q_sharp = measure_frame(sharp)
        q_blur = measure_frame(blurred)
        assert q_sharp.sharpness > q_blur.sharpness
        assert q_sharp.sharpness_score == 100.0
        assert q_blur.sharpness_score < q_sharp.sharpness_score

    def test_brightness_and_contrast(self):
        q = measure_frame(np.full((50, 50, 3), 120, dtype=np.uint8))
        assert q.brightness == pytest.approx(120.0, abs=1.0)
        assert q.contrast == pytest.approx(0.0, abs=1e-6)
        assert q.sharpness == pytest.approx(0.0, abs=1e-6)
