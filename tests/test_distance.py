"""Tests for optical + depth distance fusion."""

import pytest

from helpers import FRAME_HEIGHT, FRAME_WIDTH

from shutterguide.distance import (
    DistanceConfig,
    DistanceEstimator,
    DistanceMethod,
    DistanceRange,
)
from shutterguide.distance.estimator import (
    MSG_MOVE_BACK,
    MSG_MOVE_BACK_SLIGHTLY,
    MSG_MOVE_CLOSER,
    MSG_MOVE_CLOSER_SLIGHTLY,
    MSG_NO_SUBJECT,
    MSG_PERFECT,
)
from shutterguide.types import BoundingBox, FaceMetrics

TARGET = DistanceRange(25.0, 40.0)


def _metrics(width: float, height: float = 0.25) -> FaceMetrics:
    box = BoundingBox.from_center(0.5, 0.5, width, height)
    return FaceMetrics(box, FRAME_WIDTH, FRAME_HEIGHT)


class TestOptical:
    def setup_method(self):
        self.estimator = DistanceEstimator()

    def test_focal_length(self):
        # 4 mm lens on a 5.76 mm sensor, 1080 px wide
        assert self.estimator.focal_length_px(1080) == pytest.approx(750.0)

    def test_pinhole_distance(self):
        est = self.estimator.optical(_metrics(0.4))
        assert est.method is DistanceMethod.OPTICAL
        assert est.distance_cm == pytest.approx(16.5 * 750.0 / 432.0)
        assert est.confidence == pytest.approx(0.9)

    def test_small_box_penalized(self):
        est = self.estimator.optical(_metrics(0.1, 0.1))
        assert est.confidence == pytest.approx(0.9 * 0.6 * 0.5)

    def test_zero_width(self):
        assert self.estimator.optical(_metrics(0.0)) is None


class TestDepth:
    @pytest.mark.parametrize("width,expected", [
        (0.6, 25.0),
        (0.4, 40.0),
        (0.2, 60.0),
        (0.1, 80.0),
        (0.5, 40.0),   # bucket bounds are exclusive
    ])
    def test_buckets(self, width, expected):
        est = DistanceEstimator().depth(_metrics(width))
        assert est.distance_cm == expected
        assert est.confidence == pytest.approx(0.75)


class TestFusion:
    def setup_method(self):
        self.estimator = DistanceEstimator()

    def test_weighted_fusion(self):
        metrics = _metrics(0.4)
        optical = self.estimator.optical(metrics).distance_cm
        est = self.estimator.estimate(metrics, TARGET)
        assert est.method is DistanceMethod.FUSION
        assert est.distance_cm == pytest.approx(0.6 * optical + 0.4 * 40.0)

    def test_disagreement_penalties(self):
        # optical ~28.6 vs depth 40: gap > 10
        est = self.estimator.estimate(_metrics(0.4), TARGET)
        assert est.confidence == pytest.approx(0.9 * 0.8)

        # optical ~32 vs depth 40: 5 < gap <= 10
        est = self.estimator.estimate(_metrics(0.358), TARGET)
        assert est.confidence == pytest.approx(0.9 * 0.9)

    def test_in_range(self):
        est = self.estimator.estimate(_metrics(0.358), TARGET)
        assert est.is_in_range
        assert est.recommendation == MSG_PERFECT

    def test_no_subject(self):
        est = self.estimator.estimate(None, TARGET)
        assert est.distance_cm == 0.0
        assert est.confidence == 0.0
        assert not est.is_in_range
        assert est.recommendation == MSG_NO_SUBJECT

    def test_degenerate_box(self):
        est = self.estimator.estimate(_metrics(0.0), TARGET)
        assert est.confidence == 0.0
        assert est.recommendation == MSG_NO_SUBJECT

    def test_stateless(self):
        metrics = _metrics(0.3)
        assert self.estimator.estimate(metrics, TARGET) == self.estimator.estimate(metrics, TARGET)


class TestRecommendation:
    @pytest.mark.parametrize("distance,message", [
        (15.0, MSG_MOVE_BACK),
        (22.0, MSG_MOVE_BACK_SLIGHTLY),
        (30.0, MSG_PERFECT),
        (43.0, MSG_MOVE_CLOSER_SLIGHTLY),
        (50.0, MSG_MOVE_CLOSER),
    ])
    def test_messages(self, distance, message):
        assert DistanceEstimator().recommend(distance, TARGET) == message

    def test_custom_margin(self):
        estimator = DistanceEstimator(DistanceConfig(recommendation_margin_cm=1.0))
        assert estimator.recommend(22.0, TARGET) == MSG_MOVE_BACK
