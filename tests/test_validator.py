"""Tests for the adaptive validator: scoring, hysteresis and baseline."""

import math

import pytest

from shutterguide.errors import ConfigurationError
from shutterguide.validator import (
    AdaptiveValidator,
    AxisTarget,
    ValidationCriteria,
    ValidatorConfig,
    WindowTarget,
    axis_score,
    floor_score,
    window_score,
)
from shutterguide.validator.validator import (
    MSG_BRIGHTER,
    MSG_COME_CLOSER,
    MSG_EYES,
    MSG_HOLD_STEADY,
    MSG_MOVE_BACK,
    MSG_ROTATE_LEFT,
    MSG_TILT_DOWN,
    MSG_TILT_UP,
)


def _pitch_only(accuracy: float) -> ValidationCriteria:
    """Criteria whose weighted accuracy is exactly ``accuracy``."""
    return ValidationCriteria(pitch=90.0 - (100.0 - accuracy) / 20.0)


class TestPartialScores:
    def test_axis(self):
        target = AxisTarget(90.0, 5.0)
        assert axis_score(90.0, target) == 100.0
        assert axis_score(92.0, target) == pytest.approx(60.0)
        assert axis_score(95.0, target) == 0.0
        assert axis_score(80.0, target) == 0.0

    def test_axis_zero_tolerance(self):
        assert axis_score(1.0, AxisTarget(1.0, 0.0)) == 100.0
        assert axis_score(1.1, AxisTarget(1.0, 0.0)) == 0.0

    def test_window(self):
        window = WindowTarget(35.0, 45.0)
        assert window_score(40.0, window) == pytest.approx(100.0)
        assert window_score(37.5, window) == pytest.approx(math.sin(math.pi / 4) * 100.0)
        assert window_score(35.0, window) == pytest.approx(0.0, abs=1e-9)
        assert window_score(50.0, window) == 0.0

    def test_floor(self):
        assert floor_score(70.0, 75.0) == 0.0
        assert floor_score(90.0, 75.0) == 90.0
        assert floor_score(150.0, 75.0) == 100.0


class TestAccuracy:
    def setup_method(self):
        self.validator = AdaptiveValidator()

    def test_perfect_angles(self):
        result = self.validator.validate(ValidationCriteria(pitch=90.0, roll=0.0))
        assert result.accuracy == 100
        assert result.scores == {"pitch": 100, "roll": 100}
        assert result.failure_reasons == []

    def test_missing_criteria_drop_out(self):
        # pitch 100 (w .20), roll 0 (w .20): missing yaw etc. do not count
        result = self.validator.validate(ValidationCriteria(pitch=90.0, roll=10.0))
        assert result.accuracy == 50

    def test_grouped_scores(self):
        result = self.validator.validate(ValidationCriteria(
            sharpness=90.0, brightness=115.0, contrast=50.0,
            face_center_x=0.0, face_center_y=7.5,
        ))
        assert result.scores["image_quality"] == round((90.0 + 100.0 + 50.0) / 3.0)
        assert result.scores["centering"] == 75

    def test_empty_criteria(self):
        result = self.validator.validate(ValidationCriteria())
        assert result.accuracy == 0
        assert not result.is_valid


class TestHysteresis:
    def setup_method(self):
        self.validator = AdaptiveValidator()

    def test_needs_threshold_plus_band(self):
        assert not self.validator.validate(_pitch_only(62)).is_valid
        assert not self.validator.validate(_pitch_only(65)).is_valid
        assert self.validator.validate(_pitch_only(70)).is_valid

    def test_dead_band_holds_state(self):
        self.validator.validate(_pitch_only(70))
        # Oscillating around 60 never flips validity back
        for accuracy in (58, 62, 56, 61, 57):
            assert self.validator.validate(_pitch_only(accuracy)).is_valid
        assert not self.validator.validate(_pitch_only(50)).is_valid

    def test_reset(self):
        self.validator.validate(_pitch_only(90))
        self.validator.reset()
        assert not self.validator.is_valid
        assert self.validator.buffer_stats().total_frames == 0


class TestCountdown:
    def setup_method(self):
        self.validator = AdaptiveValidator()

    def test_single_good_frame_never_counts_down(self):
        result = self.validator.validate(_pitch_only(100))
        assert result.is_valid
        assert not result.should_countdown

    def test_baseline_needs_two_thirds_valid(self):
        results = [self.validator.validate(_pitch_only(100)) for _ in range(19)]
        # floor(30 * 0.66) = 19 valid frames
        assert not any(r.should_countdown for r in results[:18])
        assert results[18].should_countdown

    def test_countdown_needs_high_accuracy(self):
        for _ in range(25):
            result = self.validator.validate(_pitch_only(70))
        assert result.is_valid
        assert not result.should_countdown

    def test_buffer_stats(self):
        for _ in range(5):
            self.validator.validate(_pitch_only(20))
        for _ in range(15):
            self.validator.validate(_pitch_only(100))
        stats = self.validator.buffer_stats()
        assert stats.total_frames == 20
        assert stats.valid_frames == 15
        assert stats.invalid_frames == 5
        assert stats.validity_percentage == 75

    def test_buffer_is_bounded(self):
        for _ in range(50):
            self.validator.validate(_pitch_only(100))
        assert self.validator.buffer_stats().total_frames == 30


class TestFailureReasons:
    def setup_method(self):
        self.validator = AdaptiveValidator()

    def test_pitch_direction(self):
        assert self.validator.validate(ValidationCriteria(pitch=80.0)).failure_reasons == [MSG_TILT_UP]
        assert self.validator.validate(ValidationCriteria(pitch=99.0)).failure_reasons == [MSG_TILT_DOWN]

    def test_one_reason_per_group(self):
        result = self.validator.validate(ValidationCriteria(
            pitch=90.0, roll=10.0, distance=30.0, sharpness=10.0, brightness=40.0,
        ))
        assert result.failure_reasons == [MSG_ROTATE_LEFT, MSG_MOVE_BACK, MSG_HOLD_STEADY]

    def test_position_and_quality(self):
        result = self.validator.validate(ValidationCriteria(distance=60.0, brightness=40.0))
        assert result.failure_reasons == [MSG_COME_CLOSER, MSG_BRIGHTER]

    def test_eyes(self):
        result = self.validator.validate(ValidationCriteria(eyes_open_percent=30.0))
        assert result.failure_reasons == [MSG_EYES]


class TestConfiguration:
    def setup_method(self):
        self.validator = AdaptiveValidator()

    def test_set_thresholds(self):
        self.validator.set_thresholds(valid_threshold=80.0, hysteresis_band=0.0)
        assert not self.validator.validate(_pitch_only(75)).is_valid
        assert self.validator.validate(_pitch_only(85)).is_valid

    def test_unknown_threshold(self):
        with pytest.raises(ConfigurationError):
            self.validator.set_thresholds(buffer_size=10)

    def test_set_targets_keeps_state(self):
        self.validator.validate(_pitch_only(100))
        self.validator.set_targets(pitch=AxisTarget(0.0, 10.0))
        assert self.validator.is_valid
        assert self.validator.validate(ValidationCriteria(pitch=0.0)).accuracy == 100

    @pytest.mark.parametrize("kwargs", [
        {"tilt": AxisTarget(0.0, 1.0)},
        {"pitch": WindowTarget(0.0, 1.0)},
        {"distance": AxisTarget(0.0, 1.0)},
        {"min_sharpness": "high"},
        {"min_eyes_open": True},
    ])
    def test_invalid_targets(self, kwargs):
        with pytest.raises(ConfigurationError):
            self.validator.set_targets(**kwargs)

    def test_custom_buffer_size(self):
        validator = AdaptiveValidator(ValidatorConfig(buffer_size=6))
        results = [validator.validate(_pitch_only(100)) for _ in range(3)]
        # floor(6 * 0.66) = 3
        assert results[-1].should_countdown
