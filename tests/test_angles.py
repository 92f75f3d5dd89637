"""Tests for the per-angle capture table."""

import dataclasses

import pytest

from shutterguide.angles import (
    ANGLE_CONFIGS,
    CAPTURE_SEQUENCE,
    AngleRange,
    CaptureAngle,
    FaceDetectionConfig,
    PhoneTarget,
    SensorOnlyConfig,
    ValidationStrategy,
    get_angle_config,
    next_angle,
    parse_angle,
    validate_angle_config,
)
from shutterguide.distance.output import DistanceRange
from shutterguide.errors import ConfigurationError
from shutterguide.region.output import ScalpRegion


class TestParseAngle:
    @pytest.mark.parametrize("name,angle", [
        ("front", CaptureAngle.FRONT),
        ("FRONT", CaptureAngle.FRONT),
        (" right_45 ", CaptureAngle.RIGHT_45),
        ("Back_Donor", CaptureAngle.BACK_DONOR),
        (CaptureAngle.VERTEX, CaptureAngle.VERTEX),
    ])
    def test_names(self, name, angle):
        assert parse_angle(name) is angle

    def test_unknown(self):
        with pytest.raises(ConfigurationError, match="Unknown capture angle"):
            parse_angle("top")

    def test_get_config(self):
        assert get_angle_config("vertex") is ANGLE_CONFIGS[CaptureAngle.VERTEX]


class TestSequence:
    def test_order(self):
        assert [a.value for a in CAPTURE_SEQUENCE] == [
            "front", "right_45", "left_45", "vertex", "back_donor",
        ]

    def test_next_angle(self):
        assert next_angle(CaptureAngle.FRONT) is CaptureAngle.RIGHT_45
        assert next_angle("vertex") is CaptureAngle.BACK_DONOR
        assert next_angle(CaptureAngle.BACK_DONOR) is None


class TestAngleTable:
    def test_every_angle_configured(self):
        assert set(ANGLE_CONFIGS) == set(CaptureAngle)
        for config in ANGLE_CONFIGS.values():
            assert validate_angle_config(config) is config

    def test_strategies(self):
        for angle in (CaptureAngle.FRONT, CaptureAngle.RIGHT_45, CaptureAngle.LEFT_45):
            config = ANGLE_CONFIGS[angle]
            assert config.strategy is ValidationStrategy.FACE_DETECTION
            assert not config.region_required
        for angle in (CaptureAngle.VERTEX, CaptureAngle.BACK_DONOR):
            config = ANGLE_CONFIGS[angle]
            assert config.strategy is ValidationStrategy.SENSOR_ONLY
            assert config.region_required

    def test_front(self):
        front = ANGLE_CONFIGS[CaptureAngle.FRONT]
        assert front.yaw_range == AngleRange(-4.0, 4.0)
        assert front.distance == DistanceRange(25.0, 40.0)
        assert front.iou_threshold == 0.75
        assert front.stability_ms == 1200.0
        assert front.head_pose_valid(3.0, -5.0, 2.0)
        assert not front.head_pose_valid(5.0, 0.0, 0.0)

    def test_profiles_mirror(self):
        right = ANGLE_CONFIGS[CaptureAngle.RIGHT_45]
        left = ANGLE_CONFIGS[CaptureAngle.LEFT_45]
        assert right.yaw_range == AngleRange(-left.yaw_range.max, -left.yaw_range.min)
        assert right.head_pose_valid(45.0, 0.0, 0.0)
        assert not left.head_pose_valid(45.0, 0.0, 0.0)

    def test_scalp_regions(self):
        assert ANGLE_CONFIGS[CaptureAngle.VERTEX].required_region is ScalpRegion.VERTEX
        assert ANGLE_CONFIGS[CaptureAngle.BACK_DONOR].required_region is ScalpRegion.OCCIPITAL
        assert ANGLE_CONFIGS[CaptureAngle.BACK_DONOR].stability_ms == 800.0


class TestPhoneTarget:
    def test_symmetric_window(self):
        target = PhoneTarget(pitch=0.0, tolerance=5.0)
        assert target.pitch_window == AngleRange(-5.0, 5.0)
        assert target.contains(4.0, -4.0)
        assert not target.contains(0.0, 6.0)

    def test_pitch_max_window(self):
        target = PhoneTarget(pitch=-85.0, tolerance=5.0, pitch_max=-95.0)
        assert target.pitch_window == AngleRange(-95.0, -85.0)
        assert target.contains(-90.0, 0.0)
        assert not target.contains(-80.0, 0.0)

    def test_errors(self):
        target = PhoneTarget(pitch=-85.0, tolerance=5.0, pitch_max=-95.0)
        assert target.pitch_error(-90.0) == 0.0
        assert target.pitch_error(-80.0) == pytest.approx(5.0)
        assert target.pitch_error(-97.0) == pytest.approx(-2.0)
        assert target.roll_error(7.0) == pytest.approx(2.0)
        assert target.roll_error(-6.0) == pytest.approx(-1.0)

    def test_range_properties(self):
        window = AngleRange(-95.0, -85.0)
        assert window.center == -90.0
        assert window.half_width == 5.0


class TestValidateAngleConfig:
    def setup_method(self):
        self.front = ANGLE_CONFIGS[CaptureAngle.FRONT]
        self.vertex = ANGLE_CONFIGS[CaptureAngle.VERTEX]

    @pytest.mark.parametrize("changes", [
        {"yaw_range": AngleRange(10.0, -10.0)},
        {"distance": DistanceRange(40.0, 20.0)},
        {"iou_threshold": 1.5},
        {"stability_ms": -1.0},
        {"centering_tolerance": 0.0},
        {"phone": PhoneTarget(tolerance=-1.0)},
    ])
    def test_face_config_errors(self, changes):
        with pytest.raises(ConfigurationError):
            validate_angle_config(dataclasses.replace(self.front, **changes))

    @pytest.mark.parametrize("changes", [
        {"required_region": ScalpRegion.UNKNOWN},
        {"min_region_confidence": 1.2},
    ])
    def test_sensor_config_errors(self, changes):
        with pytest.raises(ConfigurationError):
            validate_angle_config(dataclasses.replace(self.vertex, **changes))

    def test_not_a_config(self):
        with pytest.raises(ConfigurationError):
            validate_angle_config({"angle": "front"})

    def test_custom_config(self):
        custom = FaceDetectionConfig(
            angle=CaptureAngle.FRONT,
            title="Wide front",
            instructions="",
            yaw_range=AngleRange(-10.0, 10.0),
            pitch_range=AngleRange(-10.0, 10.0),
            roll_range=AngleRange(-10.0, 10.0),
            phone=PhoneTarget(),
            distance=DistanceRange(20.0, 60.0),
        )
        assert validate_angle_config(custom) is custom
        assert isinstance(self.vertex, SensorOnlyConfig)
