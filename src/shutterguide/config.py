"""Engine configuration.

Every component keeps its own frozen config dataclass next to its output
types; ``EngineConfig`` groups them and adds the orchestrator constants in
``ShutterConfig``.

Example:
    >>> config = EngineConfig.from_yaml("engine.yaml")
    >>> engine = AutoShutterEngine(get_angle_config("front"), config)

YAML layout (every section and key optional):

    shutter:
      countdown_s: 3
      gate_on_validator: true
    validator:
      valid_threshold: 60
      pitch: {target: 0, tolerance: 5}
    distance:
      depth_buckets: [[0.5, 25], [0.3, 40], [0.15, 60]]
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from shutterguide.distance.output import DistanceConfig
from shutterguide.errors import ConfigurationError
from shutterguide.head_pose.output import HeadPoseConfig
from shutterguide.lighting.output import LightingConfig
from shutterguide.orientation.output import OrientationConfig
from shutterguide.region.output import RegionConfig
from shutterguide.validator.output import ValidatorConfig


@dataclass(frozen=True)
class ShutterConfig:
    """Orchestrator constants.

    Component weights must sum to 1. Confidence levels:
    PERFECT >= perfect_threshold, AUTO_CAPTURE >= auto_capture_threshold,
    USER_GUIDANCE >= guidance_threshold, otherwise REJECT.
    """

    weight_pose: float = 0.35
    weight_phone: float = 0.25
    weight_centering: float = 0.15
    weight_distance: float = 0.10
    weight_region: float = 0.10
    weight_quality: float = 0.05

    perfect_threshold: float = 0.95
    auto_capture_threshold: float = 0.85
    guidance_threshold: float = 0.70

    lighting_ok_score: int = 70
    countdown_s: int = 3

    # Component scores when the check fails or has no input
    centering_fallback: float = 0.5
    distance_out_of_range: float = 0.3
    region_default: float = 0.7

    # Sensor samples older than this no longer count as phone attitude
    sensor_stale_ms: float = 500.0

    # READY and the countdown also need the adaptive validator's
    # should_countdown verdict (hysteresis plus a mostly valid buffer)
    gate_on_validator: bool = True

    # Preview height / width in pixels
    screen_aspect: float = 16.0 / 9.0


_SECTIONS = {
    "orientation": OrientationConfig,
    "head_pose": HeadPoseConfig,
    "distance": DistanceConfig,
    "region": RegionConfig,
    "lighting": LightingConfig,
    "validator": ValidatorConfig,
    "shutter": ShutterConfig,
}


def _to_tuple(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return tuple(_to_tuple(v) for v in value)
    return value


def _to_plain(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return [_to_plain(v) for v in value]
    return value


def _coerce(path: str, default: Any, value: Any) -> Any:
    """Convert a YAML value to the type of the field's default."""
    if dataclasses.is_dataclass(default):
        if not isinstance(value, dict):
            raise ConfigurationError(f"{path}: expected a mapping, got {value!r}")
        return _build(path, type(default), value, base=default)
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise ConfigurationError(f"{path}: expected true/false, got {value!r}")
        return value
    if isinstance(default, (int, float)):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigurationError(f"{path}: expected a number, got {value!r}")
        if isinstance(default, float):
            return float(value)
        if value != int(value):
            raise ConfigurationError(f"{path}: expected an integer, got {value!r}")
        return int(value)
    if isinstance(default, tuple):
        if not isinstance(value, (list, tuple)):
            raise ConfigurationError(f"{path}: expected a list, got {value!r}")
        return _to_tuple(value)
    return value


def _build(path: str, cls: type, data: Dict[str, Any], base: Optional[Any] = None) -> Any:
    base = base if base is not None else cls()
    names = {f.name for f in dataclasses.fields(cls)}
    unknown = sorted(set(data) - names)
    if unknown:
        raise ConfigurationError(f"{path}: unknown keys {unknown}")
    changes = {
        key: _coerce(f"{path}.{key}", getattr(base, key), value)
        for key, value in data.items()
    }
    return dataclasses.replace(base, **changes)


@dataclass(frozen=True)
class EngineConfig:
    """Complete configuration for one capture session."""

    orientation: OrientationConfig = field(default_factory=OrientationConfig)
    head_pose: HeadPoseConfig = field(default_factory=HeadPoseConfig)
    distance: DistanceConfig = field(default_factory=DistanceConfig)
    region: RegionConfig = field(default_factory=RegionConfig)
    lighting: LightingConfig = field(default_factory=LightingConfig)
    validator: ValidatorConfig = field(default_factory=ValidatorConfig)
    shutter: ShutterConfig = field(default_factory=ShutterConfig)

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Check cross-field constraints.

        Raises:
            ConfigurationError: If weights or thresholds are inconsistent.
        """
        s = self.shutter
        total = (
            s.weight_pose + s.weight_phone + s.weight_centering
            + s.weight_distance + s.weight_region + s.weight_quality
        )
        if abs(total - 1.0) > 1e-6:
            raise ConfigurationError(f"shutter weights must sum to 1, got {total:.4f}")
        if not 0.0 <= s.guidance_threshold <= s.auto_capture_threshold <= s.perfect_threshold <= 1.0:
            raise ConfigurationError("shutter thresholds must satisfy guidance <= auto_capture <= perfect <= 1")
        if s.countdown_s < 0:
            raise ConfigurationError("shutter.countdown_s must be non-negative")
        if s.screen_aspect <= 0:
            raise ConfigurationError("shutter.screen_aspect must be positive")

        o = self.orientation
        if abs(o.gyro_weight + o.accel_weight - 1.0) > 1e-6:
            raise ConfigurationError("orientation gyro_weight + accel_weight must be 1")

        h = self.head_pose
        if not 0.0 < h.smoothing_factor <= 1.0:
            raise ConfigurationError("head_pose.smoothing_factor must be in (0, 1]")

        v = self.validator
        if v.buffer_size <= 0:
            raise ConfigurationError("validator.buffer_size must be positive")
        if v.hysteresis_band < 0:
            raise ConfigurationError("validator.hysteresis_band must be non-negative")

        r = self.region
        if not r.iou_acceptable <= r.iou_good <= r.iou_perfect:
            raise ConfigurationError("region IoU tiers must be ascending")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "EngineConfig":
        """Create EngineConfig from a dictionary (e.g., loaded from YAML).

        Missing sections and keys keep their defaults.

        Raises:
            ConfigurationError: On unknown sections or keys and on values
                of the wrong type.
        """
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigurationError("engine config must be a mapping")
        unknown = sorted(set(data) - set(_SECTIONS))
        if unknown:
            raise ConfigurationError(f"Unknown config sections: {unknown}")

        sections = {}
        for name, section_cls in _SECTIONS.items():
            section = data.get(name) or {}
            if not isinstance(section, dict):
                raise ConfigurationError(f"{name}: expected a mapping")
            sections[name] = _build(name, section_cls, section)
        return cls(**sections)

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "EngineConfig":
        """Load EngineConfig from a YAML file.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ConfigurationError: If the YAML is malformed or invalid.
        """
        import yaml

        with open(yaml_path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {yaml_path}: {e}") from e
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict (lists instead of tuples) suitable for YAML."""
        result = {}
        for name in _SECTIONS:
            section = dataclasses.asdict(getattr(self, name))
            result[name] = {
                key: {k: _to_plain(v) for k, v in value.items()} if isinstance(value, dict) else _to_plain(value)
                for key, value in section.items()
            }
        return result


__all__ = ["EngineConfig", "ShutterConfig"]
