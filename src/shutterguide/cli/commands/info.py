"""Info command for shutterguide CLI.

Shows the capture sequence and the per-angle targets.
"""

import sys

from shutterguide.angles import (
    CAPTURE_SEQUENCE,
    FaceDetectionConfig,
    get_angle_config,
    parse_angle,
)
from shutterguide.cli.utils import load_config
from shutterguide.errors import ConfigurationError


def run_info(args):
    """Show capture angles and thresholds."""
    config = load_config(getattr(args, "config", None))

    angle_name = getattr(args, "angle", None)
    if angle_name:
        try:
            angle = parse_angle(angle_name)
        except ConfigurationError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2
        _print_angle_detail(get_angle_config(angle))
        return 0

    print("ShutterGuide - Capture Angles")
    print("=" * 72)
    _print_version_info()

    print("\n[Capture Sequence]")
    print("-" * 72)
    print(f"  {'#':<3}{'angle':<12}{'strategy':<16}{'phone pitch':<16}{'distance':<12}{'hold'}")
    for i, angle in enumerate(CAPTURE_SEQUENCE, start=1):
        cfg = get_angle_config(angle)
        window = cfg.phone.pitch_window
        pitch = f"{window.min:.0f}..{window.max:.0f}"
        distance = f"{cfg.distance.min_cm:.0f}-{cfg.distance.max_cm:.0f}cm"
        print(
            f"  {i:<3}{angle.value:<12}{cfg.strategy.value:<16}{pitch:<16}"
            f"{distance:<12}{cfg.stability_ms:.0f}ms"
        )

    shutter = config.shutter
    print("\n[Shutter]")
    print("-" * 72)
    print(f"  Auto-capture confidence: >= {shutter.auto_capture_threshold:.2f}")
    print(f"  Lighting score:          >= {shutter.lighting_ok_score}")
    print(f"  Countdown:               {shutter.countdown_s:g}s")
    print(
        "  Weights:                 "
        f"pose {shutter.weight_pose:g}, phone {shutter.weight_phone:g}, "
        f"centering {shutter.weight_centering:g}, distance {shutter.weight_distance:g}, "
        f"region {shutter.weight_region:g}, quality {shutter.weight_quality:g}"
    )
    return 0


def _print_version_info():
    from shutterguide import __version__
    print(f"  shutterguide: {__version__}")


def _print_angle_detail(cfg):
    print(f"{cfg.title} ({cfg.angle.value})")
    print("=" * 72)
    print(f"  {cfg.instructions}")
    print()
    print(f"  Strategy:     {cfg.strategy.value}")
    window = cfg.phone.pitch_window
    print(
        f"  Phone:        pitch {window.min:.0f}..{window.max:.0f}, "
        f"roll {cfg.phone.roll:.0f} ±{cfg.phone.tolerance:.0f}"
    )
    if isinstance(cfg, FaceDetectionConfig):
        print(
            f"  Head:         yaw {cfg.yaw_range.min:.0f}..{cfg.yaw_range.max:.0f}, "
            f"pitch {cfg.pitch_range.min:.0f}..{cfg.pitch_range.max:.0f}, "
            f"roll {cfg.roll_range.min:.0f}..{cfg.roll_range.max:.0f}"
        )
        print(f"  Eyes open:    >= {cfg.min_eyes_open:.0f}%")
    else:
        print(
            f"  Region:       {cfg.required_region.value} "
            f"(confidence >= {cfg.min_region_confidence:.2f})"
        )
    print(f"  Distance:     {cfg.distance.min_cm:.0f}-{cfg.distance.max_cm:.0f} cm")
    print(
        f"  Template:     {cfg.template.width_fraction:.0%} of screen width, "
        f"height x{cfg.template.height_factor:g}"
    )
    print(f"  IoU:          >= {cfg.iou_threshold:.2f}")
    print(f"  Centering:    ±{cfg.centering_tolerance:.0%}")
    print(f"  Hold:         {cfg.stability_ms:.0f} ms")
