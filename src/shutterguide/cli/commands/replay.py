"""Replay command for shutterguide CLI."""

import json
import sys

from shutterguide.angles import get_angle_config
from shutterguide.cli.utils import load_config, start_tracing, stop_tracing
from shutterguide.errors import ConfigurationError, SessionError
from shutterguide.replay import load_events, replay
from shutterguide.shutter import AutoShutterEngine


def run_replay(args):
    """Replay a recorded session and print phase changes."""
    config = load_config(getattr(args, "config", None))
    try:
        angle = get_angle_config(args.angle)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        events = load_events(args.path)
    except OSError as e:
        print(f"Error: cannot read {args.path}: {e}", file=sys.stderr)
        return 2
    except SessionError as e:
        print(f"Error: {args.path}: {e}", file=sys.stderr)
        return 2

    trace_level = getattr(args, "trace", "off")
    trace_output = getattr(args, "trace_output", None)
    hub = start_tracing(trace_level, trace_output)

    # Recorded timestamps drive the engine clock.
    now = [events[0]["t_ns"] if events else 0]
    engine = AutoShutterEngine(angle, config, clock=lambda: now[0])

    print(f"Replaying: {args.path}")
    print(f"Angle: {angle.angle.value}")
    print(f"Events: {len(events)}")
    print("-" * 50)

    try:
        def _timed(items):
            for event in items:
                now[0] = event["t_ns"]
                yield event

        result = replay(engine, _timed(events))
    except SessionError as e:
        print(f"Error: {args.path}: {e}", file=sys.stderr)
        return 2
    finally:
        engine.cleanup()
        stop_tracing(hub)

    start = events[0]["t_ns"] if events else 0
    for state in result.phase_changes:
        print(
            f"  t={(state.t_ns - start) / 1e9:7.3f}s  {state.phase.value:<20} "
            f"confidence={state.confidence.overall:.2f}  {state.feedback}"
        )

    print("-" * 50)
    final = result.final_state
    if final is None:
        print("No events")
        return 0

    if getattr(args, "json", False):
        print(json.dumps(final.to_dict(), indent=2))
    else:
        print(f"Final phase: {final.phase.value}")
        print(f"Confidence:  {final.confidence.overall:.2f} ({final.confidence.level.value})")
        failed = final.conditions.failed()
        print(f"Blocked by:  {', '.join(failed) if failed else '-'}")
        print(f"Feedback:    {final.feedback}")
    if result.captured:
        print(f"Captured at t={(result.fired_at_ns - start) / 1e9:.3f}s")
    return 0
