"""Five-angle capture session on top of a single engine."""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Optional, Sequence

from shutterguide.angles import CAPTURE_SEQUENCE, CaptureAngle, parse_angle
from shutterguide.config import EngineConfig
from shutterguide.errors import ConfigurationError
from shutterguide.shutter.engine import AutoShutterEngine
from shutterguide.shutter.output import AutoShutterState, ShutterPhase

logger = logging.getLogger(__name__)


class AutoShutterSession:
    """Walks the capture sequence, one angle at a time.

    The session records when each angle was captured and moves on only
    when ``advance()`` is called, so the host can show a review screen
    between steps.

    Example:
        >>> session = AutoShutterSession()
        >>> state = session.evaluate()
        >>> if state.phase is ShutterPhase.CAPTURED:
        ...     session.advance()
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], int] = time.monotonic_ns,
        sequence: Sequence[CaptureAngle] = CAPTURE_SEQUENCE,
    ):
        if not sequence:
            raise ConfigurationError("Capture sequence is empty")
        self._sequence = tuple(parse_angle(a) for a in sequence)
        self._index = 0
        self.captured: Dict[CaptureAngle, int] = {}
        self.engine = AutoShutterEngine(self._sequence[0], config, clock)

    @property
    def sequence(self) -> Sequence[CaptureAngle]:
        return self._sequence

    @property
    def current_angle(self) -> Optional[CaptureAngle]:
        if self.is_complete:
            return None
        return self._sequence[self._index]

    @property
    def is_complete(self) -> bool:
        return self._index >= len(self._sequence)

    @property
    def progress(self) -> float:
        """Fraction of the sequence captured."""
        return len(self.captured) / len(self._sequence)

    def evaluate(self, t_ns: Optional[int] = None) -> AutoShutterState:
        state = self.engine.evaluate(t_ns)
        if state.phase is ShutterPhase.CAPTURED and state.angle not in self.captured:
            self.captured[state.angle] = state.t_ns
            logger.info(
                "Captured %s (%d/%d)", state.angle.value, len(self.captured), len(self._sequence)
            )
        return state

    def advance(self) -> Optional[CaptureAngle]:
        """Move to the next angle not yet captured; None when done."""
        self._index += 1
        while not self.is_complete and self._sequence[self._index] in self.captured:
            self._index += 1
        if self.is_complete:
            logger.info("Capture session complete")
            return None
        self.engine.set_angle(self._sequence[self._index])
        return self._sequence[self._index]

    def retake(self, angle) -> None:
        """Discard a capture and make it the current step again."""
        angle = parse_angle(angle)
        if angle not in self._sequence:
            raise ConfigurationError(f"Angle {angle.value} is not in this session")
        self.captured.pop(angle, None)
        self._index = self._sequence.index(angle)
        self.engine.set_angle(angle)
        logger.info("Retaking %s", angle.value)

    def cleanup(self) -> None:
        self.engine.cleanup()
