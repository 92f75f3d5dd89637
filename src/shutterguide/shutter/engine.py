"""Auto-shutter engine: fuses every estimate into one capture decision.

Inputs arrive from three producers (sensor callbacks, camera frames and
the host's timer) and are funneled through a single lock; each public
method mutates engine state only while holding it.

Every ``evaluate`` tick:

    1. gather latest estimates (stale sensor data is dropped)
    2. seven boolean conditions + weighted confidence score
    3. adaptive validator verdict
    4. advance the phase machine

       not all met                  -> CONDITIONS_PENDING (cancel)
       all met, confidence < 0.85   -> ALL_CONDITIONS_MET (cancel)
       all met, not validated       -> ALL_CONDITIONS_MET (cancel)
       all met, confident, valid    -> STABILIZING
       ... for stability_ms         -> READY (capture lock, countdown)
       countdown elapsed            -> CAPTURED (fire once)
"""

from __future__ import annotations

import dataclasses
import logging
import math
import threading
import time
from collections import Counter
from typing import Callable, Optional, Union

import numpy as np

from shutterguide.angles import (
    AngleConfig,
    CaptureAngle,
    FaceDetectionConfig,
    get_angle_config,
    validate_angle_config,
)
from shutterguide.config import EngineConfig
from shutterguide.distance.estimator import DistanceEstimator
from shutterguide.distance.output import DistanceEstimate
from shutterguide.head_pose.estimator import HeadPoseEstimator
from shutterguide.head_pose.output import HeadPoseEstimate
from shutterguide.lighting.analyzer import HistogramLike, LightingAnalyzer
from shutterguide.lighting.frame import luminance_histogram, measure_frame
from shutterguide.lighting.output import FrameQuality, LightingAnalysis
from shutterguide.observability import ObservabilityHub, TraceLevel
from shutterguide.observability.records import (
    CaptureFireRecord,
    ConditionDetailRecord,
    PhaseChangeRecord,
    TickRecord,
    ValidityChangeRecord,
)
from shutterguide.orientation.calibration import SensorCalibrator
from shutterguide.orientation.filter import OrientationFilter
from shutterguide.orientation.output import PhoneOrientation
from shutterguide.region.classifier import ScalpRegionClassifier
from shutterguide.region.matcher import RegionMatcher
from shutterguide.region.output import RegionMatch
from shutterguide.shutter import feedback
from shutterguide.shutter.conditions import TickInputs, evaluate_conditions
from shutterguide.shutter.confidence import score_confidence
from shutterguide.shutter.output import AutoShutterState, ShutterPhase
from shutterguide.types import BoundingBox, DetectedFace, FaceMetrics, RawSensorSample
from shutterguide.validator.output import AxisTarget, ValidationCriteria, ValidationResult, WindowTarget
from shutterguide.validator.validator import AdaptiveValidator

logger = logging.getLogger(__name__)

# Get the global observability hub
_hub = ObservabilityHub.get_instance()

AngleLike = Union[AngleConfig, CaptureAngle, str]


def _resolve_angle(angle: AngleLike) -> AngleConfig:
    if isinstance(angle, (CaptureAngle, str)):
        return get_angle_config(angle)
    return validate_angle_config(angle)


class AutoShutterEngine:
    """Per-session capture decision engine.

    Owns every stateful estimator (orientation filter, head pose
    stabilizer, adaptive validator) for one capture session; nothing is
    shared between engines.

    Args:
        angle: Capture step config, or an angle name.
        config: Engine configuration.
        clock: Monotonic nanosecond clock used when a call omits ``t_ns``.
        calibrator: Optional gyro bias calibrator for the orientation filter.

    Example:
        >>> engine = AutoShutterEngine("front")
        >>> engine.update_sensor(sample)
        >>> engine.update_face(face, 1080, 1920)
        >>> engine.update_lighting(histogram)
        >>> state = engine.evaluate()
        >>> state.ready, state.feedback
    """

    def __init__(
        self,
        angle: AngleLike,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], int] = time.monotonic_ns,
        calibrator: Optional[SensorCalibrator] = None,
    ):
        self.config = config or EngineConfig()
        self._clock = clock
        self._lock = threading.Lock()

        cfg = self.config
        self._orientation = OrientationFilter(cfg.orientation, calibrator)
        self._head = HeadPoseEstimator(cfg.head_pose)
        self._distance = DistanceEstimator(cfg.distance)
        self._matcher = RegionMatcher(cfg.region, cfg.shutter.screen_aspect)
        self._classifier = ScalpRegionClassifier(cfg.region)
        self._lighting_analyzer = LightingAnalyzer(cfg.lighting)
        self._validator = AdaptiveValidator(cfg.validator)

        # Stats
        self._stats_ticks = 0
        self._stats_captures = 0
        self._stats_cancels = 0
        self._stats_blockers: Counter = Counter()

        self._angle = _resolve_angle(angle)
        self._clear_inputs()
        self._clear_phase()
        self._retarget_validator()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def angle_config(self) -> AngleConfig:
        return self._angle

    @property
    def angle(self) -> CaptureAngle:
        return self._angle.angle

    @property
    def phase(self) -> ShutterPhase:
        return self._phase

    @property
    def capture_locked(self) -> bool:
        return self._capture_locked

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def update_sensor(self, sample: RawSensorSample) -> PhoneOrientation:
        """Fuse one gyro + accelerometer sample."""
        with self._lock:
            orientation = self._orientation.fuse(sample)
            self._sensor_stale_logged = False
            return orientation

    def update_face(
        self,
        face: Optional[DetectedFace],
        image_width_px: int,
        image_height_px: int,
        t_ns: Optional[int] = None,
    ) -> Optional[HeadPoseEstimate]:
        """Feed the face detector result for one camera frame.

        ``None`` means no face in this frame; the head pose and distance
        are cleared but the stabilization history is kept.
        """
        with self._lock:
            t = self._clock() if t_ns is None else t_ns
            self._head_pose = self._head.estimate(face, t)
            self._face = face
            if face is None:
                self._face_metrics = None
            else:
                self._face_metrics = FaceMetrics(face.bounds, image_width_px, image_height_px)
            return self._head_pose

    def update_region(
        self,
        bounds: Optional[BoundingBox],
        image_width_px: Optional[int] = None,
        image_height_px: Optional[int] = None,
    ) -> None:
        """Feed the scalp region box from an external segmenter.

        On face angles the face box is used when no region box is set.
        Image size is needed for the distance estimate of scalp angles.
        """
        with self._lock:
            self._region_box = bounds
            if bounds is not None and image_width_px and image_height_px:
                self._region_metrics = FaceMetrics(bounds, image_width_px, image_height_px)
            else:
                self._region_metrics = None

    def update_lighting(self, lighting: Union[HistogramLike, LightingAnalysis]) -> LightingAnalysis:
        """Feed a 256-bin luminance histogram or a finished analysis."""
        with self._lock:
            if not isinstance(lighting, LightingAnalysis):
                lighting = self._lighting_analyzer.analyze(lighting)
            self._lighting = lighting
            return lighting

    def update_frame_quality(self, quality: Optional[FrameQuality]) -> None:
        with self._lock:
            self._frame_quality = quality

    def update_frame(self, image: np.ndarray, color_order: str = "bgr") -> LightingAnalysis:
        """Derive lighting and frame quality from a raw camera frame."""
        histogram = luminance_histogram(image, color_order)
        quality = measure_frame(image, color_order, self.config.lighting)
        with self._lock:
            self._frame_quality = quality
            self._lighting = self._lighting_analyzer.analyze(histogram)
            return self._lighting

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def confirm_capture(self, t_ns: Optional[int] = None) -> None:
        """Mark the current angle captured (host took the photo)."""
        with self._lock:
            t = self._clock() if t_ns is None else t_ns
            if self._phase is ShutterPhase.CAPTURED:
                return
            self._capture_locked = True
            self._captured_ns = t
            self._stats_captures += 1
            self._set_phase(ShutterPhase.CAPTURED, t)
            logger.info("Capture confirmed for %s", self.angle.value)

    def reset(self) -> None:
        """Back to IDLE: clears the capture lock, stability timer,
        head pose history and validator state."""
        with self._lock:
            self._clear_phase()
            self._head.reset_stabilization()
            self._head_pose = None
            self._validator.reset()
            logger.debug("Engine reset for %s", self.angle.value)

    def set_angle(self, angle: AngleLike) -> None:
        """Switch capture step; every per-angle state starts fresh."""
        resolved = _resolve_angle(angle)
        with self._lock:
            self._angle = resolved
            self._orientation.reset()
            self._head.reset_stabilization()
            self._validator.reset()
            self._clear_inputs()
            self._clear_phase()
            self._retarget_validator()
            logger.info("Capture angle set to %s", resolved.angle.value)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(self, t_ns: Optional[int] = None) -> AutoShutterState:
        """Run one decision tick and return a fresh state."""
        with self._lock:
            t = self._clock() if t_ns is None else t_ns
            return self._evaluate(t)

    def _evaluate(self, t: int) -> AutoShutterState:
        cfg = self.config.shutter
        angle = self._angle
        self._stats_ticks += 1

        inputs = self._gather(t)
        conditions = evaluate_conditions(angle, inputs, cfg)
        confidence = score_confidence(angle, inputs, cfg)
        validation = self._validate(t, inputs)

        confident = confidence.overall >= cfg.auto_capture_threshold
        validated = not cfg.gate_on_validator or (
            validation is not None and validation.should_countdown
        )

        fire = False
        countdown: Optional[int] = None
        progress = 0.0

        if self._phase is ShutterPhase.CAPTURED:
            progress = 1.0
        elif not conditions.all_met:
            self._cancel(t, ShutterPhase.CONDITIONS_PENDING, conditions.failed()[0])
        elif not confident:
            self._cancel(t, ShutterPhase.ALL_CONDITIONS_MET, "low confidence")
        elif not validated:
            self._cancel(t, ShutterPhase.ALL_CONDITIONS_MET, "validator")
        else:
            if self._stable_since_ns is None:
                self._stable_since_ns = t
            stable_ns = t - self._stable_since_ns
            stability_ns = int(angle.stability_ms * 1_000_000)

            if self._phase is not ShutterPhase.READY and stable_ns >= stability_ns:
                self._capture_locked = True
                self._ready_since_ns = t
                self._set_phase(ShutterPhase.READY, t, confidence=confidence.overall)
                logger.info(
                    "%s ready after %.0fms (confidence %.2f)",
                    angle.angle.value, stable_ns / 1e6, confidence.overall,
                )
            elif self._phase is not ShutterPhase.READY:
                self._set_phase(ShutterPhase.STABILIZING, t, confidence=confidence.overall)
                progress = stable_ns / stability_ns if stability_ns > 0 else 1.0

            if self._phase is ShutterPhase.READY:
                progress = 1.0
                elapsed_s = (t - self._ready_since_ns) / 1e9
                remaining = cfg.countdown_s - elapsed_s
                if remaining <= 0:
                    fire = True
                    self._fire(t, confidence.overall, confidence.level.value, stable_ns)
                else:
                    countdown = int(math.ceil(remaining))

        for name in conditions.failed():
            self._stats_blockers[name] += 1

        ready = self._phase is ShutterPhase.READY or fire
        blockers = feedback.blocker_messages(conditions, angle, inputs, confidence, confident and validated)
        if self._phase is ShutterPhase.CAPTURED:
            text = feedback.MSG_CAPTURED
            blockers = []
        elif ready:
            text = feedback.MSG_COUNTDOWN.format(n=countdown) if countdown else feedback.MSG_CAPTURED
        elif self._phase is ShutterPhase.STABILIZING:
            text = feedback.MSG_STABILIZING
        else:
            text = feedback.select_feedback(conditions, angle, inputs, blockers)

        state = AutoShutterState(
            t_ns=t,
            angle=angle.angle,
            phase=self._phase,
            ready=ready,
            countdown=countdown,
            conditions=conditions,
            confidence=confidence,
            blockers=blockers,
            feedback=text,
            stability_progress=min(1.0, max(0.0, progress)),
            fire=fire,
            head_pose=inputs.head_pose,
            phone=inputs.phone,
            distance=inputs.distance,
            iou=inputs.region.result if inputs.region is not None else None,
            lighting=inputs.lighting,
            validation=validation,
        )
        self._emit_tick(state, inputs)
        return state

    def _gather(self, t: int) -> TickInputs:
        angle = self._angle
        cfg = self.config.shutter

        phone: Optional[PhoneOrientation] = None
        if self._orientation.has_data:
            age_ns = t - (self._orientation.last_t_ns or 0)
            if age_ns <= cfg.sensor_stale_ms * 1_000_000:
                phone = self._orientation.orientation
            elif not self._sensor_stale_logged:
                logger.warning("Sensor data stale (%.0fms old), ignoring phone attitude", age_ns / 1e6)
                self._sensor_stale_logged = True

        is_face_angle = isinstance(angle, FaceDetectionConfig)
        observed = self._region_box
        metrics = self._region_metrics
        if is_face_angle:
            if observed is None and self._face is not None:
                observed = self._face.bounds
            metrics = self._face_metrics

        region: Optional[RegionMatch] = None
        if observed is not None and not observed.is_empty():
            region = self._matcher.match(
                observed,
                angle.template,
                angle.iou_threshold,
                angle.centering_tolerance,
            )

        distance: Optional[DistanceEstimate] = None
        if metrics is not None:
            distance = self._distance.estimate(metrics, angle.distance)

        region_confidence: Optional[float] = None
        if not is_face_angle and phone is not None:
            region_confidence = self._classifier.confidence_for(
                angle.required_region, phone, self._head_pose
            )

        if is_face_angle:
            jitter_low = self._head.is_stable()
        else:
            jitter_low = phone is not None and self._orientation.is_steady()

        return TickInputs(
            head_pose=self._head_pose if is_face_angle else None,
            phone=phone,
            distance=distance,
            region=region,
            region_confidence=region_confidence,
            lighting=self._lighting,
            jitter_low=jitter_low,
        )

    def _validate(self, t: int, inputs: TickInputs) -> Optional[ValidationResult]:
        face = self._face if isinstance(self._angle, FaceDetectionConfig) else None
        quality = self._frame_quality
        criteria = ValidationCriteria(
            pitch=inputs.phone.pitch if inputs.phone is not None else None,
            roll=inputs.phone.roll if inputs.phone is not None else None,
            yaw=inputs.head_pose.yaw if inputs.head_pose is not None else None,
            distance=inputs.distance.distance_cm
            if inputs.distance is not None and inputs.distance.confidence > 0 else None,
            face_width_percent=face.bounds.width * 100.0 if face is not None else None,
            sharpness=quality.sharpness_score if quality is not None else None,
            brightness=quality.brightness if quality is not None else None,
            contrast=quality.contrast if quality is not None else None,
            eyes_open_percent=face.eyes_open_percent if face is not None else None,
            face_center_x=inputs.region.offset_x * 100.0 if inputs.region is not None else None,
            face_center_y=inputs.region.offset_y * 100.0 if inputs.region is not None else None,
        )
        if all(getattr(criteria, f.name) is None for f in dataclasses.fields(criteria)):
            return None

        was_valid = self._validator.is_valid
        result = self._validator.validate(criteria)
        if result.is_valid != was_valid:
            logger.debug(
                "Validator %s at accuracy %d", "valid" if result.is_valid else "invalid", result.accuracy
            )
            if _hub.enabled:
                _hub.emit(ValidityChangeRecord(
                    t_ns=t,
                    angle=self.angle.value,
                    is_valid=result.is_valid,
                    accuracy=result.accuracy,
                    failure_reasons=list(result.failure_reasons),
                ))
        return result

    # ------------------------------------------------------------------
    # Phase machine
    # ------------------------------------------------------------------

    def _cancel(self, t: int, phase: ShutterPhase, reason: str) -> None:
        """Drop back from STABILIZING/READY; never leaves the lock engaged."""
        if self._phase in (ShutterPhase.STABILIZING, ShutterPhase.READY):
            self._stats_cancels += 1
            if self._phase is ShutterPhase.READY:
                logger.info("Countdown cancelled for %s: %s", self.angle.value, reason)
        self._stable_since_ns = None
        self._ready_since_ns = None
        self._capture_locked = False
        self._set_phase(phase, t, reason=reason)

    def _fire(self, t: int, confidence: float, level: str, stable_ns: int) -> None:
        self._captured_ns = t
        self._stats_captures += 1
        self._set_phase(ShutterPhase.CAPTURED, t, confidence=confidence)
        logger.info("Auto-capture fired for %s (confidence %.2f)", self.angle.value, confidence)
        if _hub.enabled:
            _hub.emit(CaptureFireRecord(
                t_ns=t,
                angle=self.angle.value,
                confidence=confidence,
                level=level,
                stable_ns=stable_ns,
                countdown_s=self.config.shutter.countdown_s,
            ))

    def _set_phase(self, phase: ShutterPhase, t: int, confidence: float = 0.0, reason: str = "") -> None:
        if phase is self._phase:
            return
        old = self._phase
        self._phase = phase
        logger.debug("Phase %s -> %s at t=%.3fs", old.value, phase.value, t / 1e9)
        if _hub.enabled:
            _hub.emit(PhaseChangeRecord(
                t_ns=t,
                angle=self.angle.value,
                old_phase=old.value,
                new_phase=phase.value,
                confidence=confidence,
                reason=reason,
            ))

    def _emit_tick(self, state: AutoShutterState, inputs: TickInputs) -> None:
        if not (_hub.enabled and _hub.is_level_enabled(TraceLevel.NORMAL)):
            return
        _hub.emit(TickRecord(
            t_ns=state.t_ns,
            angle=state.angle.value,
            phase=state.phase.value,
            ready=state.ready,
            all_met=state.conditions.all_met,
            confidence=state.confidence.overall,
            level=state.confidence.level.value,
            blockers=list(state.blockers),
            feedback=state.feedback,
        ))
        if _hub.is_level_enabled(TraceLevel.VERBOSE):
            pose = inputs.head_pose
            phone = inputs.phone
            _hub.emit(ConditionDetailRecord(
                t_ns=state.t_ns,
                angle=state.angle.value,
                conditions=state.conditions.to_dict(),
                components=dict(state.confidence.components),
                head={"yaw": pose.yaw, "pitch": pose.pitch, "roll": pose.roll} if pose else {},
                phone={"pitch": phone.pitch, "roll": phone.roll, "yaw": phone.yaw} if phone else {},
                distance_cm=inputs.distance.distance_cm if inputs.distance else 0.0,
                iou=inputs.region.result.iou if inputs.region else 0.0,
                lighting_score=inputs.lighting.score if inputs.lighting else 0,
            ))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _retarget_validator(self) -> None:
        """Point validator scoring at the current angle's targets."""
        angle = self._angle
        window = angle.phone.pitch_window
        targets = dict(
            pitch=AxisTarget(window.center, window.half_width),
            roll=AxisTarget(angle.phone.roll, angle.phone.tolerance),
            distance=WindowTarget(angle.distance.min_cm, angle.distance.max_cm),
            center_tolerance=angle.centering_tolerance * 100.0,
        )
        if isinstance(angle, FaceDetectionConfig):
            targets["yaw"] = AxisTarget(angle.yaw_range.center, angle.yaw_range.half_width)
            targets["min_eyes_open"] = angle.min_eyes_open
        self._validator.set_targets(**targets)

    def _clear_inputs(self) -> None:
        self._face: Optional[DetectedFace] = None
        self._face_metrics: Optional[FaceMetrics] = None
        self._head_pose: Optional[HeadPoseEstimate] = None
        self._region_box: Optional[BoundingBox] = None
        self._region_metrics: Optional[FaceMetrics] = None
        self._lighting: Optional[LightingAnalysis] = None
        self._frame_quality: Optional[FrameQuality] = None
        self._sensor_stale_logged = False

    def _clear_phase(self) -> None:
        self._phase = ShutterPhase.IDLE
        self._stable_since_ns: Optional[int] = None
        self._ready_since_ns: Optional[int] = None
        self._captured_ns: Optional[int] = None
        self._capture_locked = False

    def cleanup(self) -> None:
        """Log session statistics."""
        with self._lock:
            if self._stats_ticks > 0:
                top = ", ".join(f"{name}={count}" for name, count in self._stats_blockers.most_common(3))
                logger.info(
                    "AutoShutterEngine stats: %d ticks, %d captures, %d cancels, top blockers: %s",
                    self._stats_ticks, self._stats_captures, self._stats_cancels, top or "none",
                )
