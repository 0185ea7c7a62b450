"""Session state machine turning a triad stream into calibration measurements.

A :class:`MeasurementsGenerator` owns one :class:`StaticIntervalDetector`,
one :class:`TimeIntervalEstimator` per tracked stream and the noise
accumulators of the current static segment.  Samples are pushed through
:meth:`MeasurementsGenerator.process`; every state change is reported
through the optional callables of :class:`GeneratorListeners`.

Each dynamic interval bracketed by a valid static segment yields one
:class:`GeneratedMeasurement`: the average of the static segment that
preceded the motion together with the standard deviation observed over
it, plus the buffered dynamic samples.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Protocol, Tuple, Union

from ..errors import ConfigurationError, SampleOrderError, SessionStateError
from ..settings import (
    CalibrationSettings,
    bundled_defaults,
    validate_max_dynamic_samples,
    validate_min_static_samples,
)
from ..units import Measurement, TimeUnit, Unit, convert, nanoseconds_to_seconds
from .intervals import DetectorErrorReason, IntervalState, StaticIntervalDetector
from .noise import TriadNoiseAccumulator
from .samples import CompositeSample, SensorAccuracy, TriadSample
from .timing import UNBOUNDED_SAMPLES, TimeIntervalEstimator

__all__ = [
    "ErrorReason",
    "GeneratedMeasurement",
    "GeneratorListeners",
    "MeasurementsGenerator",
    "SampleSource",
]


logger = logging.getLogger(__name__)

Triad = Tuple[float, float, float]


class ErrorReason(Enum):
    """Session-level failure causes reported through ``on_error``."""

    SUDDEN_EXCESSIVE_MOVEMENT_DETECTED_DURING_INITIALIZATION = (
        "sudden_excessive_movement_detected_during_initialization"
    )
    OVERALL_EXCESSIVE_MOVEMENT_DETECTED_DURING_INITIALIZATION = (
        "overall_excessive_movement_detected_during_initialization"
    )
    UNRELIABLE_SENSOR = "unreliable_sensor"


_DETECTOR_REASONS = {
    DetectorErrorReason.SUDDEN_EXCESSIVE_MOVEMENT_DETECTED: (
        ErrorReason.SUDDEN_EXCESSIVE_MOVEMENT_DETECTED_DURING_INITIALIZATION
    ),
    DetectorErrorReason.OVERALL_EXCESSIVE_MOVEMENT_DETECTED: (
        ErrorReason.OVERALL_EXCESSIVE_MOVEMENT_DETECTED_DURING_INITIALIZATION
    ),
}

# sample timestamps feed the interval estimators only while these hold
_TIMING_STATES = (IntervalState.IDLE, IntervalState.INITIALIZING)


class SampleSource(Protocol):
    """Acquisition collaborator started and stopped by the generator."""

    def start(self) -> None: ...

    def stop(self) -> None: ...


@dataclass(frozen=True)
class GeneratorListeners:
    """Optional event handlers; every handler but the accuracy one receives the generator."""

    on_initialization_started: Optional[Callable[["MeasurementsGenerator"], Any]] = None
    on_initialization_completed: Optional[
        Callable[["MeasurementsGenerator", float], Any]
    ] = None
    on_error: Optional[Callable[["MeasurementsGenerator", ErrorReason], Any]] = None
    on_static_interval_detected: Optional[Callable[["MeasurementsGenerator"], Any]] = None
    on_dynamic_interval_detected: Optional[Callable[["MeasurementsGenerator"], Any]] = None
    on_static_interval_skipped: Optional[Callable[["MeasurementsGenerator"], Any]] = None
    on_dynamic_interval_skipped: Optional[Callable[["MeasurementsGenerator"], Any]] = None
    on_generated_measurement: Optional[
        Callable[["MeasurementsGenerator", "GeneratedMeasurement"], Any]
    ] = None
    on_reset: Optional[Callable[["MeasurementsGenerator"], Any]] = None
    on_accuracy_changed: Optional[Callable[[SensorAccuracy], Any]] = None


@dataclass(frozen=True)
class GeneratedMeasurement:
    """One calibration measurement emitted at the end of a dynamic interval."""

    value: Triad
    standard_deviation: Triad
    unit: Unit
    static_samples: int
    start_timestamp_ns: int
    end_timestamp_ns: int
    dynamic_samples: Tuple[TriadSample, ...] = ()
    companion_value: Optional[Triad] = None
    companion_standard_deviation: Optional[Triad] = None

    @property
    def standard_deviation_norm(self) -> float:
        return math.sqrt(sum(value * value for value in self.standard_deviation))

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "value": list(self.value),
            "standard_deviation": list(self.standard_deviation),
            "unit": self.unit.name.lower(),
            "static_samples": self.static_samples,
            "dynamic_samples": len(self.dynamic_samples),
            "start_timestamp_ns": self.start_timestamp_ns,
            "end_timestamp_ns": self.end_timestamp_ns,
        }
        if self.companion_value is not None:
            payload["companion_value"] = list(self.companion_value)
        if self.companion_standard_deviation is not None:
            payload["companion_standard_deviation"] = list(self.companion_standard_deviation)
        return payload


@dataclass
class _StaticSegment:
    value: Triad
    standard_deviation: Triad
    samples: int
    start_timestamp_ns: int
    end_timestamp_ns: int
    valid: bool
    companion_value: Optional[Triad] = None
    companion_standard_deviation: Optional[Triad] = None


@dataclass
class _SessionCounters:
    static_samples: int = 0
    dynamic_samples: int = 0
    primary: int = 0
    companion: int = 0


@dataclass
class _CompanionBaseline:
    base_noise_level: Optional[float] = None
    initial_norm: Optional[float] = None
    frozen: bool = False


def _triad(values: Any) -> Triad:
    return (float(values[0]), float(values[1]), float(values[2]))


class MeasurementsGenerator:
    """Drive interval detection and emit generated measurements.

    ``unit`` is the unit the primary stream is fed in; ``companion_unit``
    tags the statistics of the optional companion stream (for instance a
    magnetometer sampled alongside an accelerometer).
    """

    def __init__(
        self,
        settings: Optional[CalibrationSettings] = None,
        *,
        unit: Unit,
        companion_unit: Optional[Unit] = None,
        listeners: Optional[GeneratorListeners] = None,
        source: Optional[SampleSource] = None,
    ) -> None:
        resolved = settings or bundled_defaults()
        self.unit = unit
        self.companion_unit = companion_unit
        self.listeners = listeners or GeneratorListeners()
        self.source = source
        self._floors = resolved.floors
        self._min_static_samples = validate_min_static_samples(
            resolved.generator.min_static_samples, self._floors
        )
        self._detector = StaticIntervalDetector(
            resolved.detector,
            unit=unit,
            max_dynamic_samples=resolved.generator.max_dynamic_samples,
            floors=self._floors,
        )

        self._estimator = TimeIntervalEstimator(UNBOUNDED_SAMPLES)
        self._companion_estimator = TimeIntervalEstimator(UNBOUNDED_SAMPLES)
        self._accumulator = TriadNoiseAccumulator(unit)
        self._companion_accumulator = TriadNoiseAccumulator(companion_unit or unit)
        self._companion_baseline_accumulator = TriadNoiseAccumulator(companion_unit or unit)

        self._running = False
        self._initialized = False
        self._unreliable = False
        self._initial_timestamp_ns: Optional[int] = None
        self._last_timestamp_ns: Optional[int] = None
        self._initial_companion_timestamp_ns: Optional[int] = None
        self._last_companion_timestamp_ns: Optional[int] = None
        self._segment_start_ns: Optional[int] = None
        self._segment_end_ns: Optional[int] = None
        self._previous_static: Optional[_StaticSegment] = None
        self._dynamic_buffer: List[TriadSample] = []
        self._counters = _SessionCounters()
        self._companion = _CompanionBaseline()

    # ------------------------------------------------------------------
    # session state
    @property
    def detector(self) -> StaticIntervalDetector:
        return self._detector

    @property
    def running(self) -> bool:
        return self._running

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def unreliable(self) -> bool:
        return self._unreliable

    @property
    def status(self) -> IntervalState:
        if self._unreliable:
            return IntervalState.FAILED
        return self._detector.status

    @property
    def initial_timestamp_ns(self) -> Optional[int]:
        return self._initial_timestamp_ns

    @property
    def processed_static_samples(self) -> int:
        return self._counters.static_samples

    @property
    def processed_dynamic_samples(self) -> int:
        return self._counters.dynamic_samples

    @property
    def number_of_processed_primary_measurements(self) -> int:
        return self._counters.primary

    @property
    def number_of_processed_companion_measurements(self) -> int:
        return self._counters.companion

    @property
    def time_interval_estimator(self) -> TimeIntervalEstimator:
        return self._estimator

    @property
    def companion_time_interval_estimator(self) -> TimeIntervalEstimator:
        return self._companion_estimator

    @property
    def accumulator(self) -> TriadNoiseAccumulator:
        """Noise statistics of the static segment in progress."""

        return self._accumulator

    @property
    def companion_accumulator(self) -> TriadNoiseAccumulator:
        return self._companion_accumulator

    def map_error_reason(self, reason: DetectorErrorReason) -> ErrorReason:
        if self._unreliable:
            return ErrorReason.UNRELIABLE_SENSOR
        return _DETECTOR_REASONS[reason]

    # ------------------------------------------------------------------
    # lifecycle
    def start(self) -> None:
        if self._running:
            raise SessionStateError(
                "Measurement generation is already running",
                context={"status": self.status.value},
            )
        self.reset()
        self._running = True
        logger.debug("Measurement generation started", extra={"event": "generator.started"})
        if self.source is not None:
            self.source.start()

    def stop(self) -> None:
        if self.source is not None:
            self.source.stop()
        if self._running:
            logger.debug(
                "Measurement generation stopped",
                extra={"event": "generator.stopped", "status": self.status.value},
            )
        self._running = False

    def reset(self) -> None:
        self._detector.reset()
        self._estimator.reset()
        self._estimator.total_samples = UNBOUNDED_SAMPLES
        self._companion_estimator.reset()
        self._companion_estimator.total_samples = UNBOUNDED_SAMPLES
        self._accumulator.reset()
        self._companion_accumulator.reset()
        self._companion_baseline_accumulator.reset()

        self._initialized = False
        self._unreliable = False
        self._initial_timestamp_ns = None
        self._last_timestamp_ns = None
        self._initial_companion_timestamp_ns = None
        self._last_companion_timestamp_ns = None
        self._segment_start_ns = None
        self._segment_end_ns = None
        self._previous_static = None
        self._dynamic_buffer = []
        self._counters = _SessionCounters()
        self._companion = _CompanionBaseline()
        self._emit("on_reset", self)

    def _emit(self, name: str, *args: Any) -> None:
        handler = getattr(self.listeners, name)
        if handler is not None:
            handler(*args)

    # ------------------------------------------------------------------
    # sample routing
    def on_accuracy_changed(self, accuracy: SensorAccuracy) -> None:
        if accuracy is SensorAccuracy.UNRELIABLE and not self._unreliable:
            self.stop()
            self._unreliable = True
            logger.warning(
                "Sensor reported unreliable accuracy",
                extra={"event": "generator.unreliable"},
            )
            self._emit("on_error", self, ErrorReason.UNRELIABLE_SENSOR)
        self._emit("on_accuracy_changed", accuracy)

    def track_companion(self, sample: TriadSample) -> bool:
        """Record a companion reading for timing and baseline statistics.

        Companion readings never drive interval detection; they are paired
        with primary readings by the caller through :class:`CompositeSample`.
        """

        if not self._running or self.status is IntervalState.FAILED:
            return False

        timestamp_ns = sample.timestamp_ns
        last = self._last_companion_timestamp_ns
        if last is not None and timestamp_ns <= last:
            raise SampleOrderError(
                "Companion timestamps must strictly increase",
                context={"timestamp_ns": timestamp_ns, "previous_ns": last},
            )

        self._counters.companion += 1
        self._last_companion_timestamp_ns = timestamp_ns
        status = self._detector.status
        if self._initial_companion_timestamp_ns is None:
            self._initial_companion_timestamp_ns = timestamp_ns
        elif status in _TIMING_STATES:
            self._companion_estimator.add_timestamp(
                nanoseconds_to_seconds(timestamp_ns - self._initial_companion_timestamp_ns)
            )

        if status in _TIMING_STATES:
            self._companion_baseline_accumulator.add_triad(sample.x, sample.y, sample.z)
        elif self._initialized and not self._companion.frozen:
            self._freeze_companion_baseline()
        return True

    def _freeze_companion_baseline(self) -> None:
        baseline = self._companion_baseline_accumulator
        if baseline.number_of_processed_samples > 0:
            self._companion.base_noise_level = baseline.standard_deviation_norm
            self._companion.initial_norm = baseline.avg_norm
        self._companion.frozen = True

    def process(self, sample: Union[TriadSample, CompositeSample]) -> bool:
        """Push one sample; returns ``False`` when the sample was ignored."""

        if not self._running or self.status is IntervalState.FAILED:
            return False

        composite = sample if isinstance(sample, CompositeSample) else CompositeSample(sample)
        primary = composite.primary
        timestamp_ns = primary.timestamp_ns
        if self._last_timestamp_ns is not None and timestamp_ns <= self._last_timestamp_ns:
            raise SampleOrderError(
                "Sample timestamps must strictly increase",
                context={"timestamp_ns": timestamp_ns, "previous_ns": self._last_timestamp_ns},
            )

        previous = self._detector.status
        if self._initial_timestamp_ns is None:
            self._initial_timestamp_ns = timestamp_ns
        elif previous in _TIMING_STATES:
            self._estimator.add_timestamp(
                nanoseconds_to_seconds(timestamp_ns - self._initial_timestamp_ns)
            )
        self._last_timestamp_ns = timestamp_ns
        self._counters.primary += 1

        current = self._detector.process(primary.x, primary.y, primary.z)

        if previous is IntervalState.IDLE:
            logger.debug("Initialization started", extra={"event": "generator.initializing"})
            self._emit("on_initialization_started", self)

        if current is IntervalState.INITIALIZATION_COMPLETED and not self._initialized:
            self._complete_initialization()
        elif current is IntervalState.STATIC_INTERVAL:
            if previous is not IntervalState.STATIC_INTERVAL:
                self._enter_static(previous, timestamp_ns)
            self._accumulate_static(composite)
        elif current is IntervalState.DYNAMIC_INTERVAL:
            if previous is IntervalState.INITIALIZATION_COMPLETED:
                self._enter_static(previous, timestamp_ns)
            if previous is not IntervalState.DYNAMIC_INTERVAL:
                self._enter_dynamic()
            self._counters.dynamic_samples += 1
            if len(self._dynamic_buffer) < self._detector.max_dynamic_samples:
                self._dynamic_buffer.append(primary)
        elif current is IntervalState.FAILED:
            self._fail()
        return True

    def _complete_initialization(self) -> None:
        interval = self._estimator.average_time_interval or 0.0
        companion_interval = self._companion_estimator.average_time_interval or interval
        self._accumulator.time_interval = interval
        self._companion_accumulator.time_interval = companion_interval
        self._companion_baseline_accumulator.time_interval = companion_interval
        self._detector.time_interval = interval
        self._initialized = True
        if self._counters.companion > 0:
            self._freeze_companion_baseline()

        base = self._detector.base_noise_level
        logger.debug(
            "Initialization completed",
            extra={
                "event": "generator.initialized",
                "base_noise_level": base,
                "threshold": self._detector.threshold,
                "time_interval": interval,
            },
        )
        self._emit("on_initialization_completed", self, base)

    def _restart_segment(self) -> None:
        # accumulator.reset() also clears the time interval
        interval = self._accumulator.time_interval
        companion_interval = self._companion_accumulator.time_interval
        self._accumulator.reset()
        self._companion_accumulator.reset()
        self._accumulator.time_interval = interval
        self._companion_accumulator.time_interval = companion_interval

    def _enter_static(self, previous: IntervalState, timestamp_ns: int) -> None:
        self._emit("on_static_interval_detected", self)
        if previous is IntervalState.DYNAMIC_INTERVAL:
            self._finish_dynamic(timestamp_ns)
        self._restart_segment()
        self._segment_start_ns = timestamp_ns
        self._segment_end_ns = timestamp_ns

    def _accumulate_static(self, composite: CompositeSample) -> None:
        primary = composite.primary
        self._accumulator.add_triad(primary.x, primary.y, primary.z)
        companion = composite.companion
        if companion is not None:
            self._companion_accumulator.add_triad(companion.x, companion.y, companion.z)
        self._segment_end_ns = primary.timestamp_ns
        self._counters.static_samples += 1

    def _enter_dynamic(self) -> None:
        segment = self._close_static_segment()
        self._previous_static = segment
        if not segment.valid:
            logger.info(
                "Static interval skipped",
                extra={
                    "event": "generator.static_skipped",
                    "samples": segment.samples,
                    "min_static_samples": self._min_static_samples,
                },
            )
            self._emit("on_static_interval_skipped", self)
        self._dynamic_buffer = []
        self._emit("on_dynamic_interval_detected", self)

    def _close_static_segment(self) -> _StaticSegment:
        accumulator = self._accumulator
        samples = accumulator.number_of_processed_samples
        threshold = self._detector.threshold
        valid = samples >= self._min_static_samples and (
            threshold is None or accumulator.standard_deviation_norm <= threshold
        )
        segment = _StaticSegment(
            value=_triad(accumulator.avg_triad),
            standard_deviation=_triad(accumulator.standard_deviation_triad),
            samples=samples,
            start_timestamp_ns=self._segment_start_ns or 0,
            end_timestamp_ns=self._segment_end_ns or 0,
            valid=valid,
        )
        companion = self._companion_accumulator
        if companion.number_of_processed_samples > 0:
            segment.companion_value = _triad(companion.avg_triad)
            segment.companion_standard_deviation = _triad(companion.standard_deviation_triad)
        return segment

    def _finish_dynamic(self, timestamp_ns: int) -> None:
        segment = self._previous_static
        buffered = len(self._dynamic_buffer)
        if (
            segment is None
            or not segment.valid
            or not 1 <= buffered <= self._detector.max_dynamic_samples
        ):
            logger.info(
                "Dynamic interval skipped",
                extra={"event": "generator.dynamic_skipped", "samples": buffered},
            )
            self._emit("on_dynamic_interval_skipped", self)
            self._dynamic_buffer = []
            return

        measurement = GeneratedMeasurement(
            value=segment.value,
            standard_deviation=segment.standard_deviation,
            unit=self.unit,
            static_samples=segment.samples,
            start_timestamp_ns=segment.start_timestamp_ns,
            end_timestamp_ns=timestamp_ns,
            dynamic_samples=tuple(self._dynamic_buffer),
            companion_value=segment.companion_value,
            companion_standard_deviation=segment.companion_standard_deviation,
        )
        self._dynamic_buffer = []
        logger.debug(
            "Measurement generated",
            extra={
                "event": "generator.measurement",
                "static_samples": segment.samples,
                "dynamic_samples": buffered,
            },
        )
        self._emit("on_generated_measurement", self, measurement)

    def _fail(self) -> None:
        self.stop()
        reason = self._detector.error_reason
        assert reason is not None
        mapped = self.map_error_reason(reason)
        logger.warning(
            "Measurement generation failed",
            extra={"event": "generator.failed", "reason": mapped.value},
        )
        self._emit("on_error", self, mapped)

    # ------------------------------------------------------------------
    # configuration
    def _require_stopped(self, name: str) -> None:
        if self._running:
            raise ConfigurationError(
                f"{name} cannot be changed while measurement generation is running",
                category="state",
                context={"setting": name},
            )

    @property
    def min_static_samples(self) -> int:
        return self._min_static_samples

    @min_static_samples.setter
    def min_static_samples(self, value: int) -> None:
        self._require_stopped("min_static_samples")
        self._min_static_samples = validate_min_static_samples(value, self._floors)

    @property
    def max_dynamic_samples(self) -> int:
        return self._detector.max_dynamic_samples

    @max_dynamic_samples.setter
    def max_dynamic_samples(self, value: int) -> None:
        self._require_stopped("max_dynamic_samples")
        self._detector.max_dynamic_samples = validate_max_dynamic_samples(value, self._floors)

    @property
    def window_size(self) -> int:
        return self._detector.window_size

    @window_size.setter
    def window_size(self, value: int) -> None:
        self._require_stopped("window_size")
        self._detector.window_size = value

    @property
    def initial_static_samples(self) -> int:
        return self._detector.initial_static_samples

    @initial_static_samples.setter
    def initial_static_samples(self, value: int) -> None:
        self._require_stopped("initial_static_samples")
        self._detector.initial_static_samples = value

    @property
    def threshold_factor(self) -> float:
        return self._detector.threshold_factor

    @threshold_factor.setter
    def threshold_factor(self, value: float) -> None:
        self._require_stopped("threshold_factor")
        self._detector.threshold_factor = value

    @property
    def instantaneous_noise_level_factor(self) -> float:
        return self._detector.instantaneous_noise_level_factor

    @instantaneous_noise_level_factor.setter
    def instantaneous_noise_level_factor(self, value: float) -> None:
        self._require_stopped("instantaneous_noise_level_factor")
        self._detector.instantaneous_noise_level_factor = value

    @property
    def base_noise_level_absolute_threshold(self) -> float:
        return self._detector.base_noise_level_absolute_threshold

    @base_noise_level_absolute_threshold.setter
    def base_noise_level_absolute_threshold(self, value: float) -> None:
        self._require_stopped("base_noise_level_absolute_threshold")
        self._detector.base_noise_level_absolute_threshold = value

    @property
    def base_noise_level_absolute_threshold_as_measurement(self) -> Measurement:
        return Measurement(self.base_noise_level_absolute_threshold, self.unit)

    @base_noise_level_absolute_threshold_as_measurement.setter
    def base_noise_level_absolute_threshold_as_measurement(self, value: Measurement) -> None:
        try:
            numeric = convert(value.value, value.unit, self.unit)
        except ValueError as exc:
            raise ConfigurationError(
                "base_noise_level_absolute_threshold must be given in a unit of the sensor",
                context={"unit": value.unit.name, "expected": self.unit.name},
            ) from exc
        self.base_noise_level_absolute_threshold = numeric

    def get_base_noise_level_absolute_threshold_as_measurement(self, result: Measurement) -> None:
        result.assign(self.base_noise_level_absolute_threshold, self.unit)

    # ------------------------------------------------------------------
    # derived quantities
    def _initialized_value(self, value: Optional[float]) -> Optional[float]:
        if not self._initialized:
            return None
        return value

    def _typed(self, value: Optional[float], unit: Unit) -> Optional[Measurement]:
        if value is None:
            return None
        return Measurement(value, unit)

    def _fill(self, value: Optional[float], unit: Unit, result: Measurement) -> bool:
        if value is None:
            return False
        result.assign(value, unit)
        return True

    @property
    def base_noise_level(self) -> Optional[float]:
        return self._initialized_value(self._detector.base_noise_level)

    @property
    def base_noise_level_as_measurement(self) -> Optional[Measurement]:
        return self._typed(self.base_noise_level, self.unit)

    def get_base_noise_level_as_measurement(self, result: Measurement) -> bool:
        return self._fill(self.base_noise_level, self.unit, result)

    @property
    def base_noise_level_psd(self) -> Optional[float]:
        return self._initialized_value(self._detector.base_noise_level_psd)

    @property
    def base_noise_level_root_psd(self) -> Optional[float]:
        return self._initialized_value(self._detector.base_noise_level_root_psd)

    @property
    def threshold(self) -> Optional[float]:
        return self._initialized_value(self._detector.threshold)

    @property
    def threshold_as_measurement(self) -> Optional[Measurement]:
        return self._typed(self.threshold, self.unit)

    def get_threshold_as_measurement(self, result: Measurement) -> bool:
        return self._fill(self.threshold, self.unit, result)

    @property
    def average_time_interval(self) -> Optional[float]:
        return self._initialized_value(self._estimator.average_time_interval)

    @property
    def average_time_interval_as_measurement(self) -> Optional[Measurement]:
        return self._typed(self.average_time_interval, TimeUnit.SECOND)

    def get_average_time_interval_as_measurement(self, result: Measurement) -> bool:
        return self._fill(self.average_time_interval, TimeUnit.SECOND, result)

    @property
    def time_interval_variance(self) -> Optional[float]:
        return self._initialized_value(self._estimator.time_interval_variance)

    @property
    def time_interval_standard_deviation(self) -> Optional[float]:
        return self._initialized_value(self._estimator.time_interval_standard_deviation)

    @property
    def time_interval_standard_deviation_as_measurement(self) -> Optional[Measurement]:
        return self._typed(self.time_interval_standard_deviation, TimeUnit.SECOND)

    def get_time_interval_standard_deviation_as_measurement(self, result: Measurement) -> bool:
        return self._fill(self.time_interval_standard_deviation, TimeUnit.SECOND, result)

    @property
    def companion_base_noise_level(self) -> Optional[float]:
        return self._companion.base_noise_level

    @property
    def companion_base_noise_level_as_measurement(self) -> Optional[Measurement]:
        return self._typed(self._companion.base_noise_level, self.companion_unit or self.unit)

    def get_companion_base_noise_level_as_measurement(self, result: Measurement) -> bool:
        return self._fill(self._companion.base_noise_level, self.companion_unit or self.unit, result)

    @property
    def initial_companion_norm(self) -> Optional[float]:
        return self._companion.initial_norm

    @property
    def initial_companion_norm_as_measurement(self) -> Optional[Measurement]:
        return self._typed(self._companion.initial_norm, self.companion_unit or self.unit)

    def get_initial_companion_norm_as_measurement(self, result: Measurement) -> bool:
        return self._fill(self._companion.initial_norm, self.companion_unit or self.unit, result)
