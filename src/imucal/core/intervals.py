"""Adaptive-threshold static/dynamic interval detection for triad signals.

The detector assumes the device rests during the first
``initial_static_samples`` readings and estimates the baseline noise from
them.  Afterwards each reading is compared against the average of the
sliding window that precedes it:

* a deviation above ``base_noise_level × instantaneous_noise_level_factor``
  turns a static interval dynamic;
* a dynamic interval turns static again once the deviation stays below
  ``threshold = base_noise_level × threshold_factor`` for a whole window.

``base_noise_level`` is the estimated baseline standard deviation norm,
floored by ``base_noise_level_absolute_threshold``.  Both the base noise
level and the threshold are frozen when initialization completes.
"""

from __future__ import annotations

import logging
import math
from collections import deque
from enum import Enum
from typing import Deque, Optional, Tuple

import numpy as np

from ..errors import ConfigurationError
from ..settings import (
    DetectorSettings,
    SampleFloors,
    bundled_defaults,
    validate_initial_static_samples,
    validate_max_dynamic_samples,
    validate_positive,
    validate_window_size,
)
from ..units import Measurement, Unit
from .noise import TriadNoiseAccumulator

__all__ = [
    "DetectorErrorReason",
    "IntervalState",
    "SlidingTriadWindow",
    "StaticIntervalDetector",
]


logger = logging.getLogger(__name__)


class IntervalState(Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    INITIALIZATION_COMPLETED = "initialization_completed"
    STATIC_INTERVAL = "static_interval"
    DYNAMIC_INTERVAL = "dynamic_interval"
    FAILED = "failed"


class DetectorErrorReason(Enum):
    SUDDEN_EXCESSIVE_MOVEMENT_DETECTED = "sudden_excessive_movement_detected"
    OVERALL_EXCESSIVE_MOVEMENT_DETECTED = "overall_excessive_movement_detected"


class SlidingTriadWindow:
    """Fixed-size window of triads with incremental mean and variance.

    While filling, samples are added with Welford's recurrence.  Once
    full, the oldest sample is replaced by the newest with the sliding
    form of the same recurrence.
    """

    __slots__ = ("_size", "_samples", "_mean", "_m2")

    def __init__(self, size: int) -> None:
        self._size = int(size)
        self._samples: Deque[Tuple[float, float, float]] = deque()
        self._mean = [0.0, 0.0, 0.0]
        self._m2 = [0.0, 0.0, 0.0]

    @property
    def size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return len(self._samples)

    @property
    def is_full(self) -> bool:
        return len(self._samples) >= self._size

    def clear(self) -> None:
        self._samples.clear()
        self._mean = [0.0, 0.0, 0.0]
        self._m2 = [0.0, 0.0, 0.0]

    def push(self, x: float, y: float, z: float) -> None:
        values = (float(x), float(y), float(z))
        mean = self._mean
        m2 = self._m2
        if len(self._samples) < self._size:
            self._samples.append(values)
            n = len(self._samples)
            for axis in range(3):
                delta = values[axis] - mean[axis]
                mean[axis] += delta / n
                m2[axis] += delta * (values[axis] - mean[axis])
            return

        oldest = self._samples.popleft()
        self._samples.append(values)
        n = self._size
        for axis in range(3):
            previous_mean = mean[axis]
            mean[axis] = previous_mean + (values[axis] - oldest[axis]) / n
            m2[axis] += (values[axis] - oldest[axis]) * (
                values[axis] - mean[axis] + oldest[axis] - previous_mean
            )
            if m2[axis] < 0.0:
                m2[axis] = 0.0

    @property
    def mean(self) -> Tuple[float, float, float]:
        return (self._mean[0], self._mean[1], self._mean[2])

    @property
    def variance(self) -> Tuple[float, float, float]:
        n = len(self._samples)
        if n == 0:
            return (0.0, 0.0, 0.0)
        return (self._m2[0] / n, self._m2[1] / n, self._m2[2] / n)

    @property
    def standard_deviation(self) -> Tuple[float, float, float]:
        vx, vy, vz = self.variance
        return (math.sqrt(vx), math.sqrt(vy), math.sqrt(vz))

    def deviation_of(self, x: float, y: float, z: float) -> float:
        """Return the norm of ``(x, y, z)`` minus the window average."""

        dx = x - self._mean[0]
        dy = y - self._mean[1]
        dz = z - self._mean[2]
        return math.sqrt(dx * dx + dy * dy + dz * dz)


class StaticIntervalDetector:
    """Classify a triad stream into static and dynamic intervals.

    :meth:`process` returns the state reached after consuming the sample.
    Failures are terminal until :meth:`reset`; the cause is exposed through
    :attr:`error_reason`.
    """

    def __init__(
        self,
        settings: Optional[DetectorSettings] = None,
        *,
        unit: Unit,
        max_dynamic_samples: Optional[int] = None,
        floors: Optional[SampleFloors] = None,
    ) -> None:
        defaults = bundled_defaults()
        self._floors = floors or defaults.floors
        resolved = settings or defaults.detector
        self.unit = unit

        self._window_size = validate_window_size(resolved.window_size, self._floors)
        self._initial_static_samples = validate_initial_static_samples(
            resolved.initial_static_samples, self._floors
        )
        self._threshold_factor = validate_positive("threshold_factor", resolved.threshold_factor)
        self._instantaneous_noise_level_factor = validate_positive(
            "instantaneous_noise_level_factor", resolved.instantaneous_noise_level_factor
        )
        self._base_noise_level_absolute_threshold = validate_positive(
            "base_noise_level_absolute_threshold", resolved.base_noise_level_absolute_threshold
        )
        self._max_dynamic_samples = validate_max_dynamic_samples(
            max_dynamic_samples
            if max_dynamic_samples is not None
            else defaults.generator.max_dynamic_samples,
            self._floors,
        )

        self._accumulator = TriadNoiseAccumulator(unit)
        self._window = SlidingTriadWindow(self._window_size)
        self._status = IntervalState.IDLE
        self._error_reason: Optional[DetectorErrorReason] = None
        self._processed_samples = 0
        self._base_noise_level: Optional[float] = None
        self._threshold: Optional[float] = None
        self._time_interval = 0.0
        self._instantaneous_deviation: Optional[float] = None
        self._dynamic_samples = 0
        self._quiet_samples = 0

    # ------------------------------------------------------------------
    # configuration
    def _require_idle(self, name: str) -> None:
        if self._status is not IntervalState.IDLE:
            raise ConfigurationError(
                f"{name} cannot be changed while a detection session is running",
                category="state",
                context={"setting": name, "status": self._status.value},
            )

    @property
    def floors(self) -> SampleFloors:
        return self._floors

    @property
    def window_size(self) -> int:
        return self._window_size

    @window_size.setter
    def window_size(self, value: int) -> None:
        self._require_idle("window_size")
        self._window_size = validate_window_size(value, self._floors)
        self._window = SlidingTriadWindow(self._window_size)

    @property
    def initial_static_samples(self) -> int:
        return self._initial_static_samples

    @initial_static_samples.setter
    def initial_static_samples(self, value: int) -> None:
        self._require_idle("initial_static_samples")
        self._initial_static_samples = validate_initial_static_samples(value, self._floors)

    @property
    def threshold_factor(self) -> float:
        return self._threshold_factor

    @threshold_factor.setter
    def threshold_factor(self, value: float) -> None:
        self._require_idle("threshold_factor")
        self._threshold_factor = validate_positive("threshold_factor", value)

    @property
    def instantaneous_noise_level_factor(self) -> float:
        return self._instantaneous_noise_level_factor

    @instantaneous_noise_level_factor.setter
    def instantaneous_noise_level_factor(self, value: float) -> None:
        self._require_idle("instantaneous_noise_level_factor")
        self._instantaneous_noise_level_factor = validate_positive(
            "instantaneous_noise_level_factor", value
        )

    @property
    def base_noise_level_absolute_threshold(self) -> float:
        return self._base_noise_level_absolute_threshold

    @base_noise_level_absolute_threshold.setter
    def base_noise_level_absolute_threshold(self, value: float) -> None:
        self._require_idle("base_noise_level_absolute_threshold")
        self._base_noise_level_absolute_threshold = validate_positive(
            "base_noise_level_absolute_threshold", value
        )

    @property
    def max_dynamic_samples(self) -> int:
        return self._max_dynamic_samples

    @max_dynamic_samples.setter
    def max_dynamic_samples(self, value: int) -> None:
        self._require_idle("max_dynamic_samples")
        self._max_dynamic_samples = validate_max_dynamic_samples(value, self._floors)

    @property
    def time_interval(self) -> float:
        return self._time_interval

    @time_interval.setter
    def time_interval(self, value: float) -> None:
        numeric = float(value)
        if not math.isfinite(numeric) or numeric < 0.0:
            raise ConfigurationError(
                "time_interval must be a finite non-negative number",
                context={"time_interval": value},
            )
        self._time_interval = numeric

    # ------------------------------------------------------------------
    # state
    @property
    def status(self) -> IntervalState:
        return self._status

    @property
    def error_reason(self) -> Optional[DetectorErrorReason]:
        return self._error_reason

    @property
    def processed_samples(self) -> int:
        return self._processed_samples

    @property
    def dynamic_samples(self) -> int:
        """Samples consumed by the current (or last) dynamic interval."""

        return self._dynamic_samples

    @property
    def instantaneous_deviation(self) -> Optional[float]:
        return self._instantaneous_deviation

    @property
    def instantaneous_noise_level(self) -> Optional[float]:
        if self._base_noise_level is None:
            return None
        return self._base_noise_level * self._instantaneous_noise_level_factor

    def reset(self) -> None:
        self._accumulator.reset()
        self._window = SlidingTriadWindow(self._window_size)
        self._status = IntervalState.IDLE
        self._error_reason = None
        self._processed_samples = 0
        self._base_noise_level = None
        self._threshold = None
        self._time_interval = 0.0
        self._instantaneous_deviation = None
        self._dynamic_samples = 0
        self._quiet_samples = 0

    def _fail(self, reason: DetectorErrorReason, deviation: float, level: float) -> None:
        self._status = IntervalState.FAILED
        self._error_reason = reason
        logger.info(
            "Static interval detection failed",
            extra={
                "event": "detector.failed",
                "reason": reason.value,
                "deviation": deviation,
                "level": level,
                "processed_samples": self._processed_samples,
            },
        )

    def process(self, x: float, y: float, z: float) -> IntervalState:
        """Consume one triad and return the resulting state."""

        status = self._status
        if status is IntervalState.FAILED:
            return status
        if status is IntervalState.IDLE:
            status = self._status = IntervalState.INITIALIZING
        elif status is IntervalState.INITIALIZATION_COMPLETED:
            status = self._status = IntervalState.STATIC_INTERVAL

        x = float(x)
        y = float(y)
        z = float(z)
        deviation: Optional[float] = None
        if self._window.is_full:
            deviation = self._window.deviation_of(x, y, z)
        self._instantaneous_deviation = deviation
        self._window.push(x, y, z)
        self._processed_samples += 1

        if status is IntervalState.INITIALIZING:
            # compared against the baseline accumulated so far, without this sample
            level = (
                max(self._accumulator.standard_deviation_norm, self._base_noise_level_absolute_threshold)
                * self._instantaneous_noise_level_factor
            )
            if deviation is not None and deviation > level:
                self._fail(DetectorErrorReason.SUDDEN_EXCESSIVE_MOVEMENT_DETECTED, deviation, level)
                return self._status
            self._accumulator.add_triad(x, y, z)
            if self._processed_samples >= self._initial_static_samples:
                self._complete_initialization()
            return self._status

        assert self._base_noise_level is not None and self._threshold is not None

        if status is IntervalState.STATIC_INTERVAL:
            level = self._base_noise_level * self._instantaneous_noise_level_factor
            if deviation is not None and deviation > level:
                self._status = IntervalState.DYNAMIC_INTERVAL
                self._dynamic_samples = 1
                self._quiet_samples = 0
            return self._status

        # dynamic interval
        self._dynamic_samples += 1
        if deviation is None or deviation < self._threshold:
            self._quiet_samples += 1
        else:
            self._quiet_samples = 0

        if self._quiet_samples >= self._window_size:
            self._status = IntervalState.STATIC_INTERVAL
            self._quiet_samples = 0
        elif self._dynamic_samples > self._max_dynamic_samples:
            self._fail(
                DetectorErrorReason.OVERALL_EXCESSIVE_MOVEMENT_DETECTED,
                float(self._dynamic_samples),
                float(self._max_dynamic_samples),
            )
        return self._status

    def _complete_initialization(self) -> None:
        baseline = self._accumulator.standard_deviation_norm
        self._base_noise_level = max(baseline, self._base_noise_level_absolute_threshold)
        self._threshold = self._base_noise_level * self._threshold_factor
        self._status = IntervalState.INITIALIZATION_COMPLETED
        logger.debug(
            "Static interval detector initialized",
            extra={
                "event": "detector.initialized",
                "baseline_std_norm": baseline,
                "base_noise_level": self._base_noise_level,
                "threshold": self._threshold,
            },
        )

    # ------------------------------------------------------------------
    # derived quantities
    @property
    def baseline_standard_deviation_norm(self) -> float:
        return self._accumulator.standard_deviation_norm

    @property
    def base_noise_level(self) -> Optional[float]:
        return self._base_noise_level

    @property
    def base_noise_level_psd(self) -> Optional[float]:
        if self._base_noise_level is None:
            return None
        return self._base_noise_level * self._base_noise_level * self._time_interval

    @property
    def base_noise_level_root_psd(self) -> Optional[float]:
        if self._base_noise_level is None:
            return None
        return self._base_noise_level * math.sqrt(self._time_interval)

    @property
    def threshold(self) -> Optional[float]:
        return self._threshold

    @property
    def base_noise_level_as_measurement(self) -> Optional[Measurement]:
        if self._base_noise_level is None:
            return None
        return Measurement(self._base_noise_level, self.unit)

    def get_base_noise_level_as_measurement(self, result: Measurement) -> bool:
        if self._base_noise_level is None:
            return False
        result.assign(self._base_noise_level, self.unit)
        return True

    @property
    def threshold_as_measurement(self) -> Optional[Measurement]:
        if self._threshold is None:
            return None
        return Measurement(self._threshold, self.unit)

    def get_threshold_as_measurement(self, result: Measurement) -> bool:
        if self._threshold is None:
            return False
        result.assign(self._threshold, self.unit)
        return True

    @property
    def accumulated_avg_triad(self) -> np.ndarray:
        return self._accumulator.avg_triad

    @property
    def accumulated_std_triad(self) -> np.ndarray:
        return self._accumulator.standard_deviation_triad

    @property
    def instantaneous_avg_triad(self) -> np.ndarray:
        return np.array(self._window.mean, dtype=float)

    def get_instantaneous_avg_triad(self, result: np.ndarray) -> None:
        mean = self._window.mean
        result[0] = mean[0]
        result[1] = mean[1]
        result[2] = mean[2]

    @property
    def instantaneous_std_triad(self) -> np.ndarray:
        return np.array(self._window.standard_deviation, dtype=float)
