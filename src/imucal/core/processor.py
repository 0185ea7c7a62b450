"""Bounded noise estimation over a stationary run.

:class:`AccumulatedTriadProcessor` accumulates readings until a sample
count, a duration or either of them is reached, then publishes averaged
statistics together with the estimated sampling interval.  It is used to
characterise a sensor at rest outside a generation session.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

import numpy as np

from ..errors import ConfigurationError
from ..ingestion.frames import sample_to_body
from ..units import Measurement, TimeUnit, Unit, nanoseconds_to_seconds
from .noise import NoiseStatistics, TriadNoiseAccumulator
from .samples import SensorAccuracy, TriadSample
from .timing import UNBOUNDED_SAMPLES, TimeIntervalEstimator

__all__ = [
    "DEFAULT_MAX_DURATION_MS",
    "DEFAULT_MAX_SAMPLES",
    "AccumulatedTriadProcessor",
    "StopMode",
]


logger = logging.getLogger(__name__)

DEFAULT_MAX_SAMPLES = 1000
DEFAULT_MAX_DURATION_MS = 20_000
_NANOS_PER_MILLI = 1_000_000


class StopMode(Enum):
    MAX_SAMPLES_ONLY = "max_samples_only"
    MAX_DURATION_ONLY = "max_duration_only"
    MAX_SAMPLES_OR_DURATION = "max_samples_or_duration"

    @classmethod
    def parse(cls, value: object) -> "StopMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower().replace("-", "_"))
        except ValueError as exc:
            raise ConfigurationError(
                f"Unknown stop mode: {value!r}",
                context={"stop_mode": value},
            ) from exc


class AccumulatedTriadProcessor:
    """Accumulate triads until the configured stop condition is met.

    Statistics are published only once :attr:`result_available` is set;
    before that every accessor returns ``None``.  Readings flagged
    :attr:`SensorAccuracy.UNRELIABLE` are still accumulated but mark the
    result as unreliable.
    """

    def __init__(
        self,
        unit: Unit,
        *,
        max_samples: int = DEFAULT_MAX_SAMPLES,
        max_duration_ms: int = DEFAULT_MAX_DURATION_MS,
        stop_mode: StopMode = StopMode.MAX_SAMPLES_OR_DURATION,
    ) -> None:
        if int(max_samples) < 0:
            raise ConfigurationError("max_samples must be >= 0", context={"max_samples": max_samples})
        if int(max_duration_ms) < 0:
            raise ConfigurationError(
                "max_duration_ms must be >= 0", context={"max_duration_ms": max_duration_ms}
            )
        self.unit = unit
        self.max_samples = int(max_samples)
        self.max_duration_ms = int(max_duration_ms)
        self.stop_mode = StopMode.parse(stop_mode)
        self._accumulator = TriadNoiseAccumulator(unit)
        self._estimator = TimeIntervalEstimator(self._estimator_capacity())
        self._initial_timestamp_ns = 0
        self._end_timestamp_ns = 0
        self._processed = 0
        self._result_available = False
        self._result_unreliable = False

    def _estimator_capacity(self) -> int:
        if self.stop_mode is StopMode.MAX_DURATION_ONLY or self.max_samples < 2:
            return UNBOUNDED_SAMPLES
        return self.max_samples

    @property
    def number_of_processed_measurements(self) -> int:
        return self._processed

    @property
    def initial_timestamp_ns(self) -> int:
        return self._initial_timestamp_ns

    @property
    def end_timestamp_ns(self) -> int:
        return self._end_timestamp_ns

    @property
    def elapsed_time_ns(self) -> int:
        return self._end_timestamp_ns - self._initial_timestamp_ns

    @property
    def elapsed_time_as_measurement(self) -> Measurement:
        return Measurement(float(self.elapsed_time_ns), TimeUnit.NANOSECOND)

    @property
    def result_available(self) -> bool:
        return self._result_available

    @property
    def result_unreliable(self) -> bool:
        return self._result_unreliable

    def _is_complete(self) -> bool:
        elapsed_ms = self.elapsed_time_ns // _NANOS_PER_MILLI
        if self.stop_mode is StopMode.MAX_DURATION_ONLY:
            return elapsed_ms >= self.max_duration_ms
        if self.stop_mode is StopMode.MAX_SAMPLES_ONLY:
            return self._processed >= self.max_samples
        return elapsed_ms >= self.max_duration_ms or self._processed >= self.max_samples

    def process(self, sample: TriadSample) -> bool:
        """Accumulate ``sample``; returns ``True`` once the result is available."""

        if self._result_available:
            return True
        if sample.accuracy is SensorAccuracy.UNRELIABLE:
            self._result_unreliable = True
        if self._processed == 0:
            self._initial_timestamp_ns = sample.timestamp_ns

        body = sample_to_body(sample)
        self._accumulator.add_triad(body.x, body.y, body.z)
        if self._processed > 0:
            self._estimator.add_timestamp(
                nanoseconds_to_seconds(sample.timestamp_ns - self._initial_timestamp_ns)
            )
        self._end_timestamp_ns = sample.timestamp_ns
        self._processed += 1

        if self._is_complete():
            self._accumulator.time_interval = self._estimator.average_time_interval or 0.0
            self._result_available = True
            logger.debug(
                "Noise estimation completed",
                extra={
                    "event": "processor.completed",
                    "samples": self._processed,
                    "elapsed_ns": self.elapsed_time_ns,
                    "unreliable": self._result_unreliable,
                },
            )
            return True
        return False

    def reset(self) -> None:
        self._accumulator.reset()
        self._estimator.reset()
        self._estimator.total_samples = self._estimator_capacity()
        self._initial_timestamp_ns = 0
        self._end_timestamp_ns = 0
        self._processed = 0
        self._result_available = False
        self._result_unreliable = False

    # ------------------------------------------------------------------
    # results
    def statistics(self) -> Optional[NoiseStatistics]:
        if not self._result_available:
            return None
        return self._accumulator.snapshot()

    def _published(self, name: str) -> Optional[float]:
        if not self._result_available:
            return None
        return getattr(self._accumulator, name)

    @property
    def average_time_interval(self) -> Optional[float]:
        if not self._result_available:
            return None
        return self._estimator.average_time_interval

    @property
    def time_interval_standard_deviation(self) -> Optional[float]:
        if not self._result_available:
            return None
        return self._estimator.time_interval_standard_deviation

    @property
    def average_x(self) -> Optional[float]:
        return self._published("avg_x")

    @property
    def average_y(self) -> Optional[float]:
        return self._published("avg_y")

    @property
    def average_z(self) -> Optional[float]:
        return self._published("avg_z")

    @property
    def average_triad(self) -> Optional[np.ndarray]:
        if not self._result_available:
            return None
        return self._accumulator.avg_triad

    def get_average_triad(self, result: np.ndarray) -> bool:
        if not self._result_available:
            return False
        self._accumulator.get_avg_triad(result)
        return True

    @property
    def average_norm(self) -> Optional[float]:
        return self._published("avg_norm")

    @property
    def standard_deviation_norm(self) -> Optional[float]:
        return self._published("standard_deviation_norm")

    @property
    def average_standard_deviation(self) -> Optional[float]:
        return self._published("average_standard_deviation")

    @property
    def average_noise_psd(self) -> Optional[float]:
        return self._published("avg_noise_psd")

    @property
    def noise_root_psd_norm(self) -> Optional[float]:
        return self._published("noise_root_psd_norm")

    def as_measurement(self, quantity: str) -> Optional[Measurement]:
        if not self._result_available:
            return None
        return self._accumulator.as_measurement(quantity)

    def get_as_measurement(self, quantity: str, result: Measurement) -> bool:
        if not self._result_available:
            return False
        return self._accumulator.get_as_measurement(quantity, result)
