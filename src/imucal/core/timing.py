"""Incremental estimation of the sampling interval of a sensor stream."""

from __future__ import annotations

import math
from typing import Optional

from ..errors import ConfigurationError
from ..units import Measurement, TimeUnit

__all__ = ["DEFAULT_TOTAL_SAMPLES", "UNBOUNDED_SAMPLES", "TimeIntervalEstimator"]


DEFAULT_TOTAL_SAMPLES = 100_000
UNBOUNDED_SAMPLES = 2**31 - 1


class TimeIntervalEstimator:
    """Running mean and variance of the spacing between consecutive timestamps.

    Timestamps are fed in seconds.  The first timestamp after construction
    or :meth:`reset` only seeds the reference point, so interval statistics
    stay undefined until a second timestamp arrives.  Updates follow
    Welford's recurrence to keep long sessions numerically stable.

    ``total_samples`` bounds how many timestamps are consumed; once reached,
    :meth:`add_timestamp` returns ``False`` and leaves the estimate frozen.
    """

    __slots__ = (
        "_total_samples",
        "_processed",
        "_intervals",
        "_last_timestamp",
        "_mean",
        "_m2",
    )

    def __init__(self, total_samples: int = DEFAULT_TOTAL_SAMPLES) -> None:
        self._total_samples = self._validate_total_samples(total_samples)
        self._processed = 0
        self._intervals = 0
        self._last_timestamp: Optional[float] = None
        self._mean = 0.0
        self._m2 = 0.0

    @staticmethod
    def _validate_total_samples(value: int) -> int:
        try:
            numeric = int(value)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(
                "total_samples must be an integer",
                context={"total_samples": value},
            ) from exc
        if numeric < 2:
            raise ConfigurationError(
                "total_samples must be at least 2",
                context={"total_samples": numeric},
            )
        return numeric

    @property
    def total_samples(self) -> int:
        return self._total_samples

    @total_samples.setter
    def total_samples(self, value: int) -> None:
        self._total_samples = self._validate_total_samples(value)

    @property
    def number_of_processed_samples(self) -> int:
        return self._processed

    @property
    def is_finished(self) -> bool:
        return self._processed >= self._total_samples

    def add_timestamp(self, timestamp: float) -> bool:
        """Record ``timestamp`` (seconds) and update the interval statistics."""

        if self._processed >= self._total_samples:
            return False

        timestamp = float(timestamp)
        if self._last_timestamp is not None:
            interval = timestamp - self._last_timestamp
            self._intervals += 1
            delta = interval - self._mean
            self._mean += delta / self._intervals
            self._m2 += delta * (interval - self._mean)

        self._last_timestamp = timestamp
        self._processed += 1
        return True

    def reset(self) -> None:
        """Clear accumulated statistics while keeping ``total_samples``."""

        self._processed = 0
        self._intervals = 0
        self._last_timestamp = None
        self._mean = 0.0
        self._m2 = 0.0

    @property
    def average_time_interval(self) -> Optional[float]:
        if self._intervals == 0:
            return None
        return self._mean

    @property
    def time_interval_variance(self) -> Optional[float]:
        if self._intervals == 0:
            return None
        return max(0.0, self._m2 / self._intervals)

    @property
    def time_interval_standard_deviation(self) -> Optional[float]:
        variance = self.time_interval_variance
        if variance is None:
            return None
        return math.sqrt(variance)

    @property
    def average_time_interval_as_measurement(self) -> Optional[Measurement]:
        value = self.average_time_interval
        if value is None:
            return None
        return Measurement(value, TimeUnit.SECOND)

    def get_average_time_interval_as_measurement(self, result: Measurement) -> bool:
        value = self.average_time_interval
        if value is None:
            return False
        result.assign(value, TimeUnit.SECOND)
        return True

    @property
    def time_interval_standard_deviation_as_measurement(self) -> Optional[Measurement]:
        value = self.time_interval_standard_deviation
        if value is None:
            return None
        return Measurement(value, TimeUnit.SECOND)

    def get_time_interval_standard_deviation_as_measurement(self, result: Measurement) -> bool:
        value = self.time_interval_standard_deviation
        if value is None:
            return False
        result.assign(value, TimeUnit.SECOND)
        return True
