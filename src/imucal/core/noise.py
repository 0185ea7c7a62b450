"""Running noise statistics of a 3-axis signal.

:class:`TriadNoiseAccumulator` keeps per-axis mean and variance using
Welford's recurrence and converts variances into power spectral density
(PSD) figures once the sampling interval is known:

* ``psd = variance × time_interval``
* ``root_psd = sqrt(psd)``
* ``root_psd_norm = sqrt(psd_x + psd_y + psd_z)``
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from ..errors import ConfigurationError
from ..units import Measurement, Unit

__all__ = ["NoiseStatistics", "TriadNoiseAccumulator"]


_MEASURABLE = frozenset(
    {
        "avg_x",
        "avg_y",
        "avg_z",
        "avg_norm",
        "standard_deviation_x",
        "standard_deviation_y",
        "standard_deviation_z",
        "standard_deviation_norm",
        "average_standard_deviation",
    }
)


@dataclass(frozen=True)
class NoiseStatistics:
    """Immutable view of an accumulator at a point in time."""

    mean: Tuple[float, float, float]
    variance: Tuple[float, float, float]
    count: int
    time_interval: float

    @property
    def standard_deviation(self) -> Tuple[float, float, float]:
        return tuple(math.sqrt(value) for value in self.variance)  # type: ignore[return-value]

    @property
    def psd(self) -> Tuple[float, float, float]:
        return tuple(value * self.time_interval for value in self.variance)  # type: ignore[return-value]

    @property
    def root_psd(self) -> Tuple[float, float, float]:
        return tuple(math.sqrt(value) for value in self.psd)  # type: ignore[return-value]

    @property
    def root_psd_norm(self) -> float:
        return math.sqrt(sum(self.psd))

    @property
    def average_mean(self) -> float:
        return sum(self.mean) / 3.0

    @property
    def average_psd(self) -> float:
        return sum(self.psd) / 3.0

    @property
    def standard_deviation_norm(self) -> float:
        return math.sqrt(sum(self.variance))


class TriadNoiseAccumulator:
    """Accumulate a triad signal one sample at a time.

    ``unit`` tags the values produced by the typed accessors; the raw
    accessors always report the signal in the unit it was fed in.
    """

    def __init__(self, unit: Unit) -> None:
        self.unit = unit
        self._count = 0
        self._mean = [0.0, 0.0, 0.0]
        self._m2 = [0.0, 0.0, 0.0]
        self._time_interval = 0.0

    # ------------------------------------------------------------------
    # accumulation
    def add_triad(self, x: float, y: float, z: float) -> None:
        self._count += 1
        n = self._count
        mean = self._mean
        m2 = self._m2
        for axis, value in enumerate((float(x), float(y), float(z))):
            delta = value - mean[axis]
            mean[axis] += delta / n
            m2[axis] += delta * (value - mean[axis])

    def reset(self) -> None:
        self._count = 0
        self._mean = [0.0, 0.0, 0.0]
        self._m2 = [0.0, 0.0, 0.0]
        self._time_interval = 0.0

    @property
    def number_of_processed_samples(self) -> int:
        return self._count

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
    # averages
    @property
    def avg_x(self) -> float:
        return self._mean[0]

    @property
    def avg_y(self) -> float:
        return self._mean[1]

    @property
    def avg_z(self) -> float:
        return self._mean[2]

    @property
    def avg_triad(self) -> np.ndarray:
        return np.array(self._mean, dtype=float)

    def get_avg_triad(self, result: np.ndarray) -> None:
        result[0] = self._mean[0]
        result[1] = self._mean[1]
        result[2] = self._mean[2]

    @property
    def avg_norm(self) -> float:
        x, y, z = self._mean
        return math.sqrt(x * x + y * y + z * z)

    # ------------------------------------------------------------------
    # dispersion
    def _variance(self, axis: int) -> float:
        if self._count == 0:
            return 0.0
        return max(0.0, self._m2[axis] / self._count)

    @property
    def variance_x(self) -> float:
        return self._variance(0)

    @property
    def variance_y(self) -> float:
        return self._variance(1)

    @property
    def variance_z(self) -> float:
        return self._variance(2)

    @property
    def standard_deviation_x(self) -> float:
        return math.sqrt(self._variance(0))

    @property
    def standard_deviation_y(self) -> float:
        return math.sqrt(self._variance(1))

    @property
    def standard_deviation_z(self) -> float:
        return math.sqrt(self._variance(2))

    @property
    def standard_deviation_triad(self) -> np.ndarray:
        return np.array(
            [self.standard_deviation_x, self.standard_deviation_y, self.standard_deviation_z],
            dtype=float,
        )

    def get_standard_deviation_triad(self, result: np.ndarray) -> None:
        result[0] = self.standard_deviation_x
        result[1] = self.standard_deviation_y
        result[2] = self.standard_deviation_z

    @property
    def standard_deviation_norm(self) -> float:
        return math.sqrt(self._variance(0) + self._variance(1) + self._variance(2))

    @property
    def average_standard_deviation(self) -> float:
        return (
            self.standard_deviation_x + self.standard_deviation_y + self.standard_deviation_z
        ) / 3.0

    # ------------------------------------------------------------------
    # spectral density
    @property
    def psd_x(self) -> float:
        return self._variance(0) * self._time_interval

    @property
    def psd_y(self) -> float:
        return self._variance(1) * self._time_interval

    @property
    def psd_z(self) -> float:
        return self._variance(2) * self._time_interval

    @property
    def root_psd_x(self) -> float:
        return math.sqrt(self.psd_x)

    @property
    def root_psd_y(self) -> float:
        return math.sqrt(self.psd_y)

    @property
    def root_psd_z(self) -> float:
        return math.sqrt(self.psd_z)

    @property
    def avg_noise_psd(self) -> float:
        return (self.psd_x + self.psd_y + self.psd_z) / 3.0

    @property
    def noise_root_psd_norm(self) -> float:
        return math.sqrt(self.psd_x + self.psd_y + self.psd_z)

    # ------------------------------------------------------------------
    # typed accessors
    def as_measurement(self, quantity: str) -> Optional[Measurement]:
        """Return ``quantity`` as a :class:`Measurement`, ``None`` while empty."""

        if quantity not in _MEASURABLE:
            raise KeyError(quantity)
        if self._count == 0:
            return None
        return Measurement(getattr(self, quantity), self.unit)

    def get_as_measurement(self, quantity: str, result: Measurement) -> bool:
        """Fill ``result`` with ``quantity``; ``False`` while empty."""

        if quantity not in _MEASURABLE:
            raise KeyError(quantity)
        if self._count == 0:
            return False
        result.assign(getattr(self, quantity), self.unit)
        return True

    @property
    def avg_norm_as_measurement(self) -> Optional[Measurement]:
        return self.as_measurement("avg_norm")

    def get_avg_norm_as_measurement(self, result: Measurement) -> bool:
        return self.get_as_measurement("avg_norm", result)

    @property
    def standard_deviation_norm_as_measurement(self) -> Optional[Measurement]:
        return self.as_measurement("standard_deviation_norm")

    def get_standard_deviation_norm_as_measurement(self, result: Measurement) -> bool:
        return self.get_as_measurement("standard_deviation_norm", result)

    def snapshot(self) -> NoiseStatistics:
        return NoiseStatistics(
            mean=(self._mean[0], self._mean[1], self._mean[2]),
            variance=(self._variance(0), self._variance(1), self._variance(2)),
            count=self._count,
            time_interval=self._time_interval,
        )
