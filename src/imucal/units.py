"""Typed measurement values used by the dual accessors.

Every derived quantity is exposed both as a raw float in the stream's base
unit and as a :class:`Measurement`.  Measurements are mutable so that the
``get_*_as_measurement(result)`` accessors can fill caller-owned instances
without allocating.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

__all__ = [
    "AccelerationUnit",
    "AngularSpeedUnit",
    "MagneticFluxDensityUnit",
    "Measurement",
    "TimeUnit",
    "Unit",
    "BASE_UNITS",
    "convert",
    "nanoseconds_to_seconds",
]

STANDARD_GRAVITY = 9.80665  # m/s²
_NANOS_PER_SECOND = 1_000_000_000.0


class AccelerationUnit(Enum):
    METERS_PER_SQUARED_SECOND = 1.0
    G = STANDARD_GRAVITY
    CENTIMETERS_PER_SQUARED_SECOND = 0.01


class AngularSpeedUnit(Enum):
    RADIANS_PER_SECOND = 1.0
    DEGREES_PER_SECOND = 0.017453292519943295


class MagneticFluxDensityUnit(Enum):
    TESLA = 1.0
    MILLITESLA = 1e-3
    MICROTESLA = 1e-6
    NANOTESLA = 1e-9


class TimeUnit(Enum):
    SECOND = 1.0
    MILLISECOND = 1e-3
    MICROSECOND = 1e-6
    NANOSECOND = 1e-9


Unit = Union[AccelerationUnit, AngularSpeedUnit, MagneticFluxDensityUnit, TimeUnit]

BASE_UNITS = {
    AccelerationUnit: AccelerationUnit.METERS_PER_SQUARED_SECOND,
    AngularSpeedUnit: AngularSpeedUnit.RADIANS_PER_SECOND,
    MagneticFluxDensityUnit: MagneticFluxDensityUnit.TESLA,
    TimeUnit: TimeUnit.SECOND,
}


def convert(value: float, source: Unit, target: Unit) -> float:
    """Convert ``value`` expressed in ``source`` into ``target``."""

    if type(source) is not type(target):
        raise ValueError(
            f"Cannot convert between {type(source).__name__} and {type(target).__name__}"
        )
    if source is target:
        return float(value)
    return float(value) * source.value / target.value


def nanoseconds_to_seconds(value: float) -> float:
    return float(value) / _NANOS_PER_SECOND


@dataclass
class Measurement:
    """A scalar value tagged with its unit."""

    value: float
    unit: Unit

    def to(self, unit: Unit) -> "Measurement":
        return Measurement(convert(self.value, self.unit, unit), unit)

    def value_in(self, unit: Unit) -> float:
        return convert(self.value, self.unit, unit)

    def assign(self, value: float, unit: Unit) -> None:
        self.value = float(value)
        self.unit = unit
