from __future__ import annotations

import pytest

from imucal.units import (
    AccelerationUnit,
    AngularSpeedUnit,
    MagneticFluxDensityUnit,
    Measurement,
    TimeUnit,
    convert,
    nanoseconds_to_seconds,
)


@pytest.mark.parametrize(
    ("value", "source", "target", "expected"),
    [
        (1.0, AccelerationUnit.G, AccelerationUnit.METERS_PER_SQUARED_SECOND, 9.80665),
        (180.0, AngularSpeedUnit.DEGREES_PER_SECOND, AngularSpeedUnit.RADIANS_PER_SECOND, 3.141592653589793),
        (50.0, MagneticFluxDensityUnit.MICROTESLA, MagneticFluxDensityUnit.TESLA, 5e-5),
        (20.0, TimeUnit.MILLISECOND, TimeUnit.SECOND, 0.02),
        (1.5, TimeUnit.SECOND, TimeUnit.NANOSECOND, 1.5e9),
    ],
)
def test_convert(value: float, source, target, expected: float) -> None:
    assert convert(value, source, target) == pytest.approx(expected)


def test_convert_rejects_mixed_families() -> None:
    with pytest.raises(ValueError):
        convert(1.0, AccelerationUnit.G, TimeUnit.SECOND)


def test_scalar_helpers() -> None:
    assert nanoseconds_to_seconds(20_000_000) == pytest.approx(0.02)


def test_measurement_conversion_and_assignment() -> None:
    measurement = Measurement(2.0, AccelerationUnit.G)

    converted = measurement.to(AccelerationUnit.METERS_PER_SQUARED_SECOND)
    assert converted.value == pytest.approx(19.6133)
    assert measurement.value_in(AccelerationUnit.CENTIMETERS_PER_SQUARED_SECOND) == pytest.approx(
        1961.33
    )

    measurement.assign(3, TimeUnit.SECOND)
    assert measurement == Measurement(3.0, TimeUnit.SECOND)
    assert isinstance(measurement.value, float)
