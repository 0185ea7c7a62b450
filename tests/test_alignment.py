from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

import numpy as np
import pytest

from imucal.core.generator import MeasurementsGenerator
from imucal.core.samples import CompositeSample, Frame, SensorAccuracy, TriadSample
from imucal.errors import ConfigurationError, SessionStateError
from imucal.ingestion import AlignedMeasurementSource, sample_to_body, to_body_frame
from imucal.settings import CalibrationSettings
from imucal.units import AccelerationUnit, MagneticFluxDensityUnit

from tests.helpers import EventRecorder, step_samples


@dataclass
class _GeneratorSpy:
    source: Any = None
    processed: List[CompositeSample] = field(default_factory=list)
    companions: List[TriadSample] = field(default_factory=list)
    accuracies: List[SensorAccuracy] = field(default_factory=list)

    def process(self, sample: CompositeSample) -> bool:
        self.processed.append(sample)
        return True

    def track_companion(self, sample: TriadSample) -> bool:
        self.companions.append(sample)
        return True

    def on_accuracy_changed(self, accuracy: SensorAccuracy) -> None:
        self.accuracies.append(accuracy)


@dataclass
class _Hooks:
    calls: List[str] = field(default_factory=list)

    def on_start(self) -> None:
        self.calls.append("start")

    def on_stop(self) -> None:
        self.calls.append("stop")


def _spy_source(**kwargs: Any) -> tuple[AlignedMeasurementSource, _GeneratorSpy]:
    spy = _GeneratorSpy()
    source = AlignedMeasurementSource(spy, **kwargs)  # type: ignore[arg-type]
    source.start()
    return source, spy


def test_enu_to_ned_remap() -> None:
    assert to_body_frame(1.0, 2.0, 3.0) == (2.0, 1.0, -3.0)
    assert to_body_frame(1.0, 2.0, 3.0, bias=(0.5, 0.25, 1.0)) == (2.25, 1.5, -4.0)


def test_sample_to_body_keeps_body_samples() -> None:
    body = TriadSample(1.0, 2.0, 3.0, 10, Frame.BODY)
    sensor = TriadSample(1.0, 2.0, 3.0, 10, Frame.SENSOR, SensorAccuracy.HIGH)

    assert sample_to_body(body) is body
    converted = sample_to_body(sensor)
    assert converted.values == (2.0, 1.0, -3.0)
    assert converted.frame is Frame.BODY
    assert converted.accuracy is SensorAccuracy.HIGH
    assert converted.timestamp_ns == 10


def test_source_registers_itself_with_generator() -> None:
    spy = _GeneratorSpy()
    source = AlignedMeasurementSource(spy)  # type: ignore[arg-type]

    assert spy.source is source
    assert not source.running


def test_readings_ignored_until_started() -> None:
    spy = _GeneratorSpy()
    source = AlignedMeasurementSource(spy)  # type: ignore[arg-type]

    assert source.on_primary(1.0, 2.0, 3.0, 100) is False
    assert source.on_companion(1.0, 2.0, 3.0, 100) is False
    assert spy.processed == []
    assert spy.companions == []


def test_primary_is_paired_with_latched_companion() -> None:
    source, spy = _spy_source(companion_unit=MagneticFluxDensityUnit.TESLA)

    source.on_primary(0.0, 0.0, 9.81, 1_000)
    source.on_companion(10.0, 20.0, 30.0, 1_500)
    source.on_companion(11.0, 21.0, 31.0, 1_800)
    source.on_primary(1.0, 2.0, 3.0, 2_000, bias=(1.0, 1.0, 1.0))

    assert len(spy.processed) == 2
    first, second = spy.processed
    assert first.companion is None
    assert first.primary.values == (0.0, 0.0, -9.81)
    assert second.primary.values == (3.0, 2.0, -4.0)
    assert second.primary.frame is Frame.BODY
    assert second.companion is not None
    assert second.companion.values == (21.0, 11.0, -31.0)
    assert second.companion.timestamp_ns == 1_800
    assert len(spy.companions) == 2


def test_companion_alone_never_generates() -> None:
    source, spy = _spy_source()

    for index in range(5):
        source.on_companion(1.0, 2.0, 3.0, index)

    assert spy.processed == []
    assert source.latched_companion is not None
    assert source.latched_companion.timestamp_ns == 4


def test_companion_micro_units_are_converted() -> None:
    source, spy = _spy_source()

    source.on_companion(30.0, 20.0, 40.0, 1_000)
    source.on_companion(10.0, 20.0, -40.0, 2_000, bias=(1.0, 2.0, 3.0))

    assert source.companion_unit is MagneticFluxDensityUnit.MICROTESLA
    np.testing.assert_allclose(spy.companions[0].values, (20e-6, 30e-6, -40e-6))
    np.testing.assert_allclose(spy.companions[1].values, (22e-6, 11e-6, 37e-6))


def test_companion_converted_into_generator_unit(
    settings: CalibrationSettings, recorder: EventRecorder
) -> None:
    generator = MeasurementsGenerator(
        settings,
        unit=AccelerationUnit.METERS_PER_SQUARED_SECOND,
        companion_unit=MagneticFluxDensityUnit.NANOTESLA,
        listeners=recorder.listeners(),
    )
    source = AlignedMeasurementSource(generator)
    generator.start()

    source.on_companion(1.0, 2.0, 3.0, 1_000)

    assert source.latched_companion is not None
    np.testing.assert_allclose(source.latched_companion.values, (2000.0, 1000.0, -3000.0))


def test_companion_unit_family_must_match_generator(
    settings: CalibrationSettings, recorder: EventRecorder
) -> None:
    generator = MeasurementsGenerator(
        settings,
        unit=AccelerationUnit.METERS_PER_SQUARED_SECOND,
        companion_unit=MagneticFluxDensityUnit.TESLA,
        listeners=recorder.listeners(),
    )

    with pytest.raises(ConfigurationError) as excinfo:
        AlignedMeasurementSource(generator, companion_unit=AccelerationUnit.G)
    assert excinfo.value.category == "configuration"


def test_initial_timestamp_tracks_first_primary() -> None:
    source, _spy = _spy_source()
    assert source.initial_timestamp_ns is None

    source.on_companion(0.0, 0.0, 1.0, 50)
    source.on_primary(0.0, 0.0, 1.0, 100)
    source.on_primary(0.0, 0.0, 1.0, 200)

    assert source.initial_timestamp_ns == 100


def test_accuracy_changes_forwarded() -> None:
    source, spy = _spy_source()

    source.on_accuracy_changed(SensorAccuracy.LOW)

    assert spy.accuracies == [SensorAccuracy.LOW]


def test_start_twice_raises() -> None:
    source, _spy = _spy_source()

    with pytest.raises(SessionStateError):
        source.start()


def test_hooks_follow_generator_session(
    settings: CalibrationSettings, recorder: EventRecorder
) -> None:
    hooks = _Hooks()
    generator = MeasurementsGenerator(
        settings,
        unit=AccelerationUnit.METERS_PER_SQUARED_SECOND,
        listeners=recorder.listeners(),
    )
    source = AlignedMeasurementSource(generator, on_start=hooks.on_start, on_stop=hooks.on_stop)

    generator.start()
    assert source.running
    generator.stop()
    generator.stop()

    assert not source.running
    assert hooks.calls == ["start", "stop"]


def test_sensor_stream_generates_body_frame_measurement(
    settings: CalibrationSettings, recorder: EventRecorder
) -> None:
    generator = MeasurementsGenerator(
        settings,
        unit=AccelerationUnit.METERS_PER_SQUARED_SECOND,
        companion_unit=MagneticFluxDensityUnit.TESLA,
        listeners=recorder.listeners(),
    )
    source = AlignedMeasurementSource(generator)
    generator.start()

    for sample in step_samples(300, 300):
        source.on_companion(20.0, 5.0, -40.0, sample.timestamp_ns - 1_000_000)
        source.on_primary(sample.x, sample.y, sample.z, sample.timestamp_ns)

    assert len(recorder.measurements) == 1
    measurement = recorder.measurements[0]
    np.testing.assert_allclose(measurement.value, (0.0, 0.0, -9.81), atol=0.5)
    # the jump along sensor x shows up on body y
    assert abs(measurement.dynamic_samples[0].y) > 500.0
    assert measurement.companion_value is not None
    np.testing.assert_allclose(measurement.companion_value, (5e-6, 20e-6, 40e-6), rtol=1e-9)
    assert generator.initial_companion_norm == pytest.approx(
        float(np.linalg.norm((5e-6, 20e-6, 40e-6))), rel=1e-9
    )
