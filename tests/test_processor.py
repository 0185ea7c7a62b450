from __future__ import annotations

from typing import Iterable

import numpy as np
import pytest

from imucal.core.processor import AccumulatedTriadProcessor, StopMode
from imucal.core.samples import Frame, SensorAccuracy, TriadSample
from imucal.errors import ConfigurationError
from imucal.units import AngularSpeedUnit, Measurement, TimeUnit

from tests.helpers import PERIOD_NS, noisy_triads, stationary_samples


UNIT = AngularSpeedUnit.RADIANS_PER_SECOND


def _run(processor: AccumulatedTriadProcessor, samples: Iterable[TriadSample]) -> int:
    """Feed samples until the processor reports completion; return how many were used."""

    used = 0
    for sample in samples:
        used += 1
        if processor.process(sample):
            break
    return used


@pytest.mark.parametrize(
    ("stop_mode", "max_samples", "max_duration_ms", "expected"),
    [
        (StopMode.MAX_SAMPLES_ONLY, 10, 0, 10),
        (StopMode.MAX_DURATION_ONLY, 0, 100, 6),
        (StopMode.MAX_SAMPLES_OR_DURATION, 1000, 100, 6),
        (StopMode.MAX_SAMPLES_OR_DURATION, 3, 100, 3),
    ],
)
def test_stop_modes(
    stop_mode: StopMode, max_samples: int, max_duration_ms: int, expected: int
) -> None:
    processor = AccumulatedTriadProcessor(
        UNIT, max_samples=max_samples, max_duration_ms=max_duration_ms, stop_mode=stop_mode
    )

    used = _run(processor, stationary_samples(50, mean=(0.0, 0.0, 0.0), sigma=0.01))

    assert used == expected
    assert processor.result_available
    assert processor.number_of_processed_measurements == expected
    assert processor.elapsed_time_ns == (expected - 1) * PERIOD_NS


def test_results_hidden_until_available() -> None:
    processor = AccumulatedTriadProcessor(UNIT, max_samples=20)
    for sample in stationary_samples(5):
        processor.process(sample)

    assert not processor.result_available
    assert processor.statistics() is None
    assert processor.average_triad is None
    assert processor.average_time_interval is None
    assert processor.noise_root_psd_norm is None
    assert processor.as_measurement("avg_norm") is None
    assert processor.get_average_triad(np.zeros(3)) is False


def test_published_statistics_match_numpy() -> None:
    triads = noisy_triads(200, mean=(0.01, -0.02, 0.03), sigma=0.001, seed=5)
    processor = AccumulatedTriadProcessor(
        UNIT, max_samples=200, stop_mode=StopMode.MAX_SAMPLES_ONLY
    )
    samples = [
        TriadSample(float(x), float(y), float(z), 1_000_000_000 + index * PERIOD_NS)
        for index, (x, y, z) in enumerate(triads)
    ]

    assert _run(processor, samples) == 200

    np.testing.assert_allclose(processor.average_triad, triads.mean(axis=0), rtol=1e-9)
    assert processor.standard_deviation_norm == pytest.approx(
        float(np.sqrt(triads.var(axis=0).sum())), rel=1e-6
    )
    assert processor.average_time_interval == pytest.approx(0.02)
    assert processor.noise_root_psd_norm == pytest.approx(
        float(np.sqrt((triads.var(axis=0) * 0.02).sum())), rel=1e-6
    )
    statistics = processor.statistics()
    assert statistics is not None
    assert statistics.count == 200

    out = np.zeros(3)
    assert processor.get_average_triad(out) is True
    np.testing.assert_array_equal(out, processor.average_triad)

    result = Measurement(0.0, AngularSpeedUnit.DEGREES_PER_SECOND)
    assert processor.get_as_measurement("standard_deviation_norm", result) is True
    assert result == Measurement(processor.standard_deviation_norm, UNIT)
    assert processor.elapsed_time_as_measurement == Measurement(
        float(199 * PERIOD_NS), TimeUnit.NANOSECOND
    )


def test_sensor_frame_samples_are_remapped() -> None:
    processor = AccumulatedTriadProcessor(UNIT, max_samples=2, stop_mode=StopMode.MAX_SAMPLES_ONLY)

    processor.process(TriadSample(1.0, 2.0, 3.0, 0, Frame.SENSOR))
    processor.process(TriadSample(1.0, 2.0, 3.0, PERIOD_NS, Frame.SENSOR))

    assert processor.average_x == pytest.approx(2.0)
    assert processor.average_y == pytest.approx(1.0)
    assert processor.average_z == pytest.approx(-3.0)


def test_samples_after_completion_are_ignored() -> None:
    processor = AccumulatedTriadProcessor(UNIT, max_samples=4, stop_mode=StopMode.MAX_SAMPLES_ONLY)
    samples = stationary_samples(10)
    _run(processor, samples[:4])
    before = processor.average_triad.copy()

    assert processor.process(samples[5]) is True
    assert processor.number_of_processed_measurements == 4
    np.testing.assert_array_equal(processor.average_triad, before)


def test_unreliable_reading_flags_result() -> None:
    processor = AccumulatedTriadProcessor(UNIT, max_samples=3, stop_mode=StopMode.MAX_SAMPLES_ONLY)

    processor.process(TriadSample(0.0, 0.0, 0.0, 0, accuracy=SensorAccuracy.HIGH))
    processor.process(TriadSample(0.0, 0.0, 0.0, 1, accuracy=SensorAccuracy.UNRELIABLE))
    processor.process(TriadSample(0.0, 0.0, 0.0, 2, accuracy=SensorAccuracy.HIGH))

    assert processor.result_available
    assert processor.result_unreliable


def test_reset_allows_a_new_run() -> None:
    processor = AccumulatedTriadProcessor(UNIT, max_samples=5, stop_mode=StopMode.MAX_SAMPLES_ONLY)
    _run(processor, stationary_samples(5))

    processor.reset()

    assert not processor.result_available
    assert not processor.result_unreliable
    assert processor.number_of_processed_measurements == 0
    assert processor.elapsed_time_ns == 0
    assert _run(processor, stationary_samples(8, start_ns=5_000_000_000)) == 5
    assert processor.initial_timestamp_ns == 5_000_000_000


def test_invalid_limits_rejected() -> None:
    with pytest.raises(ConfigurationError):
        AccumulatedTriadProcessor(UNIT, max_samples=-1)
    with pytest.raises(ConfigurationError):
        AccumulatedTriadProcessor(UNIT, max_duration_ms=-5)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("max-samples-only", StopMode.MAX_SAMPLES_ONLY),
        ("MAX_DURATION_ONLY", StopMode.MAX_DURATION_ONLY),
        (StopMode.MAX_SAMPLES_OR_DURATION, StopMode.MAX_SAMPLES_OR_DURATION),
    ],
)
def test_stop_mode_parse(value: object, expected: StopMode) -> None:
    assert StopMode.parse(value) is expected


def test_stop_mode_parse_rejects_unknown() -> None:
    with pytest.raises(ConfigurationError):
        StopMode.parse("forever")
