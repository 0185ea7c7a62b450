"""Command handlers of the imucal CLI."""

from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Dict, List, Mapping, Optional

from ..core.generator import (
    ErrorReason,
    GeneratedMeasurement,
    GeneratorListeners,
    MeasurementsGenerator,
)
from ..core.processor import AccumulatedTriadProcessor, StopMode
from ..ingestion.alignment import AlignedMeasurementSource
from ..io.replay import PRIMARY, read_samples, replay
from ..settings import CalibrationSettings
from ..units import AccelerationUnit, AngularSpeedUnit, MagneticFluxDensityUnit, Unit

__all__ = ["COMPANION_UNITS", "SENSOR_UNITS", "_handle_generate", "_handle_noise"]


logger = logging.getLogger(__name__)

SENSOR_UNITS: Mapping[str, Unit] = {
    "accelerometer": AccelerationUnit.METERS_PER_SQUARED_SECOND,
    "gyroscope": AngularSpeedUnit.RADIANS_PER_SECOND,
    "magnetometer": MagneticFluxDensityUnit.MICROTESLA,
}

COMPANION_UNITS: Mapping[str, MagneticFluxDensityUnit] = {
    unit.name.lower(): unit for unit in MagneticFluxDensityUnit
}

_SETTING_OPTIONS = (
    "window_size",
    "initial_static_samples",
    "threshold_factor",
    "instantaneous_noise_level_factor",
    "base_noise_level_absolute_threshold",
    "min_static_samples",
    "max_dynamic_samples",
)


def _render(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, indent=2, sort_keys=True)


def _resolve_settings(namespace: argparse.Namespace, config: Mapping[str, Any]) -> CalibrationSettings:
    settings = CalibrationSettings.from_config(config)
    overrides = {
        key: getattr(namespace, key)
        for key in _SETTING_OPTIONS
        if getattr(namespace, key, None) is not None
    }
    if overrides:
        settings = settings.with_overrides(**overrides)
    return settings


def _handle_generate(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    settings = _resolve_settings(namespace, config)
    records = read_samples(namespace.log)

    measurements: List[GeneratedMeasurement] = []
    errors: List[ErrorReason] = []
    events: Dict[str, int] = {
        "static_intervals": 0,
        "dynamic_intervals": 0,
        "static_skipped": 0,
        "dynamic_skipped": 0,
    }

    def _count(name: str):
        def _handler(_generator: MeasurementsGenerator) -> None:
            events[name] += 1

        return _handler

    listeners = GeneratorListeners(
        on_error=lambda _generator, reason: errors.append(reason),
        on_static_interval_detected=_count("static_intervals"),
        on_dynamic_interval_detected=_count("dynamic_intervals"),
        on_static_interval_skipped=_count("static_skipped"),
        on_dynamic_interval_skipped=_count("dynamic_skipped"),
        on_generated_measurement=lambda _generator, measurement: measurements.append(measurement),
    )
    unit = SENSOR_UNITS[namespace.sensor]
    generator = MeasurementsGenerator(
        settings,
        unit=unit,
        companion_unit=MagneticFluxDensityUnit.TESLA,
        listeners=listeners,
    )
    source = AlignedMeasurementSource(
        generator, companion_unit=COMPANION_UNITS[namespace.companion_unit]
    )
    generator.start()
    consumed = replay(records, source)
    generator.stop()

    error: Optional[str] = errors[0].value if errors else None
    logger.info(
        "Replay finished",
        extra={
            "event": "cli.generate",
            "consumed": consumed,
            "measurements": len(measurements),
            "error": error,
        },
    )
    payload = {
        "sensor": namespace.sensor,
        "unit": unit.name.lower(),
        "status": generator.status.value,
        "companion_unit": MagneticFluxDensityUnit.TESLA.name.lower(),
        "companion_base_noise_level": generator.companion_base_noise_level,
        "error": error,
        "initialized": generator.initialized,
        "base_noise_level": generator.base_noise_level,
        "threshold": generator.threshold,
        "average_time_interval": generator.average_time_interval,
        "processed_samples": {
            "primary": generator.number_of_processed_primary_measurements,
            "companion": generator.number_of_processed_companion_measurements,
            "static": generator.processed_static_samples,
            "dynamic": generator.processed_dynamic_samples,
        },
        "events": events,
        "measurements": [measurement.as_dict() for measurement in measurements],
    }
    return _render(payload)


def _handle_noise(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    unit = SENSOR_UNITS[namespace.sensor]
    processor = AccumulatedTriadProcessor(
        unit,
        max_samples=namespace.max_samples,
        max_duration_ms=namespace.max_duration_ms,
        stop_mode=StopMode.parse(namespace.stop_mode),
    )
    for record in read_samples(namespace.log):
        if record.sensor != PRIMARY:
            continue
        if processor.process(record.as_sample()):
            break

    statistics = processor.statistics()
    payload: Dict[str, Any] = {
        "sensor": namespace.sensor,
        "unit": unit.name.lower(),
        "result_available": processor.result_available,
        "result_unreliable": processor.result_unreliable,
        "samples": processor.number_of_processed_measurements,
        "elapsed_time_ns": processor.elapsed_time_ns,
    }
    if statistics is not None:
        payload.update(
            {
                "average_time_interval": processor.average_time_interval,
                "mean": list(statistics.mean),
                "standard_deviation": list(statistics.standard_deviation),
                "standard_deviation_norm": statistics.standard_deviation_norm,
                "psd": list(statistics.psd),
                "root_psd_norm": statistics.root_psd_norm,
            }
        )
    return _render(payload)
