"""Listener recorder used to assert generator event sequences."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from imucal.core.generator import (
    ErrorReason,
    GeneratedMeasurement,
    GeneratorListeners,
    MeasurementsGenerator,
)
from imucal.core.samples import SensorAccuracy


@dataclass
class EventRecorder:
    events: List[str] = field(default_factory=list)
    errors: List[ErrorReason] = field(default_factory=list)
    measurements: List[GeneratedMeasurement] = field(default_factory=list)
    accuracies: List[SensorAccuracy] = field(default_factory=list)
    base_noise_level: Optional[float] = None

    def count(self, name: str) -> int:
        return self.events.count(name)

    def _record(self, name: str):
        def _handler(*_args: Any) -> None:
            self.events.append(name)

        return _handler

    def _on_initialization_completed(self, _generator: MeasurementsGenerator, base: float) -> None:
        self.events.append("initialization_completed")
        self.base_noise_level = base

    def _on_error(self, _generator: MeasurementsGenerator, reason: ErrorReason) -> None:
        self.events.append("error")
        self.errors.append(reason)

    def _on_measurement(
        self, _generator: MeasurementsGenerator, measurement: GeneratedMeasurement
    ) -> None:
        self.events.append("generated_measurement")
        self.measurements.append(measurement)

    def _on_accuracy(self, accuracy: SensorAccuracy) -> None:
        self.events.append("accuracy_changed")
        self.accuracies.append(accuracy)

    def listeners(self) -> GeneratorListeners:
        return GeneratorListeners(
            on_initialization_started=self._record("initialization_started"),
            on_initialization_completed=self._on_initialization_completed,
            on_error=self._on_error,
            on_static_interval_detected=self._record("static_interval_detected"),
            on_dynamic_interval_detected=self._record("dynamic_interval_detected"),
            on_static_interval_skipped=self._record("static_interval_skipped"),
            on_dynamic_interval_skipped=self._record("dynamic_interval_skipped"),
            on_generated_measurement=self._on_measurement,
            on_reset=self._record("reset"),
            on_accuracy_changed=self._on_accuracy,
        )
