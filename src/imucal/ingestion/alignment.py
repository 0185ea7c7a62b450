"""Pair a primary sensor stream with a companion stream for the generator.

:class:`AlignedMeasurementSource` sits between the delivery callbacks of
two sensors and a :class:`~imucal.core.generator.MeasurementsGenerator`.
Companion readings are latched in a one-slot buffer; every primary
reading is remapped into the body frame, paired with the latched
companion and pushed to the generator.  Companion readings alone never
trigger generation.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from ..core.generator import MeasurementsGenerator
from ..core.samples import CompositeSample, Frame, SensorAccuracy, TriadSample
from ..errors import ConfigurationError, SessionStateError
from ..units import BASE_UNITS, MagneticFluxDensityUnit, Unit, convert
from .frames import to_body_frame

__all__ = ["AlignedMeasurementSource"]


logger = logging.getLogger(__name__)


class AlignedMeasurementSource:
    """Normalise, pair and forward readings of two sensors.

    Companion readings (and their biases) arrive in ``companion_unit``,
    µT by default, and are converted into the generator's companion unit
    or, when the generator declares none, into the SI base unit.
    ``on_start``/``on_stop`` hook the external acquisition: they are
    invoked when the generator starts or stops the session.
    """

    def __init__(
        self,
        generator: MeasurementsGenerator,
        *,
        companion_unit: Unit = MagneticFluxDensityUnit.MICROTESLA,
        on_start: Optional[Callable[[], None]] = None,
        on_stop: Optional[Callable[[], None]] = None,
    ) -> None:
        self.generator = generator
        target = getattr(generator, "companion_unit", None) or BASE_UNITS[type(companion_unit)]
        if type(target) is not type(companion_unit):
            raise ConfigurationError(
                "Companion readings cannot be converted into the generator companion unit",
                context={"companion_unit": companion_unit.name, "target": target.name},
            )
        self.companion_unit = companion_unit
        self._companion_target = target
        self._on_start = on_start
        self._on_stop = on_stop
        self._companion: Optional[TriadSample] = None
        self._initial_timestamp_ns: Optional[int] = None
        self._running = False
        generator.source = self

    @property
    def running(self) -> bool:
        return self._running

    @property
    def initial_timestamp_ns(self) -> Optional[int]:
        """Timestamp of the first primary reading of the session."""

        return self._initial_timestamp_ns

    @property
    def latched_companion(self) -> Optional[TriadSample]:
        return self._companion

    def start(self) -> None:
        """Begin acquisition; called by the generator when a session starts."""

        if self._running:
            raise SessionStateError("Sample source is already running")
        self._companion = None
        self._initial_timestamp_ns = None
        self._running = True
        if self._on_start is not None:
            self._on_start()

    def stop(self) -> None:
        was_running = self._running
        self._running = False
        if was_running and self._on_stop is not None:
            self._on_stop()

    def on_primary(
        self,
        x: float,
        y: float,
        z: float,
        timestamp_ns: int,
        bias: Optional[Sequence[float]] = None,
        accuracy: Optional[SensorAccuracy] = None,
    ) -> bool:
        """Forward a primary reading; returns whether the generator consumed it."""

        if not self._running:
            return False
        if self._initial_timestamp_ns is None:
            self._initial_timestamp_ns = int(timestamp_ns)
            logger.debug(
                "First primary reading received",
                extra={"event": "alignment.first_primary", "timestamp_ns": int(timestamp_ns)},
            )
        bx, by, bz = to_body_frame(x, y, z, bias)
        primary = TriadSample(bx, by, bz, int(timestamp_ns), Frame.BODY, accuracy)
        return self.generator.process(CompositeSample(primary, self._companion))

    def on_companion(
        self,
        x: float,
        y: float,
        z: float,
        timestamp_ns: int,
        bias: Optional[Sequence[float]] = None,
        accuracy: Optional[SensorAccuracy] = None,
    ) -> bool:
        if not self._running:
            return False
        x, y, z = (self._to_target(value) for value in (x, y, z))
        if bias is not None:
            bias = [self._to_target(value) for value in bias]
        bx, by, bz = to_body_frame(x, y, z, bias)
        self._companion = TriadSample(bx, by, bz, int(timestamp_ns), Frame.BODY, accuracy)
        return self.generator.track_companion(self._companion)

    def _to_target(self, value: float) -> float:
        return convert(value, self.companion_unit, self._companion_target)

    def on_accuracy_changed(self, accuracy: SensorAccuracy) -> None:
        self.generator.on_accuracy_changed(accuracy)
