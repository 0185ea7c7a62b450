"""imucal: calibration measurement generation for inertial and magnetic sensors."""

from __future__ import annotations

from imucal._version import __version__
from imucal.core import (
    AccumulatedTriadProcessor,
    CompositeSample,
    DetectorErrorReason,
    ErrorReason,
    Frame,
    GeneratedMeasurement,
    GeneratorListeners,
    IntervalState,
    MeasurementsGenerator,
    NoiseStatistics,
    SensorAccuracy,
    StaticIntervalDetector,
    StopMode,
    TimeIntervalEstimator,
    TriadNoiseAccumulator,
    TriadSample,
)
from imucal.errors import ConfigurationError, ImucalError, SampleOrderError, SessionStateError
from imucal.ingestion import AlignedMeasurementSource
from imucal.settings import CalibrationSettings, load_settings
from imucal.units import Measurement

__all__ = [
    "AccumulatedTriadProcessor",
    "AlignedMeasurementSource",
    "CalibrationSettings",
    "CompositeSample",
    "ConfigurationError",
    "DetectorErrorReason",
    "ErrorReason",
    "Frame",
    "GeneratedMeasurement",
    "GeneratorListeners",
    "ImucalError",
    "IntervalState",
    "Measurement",
    "MeasurementsGenerator",
    "NoiseStatistics",
    "SampleOrderError",
    "SensorAccuracy",
    "SessionStateError",
    "StaticIntervalDetector",
    "StopMode",
    "TimeIntervalEstimator",
    "TriadNoiseAccumulator",
    "TriadSample",
    "__version__",
    "load_settings",
]
