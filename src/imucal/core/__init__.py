"""Calibration measurement generation core."""

from __future__ import annotations

from imucal.core.samples import CompositeSample, Frame, SensorAccuracy, TriadSample
from imucal.core.timing import DEFAULT_TOTAL_SAMPLES, UNBOUNDED_SAMPLES, TimeIntervalEstimator
from imucal.core.noise import NoiseStatistics, TriadNoiseAccumulator
from imucal.core.intervals import (
    DetectorErrorReason,
    IntervalState,
    SlidingTriadWindow,
    StaticIntervalDetector,
)
from imucal.core.generator import (
    ErrorReason,
    GeneratedMeasurement,
    GeneratorListeners,
    MeasurementsGenerator,
    SampleSource,
)
from imucal.core.processor import AccumulatedTriadProcessor, StopMode

__all__ = [
    "AccumulatedTriadProcessor",
    "CompositeSample",
    "DEFAULT_TOTAL_SAMPLES",
    "DetectorErrorReason",
    "ErrorReason",
    "Frame",
    "GeneratedMeasurement",
    "GeneratorListeners",
    "IntervalState",
    "MeasurementsGenerator",
    "NoiseStatistics",
    "SampleSource",
    "SensorAccuracy",
    "SlidingTriadWindow",
    "StaticIntervalDetector",
    "StopMode",
    "TimeIntervalEstimator",
    "TriadNoiseAccumulator",
    "TriadSample",
    "UNBOUNDED_SAMPLES",
]
