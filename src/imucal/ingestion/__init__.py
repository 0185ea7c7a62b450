"""Sensor delivery adapters feeding the measurement generator."""

from __future__ import annotations

from imucal.ingestion.alignment import AlignedMeasurementSource
from imucal.ingestion.frames import sample_to_body, to_body_frame

__all__ = ["AlignedMeasurementSource", "sample_to_body", "to_body_frame"]
