"""Sensor log input helpers."""

from __future__ import annotations

from imucal.io.replay import COMPANION, PRIMARY, ReplayRecord, read_samples, replay

__all__ = ["COMPANION", "PRIMARY", "ReplayRecord", "read_samples", "replay"]
