"""Convenience re-exports for test helpers."""

from __future__ import annotations

from tests.helpers.events import EventRecorder
from tests.helpers.logs import log_rows, write_csv_log, write_jsonl_log
from tests.helpers.streams import (
    GRAVITY,
    PERIOD_NS,
    SMALL_SETTINGS,
    build_settings,
    noisy_triads,
    shaking_triads,
    stationary_samples,
    step_samples,
    to_samples,
)

__all__ = [
    "EventRecorder",
    "GRAVITY",
    "PERIOD_NS",
    "SMALL_SETTINGS",
    "build_settings",
    "log_rows",
    "noisy_triads",
    "shaking_triads",
    "stationary_samples",
    "step_samples",
    "to_samples",
    "write_csv_log",
    "write_jsonl_log",
]
