"""Argument parsing helpers for the imucal CLI."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Mapping, Optional

from ..core.processor import DEFAULT_MAX_DURATION_MS, DEFAULT_MAX_SAMPLES, StopMode
from .workflows import COMPANION_UNITS, SENSOR_UNITS, _handle_generate, _handle_noise

__all__ = ["build_parser"]


def _add_sensor_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "log",
        type=Path,
        help="Recorded sensor log (.csv, .jsonl or .jsonl.gz).",
    )
    parser.add_argument(
        "--sensor",
        dest="sensor",
        choices=sorted(SENSOR_UNITS),
        default="accelerometer",
        help="Kind of primary sensor recorded in the log (default: accelerometer).",
    )


def build_parser(config: Optional[Mapping[str, Any]] = None) -> argparse.ArgumentParser:
    config = dict(config or {})
    logging_cfg_raw = config.get("logging", {})
    logging_cfg = dict(logging_cfg_raw) if isinstance(logging_cfg_raw, Mapping) else {}
    noise_cfg_raw = config.get("noise", {})
    noise_cfg = dict(noise_cfg_raw) if isinstance(noise_cfg_raw, Mapping) else {}

    parser = argparse.ArgumentParser(
        description="imucal - calibration measurement generation for inertial sensors"
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=None,
        help="Path to the pyproject.toml or TOML configuration file to load.",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=logging_cfg.get("level", "warning"),
        help="Logging level (e.g. debug, info, warning).",
    )
    parser.add_argument(
        "--log-format",
        dest="log_format",
        choices=("json", "text"),
        default=logging_cfg.get("format", "text"),
        help="Logging formatter (json or text).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Replay a sensor log and print the generated calibration measurements.",
    )
    _add_sensor_argument(generate_parser)
    generate_parser.add_argument(
        "--companion-unit",
        dest="companion_unit",
        choices=sorted(COMPANION_UNITS),
        default="microtesla",
        help="Unit of the recorded companion (magnetometer) readings; statistics are reported in tesla.",
    )
    generate_parser.add_argument(
        "--window-size", dest="window_size", type=int, default=None,
        help="Sliding window length in samples (odd).",
    )
    generate_parser.add_argument(
        "--initial-static-samples", dest="initial_static_samples", type=int, default=None,
        help="Samples used to estimate the baseline noise level.",
    )
    generate_parser.add_argument(
        "--threshold-factor", dest="threshold_factor", type=float, default=None,
        help="Multiplier applied to the baseline to obtain the static threshold.",
    )
    generate_parser.add_argument(
        "--instantaneous-noise-level-factor",
        dest="instantaneous_noise_level_factor",
        type=float,
        default=None,
        help="Multiplier applied to the baseline to detect motion onset.",
    )
    generate_parser.add_argument(
        "--base-noise-level-absolute-threshold",
        dest="base_noise_level_absolute_threshold",
        type=float,
        default=None,
        help="Lower bound of the estimated baseline noise level.",
    )
    generate_parser.add_argument(
        "--min-static-samples", dest="min_static_samples", type=int, default=None,
        help="Shortest static interval accepted as a measurement source.",
    )
    generate_parser.add_argument(
        "--max-dynamic-samples", dest="max_dynamic_samples", type=int, default=None,
        help="Longest dynamic interval before the session fails.",
    )
    generate_parser.set_defaults(handler=_handle_generate)

    noise_parser = subparsers.add_parser(
        "noise",
        help="Estimate the noise statistics of a stationary sensor log.",
    )
    _add_sensor_argument(noise_parser)
    noise_parser.add_argument(
        "--max-samples",
        dest="max_samples",
        type=int,
        default=int(noise_cfg.get("max_samples", DEFAULT_MAX_SAMPLES)),
        help=f"Samples to accumulate (default: {DEFAULT_MAX_SAMPLES}).",
    )
    noise_parser.add_argument(
        "--max-duration-ms",
        dest="max_duration_ms",
        type=int,
        default=int(noise_cfg.get("max_duration_ms", DEFAULT_MAX_DURATION_MS)),
        help=f"Duration to accumulate in milliseconds (default: {DEFAULT_MAX_DURATION_MS}).",
    )
    noise_parser.add_argument(
        "--stop-mode",
        dest="stop_mode",
        choices=[mode.value for mode in StopMode],
        default=str(noise_cfg.get("stop_mode", StopMode.MAX_SAMPLES_OR_DURATION.value)),
        help="Condition that ends the accumulation.",
    )
    noise_parser.set_defaults(handler=_handle_noise)

    return parser
