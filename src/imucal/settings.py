"""Calibration settings parsed from the bundled defaults and project TOML.

The detector and generator sample-count floors are not defined by this
package: they ship as data in ``resources/data/calibration_defaults.toml``
alongside the defaults, so that deployments can align them with the
calibration solver they feed.
"""

from __future__ import annotations

import math
from collections.abc import Mapping as ABCMapping
from dataclasses import dataclass, replace
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

from .configuration import discover_project_config, load_toml_mapping
from .errors import ConfigurationError
from .resources import data_root

__all__ = [
    "CalibrationSettings",
    "DetectorSettings",
    "GeneratorSettings",
    "SampleFloors",
    "bundled_defaults",
    "load_settings",
    "validate_floors",
    "validate_initial_static_samples",
    "validate_max_dynamic_samples",
    "validate_min_static_samples",
    "validate_positive",
    "validate_window_size",
]

_DEFAULTS_FILENAME = "calibration_defaults.toml"


@dataclass(frozen=True, slots=True)
class SampleFloors:
    """Smallest accepted value of each sample-count setting."""

    window_size: int
    initial_static_samples: int
    min_static_samples: int
    max_dynamic_samples: int


@dataclass(frozen=True, slots=True)
class DetectorSettings:
    window_size: int
    initial_static_samples: int
    threshold_factor: float
    instantaneous_noise_level_factor: float
    base_noise_level_absolute_threshold: float


@dataclass(frozen=True, slots=True)
class GeneratorSettings:
    min_static_samples: int
    max_dynamic_samples: int


def _as_mapping(value: Any) -> Mapping[str, Any]:
    if isinstance(value, ABCMapping):
        return value
    return {}


def _coerce_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be an integer", context={name: value})
    if isinstance(value, float) and not value.is_integer():
        raise ConfigurationError(f"{name} must be an integer", context={name: value})
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be an integer", context={name: value}) from exc


def _coerce_float(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be a number", context={name: value})
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be a number", context={name: value}) from exc


def validate_floors(floors: SampleFloors) -> SampleFloors:
    """Reject floors below the smallest window and sample counts that work at all."""

    if floors.window_size < 3 or floors.window_size % 2 == 0:
        raise ConfigurationError(
            "floors.window_size must be an odd integer >= 3",
            context={"floors.window_size": floors.window_size},
        )
    for name in ("initial_static_samples", "min_static_samples", "max_dynamic_samples"):
        value = getattr(floors, name)
        if value < 1:
            raise ConfigurationError(
                f"floors.{name} must be >= 1",
                context={f"floors.{name}": value},
            )
    return floors


def validate_window_size(value: Any, floors: SampleFloors) -> int:
    numeric = _coerce_int("window_size", value)
    if numeric < floors.window_size or numeric % 2 == 0:
        raise ConfigurationError(
            f"window_size must be an odd integer >= {floors.window_size}",
            context={"window_size": numeric},
        )
    return numeric


def _validate_floor(name: str, value: Any, floor: int) -> int:
    numeric = _coerce_int(name, value)
    if numeric < floor:
        raise ConfigurationError(
            f"{name} must be >= {floor}",
            context={name: numeric, "floor": floor},
        )
    return numeric


def validate_initial_static_samples(value: Any, floors: SampleFloors) -> int:
    return _validate_floor("initial_static_samples", value, floors.initial_static_samples)


def validate_min_static_samples(value: Any, floors: SampleFloors) -> int:
    return _validate_floor("min_static_samples", value, floors.min_static_samples)


def validate_max_dynamic_samples(value: Any, floors: SampleFloors) -> int:
    return _validate_floor("max_dynamic_samples", value, floors.max_dynamic_samples)


def validate_positive(name: str, value: Any) -> float:
    numeric = _coerce_float(name, value)
    if not math.isfinite(numeric) or numeric <= 0.0:
        raise ConfigurationError(
            f"{name} must be a finite number greater than zero",
            context={name: numeric},
        )
    return numeric


@dataclass(frozen=True, slots=True)
class CalibrationSettings:
    """Validated detector and generator configuration."""

    detector: DetectorSettings
    generator: GeneratorSettings
    floors: SampleFloors

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any] | None = None,
        *,
        base: "CalibrationSettings | None" = None,
    ) -> "CalibrationSettings":
        """Overlay ``config`` tables onto ``base`` (bundled defaults by default).

        Recognised tables are ``detector``, ``generator`` and ``floors``;
        unknown keys are ignored so that the same mapping can carry CLI or
        logging options.
        """

        resolved = base if base is not None else bundled_defaults()
        payload = _as_mapping(config)
        floors_cfg = _as_mapping(payload.get("floors"))
        detector_cfg = _as_mapping(payload.get("detector"))
        generator_cfg = _as_mapping(payload.get("generator"))

        floors = resolved.floors
        if floors_cfg:
            floors = SampleFloors(
                window_size=_coerce_int(
                    "floors.window_size", floors_cfg.get("window_size", floors.window_size)
                ),
                initial_static_samples=_coerce_int(
                    "floors.initial_static_samples",
                    floors_cfg.get("initial_static_samples", floors.initial_static_samples),
                ),
                min_static_samples=_coerce_int(
                    "floors.min_static_samples",
                    floors_cfg.get("min_static_samples", floors.min_static_samples),
                ),
                max_dynamic_samples=_coerce_int(
                    "floors.max_dynamic_samples",
                    floors_cfg.get("max_dynamic_samples", floors.max_dynamic_samples),
                ),
            )

        detector = resolved.detector
        detector = replace(
            detector,
            **{
                key: detector_cfg[key]
                for key in (
                    "window_size",
                    "initial_static_samples",
                    "threshold_factor",
                    "instantaneous_noise_level_factor",
                    "base_noise_level_absolute_threshold",
                )
                if key in detector_cfg
            },
        )
        generator = replace(
            resolved.generator,
            **{
                key: generator_cfg[key]
                for key in ("min_static_samples", "max_dynamic_samples")
                if key in generator_cfg
            },
        )
        return cls._validated(detector, generator, floors)

    @classmethod
    def _validated(
        cls,
        detector: DetectorSettings,
        generator: GeneratorSettings,
        floors: SampleFloors,
    ) -> "CalibrationSettings":
        floors = validate_floors(floors)
        detector = DetectorSettings(
            window_size=validate_window_size(detector.window_size, floors),
            initial_static_samples=validate_initial_static_samples(
                detector.initial_static_samples, floors
            ),
            threshold_factor=validate_positive("threshold_factor", detector.threshold_factor),
            instantaneous_noise_level_factor=validate_positive(
                "instantaneous_noise_level_factor", detector.instantaneous_noise_level_factor
            ),
            base_noise_level_absolute_threshold=validate_positive(
                "base_noise_level_absolute_threshold",
                detector.base_noise_level_absolute_threshold,
            ),
        )
        generator = GeneratorSettings(
            min_static_samples=validate_min_static_samples(generator.min_static_samples, floors),
            max_dynamic_samples=validate_max_dynamic_samples(
                generator.max_dynamic_samples, floors
            ),
        )
        return cls(detector=detector, generator=generator, floors=floors)

    def with_overrides(self, **overrides: Any) -> "CalibrationSettings":
        """Return a copy with flat detector/generator keys replaced."""

        detector_keys = set(DetectorSettings.__dataclass_fields__)
        generator_keys = set(GeneratorSettings.__dataclass_fields__)
        unknown = set(overrides) - detector_keys - generator_keys
        if unknown:
            raise ConfigurationError(
                "Unknown calibration setting(s): " + ", ".join(sorted(unknown)),
                context={"keys": ",".join(sorted(unknown))},
            )
        detector = replace(
            self.detector, **{k: v for k, v in overrides.items() if k in detector_keys}
        )
        generator = replace(
            self.generator, **{k: v for k, v in overrides.items() if k in generator_keys}
        )
        return self._validated(detector, generator, self.floors)


@lru_cache(maxsize=None)
def _load_bundled(path: Path) -> CalibrationSettings:
    payload = load_toml_mapping(path)
    if payload is None:
        raise ConfigurationError(
            f"Bundled calibration defaults not found at {path}",
            category="not_found",
            context={"path": str(path)},
        )
    floors_cfg = _as_mapping(payload.get("floors"))
    detector_cfg = _as_mapping(payload.get("detector"))
    generator_cfg = _as_mapping(payload.get("generator"))
    try:
        floors = SampleFloors(**{k: _coerce_int(k, v) for k, v in floors_cfg.items()})
        detector = DetectorSettings(**detector_cfg)
        generator = GeneratorSettings(**generator_cfg)
    except TypeError as exc:
        raise ConfigurationError(
            f"Malformed calibration defaults in {path}",
            context={"path": str(path)},
        ) from exc
    return CalibrationSettings._validated(detector, generator, floors)


def bundled_defaults() -> CalibrationSettings:
    """Return the defaults shipped with the package."""

    return _load_bundled(data_root() / _DEFAULTS_FILENAME)


def load_settings(path: Path | None = None) -> CalibrationSettings:
    """Resolve settings from ``path`` or the nearest ``pyproject.toml``."""

    config, _ = discover_project_config(path)
    return CalibrationSettings.from_config(config)
