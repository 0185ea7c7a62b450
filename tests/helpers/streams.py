"""Synthetic sensor streams and settings shared by the tests."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

import numpy as np

from imucal.core.samples import TriadSample
from imucal.settings import CalibrationSettings, bundled_defaults

PERIOD_NS = 20_000_000
GRAVITY = (0.0, 0.0, 9.81)

SMALL_SETTINGS = {
    "window_size": 11,
    "initial_static_samples": 50,
    "threshold_factor": 3.0,
    "instantaneous_noise_level_factor": 3.0,
    "base_noise_level_absolute_threshold": 100.0,
    "min_static_samples": 10,
    "max_dynamic_samples": 200,
}


def build_settings(**overrides: float) -> CalibrationSettings:
    """Return bundled defaults with the small test configuration applied."""

    values = dict(SMALL_SETTINGS)
    values.update(overrides)
    return bundled_defaults().with_overrides(**values)


def noisy_triads(
    count: int,
    *,
    mean: Sequence[float] = GRAVITY,
    sigma: float = 1.0,
    seed: int = 7,
) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return np.asarray(mean, dtype=float) + rng.normal(0.0, sigma, size=(count, 3))


def to_samples(
    triads: Iterable[Sequence[float]],
    *,
    start_ns: int = 1_000_000_000,
    period_ns: int = PERIOD_NS,
) -> List[TriadSample]:
    return [
        TriadSample(float(x), float(y), float(z), start_ns + index * period_ns)
        for index, (x, y, z) in enumerate(triads)
    ]


def stationary_samples(
    count: int,
    *,
    mean: Sequence[float] = GRAVITY,
    sigma: float = 1.0,
    seed: int = 7,
    start_ns: int = 1_000_000_000,
) -> List[TriadSample]:
    return to_samples(noisy_triads(count, mean=mean, sigma=sigma, seed=seed), start_ns=start_ns)


def step_samples(
    before: int,
    after: int,
    *,
    jump: Tuple[float, float, float] = (1000.0, 0.0, 0.0),
    sigma: float = 1.0,
) -> List[TriadSample]:
    """Stationary run followed by a single jump to a new stationary level."""

    shifted = tuple(g + j for g, j in zip(GRAVITY, jump))
    triads = np.vstack(
        [
            noisy_triads(before, sigma=sigma, seed=1),
            noisy_triads(after, mean=shifted, sigma=sigma, seed=2),
        ]
    )
    return to_samples(triads)


def shaking_triads(count: int, *, amplitude: float = 1000.0) -> np.ndarray:
    """Motion that never settles: x alternates between +/- ``amplitude``."""

    signs = np.where(np.arange(count) % 2 == 0, 1.0, -1.0)
    triads = np.tile(np.asarray(GRAVITY, dtype=float), (count, 1))
    triads[:, 0] += amplitude * signs
    return triads
