"""Sample containers flowing through the calibration pipeline."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np

__all__ = [
    "CompositeSample",
    "Frame",
    "SensorAccuracy",
    "TriadSample",
]


class SensorAccuracy(Enum):
    """Accuracy level reported alongside every reading."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNRELIABLE = "unreliable"

    @classmethod
    def parse(cls, value: object) -> Optional["SensorAccuracy"]:
        if value is None or isinstance(value, cls):
            return value  # type: ignore[return-value]
        text = str(value).strip().lower()
        if not text or text == "nan":
            return None
        try:
            return cls(text)
        except ValueError:
            return None


class Frame(Enum):
    """Coordinate convention a triad is expressed in."""

    SENSOR = "sensor"
    BODY = "body"


@dataclass(frozen=True)
class TriadSample:
    """One 3-axis reading with its monotonic nanosecond timestamp."""

    x: float
    y: float
    z: float
    timestamp_ns: int
    frame: Frame = Frame.BODY
    accuracy: Optional[SensorAccuracy] = None

    @property
    def values(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    @property
    def norm(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def as_array(self) -> np.ndarray:
        return np.array(self.values, dtype=float)


@dataclass(frozen=True)
class CompositeSample:
    """Primary reading paired with the latest latched companion reading."""

    primary: TriadSample
    companion: Optional[TriadSample] = None

    @property
    def timestamp_ns(self) -> int:
        return self.primary.timestamp_ns
