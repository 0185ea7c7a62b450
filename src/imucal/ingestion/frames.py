"""Sensor-frame to body-frame remapping.

Readings are delivered in the device ENU convention (x east, y north,
z up) and calibration math works in the local NED body frame, so the
horizontal axes swap and the vertical axis flips sign.  Per-axis bias
estimates reported by the sensor are added before remapping.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence, Tuple

from ..core.samples import Frame, TriadSample

__all__ = ["sample_to_body", "to_body_frame"]


def to_body_frame(
    x: float,
    y: float,
    z: float,
    bias: Optional[Sequence[float]] = None,
) -> Tuple[float, float, float]:
    if bias is None:
        bx = by = bz = 0.0
    else:
        bx, by, bz = (float(value) for value in bias)
    return (float(y) + by, float(x) + bx, -(float(z) + bz))


def sample_to_body(
    sample: TriadSample,
    bias: Optional[Sequence[float]] = None,
) -> TriadSample:
    """Return ``sample`` expressed in the body frame.

    Samples already tagged :attr:`Frame.BODY` are returned unchanged.
    """

    if sample.frame is Frame.BODY:
        return sample
    x, y, z = to_body_frame(sample.x, sample.y, sample.z, bias)
    return replace(sample, x=x, y=y, z=z, frame=Frame.BODY)
