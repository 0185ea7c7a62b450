"""Read recorded sensor logs and replay them through the pipeline.

Logs hold one reading per row with the columns ``sensor``
(``primary`` or ``companion``), ``timestamp_ns``, ``x``, ``y``, ``z`` and
the optional ``bias_x``, ``bias_y``, ``bias_z`` and ``accuracy``.  CSV
files are parsed with pandas; JSON-lines files (optionally gzip
compressed) carry one object per line with the same keys.
"""

from __future__ import annotations

import gzip
import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Tuple

import pandas as pd

from ..core.samples import Frame, SensorAccuracy, TriadSample
from ..errors import ImucalError
from ..ingestion.alignment import AlignedMeasurementSource

__all__ = ["PRIMARY", "COMPANION", "ReplayRecord", "read_samples", "replay"]


logger = logging.getLogger(__name__)

PRIMARY = "primary"
COMPANION = "companion"
_SENSORS = frozenset({PRIMARY, COMPANION})
_REQUIRED_COLUMNS = ("sensor", "timestamp_ns", "x", "y", "z")
_BIAS_COLUMNS = ("bias_x", "bias_y", "bias_z")


@dataclass(frozen=True)
class ReplayRecord:
    sensor: str
    timestamp_ns: int
    x: float
    y: float
    z: float
    bias: Optional[Tuple[float, float, float]] = None
    accuracy: Optional[SensorAccuracy] = None

    def as_sample(self) -> TriadSample:
        """Return the raw reading as a sensor-frame sample."""

        return TriadSample(self.x, self.y, self.z, self.timestamp_ns, Frame.SENSOR, self.accuracy)


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def _decode_record(payload: Mapping[str, Any], *, source: Path, row: int) -> ReplayRecord:
    missing = [column for column in _REQUIRED_COLUMNS if _is_missing(payload.get(column))]
    if missing:
        raise ImucalError(
            f"Row {row} of {source} lacks column(s): {', '.join(missing)}",
            category="usage",
            context={"path": str(source), "row": row, "missing": ",".join(missing)},
        )
    sensor = str(payload["sensor"]).strip().lower()
    if sensor not in _SENSORS:
        raise ImucalError(
            f"Row {row} of {source} names unknown sensor '{payload['sensor']}'",
            category="usage",
            context={"path": str(source), "row": row, "sensor": payload["sensor"]},
        )

    bias: Optional[Tuple[float, float, float]] = None
    raw_bias = [payload.get(column) for column in _BIAS_COLUMNS]
    if not any(_is_missing(value) for value in raw_bias):
        bias = (float(raw_bias[0]), float(raw_bias[1]), float(raw_bias[2]))

    try:
        return ReplayRecord(
            sensor=sensor,
            timestamp_ns=int(payload["timestamp_ns"]),
            x=float(payload["x"]),
            y=float(payload["y"]),
            z=float(payload["z"]),
            bias=bias,
            accuracy=SensorAccuracy.parse(payload.get("accuracy")),
        )
    except (TypeError, ValueError) as exc:
        raise ImucalError(
            f"Row {row} of {source} holds non-numeric values",
            category="usage",
            context={"path": str(source), "row": row},
        ) from exc


def _iter_json_lines(handle: Iterable[str], source: Path) -> Iterator[ReplayRecord]:
    for row, line in enumerate(handle, start=1):
        if not line.strip():
            continue
        try:
            payload = json.loads(line)
        except json.JSONDecodeError as exc:
            raise ImucalError(
                f"Line {row} of {source} is not valid JSON",
                category="usage",
                context={"path": str(source), "row": row},
            ) from exc
        yield _decode_record(payload, source=source, row=row)


def _read_json_lines(source: Path) -> List[ReplayRecord]:
    if source.suffix in {".gz", ".gzip"}:
        with gzip.open(source, "rt", encoding="utf8") as handle:
            return list(_iter_json_lines(handle, source))
    with source.open("r", encoding="utf8") as handle:
        return list(_iter_json_lines(handle, source))


def _read_csv(source: Path) -> List[ReplayRecord]:
    frame = pd.read_csv(source)
    missing = [column for column in _REQUIRED_COLUMNS if column not in frame.columns]
    if missing:
        raise ImucalError(
            f"CSV log {source} lacks column(s): {', '.join(missing)}",
            category="usage",
            context={"path": str(source), "missing": ",".join(missing)},
        )
    return [
        _decode_record(payload, source=source, row=row)
        for row, payload in enumerate(frame.to_dict(orient="records"), start=1)
    ]


def read_samples(path: str | Path) -> List[ReplayRecord]:
    """Load a recorded log, sorted by timestamp."""

    source = Path(path)
    if not source.exists():
        raise ImucalError(
            f"Sensor log {source} does not exist",
            category="not_found",
            context={"path": str(source)},
        )
    name = source.name.lower()
    if name.endswith(".csv"):
        records = _read_csv(source)
    elif name.endswith((".jsonl", ".jsonl.gz", ".jsonl.gzip")):
        records = _read_json_lines(source)
    else:
        raise ImucalError(
            f"Unsupported sensor log format: {source}",
            category="usage",
            context={"path": str(source), "suffix": source.suffix},
        )
    records.sort(key=lambda record: record.timestamp_ns)
    logger.debug(
        "Sensor log loaded",
        extra={"event": "replay.loaded", "path": str(source), "records": len(records)},
    )
    return records


def replay(records: Iterable[ReplayRecord], source: AlignedMeasurementSource) -> int:
    """Push ``records`` through ``source``; returns the consumed primary count.

    Accuracy changes are forwarded before the reading that reports them.
    Replay ends early once the generator stops the source.
    """

    consumed = 0
    accuracy: dict[str, Optional[SensorAccuracy]] = {PRIMARY: None, COMPANION: None}
    for record in records:
        if not source.running:
            break
        if record.accuracy is not None and record.accuracy is not accuracy[record.sensor]:
            accuracy[record.sensor] = record.accuracy
            source.on_accuracy_changed(record.accuracy)
            if not source.running:
                break
        if record.sensor == PRIMARY:
            if source.on_primary(
                record.x, record.y, record.z, record.timestamp_ns, record.bias, record.accuracy
            ):
                consumed += 1
        else:
            source.on_companion(
                record.x, record.y, record.z, record.timestamp_ns, record.bias, record.accuracy
            )
    return consumed
