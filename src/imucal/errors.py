"""Exceptions raised by imucal and the structured payloads describing them.

Every :class:`ImucalError` belongs to a category.  The category selects
the process exit status used by the command line interface and travels
with the flattened context in an :class:`ErrorPayload`, ready to be
logged or serialised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

__all__ = [
    "EXIT_STATUS",
    "ConfigurationError",
    "ErrorPayload",
    "ImucalError",
    "SampleOrderError",
    "SessionStateError",
    "build_error_payload",
    "log_error",
]


_LOGGER = logging.getLogger("imucal")

# category -> process exit status
EXIT_STATUS: Mapping[str, int] = {
    "runtime": 1,
    "usage": 2,
    "io": 3,
    "not_found": 4,
    "configuration": 5,
    "state": 6,
}

_Scalar = (str, int, float, bool)


def _flatten(context: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Keep scalars as they are and stringify anything else."""

    flat: dict[str, Any] = {}
    for key, value in (context or {}).items():
        flat[str(key)] = value if value is None or isinstance(value, _Scalar) else str(value)
    return flat


@dataclass(frozen=True, slots=True)
class ErrorPayload:
    """Serialisable description of a failure."""

    message: str
    category: str = "runtime"
    status_code: int = EXIT_STATUS["runtime"]
    context: Mapping[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Mapping[str, Any]:
        return {
            "status_code": self.status_code,
            "category": self.category,
            "message": self.message,
            "context": dict(self.context),
        }


def build_error_payload(
    message: str,
    *,
    category: str = "runtime",
    status_code: Optional[int] = None,
    context: Optional[Mapping[str, Any]] = None,
) -> ErrorPayload:
    category = category or "runtime"
    if status_code is None:
        status_code = EXIT_STATUS.get(category, EXIT_STATUS["runtime"])
    return ErrorPayload(message, category, status_code, _flatten(context))


def log_error(
    payload: ErrorPayload,
    *,
    logger: Optional[logging.Logger] = None,
    exc_info: Optional[BaseException] = None,
) -> None:
    (logger or _LOGGER).error(
        payload.message,
        extra={
            "event": "imucal.error",
            "category": payload.category,
            "status_code": payload.status_code,
            "context": dict(payload.context),
        },
        exc_info=exc_info,
    )


class ImucalError(Exception):
    """Base class of every error raised by the package.

    Subclasses pick their category through ``default_category``; a
    ``category`` argument overrides it for a single raise.
    """

    default_category = "runtime"

    def __init__(
        self,
        message: str,
        *,
        category: Optional[str] = None,
        status_code: Optional[int] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.payload = build_error_payload(
            message,
            category=category or self.default_category,
            status_code=status_code,
            context=context,
        )

    @property
    def category(self) -> str:
        return self.payload.category

    @property
    def status_code(self) -> int:
        return self.payload.status_code

    @property
    def context(self) -> dict[str, Any]:
        return dict(self.payload.context)


class ConfigurationError(ImucalError, ValueError):
    """A setting is out of range, malformed or locked by a running session."""

    default_category = "configuration"


class SessionStateError(ImucalError, RuntimeError):
    """The session is in the wrong state for the requested operation."""

    default_category = "state"


class SampleOrderError(ImucalError, ValueError):
    """A sample timestamp did not strictly increase."""

    default_category = "usage"
