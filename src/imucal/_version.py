"""Package version resolution."""

from __future__ import annotations

import re
from importlib import metadata
from pathlib import Path

from packaging.version import InvalidVersion, Version

_DISTRIBUTION = "imucal"
_CHANGELOG_HEADING = re.compile(r"^## v(?P<version>\d+\.\d+\.\d+)\b")


def _changelog_version() -> str:
    """Return the newest release listed in ``CHANGELOG.md``.

    Used from source checkouts where no distribution metadata exists.
    """

    here = Path(__file__).resolve()
    for root in here.parents[1:3]:
        changelog = root / "CHANGELOG.md"
        if not changelog.is_file():
            continue
        for line in changelog.read_text(encoding="utf-8").splitlines():
            match = _CHANGELOG_HEADING.match(line)
            if match:
                return match.group("version")
    raise RuntimeError(f"Unable to determine the {_DISTRIBUTION!r} version")


def _load_version() -> str:
    try:
        raw_version = metadata.version(_DISTRIBUTION)
    except metadata.PackageNotFoundError:
        raw_version = _changelog_version()

    try:
        parsed = Version(raw_version)
    except InvalidVersion as exc:
        raise RuntimeError(f"Invalid {_DISTRIBUTION!r} version: {raw_version!r}") from exc
    if len(parsed.release) != 3:
        raise RuntimeError(
            f"The {_DISTRIBUTION!r} version must be MAJOR.MINOR.PATCH, got {raw_version!r}"
        )
    return raw_version


__version__ = _load_version()

__all__ = ["__version__"]
