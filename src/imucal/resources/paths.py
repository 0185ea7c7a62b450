"""Locate the data files shipped inside the imucal package."""

from __future__ import annotations

from importlib import resources
from pathlib import Path

__all__ = ["data_root", "resource_root", "set_resource_root_override"]

_PACKAGE = "imucal.resources"
_HERE = Path(__file__).resolve().parent

_override: Path | None = None
_cached_root: Path | None = None


def set_resource_root_override(path: Path | None) -> None:
    """Point :func:`resource_root` at ``path``; ``None`` restores discovery."""

    global _override, _cached_root
    _override = Path(path) if path is not None else None
    _cached_root = None


def resource_root() -> Path:
    global _cached_root
    if _override is not None:
        return _override
    if _cached_root is None:
        try:
            installed = Path(str(resources.files(_PACKAGE)))
        except ModuleNotFoundError:
            installed = _HERE
        _cached_root = installed if installed.exists() else _HERE
    return _cached_root


def data_root() -> Path:
    """Return the ``data`` directory holding the bundled TOML defaults."""

    return resource_root() / "data"
