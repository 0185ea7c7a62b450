"""Read the ``[tool.imucal]`` table of a project configuration file."""

from __future__ import annotations

from collections.abc import Mapping as ABCMapping
from pathlib import Path
from typing import Any, Iterator

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore

__all__ = [
    "discover_project_config",
    "load_project_config",
    "load_toml_mapping",
]


_PYPROJECT = "pyproject.toml"
_TOOL_SECTION = "imucal"


def _plain(value: Any) -> Any:
    """Turn TOML tables (and tables nested in arrays) into plain dicts."""

    if isinstance(value, ABCMapping):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


def load_toml_mapping(path: Path) -> dict[str, Any] | None:
    """Parse ``path`` as TOML, returning ``None`` when it does not exist."""

    if not path.is_file():
        return None
    with path.open("rb") as handle:
        return _plain(tomllib.load(handle))


def load_project_config(path: Path) -> tuple[dict[str, Any], Path] | None:
    """Load the imucal configuration stored at ``path``.

    ``path`` may name a ``pyproject.toml`` (the ``[tool.imucal]`` table is
    returned), a directory holding one, or a standalone TOML file whose
    top level already is the imucal table.
    """

    path = Path(path).expanduser()
    if path.suffix and path.name != _PYPROJECT:
        standalone = path.resolve(strict=False)
        payload = load_toml_mapping(standalone)
        return None if payload is None else (payload, standalone)

    pyproject = (path if path.name == _PYPROJECT else path / _PYPROJECT).resolve(strict=False)
    payload = load_toml_mapping(pyproject)
    section = (payload or {}).get("tool", {})
    if isinstance(section, ABCMapping):
        section = section.get(_TOOL_SECTION)
    if not isinstance(section, ABCMapping):
        return None
    return dict(section), pyproject


def _candidates(explicit: Path | None) -> Iterator[Path]:
    seen: set[Path] = set()
    cwd = Path.cwd()
    chain = [Path(explicit)] if explicit is not None else []
    chain.extend([cwd, *cwd.parents])
    for candidate in chain:
        resolved = candidate.expanduser().resolve(strict=False)
        if resolved not in seen:
            seen.add(resolved)
            yield resolved


def discover_project_config(
    explicit: Path | None = None,
) -> tuple[dict[str, Any], Path | None]:
    """Return the first configuration found at ``explicit`` or up the cwd chain."""

    for candidate in _candidates(explicit):
        loaded = load_project_config(candidate)
        if loaded:
            return loaded
    return {}, None
