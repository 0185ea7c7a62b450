from __future__ import annotations

import importlib.util
import logging
import sys
import warnings
from pathlib import Path
from textwrap import dedent
from typing import Callable, List

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
for _path in (SRC_ROOT, ROOT):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))


def write_pyproject(directory: Path, contents: str) -> Path:
    """Persist a ``pyproject.toml`` under ``directory`` and return its path."""

    payload = dedent(contents).lstrip()
    target = directory / "pyproject.toml"
    target.write_text(payload, encoding="utf8")
    return target


if importlib.util.find_spec("pytest_cov") is None:

    def pytest_addoption(parser: pytest.Parser) -> None:
        """Register stub coverage options when pytest-cov is unavailable."""

        parser.addoption(
            "--cov",
            action="append",
            default=[],
            metavar="MODULE",
            help="Stub option provided when pytest-cov is not installed.",
        )
        parser.addoption(
            "--cov-report",
            action="append",
            default=[],
            metavar="TYPE",
            help="Stub option provided when pytest-cov is not installed.",
        )

    def pytest_configure(config: pytest.Config) -> None:
        """Inform users that coverage collection is skipped without pytest-cov."""

        if config.getoption("--cov") or config.getoption("--cov-report"):
            warnings.warn(
                "pytest-cov is not installed; coverage options will be ignored.",
                RuntimeWarning,
                stacklevel=2,
            )


from imucal.core.samples import TriadSample
from imucal.settings import CalibrationSettings

from tests.helpers import EventRecorder, build_settings, stationary_samples


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep project configuration discovery away from the repository tree."""

    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def _propagating_logs() -> None:
    # setup_logging() disables propagation; caplog needs it back
    logger = logging.getLogger("imucal")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def settings() -> CalibrationSettings:
    return build_settings()


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture
def stationary_factory() -> Callable[..., List[TriadSample]]:
    return stationary_samples
