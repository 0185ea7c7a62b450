"""Command line application entry point for imucal."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence

from ..configuration import discover_project_config
from ..errors import ImucalError, log_error
from ..logging.config import setup_logging
from .parser import build_parser

__all__ = ["main", "run_cli"]


CommandHandler = Callable[[argparse.Namespace, Mapping[str, Any]], str]


def _load_cli_config(path: Optional[Path]) -> dict[str, Any]:
    if path is not None and not Path(path).expanduser().exists():
        raise ImucalError(
            f"Configuration file {path} does not exist",
            category="not_found",
            context={"path": str(path)},
        )
    config, resolved = discover_project_config(path)
    payload = dict(config)
    payload["_config_path"] = str(resolved) if resolved is not None else None
    return payload


def _write(message: str) -> None:
    sys.stdout.write(message)
    if not message.endswith("\n"):
        sys.stdout.write("\n")


def run_cli(args: Optional[Sequence[str]] = None) -> str:
    """Execute the imucal command line interface."""

    config_parser = argparse.ArgumentParser(add_help=False)
    config_parser.add_argument("--config", dest="config_path", type=Path, default=None)
    config_parser.add_argument("--log-level", dest="log_level", default=None)
    config_parser.add_argument(
        "--log-format", dest="log_format", choices=("json", "text"), default=None
    )
    preliminary, _ = config_parser.parse_known_args(args)

    try:
        config = _load_cli_config(preliminary.config_path)
    except ImucalError as exc:
        setup_logging(preliminary.log_level or "warning", preliminary.log_format)
        log_error(exc.payload, exc_info=exc)
        _write(str(exc))
        raise SystemExit(exc.status_code) from exc

    logging_config = config.get("logging", {})
    if not isinstance(logging_config, Mapping):
        logging_config = {}
    setup_logging(
        preliminary.log_level or logging_config.get("level", "warning"),
        preliminary.log_format,
        config=logging_config,
    )

    parser = build_parser(config)
    namespace = parser.parse_args(args)
    handler: Optional[CommandHandler] = getattr(namespace, "handler", None)
    if handler is None:
        parser.error(f"Unknown command '{getattr(namespace, 'command', None)}'.")

    try:
        result = handler(namespace, config=config)
    except ImucalError as exc:
        log_error(exc.payload, exc_info=exc)
        _write(str(exc))
        raise SystemExit(exc.status_code) from exc
    if result:
        _write(result)
    return result


def main() -> None:  # pragma: no cover - thin wrapper
    run_cli()


if __name__ == "__main__":  # pragma: no cover - CLI invocation guard
    main()
