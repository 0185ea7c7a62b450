"""Command line utilities for imucal."""

from imucal.cli.app import main, run_cli

__all__ = ["main", "run_cli"]
