"""Logging utilities for imucal."""

from imucal.logging.config import JsonFormatter, setup_logging

__all__ = ["JsonFormatter", "setup_logging"]
