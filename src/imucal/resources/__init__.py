"""Bundled resources distributed with imucal."""

from __future__ import annotations

from imucal.resources.paths import data_root, resource_root, set_resource_root_override

__all__ = ["data_root", "resource_root", "set_resource_root_override"]
