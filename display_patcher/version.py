"""Version utilities for Display Patcher."""

from __future__ import annotations

from importlib import metadata

DISTRIBUTION_NAME = "display-patcher"


def load_version() -> str:
    try:
        version = metadata.version(DISTRIBUTION_NAME).strip()
        return version or "1.0.0"
    except metadata.PackageNotFoundError:
        return "1.0.0"
