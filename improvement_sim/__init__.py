"""Continuous vs. Continual Improvement Simulator."""
from __future__ import annotations

from importlib import metadata as _metadata

try:
    __version__: str = _metadata.version("improvement-sim")
except _metadata.PackageNotFoundError:
    __version__ = "0.0.0-dev"

__all__ = ["config", "simulator", "policies"]

# Import to register policies
from . import policies
