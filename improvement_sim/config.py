"""Global configuration definitions.

Every tunable of a single simulation run lives here so that the policies, the
engine and the driver can access them through a single import.  Config objects
can be created either programmatically or loaded from YAML files, and are
frozen: a run never sees its parameters change underneath it.
"""

from __future__ import annotations

import dataclasses
import math
import os
from dataclasses import dataclass, asdict, field
from numbers import Integral, Real
from typing import Optional

import numpy as np
import yaml

__all__ = [
    "SimulationConfig",
    "VARIABILITY_BASELINE",
]

DEFAULT_YAML_INDENT = 2

# Environment variability value that reproduces the fixed-amplitude waveform.
VARIABILITY_BASELINE = 50.0


def _is_int(value) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool)


def _is_real(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


@dataclass(frozen=True)
class SimulationConfig:
    """Container for all parameters of one simulation run.

    Attributes
    ----------
    continuous_frequency
        Tick interval between unconditional continuous corrections.
    continuous_strength
        Fraction of the deviation removed by each continuous correction, in (0, 1].
    continual_check_frequency
        Tick interval between continual deviation checks.
    continual_threshold
        Absolute deviation a continual check must exceed before it corrects.
    continual_strength
        Fraction of the deviation removed by each continual correction, in (0, 1].
    environment_variability
        Disturbance amplitude setting; ``50`` reproduces the baseline waveform.
    ideal_position
        Target lane position both strategies track.
    duration
        Terminal tick count of a run.
    simulation_speed
        Pacing for wall-clock playback, 0..100.  The delay between ticks is
        ``100 - simulation_speed`` milliseconds.
    seed
        Seed for the spike-sign random draws.  ``None`` draws fresh entropy.
    """

    continuous_frequency: int = 2
    continuous_strength: float = 0.3
    continual_check_frequency: int = 10
    continual_threshold: float = 10.0
    continual_strength: float = 0.7
    environment_variability: float = VARIABILITY_BASELINE
    ideal_position: float = 200.0
    duration: int = 150
    simulation_speed: int = 50
    seed: Optional[int] = None

    # Free-form field to store arbitrary user metadata (e.g., experiment name).
    tag: str = field(default="", metadata={"yaml_field": True})

    def __post_init__(self) -> None:
        for name in ("continuous_frequency", "continual_check_frequency", "duration"):
            value = getattr(self, name)
            if not _is_int(value) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")

        for name in ("continuous_strength", "continual_strength"):
            value = getattr(self, name)
            if not _is_real(value) or not 0.0 < value <= 1.0:
                raise ValueError(f"{name} must be a fraction in (0, 1], got {value!r}")

        for name in ("continual_threshold", "environment_variability"):
            value = getattr(self, name)
            if not _is_real(value) or not math.isfinite(value) or value < 0:
                raise ValueError(f"{name} must be a finite non-negative number, got {value!r}")

        if not _is_real(self.ideal_position) or not math.isfinite(self.ideal_position):
            raise ValueError(f"ideal_position must be a finite number, got {self.ideal_position!r}")

        if not _is_int(self.simulation_speed) or not 0 <= self.simulation_speed <= 100:
            raise ValueError(
                f"simulation_speed must be an integer in [0, 100], got {self.simulation_speed!r}"
            )

        if self.seed is not None and not _is_int(self.seed):
            raise ValueError(f"seed must be an integer or None, got {self.seed!r}")

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------
    @classmethod
    def basic(cls, seed: Optional[int] = None) -> "SimulationConfig":
        """The non-customisable configuration: every parameter at its default."""
        return cls(seed=seed)

    @classmethod
    def from_yaml(cls, path: os.PathLike | str) -> "SimulationConfig":
        """Load a configuration from a YAML file."""
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a mapping of config options, got {type(data).__name__}")
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"{path}: unknown config option(s) {unknown}")
        return cls(**data)

    def with_overrides(self, **overrides) -> "SimulationConfig":
        """Return a validated copy with the non-``None`` overrides applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if not changes:
            return self
        return dataclasses.replace(self, **changes)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------
    @property
    def variability_scale(self) -> float:
        """Multiplier applied to every disturbance amplitude (1.0 = baseline)."""
        return self.environment_variability / VARIABILITY_BASELINE

    @property
    def tick_interval_s(self) -> float:
        """Wall-clock delay between ticks during playback."""
        return (100 - self.simulation_speed) / 1000.0

    # ------------------------------------------------------------------
    # Random Seed Control
    # ------------------------------------------------------------------
    def make_rng(self) -> np.random.Generator:
        """Fresh generator for the spike-sign draws of one run."""
        return np.random.default_rng(self.seed)

    # --------------------------------------------------------------
    # Serialisation utilities
    # --------------------------------------------------------------
    def to_yaml(self, path: os.PathLike | str) -> None:
        """Save the config to YAML."""
        with open(path, "w", encoding="utf-8") as fh:
            yaml.safe_dump(asdict(self), fh, indent=DEFAULT_YAML_INDENT, sort_keys=False)

    # Convenience str representation for logging
    def __str__(self) -> str:  # noqa: DunderStr
        return (
            f"SimulationConfig(continuous={self.continuous_frequency}/{self.continuous_strength:.0%}, "
            f"continual={self.continual_check_frequency}/{self.continual_threshold:g}/"
            f"{self.continual_strength:.0%}, variability={self.environment_variability:g}, "
            f"seed={self.seed})"
        )
