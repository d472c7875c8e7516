"""Immutable records produced by a simulation run."""
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Tuple

__all__ = [
    "TrackPoint",
    "AdjustmentEvent",
    "EnvironmentMarker",
    "RunMetrics",
    "StrategyHistory",
]


@dataclass(frozen=True)
class TrackPoint:
    """Committed position of one strategy at one tick."""

    tick: int
    position: float
    raw_position: float  # before the correction policy was applied


@dataclass(frozen=True)
class AdjustmentEvent:
    """A correction actually applied by a policy."""

    tick: int
    resulting_position: float
    correction_amount: float


@dataclass(frozen=True)
class EnvironmentMarker:
    """A notable disturbance, shared by every strategy of the run."""

    tick: int
    magnitude: float


@dataclass(frozen=True)
class RunMetrics:
    adjustment_count: int = 0
    mean_absolute_deviation: float = 0.0
    max_absolute_deviation: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class StrategyHistory:
    """Read-only snapshot of one strategy's path and adjustment log."""

    points: Tuple[TrackPoint, ...] = ()
    adjustments: Tuple[AdjustmentEvent, ...] = ()

    @property
    def positions(self) -> Tuple[float, ...]:
        return tuple(p.position for p in self.points)
