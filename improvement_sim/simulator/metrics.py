"""Metrics for evaluating a strategy's tracking performance."""
from __future__ import annotations

from typing import Sequence

import numpy as np

from .records import AdjustmentEvent, RunMetrics, TrackPoint

__all__ = [
    "absolute_deviations",
    "compute_metrics",
    "adjustment_ratio",
]


def absolute_deviations(points: Sequence[TrackPoint], ideal: float) -> np.ndarray:
    """Distance of every committed position from the ideal line."""
    positions = np.fromiter((p.position for p in points), dtype=float, count=len(points))
    return np.abs(positions - ideal)


def compute_metrics(
    points: Sequence[TrackPoint],
    adjustments: Sequence[AdjustmentEvent],
    ideal: float,
) -> RunMetrics:
    """Summarise one strategy's history.  Empty histories give zeroed metrics."""
    if len(points) == 0:
        return RunMetrics(adjustment_count=len(adjustments))
    deviations = absolute_deviations(points, ideal)
    return RunMetrics(
        adjustment_count=len(adjustments),
        mean_absolute_deviation=float(np.mean(deviations)),
        max_absolute_deviation=float(np.max(deviations)),
    )


def adjustment_ratio(continuous: RunMetrics, continual: RunMetrics) -> float:
    """How many times more adjustments the continuous strategy made.

    The continual count is floored at 1 so a run without continual
    corrections still yields a finite ratio.
    """
    return continuous.adjustment_count / max(1, continual.adjustment_count)
