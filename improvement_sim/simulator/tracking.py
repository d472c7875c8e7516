"""Per-strategy position recurrence."""
from __future__ import annotations

from typing import List

from ..policies import CorrectionPolicy
from .metrics import compute_metrics
from .records import AdjustmentEvent, RunMetrics, StrategyHistory, TrackPoint

__all__ = ["TrackingSimulation", "RESPONSE_RATE"]

# Fraction of the gap to ``ideal + disturbance`` closed each tick.
RESPONSE_RATE = 0.1


class TrackingSimulation:
    """Position state and history of one strategy within one run."""

    def __init__(self, policy: CorrectionPolicy, ideal: float):
        self.policy = policy
        self.ideal = ideal
        self.previous_position = ideal
        self.points: List[TrackPoint] = []
        self.adjustments: List[AdjustmentEvent] = []

    @property
    def strategy(self) -> str:
        return self.policy.strategy

    def raw_position(self, disturbance: float) -> float:
        """Pull the previous position toward ``ideal + disturbance``."""
        prev = self.previous_position
        return prev + (disturbance - prev + self.ideal) * RESPONSE_RATE

    def advance(self, tick: int, disturbance: float) -> TrackPoint:
        raw = self.raw_position(disturbance)
        committed, event = self.policy.evaluate(tick, raw, self.ideal)

        point = TrackPoint(tick=tick, position=committed, raw_position=raw)
        self.points.append(point)
        if event is not None:
            self.adjustments.append(event)
        self.previous_position = committed
        return point

    def snapshot(self) -> StrategyHistory:
        return StrategyHistory(points=tuple(self.points), adjustments=tuple(self.adjustments))

    def metrics(self) -> RunMetrics:
        return compute_metrics(self.points, self.adjustments, self.ideal)
