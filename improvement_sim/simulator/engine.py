"""Execution engine that advances both strategies through one shared environment."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from ..config import SimulationConfig
from ..policies import get_policy
from .environment import disturbance, is_notable_disturbance
from .records import EnvironmentMarker, RunMetrics, StrategyHistory
from .tracking import TrackingSimulation

__all__ = [
    "STRATEGIES",
    "RUN_MODES",
    "strategies_for_mode",
    "SimulationRun",
    "SimulationResult",
    "run_once",
]

logger = logging.getLogger(__name__)

STRATEGIES = ("continuous", "continual")
RUN_MODES = STRATEGIES + ("both",)

DisturbanceSource = Callable[[int], float]


def strategies_for_mode(mode: str) -> Tuple[str, ...]:
    if mode not in RUN_MODES:
        raise ValueError(f"Unknown run mode '{mode}'. Must be one of {RUN_MODES}")
    return STRATEGIES if mode == "both" else (mode,)


@dataclass(frozen=True)
class SimulationResult:
    """Container returned by `run_once` and `SimulationRun.result`."""

    config: SimulationConfig
    mode: str
    seed: Optional[int]
    ticks: int
    histories: Dict[str, StrategyHistory]
    markers: Tuple[EnvironmentMarker, ...]
    disturbances: Tuple[float, ...]
    metrics: Dict[str, RunMetrics]

    def to_dict(self) -> dict:
        """YAML-safe summary: metrics plus the committed paths."""
        return {
            "mode": self.mode,
            "seed": self.seed,
            "ticks": self.ticks,
            "metrics": {name: m.to_dict() for name, m in self.metrics.items()},
            "paths": {name: list(h.positions) for name, h in self.histories.items()},
            "adjustment_ticks": {
                name: [a.tick for a in h.adjustments] for name, h in self.histories.items()
            },
            "environment_markers": [
                {"tick": m.tick, "magnitude": m.magnitude} for m in self.markers
            ],
        }


class SimulationRun:
    """One run: a shared disturbance stream feeding one tracker per active strategy.

    ``step`` processes exactly one tick: the disturbance is computed once and
    reused for the marker log, the recorded waveform and every tracker.
    """

    def __init__(
        self,
        cfg: SimulationConfig,
        mode: str = "both",
        rng: Optional[np.random.Generator] = None,
        disturbance_source: Optional[DisturbanceSource] = None,
    ):
        self.cfg = cfg
        self.mode = mode
        self._rng = rng if rng is not None else cfg.make_rng()
        self._source = disturbance_source or self._default_source
        self.tick = 0
        self.disturbances: List[float] = []
        self.markers: List[EnvironmentMarker] = []
        self.trackers: Dict[str, TrackingSimulation] = {
            name: TrackingSimulation(get_policy(name)(cfg), cfg.ideal_position)
            for name in strategies_for_mode(mode)
        }

    def _default_source(self, tick: int) -> float:
        return disturbance(tick, self.cfg.variability_scale, self._rng)

    @property
    def complete(self) -> bool:
        return self.tick >= self.cfg.duration

    def step(self) -> bool:
        """Advance one tick.  Returns ``False`` without side effects once complete."""
        if self.complete:
            return False
        tick = self.tick
        effect = float(self._source(tick))

        self.disturbances.append(effect)
        if is_notable_disturbance(tick):
            self.markers.append(EnvironmentMarker(tick=tick, magnitude=effect))
        for tracker in self.trackers.values():
            tracker.advance(tick, effect)

        self.tick = tick + 1
        if self.complete:
            logger.debug("Run finished after %d ticks (mode=%s)", self.tick, self.mode)
        return True

    def history(self, strategy: str) -> StrategyHistory:
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown strategy '{strategy}'. Must be one of {STRATEGIES}")
        tracker = self.trackers.get(strategy)
        return tracker.snapshot() if tracker is not None else StrategyHistory()

    def metrics(self) -> Dict[str, RunMetrics]:
        """Per-strategy metrics; zeroed until the terminal tick is reached."""
        if not self.complete:
            return {name: RunMetrics() for name in self.trackers}
        return {name: tracker.metrics() for name, tracker in self.trackers.items()}

    def result(self) -> SimulationResult:
        return SimulationResult(
            config=self.cfg,
            mode=self.mode,
            seed=self.cfg.seed,
            ticks=self.tick,
            histories={name: t.snapshot() for name, t in self.trackers.items()},
            markers=tuple(self.markers),
            disturbances=tuple(self.disturbances),
            metrics=self.metrics(),
        )


# ------------------------------------------------------------------
# Engine entry-point
# ------------------------------------------------------------------

def run_once(
    cfg: SimulationConfig,
    mode: str = "both",
    rng: Optional[np.random.Generator] = None,
) -> SimulationResult:
    """Run one simulation to its terminal tick without wall-clock pacing."""
    run = SimulationRun(cfg, mode, rng=rng)
    while run.step():
        pass
    result = run.result()
    for name, m in result.metrics.items():
        logger.debug(
            "%s: %d adjustments, mean |dev| %.2f, max |dev| %.2f",
            name, m.adjustment_count, m.mean_absolute_deviation, m.max_absolute_deviation,
        )
    return result
