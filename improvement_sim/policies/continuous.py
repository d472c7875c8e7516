"""Continuous improvement: small corrections on a fixed cadence, needed or not."""
from __future__ import annotations

from ..config import SimulationConfig
from . import CorrectionPolicy, Evaluation, correct_toward, register_policy


@register_policy
class ContinuousPolicy(CorrectionPolicy):
    """Correct ``continuous_strength`` of the deviation every ``continuous_frequency`` ticks.

    The correction is unconditional on cadence ticks, so negligible drift is
    corrected too.
    """

    strategy = "continuous"

    def __init__(self, cfg: SimulationConfig):
        super().__init__(cfg)
        self.frequency = cfg.continuous_frequency
        self.strength = cfg.continuous_strength

    def evaluate(self, tick: int, raw_position: float, ideal: float, /) -> Evaluation:
        if tick % self.frequency != 0:
            return raw_position, None
        return correct_toward(tick, raw_position, ideal, self.strength)
