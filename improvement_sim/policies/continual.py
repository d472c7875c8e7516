"""Continual improvement: periodic checks, correcting only past a threshold."""
from __future__ import annotations

from ..config import SimulationConfig
from . import CorrectionPolicy, Evaluation, correct_toward, register_policy


@register_policy
class ContinualPolicy(CorrectionPolicy):
    """Check every ``continual_check_frequency`` ticks; correct only when
    ``|deviation| > continual_threshold``.

    Corrections are rarer than the continuous strategy's and usually stronger.
    A deviation exactly at the threshold is left alone.
    """

    strategy = "continual"

    def __init__(self, cfg: SimulationConfig):
        super().__init__(cfg)
        self.frequency = cfg.continual_check_frequency
        self.threshold = cfg.continual_threshold
        self.strength = cfg.continual_strength

    def evaluate(self, tick: int, raw_position: float, ideal: float, /) -> Evaluation:
        if tick % self.frequency != 0:
            return raw_position, None
        if abs(raw_position - ideal) <= self.threshold:
            return raw_position, None
        return correct_toward(tick, raw_position, ideal, self.strength)
