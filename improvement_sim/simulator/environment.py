"""Environmental disturbance model shared by every strategy of a run.

The disturbance is a sum of three sinusoids of the tick index plus a spike of
random sign on every 17th tick.  Because of that spike a tick must be evaluated
once per run and the value handed to every consumer; evaluating it twice may
flip the spike.
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

__all__ = [
    "disturbance",
    "is_notable_disturbance",
    "SPIKE_PERIOD",
]

# (divisor of the tick index, amplitude at variability scale 1.0)
WAVE_COMPONENTS = (
    (8.0, 10.0),
    (3.0, 4.0),
    (20.0, 15.0),
)

SPIKE_PERIOD = 17
SPIKE_AMPLITUDE = 15.0


def is_notable_disturbance(tick: int) -> bool:
    """True on ticks that carry a spike and get an environment marker."""
    return tick % SPIKE_PERIOD == 0


def disturbance(
    tick: int,
    variability_scale: float,
    rng: Optional[np.random.Generator] = None,
    *,
    spikes: bool = True,
) -> float:
    """Environmental effect at ``tick``.

    Parameters
    ----------
    tick
        Discrete time index.
    variability_scale
        Multiplier applied to every amplitude; 1.0 reproduces the baseline.
    rng
        Source of the spike sign.  A fresh unseeded generator is used if omitted.
    spikes
        Set to ``False`` to drop the random term and get a pure function.
    """
    value = sum(
        math.sin(tick / divisor) * amplitude * variability_scale
        for divisor, amplitude in WAVE_COMPONENTS
    )
    if spikes and is_notable_disturbance(tick):
        if rng is None:
            rng = np.random.default_rng()
        sign = 1.0 if rng.random() > 0.5 else -1.0
        value += sign * SPIKE_AMPLITUDE * variability_scale
    return float(value)
