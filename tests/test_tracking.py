"""Position recurrence of a single strategy."""
import pytest

from improvement_sim.config import SimulationConfig
from improvement_sim.policies import CorrectionPolicy
from improvement_sim.policies.continuous import ContinuousPolicy
from improvement_sim.simulator.tracking import TrackingSimulation


class NoCorrection(CorrectionPolicy):
    strategy = "none"

    def evaluate(self, tick, raw_position, ideal, /):
        return raw_position, None


def test_raw_position_pulls_toward_ideal_plus_disturbance():
    sim = TrackingSimulation(NoCorrection(SimulationConfig()), ideal=200.0)
    point = sim.advance(0, 10.0)
    # 200 + (10 - 200 + 200) * 0.1
    assert point.raw_position == pytest.approx(201.0)
    assert point.position == pytest.approx(201.0)
    point = sim.advance(1, 10.0)
    assert point.raw_position == pytest.approx(201.0 + (10.0 - 201.0 + 200.0) * 0.1)


def test_committed_position_carries_to_next_tick():
    cfg = SimulationConfig(continuous_frequency=1, continuous_strength=1.0)
    sim = TrackingSimulation(ContinuousPolicy(cfg), ideal=200.0)
    sim.advance(0, 30.0)
    assert sim.previous_position == pytest.approx(200.0)
    sim.advance(1, 30.0)
    assert sim.points[1].raw_position == pytest.approx(203.0)


def test_histories_and_snapshot():
    cfg = SimulationConfig(continuous_frequency=2)
    sim = TrackingSimulation(ContinuousPolicy(cfg), ideal=200.0)
    for tick in range(6):
        sim.advance(tick, 5.0)
    snap = sim.snapshot()
    assert [p.tick for p in snap.points] == list(range(6))
    assert [a.tick for a in snap.adjustments] == [0, 2, 4]
    sim.advance(6, 5.0)
    assert len(snap.points) == 6  # snapshots do not follow later ticks
