"""Tick driver: scheduling, reset atomicity and stale-callback suppression."""
import threading

import pytest

from improvement_sim.config import SimulationConfig
from improvement_sim.simulator.driver import SimulationDriver
from improvement_sim.simulator.records import RunMetrics
from improvement_sim.simulator.scheduling import ManualScheduler, TimerScheduler


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def driver(scheduler):
    return SimulationDriver(scheduler)


def test_initial_state(driver):
    assert driver.current_tick() == 0
    assert not driver.is_running()
    assert not driver.is_complete()
    assert driver.history("continuous").points == ()
    assert driver.environment_markers() == ()
    assert driver.metrics() == {}


def test_ticks_follow_the_configured_pace(driver, scheduler):
    cfg = SimulationConfig(duration=30, simulation_speed=50, seed=1)
    driver.start_run("both", cfg)
    assert driver.is_running()
    assert driver.current_tick() == 0

    scheduler.advance(0.0)
    assert driver.current_tick() == 1
    scheduler.advance(0.05)
    assert driver.current_tick() == 2
    scheduler.advance(0.47)
    assert driver.current_tick() == 11


def test_run_to_completion(driver, scheduler):
    cfg = SimulationConfig(duration=40, seed=5)
    driver.start_run("both", cfg)
    scheduler.run_until_idle()

    assert driver.is_complete()
    assert not driver.is_running()
    assert driver.current_tick() == 40
    assert scheduler.pending == []
    points = driver.history("continual").points
    assert [p.tick for p in points] == list(range(40))
    assert [m.tick for m in driver.environment_markers()] == [0, 17, 34]
    assert driver.metrics()["continuous"].adjustment_count == 20


def test_metrics_zeroed_while_running(driver, scheduler):
    driver.start_run("continuous", SimulationConfig(duration=20, seed=0))
    scheduler.advance(0.2)
    assert not driver.is_complete()
    assert driver.metrics() == {"continuous": RunMetrics()}


def test_restart_discards_previous_run(driver, scheduler):
    driver.start_run("both", SimulationConfig(duration=50, seed=1))
    scheduler.advance(0.5)
    assert driver.current_tick() > 0

    driver.start_run("continual", SimulationConfig(duration=50, seed=2))
    assert driver.current_tick() == 0
    assert driver.history("continuous").points == ()
    assert driver.history("continual").points == ()
    assert driver.environment_markers() == ()
    assert len(scheduler.pending) == 1

    scheduler.run_until_idle()
    assert driver.history("continuous").points == ()
    assert [p.tick for p in driver.history("continual").points] == list(range(50))


def test_stale_callback_after_reset_is_ignored(driver, scheduler):
    driver.start_run("both", SimulationConfig(duration=50, seed=1))
    scheduler.advance(0.2)
    stale = scheduler.pending[0]

    driver.start_run("both", SimulationConfig(duration=50, seed=2))
    stale.fire()
    stale.fire()
    assert driver.current_tick() == 0
    assert driver.history("continuous").points == ()


def test_no_ticks_after_completion(driver, scheduler):
    driver.start_run("both", SimulationConfig(duration=5, seed=1))
    handles = []
    while scheduler.pending:
        handles.append(scheduler.pending[0])
        scheduler.run_until_idle(max_calls=1)
    assert driver.is_complete()
    for handle in handles:
        handle.fire()
    assert driver.current_tick() == 5
    assert len(driver.history("continual").points) == 5


def test_stop_freezes_the_run(driver, scheduler):
    driver.start_run("both", SimulationConfig(duration=50, seed=1))
    scheduler.advance(0.3)
    tick = driver.current_tick()
    driver.stop()
    assert not driver.is_running()
    scheduler.advance(5.0)
    assert driver.current_tick() == tick
    assert len(driver.history("continuous").points) == tick


def test_listeners_see_every_tick(driver, scheduler):
    seen = []
    unsubscribe = driver.subscribe(lambda d: seen.append(d.current_tick()))
    driver.start_run("both", SimulationConfig(duration=10, seed=1))
    scheduler.run_until_idle()
    assert seen == list(range(11))

    unsubscribe()
    driver.start_run("both", SimulationConfig(duration=10, seed=1))
    scheduler.run_until_idle()
    assert len(seen) == 11


def test_restart_from_listener_leaves_no_residue(driver, scheduler):
    restarted = []

    def restart_midway(d):
        if d.current_tick() == 7 and not restarted:
            restarted.append(True)
            d.start_run("continuous", SimulationConfig(duration=12, seed=3))

    driver.subscribe(restart_midway)
    driver.start_run("both", SimulationConfig(duration=30, seed=1))
    scheduler.run_until_idle()
    assert driver.mode == "continuous"
    assert [p.tick for p in driver.history("continuous").points] == list(range(12))
    assert driver.history("continual").points == ()


def test_defaults_used_without_config(driver):
    driver.start_run("both")
    assert driver.config == SimulationConfig.basic()


def test_unknown_mode_and_strategy(driver):
    with pytest.raises(ValueError):
        driver.start_run("sometimes")
    with pytest.raises(ValueError):
        driver.history("both")


def test_timer_scheduler_runs_to_completion():
    driver = SimulationDriver(TimerScheduler())
    done = threading.Event()
    driver.subscribe(lambda d: done.set() if d.is_complete() else None)
    driver.start_run("both", SimulationConfig(duration=8, simulation_speed=100, seed=1))
    assert done.wait(timeout=10)
    assert driver.current_tick() == 8
    assert len(driver.history("continuous").points) == 8
