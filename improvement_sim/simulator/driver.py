"""Stateful tick driver: the single owner of the active simulation run.

Consumers (the CLI progress view, plots, tests) read immutable snapshots from
the driver and never touch simulation state directly.  Ticks are paced by a
`Scheduler`; each scheduled callback carries the run token it was issued
under, so a callback that outlives a reset or stop does nothing.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Optional, Tuple

from ..config import SimulationConfig
from .engine import STRATEGIES, SimulationRun, strategies_for_mode
from .records import EnvironmentMarker, RunMetrics, StrategyHistory
from .scheduling import Scheduler, TimerScheduler

__all__ = ["SimulationDriver"]

logger = logging.getLogger(__name__)

Listener = Callable[["SimulationDriver"], None]


class SimulationDriver:
    def __init__(self, scheduler: Optional[Scheduler] = None):
        self._scheduler = scheduler if scheduler is not None else TimerScheduler()
        self._lock = threading.RLock()
        self._run: Optional[SimulationRun] = None
        self._token = 0
        self._pending: Optional[object] = None
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------
    def start_run(self, mode: str, config: Optional[SimulationConfig] = None) -> None:
        """Discard any previous run and start ticking a fresh one."""
        strategies_for_mode(mode)
        cfg = config if config is not None else SimulationConfig.basic()
        with self._lock:
            self._cancel_pending()
            self._token += 1
            self._run = SimulationRun(cfg, mode)
            self._schedule(self._token, delay=0.0)
            logger.info("Started %s run (%d ticks): %s", mode, cfg.duration, cfg)
        self._notify()

    def stop(self) -> None:
        """Stop ticking; the partial or finished run stays readable."""
        with self._lock:
            self._cancel_pending()
            self._token += 1

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(driver)`` after every tick and run start."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Tick loop
    # ------------------------------------------------------------------
    def _schedule(self, token: int, delay: float) -> None:
        self._pending = self._scheduler.call_later(delay, self._on_tick, token)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._scheduler.cancel(self._pending)
            self._pending = None

    def _on_tick(self, token: int) -> None:
        with self._lock:
            run = self._run
            if token != self._token or run is None:
                logger.debug("Ignoring stale tick callback (token %d, current %d)", token, self._token)
                return
            if not run.step():
                logger.debug("Ignoring tick callback for a completed run")
                self._pending = None
                return
            if run.complete:
                self._pending = None
                logger.info("Run complete after %d ticks", run.tick)
            else:
                self._schedule(token, run.cfg.tick_interval_s)
        self._notify()

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(self)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def mode(self) -> Optional[str]:
        with self._lock:
            return self._run.mode if self._run is not None else None

    @property
    def config(self) -> Optional[SimulationConfig]:
        with self._lock:
            return self._run.cfg if self._run is not None else None

    def current_tick(self) -> int:
        with self._lock:
            return self._run.tick if self._run is not None else 0

    def is_running(self) -> bool:
        with self._lock:
            return self._run is not None and not self._run.complete and self._pending is not None

    def is_complete(self) -> bool:
        with self._lock:
            return self._run is not None and self._run.complete

    def history(self, strategy: str) -> StrategyHistory:
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown strategy '{strategy}'. Must be one of {STRATEGIES}")
        with self._lock:
            if self._run is None:
                return StrategyHistory()
            return self._run.history(strategy)

    def environment_markers(self) -> Tuple[EnvironmentMarker, ...]:
        with self._lock:
            return tuple(self._run.markers) if self._run is not None else ()

    def disturbances(self) -> Tuple[float, ...]:
        with self._lock:
            return tuple(self._run.disturbances) if self._run is not None else ()

    def metrics(self) -> Dict[str, RunMetrics]:
        """Per-strategy metrics; zeroed until `is_complete`."""
        with self._lock:
            return self._run.metrics() if self._run is not None else {}
