"""Command‐line interface entry‐point.

Usage examples
--------------
Run a headless comparison and save a plot:
    python -m improvement_sim.cli run --config cfgs/basic.yaml --mode both --plot figs/run

Watch a run tick by tick at wall-clock pace:
    python -m improvement_sim.cli watch --mode continual --speed 80

Write the default configuration to edit:
    python -m improvement_sim.cli defaults --out cfgs/mine.yaml
"""
from __future__ import annotations

import argparse
import logging
import sys
import threading
from pathlib import Path
from typing import List

import yaml

from .config import SimulationConfig
from .simulator.driver import SimulationDriver
from .simulator.engine import RUN_MODES, run_once
from .simulator.environment import is_notable_disturbance
from .simulator.report import explanation, format_report
from .simulator.visualize import plot_run


def _add_run_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", type=Path, default=None, help="YAML config file (defaults if omitted)")
    p.add_argument("--mode", choices=RUN_MODES, default="both", help="Which strategies to simulate")
    p.add_argument("--seed", type=int, default=None, help="Seed for the disturbance spikes")
    p.add_argument("--duration", type=int, default=None, help="Terminal tick count")
    p.add_argument("--variability", type=float, default=None, help="Environment variability (50 = baseline)")


def _parse_args(argv: List[str] | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="improvement_sim", description="Continuous vs. continual improvement simulator"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    # ------------------------------------------------------------------
    # run
    # ------------------------------------------------------------------
    p_run = subparsers.add_parser("run", help="Run one simulation to completion and report metrics")
    _add_run_options(p_run)
    p_run.add_argument("--plot", type=Path, default=None, help="Save a figure (PNG + SVG) to this path")
    p_run.add_argument("--results_path", type=Path, default=None, help="Export the run summary as YAML")

    # ------------------------------------------------------------------
    # watch
    # ------------------------------------------------------------------
    p_watch = subparsers.add_parser("watch", help="Play a run back tick by tick")
    _add_run_options(p_watch)
    p_watch.add_argument("--speed", type=int, default=None, help="Playback speed 0..100 (delay = 100 - speed ms)")

    # ------------------------------------------------------------------
    # defaults
    # ------------------------------------------------------------------
    p_def = subparsers.add_parser("defaults", help="Write the default configuration as YAML")
    p_def.add_argument("--out", required=True, type=Path, help="Output YAML path")
    return parser


def _load_config(args: argparse.Namespace) -> SimulationConfig:
    cfg = SimulationConfig.from_yaml(args.config) if args.config else SimulationConfig.basic()
    return cfg.with_overrides(
        seed=args.seed,
        duration=args.duration,
        environment_variability=args.variability,
        simulation_speed=getattr(args, "speed", None),
    )


def _tick_line(driver: SimulationDriver, tick: int) -> str:
    """One progress row: disturbance, each position, and a * where a correction happened."""
    cells = [f"{tick:>4d}", f"env {driver.disturbances()[tick]:>7.2f}"]
    for name in ("continuous", "continual"):
        history = driver.history(name)
        if not history.points:
            continue
        point = history.points[tick]
        flag = "*" if any(a.tick == tick for a in history.adjustments) else " "
        cells.append(f"{name} {point.position:>7.2f}{flag}")
    if is_notable_disturbance(tick):
        cells.append("challenge")
    return "  ".join(cells)


def _watch(cfg: SimulationConfig, mode: str) -> int:
    driver = SimulationDriver()
    done = threading.Event()
    printed = [0]
    print_lock = threading.Lock()

    def on_update(d: SimulationDriver) -> None:
        # Listeners run on timer threads and may lag a tick behind; catch up in order.
        with print_lock:
            current = d.current_tick()
            for tick in range(printed[0], current):
                print(_tick_line(d, tick))
            printed[0] = max(printed[0], current)
            if d.is_complete():
                done.set()

    driver.subscribe(on_update)
    print(explanation(mode, cfg))
    driver.start_run(mode, cfg)
    try:
        while not done.wait(timeout=0.5):
            pass
    except KeyboardInterrupt:
        driver.stop()
        print(f"[WARNING] Stopped at tick {driver.current_tick()} of {cfg.duration}")
        return 130
    print()
    print(format_report(mode, cfg, driver.metrics()))
    return 0


def main(argv: List[str] | None = None) -> int:  # noqa: D401
    """Main entry point for the command-line interface."""
    parser = _parse_args(argv)
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    if args.cmd == "defaults":
        SimulationConfig.basic().to_yaml(args.out)
        print(f"[INFO] Default configuration written to {args.out}")
        return 0

    try:
        cfg = _load_config(args)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(f"[WARNING] Invalid configuration: {exc}")
        return 2

    if args.cmd == "run":
        result = run_once(cfg, args.mode)
        print(format_report(args.mode, cfg, result.metrics))
        if args.plot is not None:
            plot_run(result, save_path=args.plot)
            print(f"[INFO] Figure saved to {args.plot.with_suffix('.png')}")
        if args.results_path is not None:
            args.results_path.parent.mkdir(parents=True, exist_ok=True)
            with open(args.results_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(result.to_dict(), f, sort_keys=False)
            print(f"[INFO] Run results saved to {args.results_path}")
        return 0

    if args.cmd == "watch":
        return _watch(cfg, args.mode)

    raise ValueError(f"Unknown command: {args.cmd}")


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
