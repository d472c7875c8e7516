"""Visualisation helpers (Matplotlib)."""
from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

from .engine import SimulationResult

__all__ = [
    "plot_run",
]

STRATEGY_COLOURS = {
    "continuous": "#e74c3c",
    "continual": "#3498db",
}
MARKER_SIZES = {
    "continuous": 12,
    "continual": 36,
}
# The waveform is drawn around the ideal line, scaled down so it reads as background.
WAVEFORM_SCALE = 0.3


def plot_run(result: SimulationResult, save_path: Path | None = None) -> None:
    """Paths of every strategy over the shared disturbance waveform.

    Adjustments are drawn as vertical ticks from the raw to the committed
    position; environment markers as shaded circles on the ideal line.
    """
    cfg = result.config
    ideal = cfg.ideal_position

    fig, ax = plt.subplots(figsize=(10, 5))
    ticks = np.arange(len(result.disturbances))
    ax.axhline(ideal, color="#555", ls="--", lw=1, label="Ideal position")
    ax.plot(
        ticks,
        ideal + np.asarray(result.disturbances) * WAVEFORM_SCALE,
        color="black",
        alpha=0.15,
        lw=2,
        label="Environment",
    )

    for marker in result.markers:
        colour = (1.0, 0.4, 0.4, 0.2) if marker.magnitude > 0 else (0.4, 0.4, 1.0, 0.2)
        ax.scatter([marker.tick], [ideal], s=300, color=colour, edgecolors="none")

    for name, history in result.histories.items():
        colour = STRATEGY_COLOURS.get(name, "gray")
        ax.plot(
            [p.tick for p in history.points],
            history.positions,
            color=colour,
            lw=2,
            label=f"{name.capitalize()} ({len(history.adjustments)} adjustments)",
        )
        if history.adjustments:
            adj_ticks = [a.tick for a in history.adjustments]
            resulting = [a.resulting_position for a in history.adjustments]
            before = [a.resulting_position + a.correction_amount for a in history.adjustments]
            ax.vlines(adj_ticks, resulting, before, color=colour, lw=1)
            ax.scatter(adj_ticks, resulting, s=MARKER_SIZES.get(name, 12), color=colour, zorder=3)

    ax.set_xlabel("Tick")
    ax.set_ylabel("Lane position")
    ax.set_title(f"Continuous vs. Continual Improvement ({result.mode})")
    ax.set_xlim(0, max(cfg.duration, 1))
    ax.legend(loc="upper right", fontsize="small")
    ax.grid(True, ls=":", lw=0.5)

    if save_path is not None:
        save_path = Path(save_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(save_path.with_suffix(".png"), dpi=150, bbox_inches="tight")
        fig.savefig(save_path.with_suffix(".svg"), bbox_inches="tight")
    else:
        plt.show()

    plt.close(fig)
