"""Plain-text descriptions of a run: mode explanation, metrics table, conclusion."""
from __future__ import annotations

from typing import Dict, List

from ..config import SimulationConfig
from .engine import strategies_for_mode
from .metrics import adjustment_ratio
from .records import RunMetrics

__all__ = ["explanation", "format_metrics_table", "conclusion", "format_report"]

KEY_INSIGHT = (
    "Key insight: Both cars faced identical challenges and reached their destination, "
    "but with different adjustment patterns based on the parameter settings."
)


def explanation(mode: str, cfg: SimulationConfig) -> str:
    strategies_for_mode(mode)
    if mode == "continuous":
        return (
            f"Continuous improvement: adjusting every {cfg.continuous_frequency} time units "
            f"with {cfg.continuous_strength:.0%} correction strength, regardless of need."
        )
    if mode == "continual":
        return (
            f"Continual improvement: checking every {cfg.continual_check_frequency} time units, "
            f"adjusting ({cfg.continual_strength:.0%} strength) only when deviation exceeds "
            f"{cfg.continual_threshold:g} units."
        )
    return (
        "Comparing both approaches: both cars face identical environmental challenges. "
        "Continuous makes frequent small adjustments, continual makes periodic targeted "
        "adjustments only when needed."
    )


def format_metrics_table(metrics: Dict[str, RunMetrics]) -> str:
    header = f"{'Strategy':<12}{'Adjustments':>12}{'Avg dev':>10}{'Max dev':>10}"
    lines: List[str] = [header, "-" * len(header)]
    for name, m in metrics.items():
        lines.append(
            f"{name:<12}{m.adjustment_count:>12d}"
            f"{m.mean_absolute_deviation:>10.1f}{m.max_absolute_deviation:>10.1f}"
        )
    return "\n".join(lines)


def conclusion(metrics: Dict[str, RunMetrics]) -> str:
    """Efficiency comparison; only meaningful when both strategies ran."""
    if "continuous" not in metrics or "continual" not in metrics:
        return ""
    cont, cl = metrics["continuous"], metrics["continual"]
    ratio = adjustment_ratio(cont, cl)
    return (
        f"Continuous approach made {cont.adjustment_count} adjustments to maintain an average "
        f"deviation of {cont.mean_absolute_deviation:.1f} units.\n"
        f"Continual approach made {cl.adjustment_count} adjustments to maintain an average "
        f"deviation of {cl.mean_absolute_deviation:.1f} units.\n"
        f"Conclusion: Continual improvement achieved {ratio:.1f}x fewer adjustments."
    )


def format_report(mode: str, cfg: SimulationConfig, metrics: Dict[str, RunMetrics]) -> str:
    parts = [explanation(mode, cfg), "", format_metrics_table(metrics)]
    summary = conclusion(metrics)
    if summary:
        parts += ["", summary]
    parts += ["", KEY_INSIGHT]
    return "\n".join(parts)
