import matplotlib

matplotlib.use("Agg")

from improvement_sim.config import SimulationConfig  # noqa: E402
from improvement_sim.simulator.engine import run_once  # noqa: E402
from improvement_sim.simulator.visualize import plot_run  # noqa: E402


def test_plot_saves_png_and_svg(tmp_path):
    result = run_once(SimulationConfig(duration=40, seed=1))
    plot_run(result, save_path=tmp_path / "figs" / "run")
    assert (tmp_path / "figs" / "run.png").exists()
    assert (tmp_path / "figs" / "run.svg").exists()
