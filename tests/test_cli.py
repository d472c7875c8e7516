"""End-to-end checks of the command-line interface."""
import yaml

from improvement_sim.cli import main


def test_run_prints_report_and_exports(tmp_path, capsys):
    results = tmp_path / "out" / "run.yaml"
    code = main(["run", "--mode", "both", "--seed", "3", "--duration", "30", "--results_path", str(results)])
    assert code == 0
    out = capsys.readouterr().out
    assert "continuous" in out and "continual" in out
    assert "fewer adjustments" in out

    data = yaml.safe_load(results.read_text())
    assert data["ticks"] == 30
    assert data["metrics"]["continuous"]["adjustment_count"] == 15


def test_run_with_plot(tmp_path):
    assert main(["run", "--duration", "20", "--seed", "1", "--plot", str(tmp_path / "fig")]) == 0
    assert (tmp_path / "fig.png").exists()


def test_defaults_then_run_from_file(tmp_path, capsys):
    path = tmp_path / "cfg.yaml"
    assert main(["defaults", "--out", str(path)]) == 0
    assert path.exists()
    assert main(["run", "--config", str(path), "--mode", "continual", "--duration", "20"]) == 0
    assert "Continual improvement" in capsys.readouterr().out


def test_invalid_config_exits_with_status_2(tmp_path, capsys):
    path = tmp_path / "bad.yaml"
    path.write_text("continuous_frequency: 0\n")
    assert main(["run", "--config", str(path)]) == 2
    assert "[WARNING]" in capsys.readouterr().out


def test_watch_runs_to_completion(capsys):
    assert main(["watch", "--duration", "5", "--speed", "100", "--seed", "2"]) == 0
    out = capsys.readouterr().out
    assert "challenge" in out  # tick 0 is always a notable disturbance
    assert "Avg dev" in out
