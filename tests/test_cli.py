import json
import os

import yaml

from run_multisite_sweep import main, parse_args


def _write_config(tmp_path, **sections):
    raw = {"noise": {"start": 0.0, "stop": 1.0, "step": 0.25}, "simulation": {"time_units": 40}}
    raw.update(sections)
    path = tmp_path / "sweep.yaml"
    path.write_text(yaml.safe_dump(raw))
    return str(path)


def test_cli_writes_artifacts(tmp_path):
    out = tmp_path / "out"
    code = main(["--config", _write_config(tmp_path), "--n-max", "2", "--seed", "5", "--out", str(out)])
    assert code == 0
    for name in ["scenarios.csv", "auc_table.csv", "failures.csv", "summary.json", "config_snapshot.json"]:
        assert os.path.exists(out / name)
    with open(out / "config_snapshot.json", "r", encoding="utf-8") as f:
        snapshot = json.load(f)
    assert snapshot["n_max"] == 2
    assert snapshot["base_seed"] == 5
    assert snapshot["time_units"] == 40


def test_cli_rejects_invalid_configuration(tmp_path, capsys):
    code = main(["--config", _write_config(tmp_path), "--alpha", "1.5", "--out", str(tmp_path / "out")])
    assert code == 2
    assert "config.alpha" in capsys.readouterr().err
    assert not os.path.exists(tmp_path / "out")


def test_cli_reports_failed_configurations(tmp_path):
    config = _write_config(tmp_path, simulation={"time_units": 40, "alpha": 0.0})
    code = main(["--config", config, "--n-max", "1", "--out", str(tmp_path / "out")])
    assert code == 1
    with open(tmp_path / "out" / "summary.json", "r", encoding="utf-8") as f:
        summary = json.load(f)
    assert summary["metadata"]["n_failed"] == 1


def test_parse_args_defaults():
    args = parse_args([])
    assert args.config.endswith("default_sweep.yaml")
    assert args.workers is None and args.time_budget is None
