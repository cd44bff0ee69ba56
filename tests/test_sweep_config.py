import os

import pytest
import yaml

from multisite.config import Payoffs
from multisite.experiments.sweep_config import (
    DEFAULT_BASE_SEED,
    SweepConfig,
    load_sweep_config,
    noise_levels,
    sweep_config_from_dict,
)
from multisite.invariant_runtime import InvalidConfiguration
from multisite.response import amplified_response, identity_response

REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def test_default_noise_grid_has_101_rounded_levels():
    levels = SweepConfig().noise_levels()
    assert len(levels) == 101
    assert levels[0] == 0.0 and levels[-1] == 1.0
    assert 0.3 in levels
    assert levels == sorted(levels)


def test_noise_levels_rejects_bad_ranges():
    with pytest.raises(InvalidConfiguration):
        noise_levels(0.0, 1.0, 0.0)
    with pytest.raises(InvalidConfiguration):
        noise_levels(0.6, 0.4, 0.1)
    assert noise_levels(0.2, 0.2, 0.1) == [0.2]


def test_load_yaml_sections(tmp_path):
    path = tmp_path / "sweep.yaml"
    raw = {
        "simulation": {"time_units": 250, "alpha": 0.3, "response": "identity"},
        "grid": {"n_min": 2, "n_max": 4},
        "noise": {"start": 0.0, "stop": 0.5, "step": 0.1},
        "payoffs": {"tp": 2, "fp": -2},
        "execution": {"base_seed": 7, "workers": 2, "executor": "thread", "time_budget_s": 30},
        "logging": {"level": "debug"},
    }
    path.write_text(yaml.safe_dump(raw))
    cfg = load_sweep_config(str(path))
    assert (cfg.n_min, cfg.n_max) == (2, 4)
    assert cfg.noise_levels() == [0.0, 0.1, 0.2, 0.3, 0.4, 0.5]
    assert cfg.payoffs == Payoffs(tp=2.0, fp=-2.0, fn=-1.0, tn=1.0)
    assert cfg.time_budget_s == 30.0
    assert cfg.log_level == "DEBUG"
    base = cfg.base_simulation_config()
    assert base.response is identity_response
    assert (base.time_units, base.alpha) == (250, 0.3)


def test_overrides_win_and_none_is_ignored(tmp_path):
    path = tmp_path / "sweep.yaml"
    path.write_text(yaml.safe_dump({"grid": {"n_max": 4}, "execution": {"base_seed": 7}}))
    cfg = load_sweep_config(str(path), {"n_max": 6, "base_seed": None, "replicates": 3})
    assert cfg.n_max == 6
    assert cfg.base_seed == 7
    assert cfg.replicates == 3


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    cfg = load_sweep_config(str(path))
    assert cfg == SweepConfig()
    assert cfg.base_seed == DEFAULT_BASE_SEED
    assert cfg.base_simulation_config().response is amplified_response


def test_shipped_default_config_matches_defaults():
    cfg = load_sweep_config(os.path.join(REPO_ROOT, "config", "default_sweep.yaml"))
    assert cfg == SweepConfig()


@pytest.mark.parametrize(
    "raw, invariant_id",
    [
        ({"simulation": {"response": "sigmoid"}}, "response.registered"),
        ({"grid": {"n_min": 0}}, "sweep.n_min"),
        ({"grid": {"n_min": 5, "n_max": 3}}, "sweep.n_max"),
        ({"execution": {"executor": "cluster"}}, "sweep.executor"),
        ({"execution": {"replicates": 0}}, "sweep.replicates"),
        ({"execution": {"time_budget_s": -1}}, "sweep.time_budget"),
        ({"noise": {"step": 0}}, "noise.step"),
    ],
)
def test_invalid_sweep_config_is_rejected(raw, invariant_id):
    with pytest.raises(InvalidConfiguration) as excinfo:
        sweep_config_from_dict(raw)
    assert excinfo.value.invariant_id == invariant_id


def test_snapshot_is_plain_data():
    snap = SweepConfig(n_max=3).snapshot()
    assert snap["n_max"] == 3
    assert snap["payoffs"] == {"tp": 1.0, "fp": -1.0, "fn": -1.0, "tn": 1.0}
