import logging

import pytest

from multisite.config import SimulationConfig
from multisite.invariant_runtime import InvalidConfiguration, RunContext, reset_run_context, set_run_context
from multisite.experiments.sweep import sweep

LEVELS = [0.0, 0.1, 0.25, 0.5, 0.75, 1.0]


def _base(**kwargs):
    params = {"n": 1, "k": 1, "pnp": 0.0, "time_units": 80}
    params.update(kwargs)
    return SimulationConfig(**params)


def test_sweep_keeps_noise_order():
    levels = [0.5, 0.0, 1.0, 0.25]
    curve = sweep(3, 2, levels, _base(), base_seed=1)
    assert curve.key == (3, 2)
    assert [p.pnp for p in curve.points] == levels
    assert all(p.ppp >= p.pnp for p in curve.points)


def test_sweep_is_deterministic():
    a = sweep(4, 2, LEVELS, _base(), base_seed=9)
    b = sweep(4, 2, LEVELS, _base(), base_seed=9)
    assert a == b
    assert sweep(4, 2, LEVELS, _base(), base_seed=10) != a


def test_point_does_not_depend_on_other_levels():
    full = sweep(3, 1, LEVELS, _base(), base_seed=5)
    single = sweep(3, 1, [0.25], _base(), base_seed=5)
    assert single.points[0] == full.points[LEVELS.index(0.25)]


def test_replicates_draw_independent_points():
    first = sweep(2, 1, LEVELS, _base(), base_seed=5, replicate=0)
    second = sweep(2, 1, LEVELS, _base(), base_seed=5, replicate=1)
    assert [p.seed for p in first.points] != [p.seed for p in second.points]


def test_no_signal_marks_tpr_missing_and_records_fallbacks(caplog):
    ctx = RunContext(run_label="alpha0", base_seed=3)
    token = set_run_context(ctx)
    try:
        with caplog.at_level(logging.DEBUG, logger="multisite"):
            curve = sweep(2, 1, LEVELS, _base(alpha=0.0), base_seed=3, logger=logging.getLogger("multisite"))
    finally:
        reset_run_context(token)
    assert all(p.tpr is None for p in curve.points)
    assert all(p.fpr is not None for p in curve.points)
    assert curve.n_missing == len(LEVELS)
    assert len(ctx.fallback_log) == len(LEVELS)
    rec = ctx.fallback_log[0]
    assert rec.fallback_id == "rate.missing"
    assert rec.detail["rate"] == "tpr"
    assert rec.detail["run_label"] == "alpha0"
    assert "Missing TPR" in caplog.text


def test_missing_rates_without_context_are_still_none():
    curve = sweep(2, 2, [0.2, 0.4], _base(alpha=1.0), base_seed=3)
    assert [p.fpr for p in curve.points] == [None, None]
    assert all(p.tpr is not None for p in curve.points)


@pytest.mark.parametrize("n, k", [(1, 1), (5, 3)])
def test_sweep_rates_within_unit_interval(n, k):
    curve = sweep(n, k, LEVELS, _base(time_units=60), base_seed=2)
    for p in curve.defined_points:
        assert 0.0 <= p.fpr <= 1.0
        assert 0.0 <= p.tpr <= 1.0


@pytest.mark.parametrize("levels", [[-0.1, 0.5], [0.5, 1.2]])
def test_out_of_range_noise_is_rejected(levels):
    with pytest.raises(InvalidConfiguration) as excinfo:
        sweep(1, 1, levels, _base(), base_seed=3)
    assert excinfo.value.invariant_id == "config.pnp"


def test_fractional_sites_are_rejected_not_truncated():
    with pytest.raises(InvalidConfiguration) as excinfo:
        sweep(2.5, 1, LEVELS, _base(), base_seed=3)
    assert excinfo.value.invariant_id == "config.n"
