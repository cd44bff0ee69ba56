import numpy as np
import pytest

from multisite.config import Payoffs, SimulationConfig
from multisite.invariant_runtime import InvalidConfiguration
from multisite.response import (
    amplified_response,
    check_reliability,
    get_response_function,
    identity_response,
    response_name,
    saturating_response,
)


def _halved(x):
    return x / 2.0


def _step_down(x):
    return 1.0 if x < 0.5 else x


def _shifted(x):
    return x + 0.5


def test_amplified_response_values():
    assert amplified_response(0.0) == 0.0
    assert amplified_response(1.0) == 1.0
    assert amplified_response(0.3) == pytest.approx(0.6 / 1.3)


@pytest.mark.parametrize("fn", [amplified_response, identity_response, saturating_response])
def test_registered_responses_are_reliable(fn):
    check_reliability(fn)


@pytest.mark.parametrize(
    "fn, invariant_id",
    [
        (_halved, "response.reliability"),
        (_step_down, "response.monotone"),
        (_shifted, "response.range"),
    ],
)
def test_unreliable_responses_are_rejected(fn, invariant_id):
    with pytest.raises(InvalidConfiguration) as excinfo:
        check_reliability(fn)
    assert excinfo.value.invariant_id == invariant_id


def test_response_registry_lookup():
    assert get_response_function("Identity") is identity_response
    assert get_response_function("default") is amplified_response
    assert response_name(amplified_response) == "amplified"
    with pytest.raises(InvalidConfiguration):
        get_response_function("sigmoid")


def test_config_ppp_uses_response():
    cfg = SimulationConfig(n=1, k=1, pnp=0.3)
    assert cfg.ppp == pytest.approx(0.6 / 1.3)
    assert cfg.with_noise(0.5).pnp == 0.5
    assert cfg.with_sites(4, 2).k == 2


@pytest.mark.parametrize(
    "kwargs, invariant_id",
    [
        ({"n": 0, "k": 1, "pnp": 0.1}, "config.n"),
        ({"n": 3, "k": 0, "pnp": 0.1}, "config.k_min"),
        ({"n": 3, "k": 4, "pnp": 0.1}, "config.k_max"),
        ({"n": 2.5, "k": 1, "pnp": 0.1}, "config.n"),
        ({"n": 3, "k": 1.5, "pnp": 0.1}, "config.k_min"),
        ({"n": 3, "k": 2, "pnp": 0.1, "time_units": 10.5}, "config.time_units"),
        ({"n": 3, "k": 2, "pnp": 0.1, "time_units": 0}, "config.time_units"),
        ({"n": 3, "k": 2, "pnp": -0.1}, "config.pnp"),
        ({"n": 3, "k": 2, "pnp": 1.5}, "config.pnp"),
        ({"n": 3, "k": 2, "pnp": 0.2, "alpha": 1.2}, "config.alpha"),
        ({"n": 3, "k": 2, "pnp": 0.4, "response": _halved}, "config.reliability"),
        ({"n": 3, "k": 2, "pnp": 0.8, "response": _shifted}, "config.ppp"),
        ({"n": 3, "k": 2, "pnp": 0.4, "response": _step_down}, "response.monotone"),
        ({"n": 3, "k": 2, "pnp": 0.4, "payoffs": Payoffs(tp=float("nan"))}, "config.payoffs"),
    ],
)
def test_invalid_configurations_fail_fast(kwargs, invariant_id):
    cfg = SimulationConfig(**kwargs)
    with pytest.raises(InvalidConfiguration) as excinfo:
        cfg.validate()
    assert excinfo.value.invariant_id == invariant_id
    assert "InvalidConfiguration" in str(excinfo.value)


def test_payoff_lookup_covers_all_cells():
    p = Payoffs(tp=2.0, fp=-3.0, fn=-0.5, tn=0.25)
    assert p.lookup(True, True) == 2.0
    assert p.lookup(False, True) == -3.0
    assert p.lookup(True, False) == -0.5
    assert p.lookup(False, False) == 0.25


def test_with_sites_keeps_values_for_validation():
    cfg = SimulationConfig(n=1, k=1, pnp=0.1).with_sites(2.5, 1)
    assert cfg.n == 2.5
    with pytest.raises(InvalidConfiguration):
        cfg.validate()
    assert SimulationConfig(n=1, k=1, pnp=0.1).with_sites(np.int64(4), np.int64(2)).validate() is None
