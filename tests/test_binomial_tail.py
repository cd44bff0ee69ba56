import math

import pytest

from multisite.binomial import betainc_reg, binomial_cdf, binomial_sf


def _direct_sf(k, n, p):
    return sum(math.comb(n, j) * p**j * (1.0 - p) ** (n - j) for j in range(max(k, 0), n + 1))


@pytest.mark.parametrize("n", [1, 2, 5, 10, 25])
@pytest.mark.parametrize("p", [0.0, 0.01, 0.3, 0.5, 0.77, 0.99, 1.0])
def test_binomial_sf_matches_direct_sum(n, p):
    for k in range(0, n + 2):
        assert binomial_sf(k, n, p) == pytest.approx(_direct_sf(k, n, p), abs=1e-10)


def test_single_site_tail_is_p():
    for p in [0.0, 0.12, 0.3, 0.5, 0.9, 1.0]:
        assert binomial_sf(1, 1, p) == pytest.approx(p, abs=1e-12)


def test_cdf_complements_sf():
    assert binomial_cdf(2, 6, 0.4) == pytest.approx(1.0 - _direct_sf(3, 6, 0.4), abs=1e-12)


def test_large_n_symmetry_and_bounds():
    n, k, p = 5000, 2600, 0.52
    upper = binomial_sf(k, n, p)
    lower = binomial_sf(n - k + 1, n, 1.0 - p)
    assert 0.0 <= upper <= 1.0
    assert upper + lower == pytest.approx(1.0, abs=1e-9)


def test_tail_is_monotone_in_k_and_p():
    n = 40
    tails = [binomial_sf(k, n, 0.35) for k in range(0, n + 2)]
    assert all(a >= b for a, b in zip(tails, tails[1:]))
    by_p = [binomial_sf(12, n, p) for p in [0.05, 0.2, 0.35, 0.5, 0.8]]
    assert all(a <= b for a, b in zip(by_p, by_p[1:]))


def test_regularized_incomplete_beta_endpoints():
    assert betainc_reg(0.0, 2.0, 3.0) == 0.0
    assert betainc_reg(1.0, 2.0, 3.0) == 1.0
    # I_x(1, 1) = x
    assert betainc_reg(0.42, 1.0, 1.0) == pytest.approx(0.42, abs=1e-12)
