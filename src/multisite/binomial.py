"""
Binomial tail probabilities for the k-of-n phosphorylation threshold.

P(Bin(n, p) >= k) is evaluated through the regularized incomplete beta
identity P(X >= k) = I_p(k, n - k + 1), using a log-space prefactor and a
continued fraction so the tail stays accurate for large n and extreme p.
"""

from __future__ import annotations

import math


def binomial_sf(k: int, n: int, p: float) -> float:
    """P(X >= k) for X ~ Binomial(n, p)."""

    assert n >= 0
    assert 0.0 <= p <= 1.0
    if k <= 0:
        return 1.0
    if k > n:
        return 0.0
    if p == 0.0:
        return 0.0
    if p == 1.0:
        return 1.0
    tail = betainc_reg(p, float(k), float(n - k + 1))
    return min(max(tail, 0.0), 1.0)


def binomial_cdf(j: int, n: int, p: float) -> float:
    """P(X <= j) for X ~ Binomial(n, p)."""

    return 1.0 - binomial_sf(j + 1, n, p)


def betainc_reg(x: float, a: float, b: float) -> float:
    """Regularized incomplete beta I_x(a,b) using a continued fraction."""

    assert 0.0 <= x <= 1.0
    if x == 0.0:
        return 0.0
    if x == 1.0:
        return 1.0

    ln_beta = math.lgamma(a) + math.lgamma(b) - math.lgamma(a + b)
    ln_front = (a * math.log(x)) + (b * math.log1p(-x)) - ln_beta

    # Continued fraction converges fastest on this side of the mean.
    if x < (a + 1.0) / (a + b + 2.0):
        return math.exp(ln_front) * betacf(x, a, b) / a
    return 1.0 - math.exp(ln_front) * betacf(1.0 - x, b, a) / b


def betacf(x: float, a: float, b: float, max_iter: int = 500, eps: float = 3e-14) -> float:
    """Continued fraction for the incomplete beta (modified Lentz)."""

    tiny = 1e-300
    qab = a + b
    qap = a + 1.0
    qam = a - 1.0
    c = 1.0
    d = 1.0 - qab * x / qap
    if abs(d) < tiny:
        d = tiny
    d = 1.0 / d
    h = d

    for m in range(1, max_iter + 1):
        m2 = 2 * m
        aa = m * (b - m) * x / ((qam + m2) * (a + m2))
        d = 1.0 + aa * d
        if abs(d) < tiny:
            d = tiny
        c = 1.0 + aa / c
        if abs(c) < tiny:
            c = tiny
        d = 1.0 / d
        h *= d * c
        aa = -(a + m) * (qab + m) * x / ((a + m2) * (qap + m2))
        d = 1.0 + aa * d
        if abs(d) < tiny:
            d = tiny
        c = 1.0 + aa / c
        if abs(c) < tiny:
            c = tiny
        d = 1.0 / d
        delta = d * c
        h *= delta
        if abs(delta - 1.0) < eps:
            break

    return h
