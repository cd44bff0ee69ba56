"""
Immutable per-run configuration for the multisite simulator.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field, replace
from typing import Dict, Tuple

from .invariant_runtime import require_config
from .response import ResponseFunction, amplified_response, check_reliability, response_name


@dataclass(frozen=True)
class Payoffs:
    """Payoff for each (actual, predicted) cell of the confusion matrix."""

    tp: float = 1.0
    fp: float = -1.0
    fn: float = -1.0
    tn: float = 1.0

    def lookup(self, actual: bool, predicted: bool) -> float:
        if actual:
            return self.tp if predicted else self.fn
        return self.fp if predicted else self.tn

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return self.tp, self.fp, self.fn, self.tn


@dataclass(frozen=True)
class SimulationConfig:
    """One (n, k, PNP, alpha) configuration.

    n: number of phosphosites.
    k: activation threshold, protein is classified active when >= k sites
       are phosphorylated.
    pnp: per-site probability of spurious phosphorylation (noise).
    alpha: prior probability that the environment presents a true signal.
    time_units: number of independent trials per run.
    response: PPP = response(PNP).
    """

    n: int
    k: int
    pnp: float
    alpha: float = 0.5
    time_units: int = 100
    payoffs: Payoffs = field(default_factory=Payoffs)
    response: ResponseFunction = amplified_response

    @property
    def ppp(self) -> float:
        return float(self.response(self.pnp))

    def with_noise(self, pnp: float) -> "SimulationConfig":
        return replace(self, pnp=float(pnp))

    def with_sites(self, n: int, k: int) -> "SimulationConfig":
        return replace(self, n=n, k=k)

    def validate(self) -> None:
        """Fail fast on malformed parameters; nothing is clamped."""

        data = self.describe()
        require_config(
            is_count(self.n) and self.n >= 1, "config.n", "n must be a positive integer", data
        )
        require_config(is_count(self.k) and self.k >= 1, "config.k_min", "k must be an integer >= 1", data)
        require_config(self.k <= self.n, "config.k_max", "k must be <= n", data)
        require_config(
            is_count(self.time_units) and self.time_units >= 1,
            "config.time_units",
            "time_units must be a positive integer",
            data,
        )
        require_config(_is_probability(self.pnp), "config.pnp", "PNP must lie in [0, 1]", data)
        require_config(_is_probability(self.alpha), "config.alpha", "alpha must lie in [0, 1]", data)
        ppp = self.ppp
        require_config(_is_probability(ppp), "config.ppp", "PPP = f(PNP) must lie in [0, 1]", data)
        require_config(ppp >= self.pnp, "config.reliability", "PPP must be >= PNP", data)
        require_config(
            all(math.isfinite(v) for v in self.payoffs.as_tuple()),
            "config.payoffs",
            "payoffs must be finite",
            data,
        )
        check_reliability(self.response)

    def describe(self) -> Dict:
        """JSON-friendly view of the configuration."""

        return {
            "n": self.n,
            "k": self.k,
            "pnp": self.pnp,
            "alpha": self.alpha,
            "time_units": self.time_units,
            "payoffs": list(self.payoffs.as_tuple()),
            "response": response_name(self.response) or getattr(self.response, "__name__", repr(self.response)),
        }


def is_count(x) -> bool:
    return isinstance(x, numbers.Integral) and not isinstance(x, bool)


def _is_probability(x: float) -> bool:
    try:
        value = float(x)
    except (TypeError, ValueError):
        return False
    return math.isfinite(value) and 0.0 <= value <= 1.0
