"""
Noise-to-signal response functions PPP = f(PNP).

A response function maps the per-site probability of spurious phosphorylation
(PNP) to the per-site probability of proper phosphorylation under a true
signal (PPP). Reliability requires f(x) >= x on [0, 1] with f monotone
non-decreasing, so proper phosphorylation always dominates noise.

Registered functions are module-level callables so they can be shipped to
worker processes by name.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, Optional

import numpy as np

from .invariant_runtime import require_config

ResponseFunction = Callable[[float], float]

# Tolerance for the f(x) >= x reliability check.
RELIABILITY_TOL = 1e-12
# Grid used when checking a response function over [0, 1].
RELIABILITY_GRID_POINTS = 101


def amplified_response(x: float) -> float:
    """Default response: f(x) = 1 - (1 - x) / (1 + x)."""

    return 1.0 - (1.0 - x) / (1.0 + x)


def identity_response(x: float) -> float:
    """No amplification: f(x) = x (chance-level classifier)."""

    return x


def saturating_response(x: float) -> float:
    """Stronger amplification: f(x) = sqrt(x)."""

    return float(np.sqrt(x))


RESPONSE_REGISTRY: Dict[str, ResponseFunction] = {
    "amplified": amplified_response,
    "default": amplified_response,
    "identity": identity_response,
    "saturating": saturating_response,
}


def get_response_function(name: str) -> ResponseFunction:
    """Return the response function registered under name."""

    key = name.lower()
    require_config(
        key in RESPONSE_REGISTRY,
        "response.registered",
        f"Unknown response function '{name}'",
        data={"known": sorted(RESPONSE_REGISTRY)},
    )
    return RESPONSE_REGISTRY[key]


def response_name(fn: ResponseFunction) -> Optional[str]:
    """Registry name of fn, preferring the most specific alias."""

    for name, registered in RESPONSE_REGISTRY.items():
        if registered is fn and name != "default":
            return name
    return None


def check_reliability(fn: ResponseFunction, grid: Optional[Iterable[float]] = None) -> None:
    """Reject fn unless it maps [0,1] into [0,1], is monotone and dominates x."""

    if grid is None:
        grid = np.linspace(0.0, 1.0, RELIABILITY_GRID_POINTS)
    xs = sorted(float(x) for x in grid)
    prev = None
    for x in xs:
        y = float(fn(x))
        require_config(
            np.isfinite(y) and 0.0 <= y <= 1.0,
            "response.range",
            "Response function must map into [0, 1]",
            data={"x": x, "f(x)": y},
        )
        require_config(
            y + RELIABILITY_TOL >= x,
            "response.reliability",
            "Response function must satisfy f(x) >= x",
            data={"x": x, "f(x)": y},
        )
        if prev is not None:
            require_config(
                y + RELIABILITY_TOL >= prev,
                "response.monotone",
                "Response function must be non-decreasing",
                data={"x": x, "f(x)": y, "previous": prev},
            )
        prev = y
