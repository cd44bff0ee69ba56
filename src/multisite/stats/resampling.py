"""
Resampling summaries for replicate AUC estimates.
"""

from __future__ import annotations

from typing import Dict, Iterable, Tuple

import numpy as np

# Fixed resampling seed so summaries are reproducible.
BOOTSTRAP_SEED = 0


def bootstrap_ci(values: Iterable[float], n_boot: int = 1000, alpha: float = 0.05) -> Tuple[float, float]:
    """Percentile bootstrap CI for the mean."""

    values = np.asarray(list(values), dtype=float)
    if values.size == 0:
        raise ValueError("bootstrap_ci requires at least one value")
    if values.size == 1:
        v = float(values[0])
        return v, v
    rng = np.random.default_rng(BOOTSTRAP_SEED)
    means = []
    for _ in range(n_boot):
        sample = rng.choice(values, size=values.size, replace=True)
        means.append(sample.mean())
    lo = float(np.quantile(means, alpha / 2.0))
    hi = float(np.quantile(means, 1.0 - alpha / 2.0))
    return lo, hi


def summarize(values: Iterable[float], n_boot: int = 1000, alpha: float = 0.05) -> Dict[str, float]:
    """Mean, sample std and bootstrap CI of replicate values."""

    arr = np.asarray(list(values), dtype=float)
    if arr.size == 0:
        raise ValueError("summarize requires at least one value")
    lo, hi = bootstrap_ci(arr, n_boot=n_boot, alpha=alpha)
    return {
        "mean": float(arr.mean()),
        "std": float(arr.std(ddof=1)) if arr.size > 1 else 0.0,
        "ci_low": lo,
        "ci_high": hi,
        "n": int(arr.size),
    }
