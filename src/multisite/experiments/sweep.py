"""
Noise sweep for a single (n, k): one simulator call per noise level.

Each noise level gets its own seed derived from (base_seed, n, k, PNP), so a
point is reproducible on its own regardless of which worker computes it.
Rates that are undefined for a run (no signal or no noise trials drawn) are
stored as None and recorded as a fallback; they are never turned into NaN.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Tuple

from ..config import SimulationConfig
from ..invariant_runtime import UndefinedRate, record_fallback
from ..metrics.roc import RocCurve, ScenarioPoint
from ..simulator import SimulationResult, derive_seed, simulate


def sweep(
    n: int,
    k: int,
    noise_levels: Iterable[float],
    base_config: SimulationConfig,
    base_seed: int,
    replicate: Optional[int] = None,
    logger: Optional[logging.Logger] = None,
) -> RocCurve:
    """Run the simulator at every noise level and return the ROC curve."""

    log = logger or logging.getLogger(__name__)
    cfg_nk = base_config.with_sites(n, k)
    extra: Tuple[int, ...] = () if replicate is None else (int(replicate),)

    points = []
    for pnp in noise_levels:
        cfg = cfg_nk.with_noise(pnp)
        # Seed entropy must be non-negative; reject bad (n, k, PNP) first.
        cfg.validate()
        seed = derive_seed(base_seed, cfg.n, cfg.k, cfg.pnp, *extra)
        result = simulate(cfg, seed)
        points.append(scenario_point(result, log))

    return RocCurve(n=cfg_nk.n, k=cfg_nk.k, points=tuple(points))


def scenario_point(result: SimulationResult, log: logging.Logger) -> ScenarioPoint:
    """Derive (PNP, PPP, FPR, TPR) from one run, None for undefined rates."""

    cfg = result.config
    fpr = _rate_or_missing(result, "fpr", log)
    tpr = _rate_or_missing(result, "tpr", log)
    return ScenarioPoint(pnp=cfg.pnp, ppp=cfg.ppp, fpr=fpr, tpr=tpr, seed=result.seed)


def _rate_or_missing(result: SimulationResult, which: str, log: logging.Logger) -> Optional[float]:
    try:
        return getattr(result.confusion, which)()
    except UndefinedRate as exc:
        cfg = result.config
        detail = {
            "rate": which,
            "n": cfg.n,
            "k": cfg.k,
            "pnp": cfg.pnp,
            "seed": result.seed,
            "confusion": result.confusion.as_dict(),
        }
        record_fallback("rate.missing", detail)
        log.debug("Missing %s at n=%d k=%d pnp=%.4f: %s", which.upper(), cfg.n, cfg.k, cfg.pnp, exc)
        return None
