"""
Grid runner: noise sweeps over every (n, k) configuration.

Iterates a single parametrized list of (n, k) pairs (k = 1..n for each n in
[n_min, n_max]), sweeps each one over the noise levels, integrates its ROC
curve and collects the results into keyed tables.

Failures are isolated per configuration: an InvalidConfiguration or
InsufficientData for one (n, k) is reported in GridResult.failures and the
remaining configurations still run. With workers > 1 each configuration is
computed by a top-level worker in a process (or thread) pool; workers return
their own partial results and the parent merges them single-threaded.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..config import SimulationConfig
from ..invariant_runtime import (
    MultisiteError,
    RunContext,
    reset_run_context,
    set_run_context,
    stable_config_hash,
)
from ..metrics.roc import RocCurve, integrate
from ..stats.resampling import summarize
from .sweep import sweep
from .sweep_config import SweepConfig

ConfigKey = Tuple[int, int]

ABORTED_REASON = "aborted: time budget exceeded"


@dataclass
class GridResult:
    """Keyed outputs of a grid run.

    scenario_table: (n, k) -> ROC curve (first replicate when replicates > 1).
    auc_table: (n, k) -> AUC (replicate mean when replicates > 1).
    failures: (n, k) -> reason, for configurations without an AUC entry.
    """

    scenario_table: Dict[ConfigKey, RocCurve] = field(default_factory=dict)
    auc_table: Dict[ConfigKey, float] = field(default_factory=dict)
    failures: Dict[ConfigKey, str] = field(default_factory=dict)
    replicate_summaries: Dict[ConfigKey, Dict[str, Any]] = field(default_factory=dict)
    fallbacks: List[Dict[str, Any]] = field(default_factory=list)
    aborted: bool = False
    elapsed_s: float = 0.0

    @property
    def completed(self) -> List[ConfigKey]:
        return list(self.auc_table.keys())


def configuration_grid(n_max: int, n_min: int = 1) -> List[ConfigKey]:
    """All (n, k) with n_min <= n <= n_max and 1 <= k <= n, in n-then-k order."""

    return [(n, k) for n in range(int(n_min), int(n_max) + 1) for k in range(1, n + 1)]


def auc_replicates(
    n: int,
    k: int,
    base_config: SimulationConfig,
    noise_levels: Sequence[float],
    base_seed: int,
    replicates: int,
) -> Tuple[RocCurve, List[float]]:
    """Independent sweeps for one (n, k); returns the first curve and all AUCs."""

    if replicates == 1:
        curve = sweep(n, k, noise_levels, base_config, base_seed)
        return curve, [integrate(curve)]

    first_curve = None
    aucs = []
    for r in range(replicates):
        curve = sweep(n, k, noise_levels, base_config, base_seed, replicate=r)
        if first_curve is None:
            first_curve = curve
        aucs.append(integrate(curve))
    return first_curve, aucs


def _run_one_configuration(
    key: ConfigKey,
    base_config: SimulationConfig,
    noise_levels: Sequence[float],
    base_seed: int,
    replicates: int,
    config_hash: Optional[str],
) -> Dict[str, Any]:
    """Top-level worker: everything for one (n, k), failures captured."""

    n, k = key
    ctx = RunContext(run_label=f"n{n}_k{k}", base_seed=base_seed, config_hash=config_hash)
    token = set_run_context(ctx)
    try:
        curve, aucs = auc_replicates(n, k, base_config, noise_levels, base_seed, replicates)
        outcome = {"key": key, "curve": curve, "aucs": aucs, "failure": None}
    except MultisiteError as exc:
        outcome = {"key": key, "curve": None, "aucs": None, "failure": str(exc)}
    finally:
        reset_run_context(token)
    outcome["fallbacks"] = [dict(rec.detail, fallback_id=rec.fallback_id) for rec in ctx.fallback_log]
    return outcome


def run_grid(
    cfg: SweepConfig,
    configurations: Optional[Iterable[ConfigKey]] = None,
    base_config: Optional[SimulationConfig] = None,
    logger: Optional[logging.Logger] = None,
) -> GridResult:
    """Run every configuration and merge the per-configuration results.

    configurations defaults to configuration_grid(cfg.n_max, cfg.n_min).
    base_config overrides the template built from cfg (useful for custom
    response callables; with a process pool it must be picklable).
    """

    log = logger or logging.getLogger(__name__)
    cfg.validate()
    keys = list(configurations) if configurations is not None else configuration_grid(cfg.n_max, cfg.n_min)
    template = base_config or cfg.base_simulation_config()
    levels = cfg.noise_levels()
    config_hash = stable_config_hash(cfg.snapshot())

    log.info(
        "Grid start: %d configurations x %d noise levels, time_units=%d, workers=%d, seed=%d",
        len(keys),
        len(levels),
        template.time_units,
        cfg.workers,
        cfg.base_seed,
    )
    started = time.monotonic()

    def budget_exceeded() -> bool:
        return cfg.time_budget_s is not None and (time.monotonic() - started) > cfg.time_budget_s

    worker_args = (template, levels, cfg.base_seed, cfg.replicates, config_hash)
    outcomes: Dict[ConfigKey, Dict[str, Any]] = {}
    aborted_keys: List[ConfigKey] = []

    if cfg.workers <= 1:
        for key in keys:
            if budget_exceeded():
                aborted_keys = [k for k in keys if k not in outcomes]
                break
            outcomes[key] = _run_one_configuration(key, *worker_args)
    else:
        executor_cls = ThreadPoolExecutor if cfg.executor == "thread" else ProcessPoolExecutor
        with executor_cls(max_workers=cfg.workers) as pool:
            futures = {pool.submit(_run_one_configuration, key, *worker_args): key for key in keys}
            pending = set(futures)
            for fut in as_completed(futures):
                pending.discard(fut)
                if fut.cancelled():
                    continue
                out = fut.result()
                outcomes[out["key"]] = out
                if pending and budget_exceeded():
                    for other in pending:
                        other.cancel()
        aborted_keys = [k for k in keys if k not in outcomes]

    result = _merge(keys, outcomes, aborted_keys, log)
    result.elapsed_s = time.monotonic() - started
    if result.aborted:
        log.warning(
            "Time budget of %.1fs exceeded: %d configurations not run",
            cfg.time_budget_s,
            len(aborted_keys),
        )
    log.info(
        "Grid done in %.2fs: %d completed, %d failed, %d missing-rate points",
        result.elapsed_s,
        len(result.auc_table),
        len(result.failures),
        len(result.fallbacks),
    )
    return result


def _merge(
    keys: Sequence[ConfigKey],
    outcomes: Dict[ConfigKey, Dict[str, Any]],
    aborted_keys: Sequence[ConfigKey],
    log: logging.Logger,
) -> GridResult:
    """Single-threaded merge in configuration order."""

    result = GridResult(aborted=bool(aborted_keys))
    for key in keys:
        if key in aborted_keys:
            result.failures[key] = ABORTED_REASON
            continue
        out = outcomes[key]
        result.fallbacks.extend(out["fallbacks"])
        if out["failure"] is not None:
            result.failures[key] = out["failure"]
            log.warning("Configuration n=%d k=%d failed: %s", key[0], key[1], out["failure"])
            continue
        aucs = out["aucs"]
        result.scenario_table[key] = out["curve"]
        if len(aucs) == 1:
            result.auc_table[key] = aucs[0]
        else:
            summary = summarize(aucs)
            summary["aucs"] = list(aucs)
            result.replicate_summaries[key] = summary
            result.auc_table[key] = summary["mean"]
        log.info("n=%d k=%d AUC=%.3f", key[0], key[1], result.auc_table[key])
    return result
