"""
Run the multisite (n, k) x noise grid and write ROC/AUC tables.

Results are written under results/<run_name>/ (scenarios.csv, auc_table.csv,
failures.csv, summary.json, config_snapshot.json). Command-line flags
override the YAML configuration.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

# Allow running from repo root without installation.
SRC_ROOT = os.path.join(os.path.dirname(os.path.abspath(__file__)), "src")
if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from multisite.experiments.export import write_grid_outputs
from multisite.experiments.grid import run_grid
from multisite.experiments.sweep_config import load_sweep_config, sweep_config_from_dict
from multisite.invariant_runtime import InvalidConfiguration
from multisite.response import RESPONSE_REGISTRY

DEFAULT_CONFIG = os.path.join("config", "default_sweep.yaml")


def configure_logging(level: str) -> logging.Logger:
    log = logging.getLogger("multisite")
    log.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not log.handlers:
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
        log.addHandler(ch)
    return log


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the multisite phosphorylation ROC/AUC grid.")
    parser.add_argument("--config", default=DEFAULT_CONFIG, help="Sweep configuration YAML.")
    parser.add_argument("--n-min", type=int, default=None, help="Smallest site count.")
    parser.add_argument("--n-max", type=int, default=None, help="Largest site count.")
    parser.add_argument("--time-units", type=int, default=None, help="Trials per simulator run.")
    parser.add_argument("--alpha", type=float, default=None, help="Prior probability of a true signal.")
    parser.add_argument("--response", choices=sorted(RESPONSE_REGISTRY), default=None, help="Response function f.")
    parser.add_argument("--seed", type=int, default=None, help="Run-level base seed.")
    parser.add_argument("--workers", type=int, default=None, help="Parallel workers (1 = serial).")
    parser.add_argument("--executor", choices=["process", "thread"], default=None)
    parser.add_argument("--replicates", type=int, default=None, help="Independent sweeps per (n, k).")
    parser.add_argument("--time-budget", type=float, default=None, help="Stop scheduling after this many seconds.")
    parser.add_argument("--out", default=None, help="Output directory (default: results/<run_name>).")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    overrides = {
        "n_min": args.n_min,
        "n_max": args.n_max,
        "time_units": args.time_units,
        "alpha": args.alpha,
        "response": args.response,
        "base_seed": args.seed,
        "workers": args.workers,
        "executor": args.executor,
        "replicates": args.replicates,
        "time_budget_s": args.time_budget,
        "log_level": args.log_level.upper() if args.log_level else None,
    }
    try:
        if os.path.exists(args.config):
            cfg = load_sweep_config(args.config, overrides)
        else:
            cfg = sweep_config_from_dict({}, overrides)
    except InvalidConfiguration as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    log = configure_logging(cfg.log_level)
    result = run_grid(cfg, logger=log)

    run_name = f"multisite_n{cfg.n_min}-{cfg.n_max}_t{cfg.time_units}_seed{cfg.base_seed}"
    out_dir = args.out or os.path.join("results", run_name)
    write_grid_outputs(out_dir, result, config_snapshot=cfg.snapshot(), logger=log)

    for (n, k), reason in result.failures.items():
        log.warning("No AUC for n=%d k=%d: %s", n, k, reason)
    return 0 if not result.failures else 1


if __name__ == "__main__":
    sys.exit(main())
