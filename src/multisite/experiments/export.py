"""
Tabular export of grid results for downstream plotting and reporting.

The core keeps keyed tables; flattening happens only here. Files written by
write_grid_outputs (under results_dir):

  - scenarios.csv: long format, one row per (n, k, noise level)
  - auc_table.csv: one row per completed (n, k)
  - failures.csv: one row per configuration without an AUC
  - summary.json: metadata, AUC records, failures, missing-rate fallbacks
  - config_snapshot.json: sweep configuration (hash stored in summary)

Missing rates are written as empty cells (pd.NA in frames), never NaN.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from ..invariant_runtime import stable_config_hash
from ..metrics.roc import RocCurve, ScenarioPoint
from .grid import ConfigKey, GridResult

REPORTING_VERSION = "multisite_v1"
# AUC values are rounded to this many decimals on export.
AUC_DECIMALS = 3

SCENARIO_COLUMNS = ["n", "k", "pnp", "ppp", "fpr", "tpr", "seed"]
AUC_COLUMNS = ["n", "k", "auc"]
REPLICATE_COLUMNS = ["auc_std", "auc_ci_low", "auc_ci_high", "replicates"]
FAILURE_COLUMNS = ["n", "k", "reason"]


def scenario_frame(scenario_table: Dict[ConfigKey, RocCurve]) -> pd.DataFrame:
    """Long-format frame of every ScenarioPoint, in configuration then noise order."""

    rows = []
    for (n, k), curve in scenario_table.items():
        for p in curve.points:
            rows.append({"n": n, "k": k, "pnp": p.pnp, "ppp": p.ppp, "fpr": p.fpr, "tpr": p.tpr, "seed": p.seed})
    df = pd.DataFrame.from_records(rows, columns=SCENARIO_COLUMNS)
    df["fpr"] = df["fpr"].astype("Float64")
    df["tpr"] = df["tpr"].astype("Float64")
    df["seed"] = df["seed"].astype("Int64")
    return df


def wide_scenario_frame(scenario_table: Dict[ConfigKey, RocCurve]) -> pd.DataFrame:
    """Plotting layout: one PNP row per noise level, FPR_n_k / TPR_n_k columns."""

    long_df = scenario_frame(scenario_table)
    if long_df.empty:
        return pd.DataFrame(columns=["pnp"])
    columns = {}
    for (n, k), group in long_df.groupby(["n", "k"], sort=False):
        indexed = group.set_index("pnp")
        columns[f"FPR_{n}_{k}"] = indexed["fpr"]
        columns[f"TPR_{n}_{k}"] = indexed["tpr"]
    wide = pd.DataFrame(columns)
    wide.index.name = "pnp"
    return wide.reset_index()


def auc_frame(result: GridResult, decimals: int = AUC_DECIMALS) -> pd.DataFrame:
    """One row per completed configuration; replicate columns when available."""

    rows = []
    for (n, k), auc in result.auc_table.items():
        row = {"n": n, "k": k, "auc": round(float(auc), decimals)}
        summary = result.replicate_summaries.get((n, k))
        if summary:
            row.update(
                {
                    "auc_std": round(summary["std"], decimals),
                    "auc_ci_low": round(summary["ci_low"], decimals),
                    "auc_ci_high": round(summary["ci_high"], decimals),
                    "replicates": summary["n"],
                }
            )
        rows.append(row)
    columns = AUC_COLUMNS + (REPLICATE_COLUMNS if result.replicate_summaries else [])
    return pd.DataFrame.from_records(rows, columns=columns)


def failures_frame(result: GridResult) -> pd.DataFrame:
    rows = [{"n": n, "k": k, "reason": reason} for (n, k), reason in result.failures.items()]
    return pd.DataFrame.from_records(rows, columns=FAILURE_COLUMNS)


def write_grid_outputs(
    results_dir: str,
    result: GridResult,
    config_snapshot: Optional[Dict] = None,
    logger: Optional[logging.Logger] = None,
) -> Dict[str, str]:
    """Persist grid tables; returns a mapping artifact name -> path."""

    log = logger or logging.getLogger(__name__)
    os.makedirs(results_dir, exist_ok=True)
    paths = {
        "scenarios": os.path.join(results_dir, "scenarios.csv"),
        "auc_table": os.path.join(results_dir, "auc_table.csv"),
        "failures": os.path.join(results_dir, "failures.csv"),
        "summary": os.path.join(results_dir, "summary.json"),
    }

    scenario_frame(result.scenario_table).to_csv(paths["scenarios"], index=False)
    auc_df = auc_frame(result)
    auc_df.to_csv(paths["auc_table"], index=False)
    failures_frame(result).to_csv(paths["failures"], index=False)

    metadata = {
        "n_configurations": len(result.auc_table) + len(result.failures),
        "n_completed": len(result.auc_table),
        "n_failed": len(result.failures),
        "aborted": result.aborted,
        "elapsed_s": result.elapsed_s,
        "auc_decimals": AUC_DECIMALS,
    }
    if config_snapshot:
        snapshot_path = os.path.join(results_dir, "config_snapshot.json")
        with open(snapshot_path, "w", encoding="utf-8") as f:
            json.dump(sanitize_for_json(config_snapshot), f, indent=2)
        paths["config_snapshot"] = snapshot_path
        metadata["config_hash"] = stable_config_hash(sanitize_for_json(config_snapshot))

    summary = {
        "metadata": metadata,
        "auc_table": auc_df.to_dict(orient="records"),
        "failures": [{"n": n, "k": k, "reason": r} for (n, k), r in result.failures.items()],
        "missing_rate_points": len(result.fallbacks),
        "fallbacks": result.fallbacks,
        "reporting_version": REPORTING_VERSION,
    }
    with open(paths["summary"], "w", encoding="utf-8") as f:
        json.dump(sanitize_for_json(summary), f, indent=2)

    log.info("Wrote grid outputs to %s (%d AUC rows)", results_dir, len(auc_df))
    return paths


def read_auc_table(path: str) -> Dict[ConfigKey, float]:
    """Re-import auc_table.csv as a keyed mapping."""

    df = pd.read_csv(path)
    return {(int(r.n), int(r.k)): float(r.auc) for r in df.itertuples(index=False)}


def read_scenario_table(path: str) -> Dict[ConfigKey, RocCurve]:
    """Re-import scenarios.csv; empty rate cells come back as None."""

    df = pd.read_csv(path, dtype={"fpr": "Float64", "tpr": "Float64", "seed": "Int64"})
    table: Dict[ConfigKey, RocCurve] = {}
    for (n, k), group in df.groupby(["n", "k"], sort=False):
        points: List[ScenarioPoint] = []
        for r in group.itertuples(index=False):
            points.append(
                ScenarioPoint(
                    pnp=float(r.pnp),
                    ppp=float(r.ppp),
                    fpr=_optional_float(r.fpr),
                    tpr=_optional_float(r.tpr),
                    seed=None if pd.isna(r.seed) else int(r.seed),
                )
            )
        key: Tuple[int, int] = (int(n), int(k))
        table[key] = RocCurve(n=key[0], k=key[1], points=tuple(points))
    return table


def _optional_float(value) -> Optional[float]:
    return None if pd.isna(value) else float(value)


def sanitize_for_json(obj):
    """Convert numpy/pandas scalars and containers to JSON-serializable types."""

    if isinstance(obj, dict):
        return {str(k) if isinstance(k, tuple) else k: sanitize_for_json(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [sanitize_for_json(v) for v in obj]
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, np.ndarray):
        return [sanitize_for_json(v) for v in obj.tolist()]
    if obj is pd.NA:
        return None
    if isinstance(obj, float) and (obj != obj):  # NaN check
        return None
    return obj
