"""
Schema contract validators for grid export artifacts.

Each CSV artifact is described by a column -> cell kind mapping:
"count" (integer), "unit" (float in [0, 1]) or "unit?" (same, but an empty
cell is the missing-rate marker). Validators are pandas-free and return
(ok, errors) tuples.
"""

from __future__ import annotations

import csv
import json
import math
from typing import Dict, List, Optional, Tuple

AUC_TABLE_SCHEMA = {"n": "count", "k": "count", "auc": "unit"}

SCENARIOS_SCHEMA = {
    "n": "count",
    "k": "count",
    "pnp": "unit",
    "ppp": "unit",
    "fpr": "unit?",
    "tpr": "unit?",
    "seed": "count?",
}

REQUIRED_SUMMARY_KEYS = ["metadata", "auc_table", "failures", "missing_rate_points", "reporting_version"]

REQUIRED_SUMMARY_METADATA_KEYS = ["n_configurations", "n_completed", "n_failed", "aborted", "auc_decimals"]


def validate_auc_table_csv(path: str) -> Tuple[bool, List[str]]:
    rows, errors = _load_table(path, AUC_TABLE_SCHEMA)
    seen = set()
    for idx, row in enumerate(rows):
        key = (row.get("n"), row.get("k"))
        if key in seen:
            errors.append(f"{path}: row {idx} duplicate configuration n={key[0]} k={key[1]}")
        seen.add(key)
    return not errors, errors


def validate_scenarios_csv(path: str) -> Tuple[bool, List[str]]:
    _, errors = _load_table(path, SCENARIOS_SCHEMA)
    return not errors, errors


def validate_summary_json(path: str) -> Tuple[bool, List[str]]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, ValueError) as exc:
        return False, [f"{path}: unreadable JSON: {exc}"]
    if not isinstance(payload, dict):
        return False, [f"{path}: top level must be an object"]

    errors = [f"{path}: missing key '{key}'" for key in REQUIRED_SUMMARY_KEYS if key not in payload]
    metadata = payload.get("metadata")
    if isinstance(metadata, dict):
        errors.extend(f"{path}: metadata lacks '{key}'" for key in REQUIRED_SUMMARY_METADATA_KEYS if key not in metadata)
    elif "metadata" in payload:
        errors.append(f"{path}: metadata must be an object")
    if "reporting_version" in payload and not isinstance(payload["reporting_version"], str):
        errors.append(f"{path}: reporting_version must be a string")
    for idx, rec in enumerate(payload.get("auc_table") or []):
        auc = rec.get("auc") if isinstance(rec, dict) else None
        if isinstance(auc, bool) or not isinstance(auc, (int, float)) or not 0.0 <= auc <= 1.0:
            errors.append(f"{path}: auc_table[{idx}] has invalid auc {auc!r}")
    return not errors, errors


def _load_table(path: str, schema: Dict[str, str]) -> Tuple[List[Dict[str, str]], List[str]]:
    """Read a CSV, check its header against schema and every cell by kind."""

    try:
        with open(path, newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            header = reader.fieldnames or []
            rows = list(reader)
    except OSError as exc:
        return [], [f"{path}: unreadable CSV: {exc}"]

    errors = [f"missing column: {col}" for col in schema if col not in header]
    if not header:
        errors = ["missing CSV header"]
    if errors:
        return rows, errors
    if not rows:
        return rows, [f"{path}: no rows found"]
    for idx, row in enumerate(rows):
        for col, kind in schema.items():
            problem = _cell_problem(row.get(col), kind)
            if problem:
                errors.append(f"{path}: row {idx} {problem} '{col}'")
    return rows, errors


def _cell_problem(raw: Optional[str], kind: str) -> Optional[str]:
    """Describe what is wrong with one cell, or None when it is valid."""

    optional = kind.endswith("?")
    text = (raw or "").strip()
    if not text:
        return None if optional else "missing"
    if kind.startswith("count"):
        try:
            int(text)
        except ValueError:
            return "invalid int"
        return None
    try:
        value = float(text)
    except ValueError:
        return "invalid float"
    if not math.isfinite(value):
        return "non-finite"
    if not 0.0 <= value <= 1.0:
        return "outside [0, 1]"
    return None
