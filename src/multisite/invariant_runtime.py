"""
Error kinds and run-context bookkeeping for the multisite simulator.

Configuration checks are fail-closed: any violation raises
InvalidConfiguration before a single trial is drawn. Recoverable conditions
(an undefined TPR/FPR at one noise level) are recorded as fallbacks in the
active RunContext so a grid run can report them alongside its tables.
"""

from __future__ import annotations

import hashlib
import json
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class MultisiteError(RuntimeError):
    """Base class for simulator errors carrying an invariant id and context."""

    kind = "MultisiteError"

    def __init__(self, invariant_id: str, message: str, data: Optional[Dict[str, Any]] = None):
        self.invariant_id = invariant_id
        self.data = data or {}
        super().__init__(f"[{self.kind}:{invariant_id}] {message} | data={self.data}")


class InvalidConfiguration(MultisiteError):
    """Malformed (n, k, PNP, alpha, time_units) or response function."""

    kind = "InvalidConfiguration"


class UndefinedRate(MultisiteError):
    """TPR or FPR requested from a confusion matrix with a zero denominator."""

    kind = "UndefinedRate"


class InsufficientData(MultisiteError):
    """Fewer than two defined ROC points available for integration."""

    kind = "InsufficientData"


@dataclass
class FallbackRecord:
    fallback_id: str
    detail: Dict[str, Any]


@dataclass
class RunContext:
    """Holds per-run fallback logs (missing-value recoveries)."""

    run_label: Optional[str] = None
    base_seed: Optional[int] = None
    config_hash: Optional[str] = None
    fallback_log: List[FallbackRecord] = field(default_factory=list)

    def record_fallback(self, rec: FallbackRecord) -> None:
        self.fallback_log.append(rec)


_ctx: ContextVar[Optional[RunContext]] = ContextVar("multisite_run_ctx", default=None)


def set_run_context(ctx: Optional[RunContext]):
    return _ctx.set(ctx)


def reset_run_context(token) -> None:
    _ctx.reset(token)


def current_context() -> Optional[RunContext]:
    return _ctx.get()


def _build_data(extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    ctx = current_context()
    data = dict(extra or {})
    if ctx:
        data.setdefault("run_label", ctx.run_label)
        data.setdefault("base_seed", ctx.base_seed)
        data.setdefault("config_hash", ctx.config_hash)
    return data


def require_config(condition: bool, invariant_id: str, message: str, data: Optional[Dict[str, Any]] = None) -> None:
    """Raise InvalidConfiguration unless condition holds."""

    if condition:
        return
    raise InvalidConfiguration(invariant_id, message, data=_build_data(data))


def record_fallback(fallback_id: str, detail: Dict[str, Any]) -> None:
    """Log a missing-value recovery in the active run context, if any."""

    ctx = current_context()
    if ctx:
        ctx.record_fallback(FallbackRecord(fallback_id=fallback_id, detail=_build_data(detail)))


def stable_config_hash(cfg: Dict) -> str:
    """Deterministic hash for config snapshots."""

    payload = json.dumps(cfg, sort_keys=True, default=str).encode("utf-8")
    return hashlib.sha256(payload).hexdigest()
