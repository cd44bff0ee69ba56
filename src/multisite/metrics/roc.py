"""
ROC curves over noise levels and their trapezoidal AUC.

A ROC curve for one (n, k) is the sequence of ScenarioPoints produced by a
noise sweep, kept in noise order. Integration never assumes the FPRs are
monotone in noise: points are stable-sorted by FPR first. Points carrying a
missing rate (None) are excluded, which joins their defined neighbours with
a straight segment.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from ..invariant_runtime import InsufficientData


@dataclass(frozen=True)
class ScenarioPoint:
    """One (PNP, PPP, FPR, TPR) observation; None marks an undefined rate."""

    pnp: float
    ppp: float
    fpr: Optional[float]
    tpr: Optional[float]
    seed: Optional[int] = None

    @property
    def is_defined(self) -> bool:
        return self.fpr is not None and self.tpr is not None

    def as_dict(self) -> Dict:
        return {"pnp": self.pnp, "ppp": self.ppp, "fpr": self.fpr, "tpr": self.tpr, "seed": self.seed}


@dataclass(frozen=True)
class RocCurve:
    """ScenarioPoints for one (n, k), in the order of the swept noise levels."""

    n: int
    k: int
    points: Tuple[ScenarioPoint, ...]

    @property
    def key(self) -> Tuple[int, int]:
        return self.n, self.k

    @property
    def defined_points(self) -> Tuple[ScenarioPoint, ...]:
        return tuple(p for p in self.points if p.is_defined)

    @property
    def n_missing(self) -> int:
        return len(self.points) - len(self.defined_points)


def roc_arrays(curve: RocCurve) -> Tuple[np.ndarray, np.ndarray]:
    """Defined (FPR, TPR) pairs stable-sorted by FPR (ties keep noise order)."""

    defined = curve.defined_points
    fpr = np.asarray([p.fpr for p in defined], dtype=float)
    tpr = np.asarray([p.tpr for p in defined], dtype=float)
    order = np.argsort(fpr, kind="stable")
    return fpr[order], tpr[order]


def trapezoid_area(x: np.ndarray, y: np.ndarray) -> float:
    """Composite trapezoidal rule over already sorted x."""

    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.shape != y.shape:
        raise ValueError("x and y must have the same shape")
    if x.size < 2:
        return 0.0
    return float(np.trapezoid(y, x))


def integrate(curve: RocCurve) -> float:
    """AUC of a ROC curve; raises InsufficientData with < 2 defined points."""

    fpr, tpr = roc_arrays(curve)
    if fpr.size < 2:
        raise InsufficientData(
            "auc.min_points",
            "At least 2 defined ROC points are required for integration",
            data={"n": curve.n, "k": curve.k, "defined": int(fpr.size), "total": len(curve.points)},
        )
    return trapezoid_area(fpr, tpr)
