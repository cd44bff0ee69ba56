"""
Confusion-matrix accumulation for simulated trials.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable

from .invariant_runtime import UndefinedRate
from .trial import OUTCOME_LABELS, Trial


@dataclass(frozen=True)
class ConfusionMatrix:
    """TP/FN/FP/TN counts; TP + FN + FP + TN equals the number of trials."""

    tp: int = 0
    fn: int = 0
    fp: int = 0
    tn: int = 0

    @property
    def total(self) -> int:
        return self.tp + self.fn + self.fp + self.tn

    @property
    def positives(self) -> int:
        return self.tp + self.fn

    @property
    def negatives(self) -> int:
        return self.fp + self.tn

    def tpr(self) -> float:
        """TP / (TP + FN); raises UndefinedRate when no signal trials occurred."""

        if self.positives == 0:
            raise UndefinedRate("rate.tpr", "TPR undefined: TP + FN == 0", data=self.as_dict())
        return self.tp / self.positives

    def fpr(self) -> float:
        """FP / (FP + TN); raises UndefinedRate when no noise trials occurred."""

        if self.negatives == 0:
            raise UndefinedRate("rate.fpr", "FPR undefined: FP + TN == 0", data=self.as_dict())
        return self.fp / self.negatives

    def accuracy(self) -> float:
        if self.total == 0:
            raise UndefinedRate("rate.accuracy", "accuracy undefined: no trials", data=self.as_dict())
        return (self.tp + self.tn) / self.total

    def __add__(self, other: "ConfusionMatrix") -> "ConfusionMatrix":
        if not isinstance(other, ConfusionMatrix):
            return NotImplemented
        return ConfusionMatrix(
            tp=self.tp + other.tp,
            fn=self.fn + other.fn,
            fp=self.fp + other.fp,
            tn=self.tn + other.tn,
        )

    def as_dict(self) -> Dict[str, int]:
        return {"TP": self.tp, "FN": self.fn, "FP": self.fp, "TN": self.tn}


def accumulate(trials: Iterable[Trial]) -> ConfusionMatrix:
    """Reduce trials to a ConfusionMatrix (order-independent)."""

    counts = {label: 0 for label in OUTCOME_LABELS}
    for trial in trials:
        counts[trial.outcome] += 1
    return ConfusionMatrix(tp=counts["TP"], fn=counts["FN"], fp=counts["FP"], tn=counts["TN"])
