"""
Single-trial generator for the k-of-n threshold classifier.

Each simulated time unit draws whether a true signal is present
(u1 <= alpha), then whether at least k of the n sites end up phosphorylated,
using the noise probability PNP without a signal and PPP = f(PNP) with one.
The binomial draw is replaced by its exact tail probability and a second
uniform draw u2 <= P(Bin(n, p) >= k).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .binomial import binomial_sf
from .config import SimulationConfig

OUTCOME_LABELS = ("TP", "FN", "FP", "TN")


@dataclass(frozen=True)
class Trial:
    """One simulated decision instance."""

    actual: bool
    predicted: bool
    payoff: float

    @property
    def outcome(self) -> str:
        if self.actual:
            return "TP" if self.predicted else "FN"
        return "FP" if self.predicted else "TN"


@dataclass(frozen=True)
class DetectionProbabilities:
    """P(classified active | no signal) and P(classified active | signal)."""

    noise: float
    signal: float


def detection_probabilities(cfg: SimulationConfig) -> DetectionProbabilities:
    """Per-trial threshold-crossing probabilities for both conditions."""

    return DetectionProbabilities(
        noise=binomial_sf(cfg.k, cfg.n, cfg.pnp),
        signal=binomial_sf(cfg.k, cfg.n, cfg.ppp),
    )


def draw_trial(
    rng: np.random.Generator,
    cfg: SimulationConfig,
    detection: Optional[DetectionProbabilities] = None,
) -> Trial:
    """Draw one Trial; pass precomputed detection probabilities inside loops."""

    if detection is None:
        detection = detection_probabilities(cfg)
    u1 = float(rng.random())
    actual = cfg.alpha > 0.0 and u1 <= cfg.alpha
    p_detect = detection.signal if actual else detection.noise
    # A zero probability never fires, even on a draw of exactly 0.0.
    u2 = float(rng.random())
    predicted = p_detect > 0.0 and u2 <= p_detect
    return Trial(actual=actual, predicted=predicted, payoff=cfg.payoffs.lookup(actual, predicted))

