"""
Closed-form expectations of the threshold classifier.

With per-site probabilities independent, the classifier fires with
probability P(Bin(n, PNP) >= k) without a signal and P(Bin(n, PPP) >= k)
with one, so FPR and TPR are known exactly. These serve as the large-sample
limit of the simulator and as regression references for the analyzer.
"""

from __future__ import annotations

from typing import Iterable, Tuple

from .config import SimulationConfig
from .metrics.roc import RocCurve, ScenarioPoint
from .trial import detection_probabilities


def expected_rates(cfg: SimulationConfig) -> Tuple[float, float]:
    """Exact (FPR, TPR) for cfg."""

    cfg.validate()
    detection = detection_probabilities(cfg)
    return detection.noise, detection.signal


def expected_payoff(cfg: SimulationConfig) -> float:
    """Expected payoff per trial."""

    fpr, tpr = expected_rates(cfg)
    p = cfg.payoffs
    signal = tpr * p.tp + (1.0 - tpr) * p.fn
    noise = fpr * p.fp + (1.0 - fpr) * p.tn
    return cfg.alpha * signal + (1.0 - cfg.alpha) * noise


def theoretical_curve(n: int, k: int, noise_levels: Iterable[float], base_config: SimulationConfig) -> RocCurve:
    """Exact ROC curve for (n, k) over noise_levels."""

    cfg_nk = base_config.with_sites(n, k)
    points = []
    for pnp in noise_levels:
        cfg = cfg_nk.with_noise(pnp)
        fpr, tpr = expected_rates(cfg)
        points.append(ScenarioPoint(pnp=cfg.pnp, ppp=cfg.ppp, fpr=fpr, tpr=tpr))
    return RocCurve(n=cfg_nk.n, k=cfg_nk.k, points=tuple(points))
