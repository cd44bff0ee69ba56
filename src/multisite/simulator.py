"""
Multisite phosphorylation simulator.

Runs time_units independent trials of the k-of-n threshold classifier for one
configuration and summarizes them as a confusion matrix plus realized payoff.
The simulator is a pure function of (config, seed): every call builds its own
np.random.Generator, so runs can be distributed across workers and repeated
calls with the same inputs are identical.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from .config import SimulationConfig, is_count
from .confusion import ConfusionMatrix, accumulate
from .invariant_runtime import require_config
from .trial import Trial, detection_probabilities, draw_trial

# Resolution used to turn a noise level into an integer seed component.
NOISE_SEED_SCALE = 1_000_000


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of one simulator run.

    trials is populated only when detailed reporting was requested and keeps
    generation order.
    """

    config: SimulationConfig
    seed: int
    confusion: ConfusionMatrix
    total_payoff: float
    trials: Optional[Tuple[Trial, ...]] = None

    @property
    def mean_payoff(self) -> float:
        return self.total_payoff / self.config.time_units


def simulate(cfg: SimulationConfig, seed: int, report_trials: bool = False) -> SimulationResult:
    """Simulate cfg.time_units trials with an explicit seed."""

    cfg.validate()
    rng = np.random.default_rng(seed)
    detection = detection_probabilities(cfg)

    trials = [draw_trial(rng, cfg, detection) for _ in range(cfg.time_units)]
    confusion = accumulate(trials)
    assert confusion.total == cfg.time_units
    total_payoff = float(sum(t.payoff for t in trials))

    return SimulationResult(
        config=cfg,
        seed=int(seed),
        confusion=confusion,
        total_payoff=total_payoff,
        trials=tuple(trials) if report_trials else None,
    )


def derive_seed(base_seed: int, n: int, k: int, pnp: float, *extra: int) -> int:
    """Deterministic per-call seed from a run-level seed and the configuration.

    Uses np.random.SeedSequence so nearby inputs give unrelated streams.
    Every component must be a non-negative integer and pnp must lie in [0, 1].
    """

    counts = [base_seed, n, k, *extra]
    require_config(
        all(is_count(c) and c >= 0 for c in counts) and 0.0 <= float(pnp) <= 1.0,
        "seed.entropy",
        "seed components must be non-negative integers with PNP in [0, 1]",
        data={"base_seed": base_seed, "n": n, "k": k, "pnp": pnp, "extra": list(extra)},
    )
    entropy: Sequence[int] = [
        int(base_seed),
        int(n),
        int(k),
        int(round(float(pnp) * NOISE_SEED_SCALE)),
        *[int(e) for e in extra],
    ]
    state = np.random.SeedSequence(list(entropy)).generate_state(1, dtype=np.uint32)
    return int(state[0])
