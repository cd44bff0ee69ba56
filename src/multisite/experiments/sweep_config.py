"""
Centralized sweep defaults and YAML configuration loading.

Module constants are the single source of truth for defaults; a YAML file
may override any of them section by section.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
import yaml

from ..config import Payoffs, SimulationConfig
from ..invariant_runtime import require_config
from ..response import get_response_function

# Site-count grid bounds; k ranges over 1..n for each n.
DEFAULT_N_MIN = 1
DEFAULT_N_MAX = 10
# Noise sweep: 0.00, 0.01, ..., 1.00 (101 points).
DEFAULT_NOISE_START = 0.0
DEFAULT_NOISE_STOP = 1.0
DEFAULT_NOISE_STEP = 0.01
# Decimals kept when building noise levels, avoids 0.30000000000000004.
NOISE_DECIMALS = 6
DEFAULT_TIME_UNITS = 100
DEFAULT_ALPHA = 0.5
DEFAULT_RESPONSE = "amplified"
DEFAULT_BASE_SEED = 2024
DEFAULT_WORKERS = 1
DEFAULT_EXECUTOR = "process"
DEFAULT_REPLICATES = 1
DEFAULT_LOG_LEVEL = "INFO"

EXECUTORS = ("process", "thread")


@dataclass(frozen=True)
class SweepConfig:
    """Everything needed to run a full (n, k) x noise grid."""

    n_min: int = DEFAULT_N_MIN
    n_max: int = DEFAULT_N_MAX
    noise_start: float = DEFAULT_NOISE_START
    noise_stop: float = DEFAULT_NOISE_STOP
    noise_step: float = DEFAULT_NOISE_STEP
    time_units: int = DEFAULT_TIME_UNITS
    alpha: float = DEFAULT_ALPHA
    payoffs: Payoffs = field(default_factory=Payoffs)
    response: str = DEFAULT_RESPONSE
    base_seed: int = DEFAULT_BASE_SEED
    workers: int = DEFAULT_WORKERS
    executor: str = DEFAULT_EXECUTOR
    time_budget_s: Optional[float] = None
    replicates: int = DEFAULT_REPLICATES
    log_level: str = DEFAULT_LOG_LEVEL

    def validate(self) -> None:
        data = self.snapshot()
        require_config(self.n_min >= 1, "sweep.n_min", "n_min must be >= 1", data)
        require_config(self.n_max >= self.n_min, "sweep.n_max", "n_max must be >= n_min", data)
        require_config(self.workers >= 1, "sweep.workers", "workers must be >= 1", data)
        require_config(self.executor in EXECUTORS, "sweep.executor", f"executor must be one of {EXECUTORS}", data)
        require_config(self.replicates >= 1, "sweep.replicates", "replicates must be >= 1", data)
        require_config(self.base_seed >= 0, "sweep.base_seed", "base_seed must be non-negative", data)
        require_config(
            self.time_budget_s is None or self.time_budget_s > 0,
            "sweep.time_budget",
            "time_budget_s must be positive when set",
            data,
        )
        self.noise_levels()
        self.base_simulation_config().validate()

    def noise_levels(self) -> List[float]:
        return noise_levels(self.noise_start, self.noise_stop, self.noise_step)

    def base_simulation_config(self) -> SimulationConfig:
        """Template config; the sweep fills in n, k and PNP."""

        return SimulationConfig(
            n=1,
            k=1,
            pnp=0.0,
            alpha=self.alpha,
            time_units=self.time_units,
            payoffs=self.payoffs,
            response=get_response_function(self.response),
        )

    def snapshot(self) -> Dict[str, Any]:
        return asdict(self)


def noise_levels(start: float, stop: float, step: float) -> List[float]:
    """Inclusive, rounded noise grid start, start + step, ..., stop."""

    require_config(step > 0, "noise.step", "noise step must be positive", {"step": step})
    require_config(
        0.0 <= start <= stop <= 1.0,
        "noise.range",
        "noise range must satisfy 0 <= start <= stop <= 1",
        {"start": start, "stop": stop},
    )
    count = int(np.floor((stop - start) / step + 1e-9)) + 1
    levels = [round(start + i * step, NOISE_DECIMALS) for i in range(count)]
    return [min(x, stop) for x in levels]


def load_sweep_config(path: str, overrides: Optional[Dict[str, Any]] = None) -> SweepConfig:
    """Read a YAML sweep file; keys in overrides (flat field names) win."""

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return sweep_config_from_dict(raw, overrides)


def sweep_config_from_dict(raw: Dict[str, Any], overrides: Optional[Dict[str, Any]] = None) -> SweepConfig:
    simulation = raw.get("simulation", {}) or {}
    grid = raw.get("grid", {}) or {}
    noise = raw.get("noise", {}) or {}
    payoffs = raw.get("payoffs", {}) or {}
    execution = raw.get("execution", {}) or {}
    logging_cfg = raw.get("logging", {}) or {}

    values: Dict[str, Any] = {
        "n_min": int(grid.get("n_min", DEFAULT_N_MIN)),
        "n_max": int(grid.get("n_max", DEFAULT_N_MAX)),
        "noise_start": float(noise.get("start", DEFAULT_NOISE_START)),
        "noise_stop": float(noise.get("stop", DEFAULT_NOISE_STOP)),
        "noise_step": float(noise.get("step", DEFAULT_NOISE_STEP)),
        "time_units": int(simulation.get("time_units", DEFAULT_TIME_UNITS)),
        "alpha": float(simulation.get("alpha", DEFAULT_ALPHA)),
        "response": str(simulation.get("response", DEFAULT_RESPONSE)),
        "payoffs": Payoffs(
            tp=float(payoffs.get("tp", 1.0)),
            fp=float(payoffs.get("fp", -1.0)),
            fn=float(payoffs.get("fn", -1.0)),
            tn=float(payoffs.get("tn", 1.0)),
        ),
        "base_seed": int(execution.get("base_seed", DEFAULT_BASE_SEED)),
        "workers": int(execution.get("workers", DEFAULT_WORKERS)),
        "executor": str(execution.get("executor", DEFAULT_EXECUTOR)),
        "time_budget_s": execution.get("time_budget_s"),
        "replicates": int(execution.get("replicates", DEFAULT_REPLICATES)),
        "log_level": str(logging_cfg.get("level", DEFAULT_LOG_LEVEL)).upper(),
    }
    if values["time_budget_s"] is not None:
        values["time_budget_s"] = float(values["time_budget_s"])
    for key, val in (overrides or {}).items():
        if val is not None:
            values[key] = val

    cfg = SweepConfig(**values)
    cfg.validate()
    return cfg
