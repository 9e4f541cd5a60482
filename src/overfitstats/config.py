"""Run configuration and the named scenarios of the walkthrough."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Union

from .exceptions import InvalidParameterError


@dataclass
class SimulationConfig:
    """Calibration/validation simulation configuration."""
    n_trials: int = 1000          # Repetitions
    cal_size: int = 50            # Calibration sample size
    val_size: Optional[int] = 1000  # Validation sample size (None = calibration only)
    population_r2: float = 0.25   # Population effect size
    degree: int = 2               # Polynomial degree of the fitted model
    exact_signal_sd: bool = False  # Analytic sd(signal) instead of 0.6364
    seed: int = 42
    n_jobs: int = 1
    # Logging
    log_dir: Optional[str] = None


@dataclass
class CrossValidationConfig:
    """Cross-validation configuration (simulated sample or CSV)."""
    method: str = "kfold"         # 'kfold' or 'montecarlo'
    n_folds: int = 5              # k for k-fold
    n_repeats: int = 100          # Monte Carlo repetitions
    train_frac: float = 0.8       # Monte Carlo train proportion
    degree: int = 3               # Polynomial degree (simulated data)
    n_rows: int = 300             # Simulated sample size
    population_r2: float = 0.16   # Population effect size (simulated data)
    exact_signal_sd: bool = False
    seed: int = 42
    n_jobs: int = 1
    # Empirical data (replaces the simulated sample when set)
    data_source: Optional[str] = None
    response: Optional[str] = None
    # Logging
    log_dir: Optional[str] = None

    def partitioner_kwargs(self) -> dict:
        if self.method == "kfold":
            return {"n_folds": self.n_folds}
        if self.method == "montecarlo":
            return {"n_repeats": self.n_repeats, "train_frac": self.train_frac}
        raise InvalidParameterError(f"Unknown cross-validation method: {self.method}")


# =============================================================================
# Scenarios
# =============================================================================

OBSERVATIONS = {
    # Quadratic model, small calibration sample, large validation sample
    "obs1": SimulationConfig(degree=2),
    # Same data, cubic model: more flexibility, worse generalisation
    "obs2": SimulationConfig(degree=3),
    # Larger calibration sample: optimism shrinks
    "obs3": SimulationConfig(degree=2, cal_size=500),
    # In-sample R² alone, no validation
    "appendix_a": SimulationConfig(degree=2, val_size=None),
    # 5-fold CV of one 300-row sample
    "appendix_b": CrossValidationConfig(method="kfold"),
    # Leave-group-out: 100 random 80/20 splits of the same sample
    "appendix_c": CrossValidationConfig(method="montecarlo"),
}


def get_observation(name: str) -> Union[SimulationConfig, CrossValidationConfig]:
    """Return a copy of a named scenario configuration."""
    if name not in OBSERVATIONS:
        raise InvalidParameterError(
            f"Unknown observation: {name}. Available: {list(OBSERVATIONS.keys())}"
        )
    return replace(OBSERVATIONS[name])
