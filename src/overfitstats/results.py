"""Results containers for repeated fit/evaluate runs.

Each trial (fresh draw or resampling split) produces one immutable
TrialResult. The list of results is reduced exactly once, at the end of a
run, into an AggregateReport of means.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
from scipy import stats

from .exceptions import InvalidParameterError
from .formatting import format_statistics_table, format_summary_header, format_value
from .metrics import FitStatistics


@dataclass(frozen=True)
class TrialResult:
    """Statistics of one repetition.

    ``train`` is the calibration (in-sample) fit; ``test`` is the
    validation/held-out evaluation, or None for calibration-only runs.
    """
    trial_id: int
    train: FitStatistics
    test: Optional[FitStatistics] = None

    def to_dict(self) -> Dict[str, Any]:
        record = {
            "trial_id": self.trial_id,
            "train_r2": self.train.r2,
            "train_mse": self.train.mse,
            "train_n": self.train.n_obs,
        }
        if self.test is not None:
            record.update({
                "test_r2": self.test.r2,
                "test_mse": self.test.mse,
                "test_n": self.test.n_obs,
            })
        return record


def _mean_and_se(values: np.ndarray) -> tuple[float, float]:
    n = values.shape[0]
    mean = float(np.sum(values) / n)
    se = float(np.std(values, ddof=1) / np.sqrt(n)) if n > 1 else float("nan")
    return mean, se


@dataclass(frozen=True)
class AggregateReport:
    """Arithmetic means of R² and MSE over all trials.

    Standard errors are Monte Carlo standard errors of the means
    (sd / sqrt(n_trials)); they are NaN for a single trial.
    """
    n_trials: int
    train_r2: float
    train_mse: float
    train_r2_se: float
    train_mse_se: float
    test_r2: Optional[float] = None
    test_mse: Optional[float] = None
    test_r2_se: Optional[float] = None
    test_mse_se: Optional[float] = None

    @property
    def has_test(self) -> bool:
        return self.test_r2 is not None

    @property
    def optimism(self) -> Optional[float]:
        """Mean train R² minus mean test R²."""
        if not self.has_test:
            return None
        return self.train_r2 - self.test_r2

    def confint(self, name: str, alpha: float = 0.05) -> tuple[float, float]:
        """Normal-approximation interval for the mean of ``name`` (e.g. 'test_r2')."""
        mean = getattr(self, name)
        se = getattr(self, f"{name}_se")
        if mean is None:
            raise InvalidParameterError(f"{name} is not available in this report")
        if se is None or np.isnan(se):
            raise InvalidParameterError(
                f"{name} has no standard error with {self.n_trials} trial(s)"
            )
        z = stats.norm.ppf(1 - alpha / 2)
        return (mean - z * se, mean + z * se)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "n_trials": self.n_trials,
            "train_r2": self.train_r2,
            "train_mse": self.train_mse,
            "train_r2_se": self.train_r2_se,
            "train_mse_se": self.train_mse_se,
            "test_r2": self.test_r2,
            "test_mse": self.test_mse,
            "test_r2_se": self.test_r2_se,
            "test_mse_se": self.test_mse_se,
            "optimism": self.optimism,
        }


def aggregate(results: Sequence[TrialResult]) -> AggregateReport:
    """Reduce per-trial results to their means.

    Either every result carries test statistics or none does; a mixture
    would average over inconsistent trial counts.
    """
    if len(results) == 0:
        raise InvalidParameterError("cannot aggregate an empty set of trials")
    with_test = [r.test is not None for r in results]
    if any(with_test) and not all(with_test):
        raise InvalidParameterError("some trials lack test statistics; refusing to aggregate")

    train_r2, train_r2_se = _mean_and_se(np.array([r.train.r2 for r in results]))
    train_mse, train_mse_se = _mean_and_se(np.array([r.train.mse for r in results]))
    report = dict(
        n_trials=len(results),
        train_r2=train_r2,
        train_mse=train_mse,
        train_r2_se=train_r2_se,
        train_mse_se=train_mse_se,
    )
    if all(with_test):
        test_r2, test_r2_se = _mean_and_se(np.array([r.test.r2 for r in results]))
        test_mse, test_mse_se = _mean_and_se(np.array([r.test.mse for r in results]))
        report.update(
            test_r2=test_r2,
            test_mse=test_mse,
            test_r2_se=test_r2_se,
            test_mse_se=test_mse_se,
        )
    return AggregateReport(**report)


def results_frame(results: Sequence[TrialResult]) -> pd.DataFrame:
    """One row per trial."""
    return pd.DataFrame([r.to_dict() for r in results])


@dataclass
class SimulationResults:
    """Outcome of a calibration/validation simulation run.

    Attributes
    ----------
    report : AggregateReport
        Means across trials (train = calibration, test = validation).
    trials : list[TrialResult]
        Per-trial statistics, in trial order.
    config : dict
        Parameters of the run (population R², degree, sizes, seed).
    """
    report: AggregateReport
    trials: List[TrialResult] = field(repr=False)
    config: Dict[str, Any] = field(default_factory=dict)

    def to_frame(self) -> pd.DataFrame:
        return results_frame(self.trials)

    def summary(self) -> str:
        cfg = self.config
        header = format_summary_header(
            title="Overfitting Simulation Results",
            left=[
                ("Population R²:", format_value(cfg.get("population_r2"))),
                ("Calibration n:", str(cfg.get("cal_size"))),
                ("No. Trials:", str(self.report.n_trials)),
            ],
            right=[
                ("Model:", f"polynomial, degree {cfg.get('degree')}"),
                (
                    ("Validation n:", str(cfg.get("val_size")))
                    if self.report.has_test
                    else ("Mode:", "calibration only")
                ),
                ("Seed:", str(cfg.get("seed"))),
            ],
        )
        r = self.report
        rows = [("Calibration", r.train_r2, r.train_r2_se, r.train_mse, r.train_mse_se)]
        if r.has_test:
            rows.append(("Validation", r.test_r2, r.test_r2_se, r.test_mse, r.test_mse_se))
        parts = [header, format_statistics_table(rows)]
        if r.has_test:
            parts.append(f"Optimism (calibration R² - validation R²): {r.optimism:.2f}")
        parts.append("=" * 78)
        return "\n".join(parts)

    def __repr__(self) -> str:
        r = self.report
        if r.has_test:
            return (
                f"<SimulationResults: trials={r.n_trials}, "
                f"calibration R²={r.train_r2:.2f}, validation R²={r.test_r2:.2f}>"
            )
        return f"<SimulationResults: trials={r.n_trials}, calibration R²={r.train_r2:.2f}>"


@dataclass
class CrossValidationResults:
    """Whole-data baseline plus cross-validated estimate.

    The baseline is the fit of the full dataset evaluated on itself; it
    is reported alongside, never folded into, the cross-validated means.
    """
    whole: FitStatistics
    report: AggregateReport
    folds: List[TrialResult] = field(repr=False)
    method: str = "kfold"
    formula: str = ""
    config: Dict[str, Any] = field(default_factory=dict)

    @property
    def cv_r2(self) -> float:
        return self.report.test_r2

    @property
    def cv_mse(self) -> float:
        return self.report.test_mse

    def to_frame(self) -> pd.DataFrame:
        return results_frame(self.folds)

    def summary(self) -> str:
        label = "Folds:" if self.method == "kfold" else "Repetitions:"
        header = format_summary_header(
            title="Cross-Validation Results",
            left=[
                ("Method:", self.method),
                ("No. Observations:", str(self.whole.n_obs)),
            ],
            right=[
                (label, str(self.report.n_trials)),
                ("Seed:", str(self.config.get("seed"))),
            ],
        )
        r = self.report
        rows = [
            ("Whole data", self.whole.r2, None, self.whole.mse, None),
            ("Cross-validated", r.test_r2, r.test_r2_se, r.test_mse, r.test_mse_se),
        ]
        return "\n".join([
            header,
            f"Model: {self.formula}",
            format_statistics_table(rows),
            "=" * 78,
        ])

    def __repr__(self) -> str:
        return (
            f"<CrossValidationResults: method={self.method}, whole R²={self.whole.r2:.2f}, "
            f"cv R²={self.report.test_r2:.2f}>"
        )
