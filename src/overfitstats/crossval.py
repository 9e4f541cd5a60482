"""
Resampling cross-validation of a fixed dataset.

    1. Fit the model on ALL rows -> whole-data baseline (reported only)
    2. Partition the rows (k-fold or Monte Carlo)
    3. For each partition: fit on train rows, predict test rows, score
    4. Average the test statistics -> cross-validated estimate
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Union

import numpy as np
import pandas as pd
from sklearn.base import clone

from .dgp import PopulationSpec, Sample, get_dgp
from .engine import (
    SeedLike,
    TrainTestPair,
    TrainTestSource,
    as_seed_sequence,
    run_repeated,
    seed_record,
)
from .estimators import FormulaOLS, polynomial_formula
from .exceptions import InvalidParameterError
from .metrics import evaluate
from .partition import BasePartitioner, Partition
from .results import CrossValidationResults, aggregate


class SplitSource(TrainTestSource):
    """Train/test pairs taken from precomputed partitions of one frame."""

    def __init__(self, data: pd.DataFrame, partitions: Sequence[Partition]):
        n = len(data)
        for p in partitions:
            if np.intersect1d(p.train_idx, p.test_idx).size:
                raise InvalidParameterError(f"partition {p.index} shares rows between train and test")
            if p.train_idx.size and (p.train_idx.min() < 0 or p.train_idx.max() >= n):
                raise InvalidParameterError(f"partition {p.index} indexes rows outside the data")
            if p.test_idx.size and (p.test_idx.min() < 0 or p.test_idx.max() >= n):
                raise InvalidParameterError(f"partition {p.index} indexes rows outside the data")
        self.data = data.reset_index(drop=True)
        self.partitions: List[Partition] = list(partitions)

    def __len__(self) -> int:
        return len(self.partitions)

    def pair(self, index: int, rng: np.random.Generator) -> TrainTestPair:
        p = self.partitions[index]
        return TrainTestPair(
            index=p.index,
            train=self.data.iloc[p.train_idx].reset_index(drop=True),
            test=self.data.iloc[p.test_idx].reset_index(drop=True),
        )


def _as_frame(data: Union[pd.DataFrame, Sample]) -> pd.DataFrame:
    if isinstance(data, pd.DataFrame):
        return data
    if hasattr(data, "to_frame"):
        return data.to_frame()
    raise InvalidParameterError(f"cannot cross-validate data of type {type(data).__name__}")


def cross_validate(
    data: Union[pd.DataFrame, Sample],
    partitioner: BasePartitioner,
    formula: str,
    seed: SeedLike = None,
    n_jobs: int = 1,
    verbose: bool = False,
) -> CrossValidationResults:
    """
    Whole-data fit plus cross-validated fit statistics.

    Args:
        data: DataFrame (or simulated Sample) holding every formula variable
        partitioner: KFoldPartitioner or MonteCarloPartitioner
        formula: R-style model formula
        seed: Run seed; fixes the partitions
        n_jobs: joblib workers for the per-partition fits
        verbose: Show progress

    Returns:
        CrossValidationResults with the whole-data baseline, per-partition
        records and the aggregate of the test statistics

    Raises:
        InvalidParameterError: too few rows for the partitioning policy
        DegenerateFitError: a fit or evaluation is degenerate
    """
    frame = _as_frame(data).reset_index(drop=True)
    if seed is None:
        seed = as_seed_sequence(None)
    partition_seq, trial_seq = as_seed_sequence(seed).spawn(2)

    model = FormulaOLS(formula)
    whole_model = clone(model).fit(frame)
    whole = evaluate(whole_model.observed(frame), whole_model.fitted_values_)

    # every part must identify the model and support a correlation
    min_rows = max(whole_model.n_params_, 2)
    partitions = partitioner.split(len(frame), np.random.default_rng(partition_seq), min_rows=min_rows)

    folds = run_repeated(
        SplitSource(frame, partitions),
        model,
        seed=trial_seq,
        n_jobs=n_jobs,
        verbose=verbose,
        desc="Cross-validation",
    )
    return CrossValidationResults(
        whole=whole,
        report=aggregate(folds),
        folds=folds,
        method=partitioner.name,
        formula=formula,
        config={
            "seed": seed_record(seed),
            "partitioner": repr(partitioner),
            "n_obs": len(frame),
            "n_params": whole_model.n_params_,
        },
    )


def cross_validate_simulated(
    n_rows: int,
    population_r2: float,
    degree: int,
    partitioner: BasePartitioner,
    seed: SeedLike = None,
    population: Optional[PopulationSpec] = None,
    n_jobs: int = 1,
    verbose: bool = False,
) -> CrossValidationResults:
    """Draw one simulated sample of ``n_rows`` and cross-validate a polynomial on it."""
    spec = population if population is not None else PopulationSpec(r2=population_r2)
    if seed is None:
        seed = as_seed_sequence(None)
    sample_seq, cv_seq = as_seed_sequence(seed).spawn(2)
    sample = get_dgp(spec, np.random.default_rng(sample_seq)).generate(n_rows)
    results = cross_validate(
        sample,
        partitioner,
        polynomial_formula(degree),
        seed=cv_seq,
        n_jobs=n_jobs,
        verbose=verbose,
    )
    results.config.update({
        "seed": seed_record(seed),
        "population_r2": spec.r2,
        "degree": degree,
    })
    return results
