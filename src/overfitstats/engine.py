"""
Repeated fit/evaluate engine.

Both the simulation runner and the cross-validator reduce to the same loop:

    For trial i:
        Source: produce a (train, test) pair from the trial's own generator
        Fit:    clone the model template, fit on train only
        Score:  train statistics from fitted values,
                test statistics from predictions on test (if any)

    Aggregate: means over all trials, computed once at the end.

Every trial owns a generator spawned from one SeedSequence, so results do
not depend on execution order and the loop can run under joblib.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Union

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from sklearn.base import clone
from tqdm import tqdm

from .estimators.base import FormulaEstimatorBase
from .exceptions import InvalidParameterError
from .metrics import evaluate
from .results import TrialResult

SeedLike = Union[None, int, np.random.SeedSequence]


@dataclass(frozen=True)
class TrainTestPair:
    """Data for one trial. ``test`` is None for train-only trials."""
    index: int
    train: pd.DataFrame
    test: Optional[pd.DataFrame] = None


class TrainTestSource(ABC):
    """Strategy that supplies the (train, test) pair of each trial."""

    @abstractmethod
    def __len__(self) -> int:
        """Number of trials."""
        pass

    @abstractmethod
    def pair(self, index: int, rng: np.random.Generator) -> TrainTestPair:
        """Return the pair for trial ``index``, drawing only from ``rng``."""
        pass


def as_seed_sequence(seed: SeedLike) -> np.random.SeedSequence:
    """SeedSequence for ``seed``.

    A SeedSequence argument is copied with no children spawned, so spawning
    from the result never advances the caller's object: the same object
    always yields the same child streams.
    """
    if isinstance(seed, np.random.SeedSequence):
        return np.random.SeedSequence(
            seed.entropy, spawn_key=seed.spawn_key, pool_size=seed.pool_size
        )
    return np.random.SeedSequence(seed)


def seed_record(seed: SeedLike):
    """JSON-friendly form of ``seed`` from which the run can be repeated."""
    if isinstance(seed, np.random.SeedSequence):
        return {"entropy": seed.entropy, "spawn_key": list(seed.spawn_key)}
    return seed


def spawn_generators(seed: SeedLike, n: int) -> List[np.random.Generator]:
    """Independent child generators, one per trial."""
    return [np.random.default_rng(child) for child in as_seed_sequence(seed).spawn(n)]


def evaluate_pair(pair: TrainTestPair, model: FormulaEstimatorBase) -> TrialResult:
    """Fit a fresh clone of ``model`` on the train rows and score it."""
    fitted = clone(model).fit(pair.train)
    train = evaluate(fitted.observed(pair.train), fitted.fitted_values_)
    test = None
    if pair.test is not None:
        test = evaluate(fitted.observed(pair.test), fitted.predict(pair.test))
    return TrialResult(trial_id=pair.index, train=train, test=test)


def _run_one(
    source: TrainTestSource,
    index: int,
    rng: np.random.Generator,
    model: FormulaEstimatorBase,
) -> TrialResult:
    return evaluate_pair(source.pair(index, rng), model)


def run_repeated(
    source: TrainTestSource,
    model: FormulaEstimatorBase,
    seed: SeedLike = None,
    n_jobs: int = 1,
    verbose: bool = False,
    desc: str = "Trials",
) -> List[TrialResult]:
    """
    Run every trial of ``source`` and return the results in trial order.

    Args:
        source: Train/test pair strategy
        model: Unfitted estimator, cloned for each trial
        seed: Run seed (int or SeedSequence); fixes every trial's draws
        n_jobs: joblib workers (1 = sequential, -1 = all cores)
        verbose: Show progress
        desc: Progress bar label

    Returns:
        List of TrialResult, one per trial

    Any exception raised by a trial aborts the run.
    """
    n_trials = len(source)
    if n_trials < 1:
        raise InvalidParameterError("a run needs at least one trial")
    generators = spawn_generators(seed, n_trials)

    if n_jobs == 1:
        indices = range(n_trials)
        if verbose:
            indices = tqdm(indices, desc=desc, ncols=80)
        return [_run_one(source, i, generators[i], model) for i in indices]

    results = Parallel(n_jobs=n_jobs, verbose=10 if verbose else 0)(
        delayed(_run_one)(source, i, generators[i], model)
        for i in range(n_trials)
    )
    return list(results)
