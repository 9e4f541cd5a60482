"""Train/test partitioning of a fixed dataset.

Two policies:

k-fold:
    Rows are shuffled once and cut into k folds whose sizes differ by at
    most one. Fold j is the test set of partition j; the train set is its
    complement. Every row is tested exactly once.

Monte Carlo (leave-group-out):
    Each repetition draws ceil(n * (1 - train_frac)) test rows uniformly
    without replacement; the train set is the complement. Repetitions are
    independent, so a row can be tested in many repetitions.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

import numpy as np
from sklearn.model_selection import KFold

from ._typing import Int64Array
from .exceptions import InvalidParameterError


@dataclass(frozen=True)
class Partition:
    """A single train/test split of row indices."""
    index: int
    train_idx: Int64Array
    test_idx: Int64Array

    @property
    def n_train(self) -> int:
        return int(self.train_idx.shape[0])

    @property
    def n_test(self) -> int:
        return int(self.test_idx.shape[0])


def _complement(n: int, test_idx: np.ndarray) -> Int64Array:
    train_mask = np.ones(n, dtype=bool)
    train_mask[test_idx] = False
    return np.flatnonzero(train_mask).astype(np.int64)


class BasePartitioner(ABC):
    """Abstract base for partitioning policies."""
    name: str = "base"

    @abstractmethod
    def sizes(self, n: int) -> tuple[int, int]:
        """(smallest train size, smallest test size) for ``n`` rows."""
        pass

    @abstractmethod
    def _split(self, n: int, rng: np.random.Generator) -> List[Partition]:
        pass

    def check(self, n: int, min_rows: int = 1) -> None:
        """Raise InvalidParameterError if ``n`` rows cannot support the policy.

        ``min_rows`` is the number of model coefficients: every train and
        every test part must hold at least that many rows.
        """
        min_train, min_test = self.sizes(n)
        if min_train < min_rows or min_test < min_rows:
            raise InvalidParameterError(
                f"{self.name} on {n} rows gives train/test parts of {min_train}/{min_test} rows; "
                f"the model needs at least {min_rows}"
            )

    def split(self, n: int, rng: np.random.Generator, min_rows: int = 1) -> List[Partition]:
        """Validate, then return every partition of ``n`` rows."""
        self.check(n, min_rows)
        return self._split(n, rng)


class KFoldPartitioner(BasePartitioner):
    """Exhaustive k-fold partitioning.

    Uses sklearn's KFold: the first ``n % k`` folds hold one extra row.
    With ``shuffle=True`` the row order is permuted with a seed drawn from
    the run's generator; otherwise folds are contiguous blocks.
    """
    name = "kfold"

    def __init__(self, n_folds: int = 5, shuffle: bool = True):
        if int(n_folds) != n_folds or n_folds < 2:
            raise InvalidParameterError(f"n_folds must be an integer >= 2, got {n_folds}")
        self.n_folds = int(n_folds)
        self.shuffle = shuffle

    def sizes(self, n: int) -> tuple[int, int]:
        if self.n_folds > n:
            raise InvalidParameterError(
                f"n_folds={self.n_folds} exceeds the number of rows ({n})"
            )
        min_test = n // self.n_folds
        max_test = min_test + (1 if n % self.n_folds else 0)
        return n - max_test, min_test

    def _split(self, n: int, rng: np.random.Generator) -> List[Partition]:
        random_state = int(rng.integers(np.iinfo(np.uint32).max)) if self.shuffle else None
        kfold = KFold(n_splits=self.n_folds, shuffle=self.shuffle, random_state=random_state)
        return [
            Partition(
                index=k,
                train_idx=np.asarray(train_idx, dtype=np.int64),
                test_idx=np.sort(np.asarray(test_idx, dtype=np.int64)),
            )
            for k, (train_idx, test_idx) in enumerate(kfold.split(np.empty((n, 1))))
        ]

    def __repr__(self) -> str:
        return f"KFoldPartitioner(n_folds={self.n_folds}, shuffle={self.shuffle})"


class MonteCarloPartitioner(BasePartitioner):
    """Repeated random subsampling (leave-group-out)."""
    name = "montecarlo"

    def __init__(self, n_repeats: int = 100, train_frac: float = 0.8):
        if int(n_repeats) != n_repeats or n_repeats < 1:
            raise InvalidParameterError(f"n_repeats must be a positive integer, got {n_repeats}")
        if not 0.0 < train_frac < 1.0:
            raise InvalidParameterError(f"train_frac must lie strictly between 0 and 1, got {train_frac}")
        self.n_repeats = int(n_repeats)
        self.train_frac = float(train_frac)

    def test_size(self, n: int) -> int:
        # round() guards against 1 - 0.7 = 0.30000000000000004 pushing ceil up
        return int(math.ceil(round(n * (1.0 - self.train_frac), 9)))

    def sizes(self, n: int) -> tuple[int, int]:
        n_test = self.test_size(n)
        return n - n_test, n_test

    def _split(self, n: int, rng: np.random.Generator) -> List[Partition]:
        n_test = self.test_size(n)
        partitions = []
        for r in range(self.n_repeats):
            test_idx = np.sort(rng.choice(n, size=n_test, replace=False)).astype(np.int64)
            partitions.append(Partition(index=r, train_idx=_complement(n, test_idx), test_idx=test_idx))
        return partitions

    def __repr__(self) -> str:
        return f"MonteCarloPartitioner(n_repeats={self.n_repeats}, train_frac={self.train_frac})"


# =============================================================================
# Factory
# =============================================================================

PARTITIONERS = {
    "kfold": KFoldPartitioner,
    "montecarlo": MonteCarloPartitioner,
}


def get_partitioner(name: str, **kwargs) -> BasePartitioner:
    """Factory function for partitioning policies."""
    if name not in PARTITIONERS:
        raise InvalidParameterError(
            f"Unknown partitioning policy: {name}. Available: {list(PARTITIONERS.keys())}"
        )
    return PARTITIONERS[name](**kwargs)
