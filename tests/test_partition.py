"""Tests for k-fold and Monte Carlo partitioning."""

import numpy as np
import pytest

from overfitstats.exceptions import InvalidParameterError
from overfitstats.partition import (
    KFoldPartitioner,
    MonteCarloPartitioner,
    get_partitioner,
)


class TestKFold:
    @pytest.mark.parametrize("n,k", [(300, 5), (101, 5), (10, 10), (23, 4)])
    def test_every_row_tested_exactly_once(self, rng, n, k):
        parts = KFoldPartitioner(n_folds=k).split(n, rng)
        assert len(parts) == k
        tested = np.concatenate([p.test_idx for p in parts])
        np.testing.assert_array_equal(np.sort(tested), np.arange(n))
        for p in parts:
            assert np.intersect1d(p.train_idx, p.test_idx).size == 0
            np.testing.assert_array_equal(
                np.sort(np.concatenate([p.train_idx, p.test_idx])), np.arange(n)
            )

    def test_fold_sizes_differ_by_at_most_one(self, rng):
        sizes = [p.n_test for p in KFoldPartitioner(5).split(103, rng)]
        assert max(sizes) - min(sizes) <= 1
        assert sum(sizes) == 103

    def test_unshuffled_folds_are_contiguous(self, rng):
        parts = KFoldPartitioner(4, shuffle=False).split(8, rng)
        np.testing.assert_array_equal(parts[0].test_idx, [0, 1])
        np.testing.assert_array_equal(parts[3].test_idx, [6, 7])

    def test_same_generator_seed_same_folds(self):
        a = KFoldPartitioner(5).split(50, np.random.default_rng(1))
        b = KFoldPartitioner(5).split(50, np.random.default_rng(1))
        for pa, pb in zip(a, b):
            np.testing.assert_array_equal(pa.test_idx, pb.test_idx)

    def test_more_folds_than_rows_raises(self, rng):
        with pytest.raises(InvalidParameterError, match="exceeds"):
            KFoldPartitioner(5).split(4, rng)

    def test_parts_too_small_for_model_raise(self, rng):
        # 10 rows in 5 folds: test parts of 2 rows cannot hold 4 coefficients
        with pytest.raises(InvalidParameterError, match="needs at least 4"):
            KFoldPartitioner(5).split(10, rng, min_rows=4)

    @pytest.mark.parametrize("k", [1, 0, 2.5])
    def test_invalid_fold_count(self, k):
        with pytest.raises(InvalidParameterError):
            KFoldPartitioner(k)


class TestMonteCarlo:
    @pytest.mark.parametrize("n,expected", [(300, 60), (101, 21), (5, 1)])
    def test_test_size_is_ceil_of_fifth(self, rng, n, expected):
        parts = MonteCarloPartitioner(n_repeats=20).split(n, rng)
        assert len(parts) == 20
        for p in parts:
            assert p.n_test == expected
            assert p.n_train == n - expected
            assert np.intersect1d(p.train_idx, p.test_idx).size == 0
            np.testing.assert_array_equal(
                np.sort(np.concatenate([p.train_idx, p.test_idx])), np.arange(n)
            )

    def test_float_noise_does_not_inflate_test_size(self):
        assert MonteCarloPartitioner(train_frac=0.7).test_size(10) == 3

    def test_repetitions_differ(self, rng):
        parts = MonteCarloPartitioner(n_repeats=10).split(300, rng)
        distinct = {tuple(p.test_idx) for p in parts}
        assert len(distinct) == 10

    def test_rows_may_be_tested_repeatedly(self, rng):
        parts = MonteCarloPartitioner(n_repeats=100).split(50, rng)
        counts = np.bincount(np.concatenate([p.test_idx for p in parts]), minlength=50)
        assert counts.sum() == 100 * 10
        assert counts.max() > 1

    @pytest.mark.parametrize("frac", [0.0, 1.0, -0.2, 1.3])
    def test_invalid_train_fraction(self, frac):
        with pytest.raises(InvalidParameterError):
            MonteCarloPartitioner(train_frac=frac)

    def test_too_few_rows_for_model(self, rng):
        with pytest.raises(InvalidParameterError):
            MonteCarloPartitioner().split(6, rng, min_rows=4)


class TestFactory:
    def test_known_names(self):
        assert isinstance(get_partitioner("kfold", n_folds=3), KFoldPartitioner)
        assert isinstance(get_partitioner("montecarlo"), MonteCarloPartitioner)

    def test_unknown_name(self):
        with pytest.raises(InvalidParameterError, match="Unknown partitioning policy"):
            get_partitioner("bootstrap")
