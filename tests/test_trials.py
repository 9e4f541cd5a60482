"""Tests for the calibration/validation trial runner."""

import numpy as np
import pytest

from overfitstats.dgp import PopulationSpec
from overfitstats.engine import spawn_generators
from overfitstats.exceptions import DegenerateFitError, InvalidParameterError
from overfitstats.metrics import FitStatistics
from overfitstats.results import TrialResult, aggregate
from overfitstats.trials import FreshDrawSource, run_trials


class TestRunTrials:
    def test_same_seed_is_bit_identical(self):
        a = run_trials(30, cal_size=50, val_size=200, population_r2=0.25, degree=2, seed=11)
        b = run_trials(30, cal_size=50, val_size=200, population_r2=0.25, degree=2, seed=11)
        assert a.report == b.report
        assert a.to_frame().equals(b.to_frame())

    def test_different_seed_differs(self):
        a = run_trials(10, cal_size=50, val_size=200, population_r2=0.25, degree=2, seed=1)
        b = run_trials(10, cal_size=50, val_size=200, population_r2=0.25, degree=2, seed=2)
        assert a.report.train_r2 != b.report.train_r2

    def test_parallel_matches_sequential(self):
        kwargs = dict(n_trials=12, cal_size=40, val_size=100, population_r2=0.3, degree=2, seed=5)
        sequential = run_trials(n_jobs=1, **kwargs)
        parallel = run_trials(n_jobs=2, **kwargs)
        assert sequential.report == parallel.report

    def test_calibration_only(self):
        sim = run_trials(8, cal_size=50, val_size=None, population_r2=0.25, degree=2, seed=3)
        assert not sim.report.has_test
        assert sim.report.test_r2 is None
        assert sim.report.optimism is None
        assert "test_r2" not in sim.to_frame().columns
        assert "Validation" not in sim.summary()
        assert "calibration only" in sim.summary()

    def test_records_in_trial_order(self):
        sim = run_trials(6, cal_size=30, val_size=30, population_r2=0.25, degree=1, seed=0)
        assert [t.trial_id for t in sim.trials] == list(range(6))
        assert sim.report.n_trials == 6
        assert sim.config["formula"] == "y ~ poly(x, degree=1, raw=True)"

    def test_report_is_mean_of_trials(self):
        sim = run_trials(20, cal_size=50, val_size=100, population_r2=0.25, degree=2, seed=9)
        frame = sim.to_frame()
        assert sim.report.train_r2 == pytest.approx(frame["train_r2"].mean())
        assert sim.report.test_mse == pytest.approx(frame["test_mse"].mean())

    def test_underdetermined_model_aborts_run(self):
        with pytest.raises(DegenerateFitError):
            run_trials(5, cal_size=2, val_size=10, population_r2=0.25, degree=2, seed=1)

    def test_invalid_population_r2(self):
        with pytest.raises(InvalidParameterError):
            run_trials(5, cal_size=50, val_size=10, population_r2=1.0, degree=2, seed=1)

    def test_summary_mentions_both_samples(self):
        sim = run_trials(10, cal_size=50, val_size=100, population_r2=0.25, degree=2, seed=4)
        text = sim.summary()
        assert "Calibration" in text
        assert "Validation" in text
        assert "Optimism" in text


class TestFreshDrawSource:
    def test_pair_sizes(self, rng):
        source = FreshDrawSource(PopulationSpec(r2=0.25), n_trials=3, cal_size=50, val_size=80)
        pair = source.pair(0, rng)
        assert len(pair.train) == 50
        assert len(pair.test) == 80
        assert len(source) == 3

    def test_calibration_drawn_before_validation(self):
        source = FreshDrawSource(PopulationSpec(r2=0.25), n_trials=1, cal_size=20, val_size=20)
        with_val = source.pair(0, np.random.default_rng(8))
        no_val = FreshDrawSource(PopulationSpec(r2=0.25), 1, 20).pair(0, np.random.default_rng(8))
        assert with_val.train.equals(no_val.train)
        assert no_val.test is None

    @pytest.mark.parametrize("kwargs", [
        dict(n_trials=0, cal_size=50),
        dict(n_trials=5, cal_size=1),
        dict(n_trials=5, cal_size=50, val_size=1),
    ])
    def test_invalid_sizes(self, kwargs):
        with pytest.raises(InvalidParameterError):
            FreshDrawSource(PopulationSpec(r2=0.25), **kwargs)


class TestAggregate:
    def test_empty_raises(self):
        with pytest.raises(InvalidParameterError):
            aggregate([])

    def test_mixed_test_presence_raises(self):
        stats = FitStatistics(r2=0.2, mse=1.0, n_obs=10)
        results = [TrialResult(0, stats, stats), TrialResult(1, stats, None)]
        with pytest.raises(InvalidParameterError, match="lack test statistics"):
            aggregate(results)

    def test_confint_brackets_mean(self):
        sim = run_trials(20, cal_size=50, val_size=100, population_r2=0.25, degree=2, seed=2)
        lower, upper = sim.report.confint("test_r2")
        assert lower < sim.report.test_r2 < upper

    def test_single_trial_has_nan_se(self):
        stats = FitStatistics(r2=0.2, mse=1.0, n_obs=10)
        report = aggregate([TrialResult(0, stats)])
        assert report.train_r2 == 0.2
        assert np.isnan(report.train_r2_se)

    def test_confint_needs_more_than_one_trial(self):
        stats = FitStatistics(r2=0.2, mse=1.0, n_obs=10)
        report = aggregate([TrialResult(0, stats)])
        with pytest.raises(InvalidParameterError, match="no standard error"):
            report.confint("train_r2")


def test_spawned_generators_are_independent():
    first, second = spawn_generators(3, 2)
    assert first.random() != second.random()
    assert spawn_generators(3, 2)[0].random() == spawn_generators(3, 2)[0].random()


class TestSeedSequence:
    """Runs seeded with a SeedSequence object."""

    def test_reusing_one_sequence_is_bit_identical(self):
        ss = np.random.SeedSequence(123)
        a = run_trials(5, cal_size=30, val_size=30, population_r2=0.25, degree=2, seed=ss)
        b = run_trials(5, cal_size=30, val_size=30, population_r2=0.25, degree=2, seed=ss)
        assert a.report == b.report
        assert ss.n_children_spawned == 0

    def test_sequence_matches_integer_seed(self):
        a = run_trials(5, cal_size=30, val_size=30, population_r2=0.25, degree=2, seed=123)
        b = run_trials(
            5, cal_size=30, val_size=30, population_r2=0.25, degree=2,
            seed=np.random.SeedSequence(123),
        )
        assert a.report == b.report

    def test_recorded_seed_reproduces_run(self):
        ss = np.random.SeedSequence(123).spawn(3)[2]
        a = run_trials(5, cal_size=30, val_size=30, population_r2=0.25, degree=2, seed=ss)
        record = a.config["seed"]
        assert record == {"entropy": 123, "spawn_key": [2]}
        replay = np.random.SeedSequence(record["entropy"], spawn_key=tuple(record["spawn_key"]))
        b = run_trials(5, cal_size=30, val_size=30, population_r2=0.25, degree=2, seed=replay)
        assert a.report == b.report

    def test_unseeded_run_records_its_entropy(self):
        a = run_trials(4, cal_size=30, val_size=30, population_r2=0.25, degree=2)
        record = a.config["seed"]
        replay = np.random.SeedSequence(record["entropy"], spawn_key=tuple(record["spawn_key"]))
        b = run_trials(4, cal_size=30, val_size=30, population_r2=0.25, degree=2, seed=replay)
        assert a.report == b.report
