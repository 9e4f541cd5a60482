"""Tests for the population model and data generation."""

import numpy as np
import pytest

from overfitstats.dgp import (
    REFERENCE_SIGNAL_SD,
    PopulationSpec,
    QuadraticDGP,
    Sample,
    analytic_signal_sd,
    generate,
    get_dgp,
    population_signal,
    verify_signal_sd,
)
from overfitstats.exceptions import InvalidParameterError


class TestPopulationSpec:
    """Noise calibration from the population effect size."""

    @pytest.mark.parametrize("r2", [0.0, 1.0, -0.1, 1.5, float("nan")])
    def test_r2_outside_open_interval_rejected(self, r2):
        with pytest.raises(InvalidParameterError):
            PopulationSpec(r2=r2)

    def test_noise_sd_formula(self):
        spec = PopulationSpec(r2=0.25)
        # snr = 1/3, noise sd = 0.6364 * sqrt(3)
        assert spec.snr == pytest.approx(1 / 3)
        assert spec.noise_sd == pytest.approx(REFERENCE_SIGNAL_SD * np.sqrt(3))

    def test_half_r2_gives_equal_signal_and_noise(self):
        spec = PopulationSpec(r2=0.5)
        assert spec.noise_sd == pytest.approx(spec.signal_sd)

    def test_reference_constant_matches_analytic_value(self):
        assert analytic_signal_sd(0.0, 3.0) == pytest.approx(np.sqrt(1458) / 60)
        assert analytic_signal_sd(0.0, 3.0) == pytest.approx(REFERENCE_SIGNAL_SD, abs=5e-5)

    def test_exact_signal_sd_follows_predictor_distribution(self):
        default = PopulationSpec(r2=0.3, predictor_sd=2.0)
        exact = PopulationSpec(r2=0.3, predictor_sd=2.0, exact_signal_sd=True)
        assert default.signal_sd == REFERENCE_SIGNAL_SD
        assert exact.signal_sd == pytest.approx(analytic_signal_sd(0.0, 2.0))

    def test_monte_carlo_check_of_signal_sd(self):
        check = verify_signal_sd(n_mc=200_000, seed=7)
        assert check["monte_carlo"] == pytest.approx(check["analytic"], rel=0.01)

    def test_nonpositive_predictor_sd_rejected(self):
        with pytest.raises(InvalidParameterError):
            PopulationSpec(r2=0.2, predictor_sd=0.0)


class TestGenerate:
    """Sampling from the quadratic population."""

    def test_returns_n_rows(self, seed):
        sample = generate(57, 0.25, rng=seed)
        assert len(sample) == 57
        assert sample.x.shape == sample.y.shape == (57,)
        assert list(sample.to_frame().columns) == ["x", "y"]

    def test_predictor_moments_converge(self, seed):
        sample = generate(200_000, 0.25, rng=seed)
        assert abs(sample.x.mean()) < 0.05
        assert sample.x.std() == pytest.approx(3.0, rel=0.01)

    def test_noise_has_calibrated_sd(self, seed):
        sample = generate(200_000, 0.25, rng=seed)
        noise = sample.y - sample.signal
        assert noise.std() == pytest.approx(PopulationSpec(r2=0.25).noise_sd, rel=0.01)

    def test_population_r2_is_recovered(self, seed):
        sample = generate(200_000, 0.4, rng=seed)
        r = np.corrcoef(sample.signal, sample.y)[0, 1]
        assert r ** 2 == pytest.approx(0.4, abs=0.01)

    def test_signal_is_the_parabola(self):
        x = np.array([0.0, 6.0, 12.0])
        np.testing.assert_allclose(population_signal(x), [264 / 60, 5.0, 264 / 60])

    def test_same_seed_same_sample(self):
        a = generate(100, 0.25, rng=3)
        b = generate(100, 0.25, rng=3)
        np.testing.assert_array_equal(a.x, b.x)
        np.testing.assert_array_equal(a.y, b.y)

    def test_generator_state_is_consumed(self):
        rng = np.random.default_rng(5)
        dgp = QuadraticDGP(PopulationSpec(r2=0.25), rng)
        first = dgp.generate(20)
        second = dgp.generate(20)
        assert not np.array_equal(first.x, second.x)

    def test_invalid_r2_raises(self):
        with pytest.raises(InvalidParameterError):
            generate(10, 1.0, rng=0)

    def test_invalid_size_raises(self):
        with pytest.raises(InvalidParameterError):
            generate(0, 0.25, rng=0)

    def test_unknown_form_raises(self):
        with pytest.raises(InvalidParameterError, match="Unknown population form"):
            get_dgp(PopulationSpec(r2=0.25, form="sinusoid"))


class TestSample:
    def test_unequal_lengths_rejected(self):
        with pytest.raises(InvalidParameterError):
            Sample(x=np.zeros(3), y=np.zeros(4))

    def test_missing_values_rejected(self):
        with pytest.raises(InvalidParameterError):
            Sample(x=np.array([1.0, np.nan]), y=np.array([1.0, 2.0]))
