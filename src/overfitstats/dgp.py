"""Data Generating Processes for the overfitting simulations.

The population relationship is a fixed downward parabola in one predictor:
- x ~ Normal(0, 3)
- signal(x) = (300 - (x - 6)^2) / 60
- y = signal(x) + epsilon, epsilon ~ Normal(0, sigma)

sigma is calibrated so that signal explains a target fraction R² of the
variance of y: snr = R² / (1 - R²) and sigma = sd(signal) / sqrt(snr).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Union

import numpy as np
import pandas as pd

from ._typing import Float64Array
from .exceptions import InvalidParameterError

# sd(signal) for x ~ N(0, 3), rounded to 4 decimals. Equal to
# analytic_signal_sd(0, 3) = sqrt(1458) / 60 = 0.636396...
REFERENCE_SIGNAL_SD = 0.6364

PEAK_LOCATION = 6.0
PEAK_HEIGHT = 300.0
SIGNAL_SCALE = 60.0


# =============================================================================
# True Population Functions
# =============================================================================

def population_signal(x: np.ndarray) -> np.ndarray:
    """True regression function: (300 - (x - 6)^2) / 60."""
    return (PEAK_HEIGHT - (x - PEAK_LOCATION) ** 2) / SIGNAL_SCALE


def analytic_signal_sd(predictor_mean: float = 0.0, predictor_sd: float = 3.0) -> float:
    """Exact sd of population_signal(x) for x ~ N(mean, sd).

    With u = x - 6 ~ N(m, s^2), Var(u^2) = 2 s^4 + 4 m^2 s^2, and the
    signal is -u^2 / 60 plus a constant.
    """
    m = predictor_mean - PEAK_LOCATION
    s2 = predictor_sd ** 2
    return float(np.sqrt(2 * s2 ** 2 + 4 * m ** 2 * s2) / SIGNAL_SCALE)


def as_generator(rng: Union[None, int, np.random.Generator]) -> np.random.Generator:
    """Return ``rng`` itself, or a new Generator seeded from it."""
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


# =============================================================================
# Containers
# =============================================================================

@dataclass(frozen=True)
class PopulationSpec:
    """Immutable description of the data-generating process.

    Attributes
    ----------
    r2 : float
        Population effect size, strictly inside (0, 1).
    predictor_mean, predictor_sd : float
        Parameters of the Normal predictor distribution.
    form : str
        Name of the population functional form (see ``DGPS``).
    exact_signal_sd : bool
        Derive sd(signal) analytically instead of using
        ``REFERENCE_SIGNAL_SD``. Only differs when the predictor
        distribution is changed from N(0, 3).
    """
    r2: float
    predictor_mean: float = 0.0
    predictor_sd: float = 3.0
    form: str = "quadratic"
    exact_signal_sd: bool = False

    def __post_init__(self) -> None:
        if not np.isfinite(self.r2) or not 0.0 < self.r2 < 1.0:
            raise InvalidParameterError(
                f"population R² must lie strictly between 0 and 1, got {self.r2}"
            )
        if not self.predictor_sd > 0:
            raise InvalidParameterError(
                f"predictor_sd must be positive, got {self.predictor_sd}"
            )

    @property
    def snr(self) -> float:
        return self.r2 / (1.0 - self.r2)

    @property
    def signal_sd(self) -> float:
        if self.exact_signal_sd:
            return analytic_signal_sd(self.predictor_mean, self.predictor_sd)
        return REFERENCE_SIGNAL_SD

    @property
    def noise_sd(self) -> float:
        return self.signal_sd / np.sqrt(self.snr)


@dataclass
class Sample:
    """Container for one simulated (predictor, response) sample."""
    x: Float64Array
    y: Float64Array
    signal: Optional[Float64Array] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.x = np.asarray(self.x, dtype=np.float64)
        self.y = np.asarray(self.y, dtype=np.float64)
        if self.x.ndim != 1 or self.x.shape != self.y.shape:
            raise InvalidParameterError(
                f"x and y must be 1-D arrays of equal length, got {self.x.shape} and {self.y.shape}"
            )
        if self.signal is not None and np.shape(self.signal) != self.x.shape:
            raise InvalidParameterError("signal must have the same length as x")
        if not (np.isfinite(self.x).all() and np.isfinite(self.y).all()):
            raise InvalidParameterError("sample contains missing or non-finite values")

    def __len__(self) -> int:
        return int(self.x.shape[0])

    def to_frame(self) -> pd.DataFrame:
        """Modelling frame with columns ``x`` and ``y``."""
        return pd.DataFrame({"x": self.x, "y": self.y})


# =============================================================================
# Base Classes
# =============================================================================

class BaseDGP(ABC):
    """Abstract base for DGPs.

    The generator never seeds itself: pass a ``numpy.random.Generator``
    (or an int seed) to control reproducibility.
    """
    name: str = "base"

    def __init__(
        self,
        spec: PopulationSpec,
        rng: Union[None, int, np.random.Generator] = None,
    ):
        self.spec = spec
        self.rng = as_generator(rng)

    @abstractmethod
    def signal(self, x: np.ndarray) -> np.ndarray:
        pass

    def generate(self, n: int) -> Sample:
        """Draw ``n`` predictors, then ``n`` noise values."""
        if int(n) != n or n < 1:
            raise InvalidParameterError(f"sample size must be a positive integer, got {n}")
        n = int(n)
        x = self.rng.normal(self.spec.predictor_mean, self.spec.predictor_sd, n)
        signal = self.signal(x)
        y = signal + self.rng.normal(0.0, self.spec.noise_sd, n)
        return Sample(x=x, y=y, signal=signal)


# =============================================================================
# DGP Implementations
# =============================================================================

class QuadraticDGP(BaseDGP):
    """y = (300 - (x - 6)^2) / 60 + epsilon."""
    name = "quadratic"

    def signal(self, x: np.ndarray) -> np.ndarray:
        return population_signal(x)


# =============================================================================
# Ground Truth Verification
# =============================================================================

def verify_signal_sd(
    n_mc: int = 1_000_000,
    seed: int = 12345,
    predictor_mean: float = 0.0,
    predictor_sd: float = 3.0,
) -> dict:
    """Compare the calibration constant with analytic and Monte Carlo sd(signal)."""
    rng = np.random.default_rng(seed)
    x = rng.normal(predictor_mean, predictor_sd, n_mc)
    return {
        "reference": REFERENCE_SIGNAL_SD,
        "analytic": analytic_signal_sd(predictor_mean, predictor_sd),
        "monte_carlo": float(np.std(population_signal(x))),
    }


# =============================================================================
# Factory
# =============================================================================

DGPS = {
    "quadratic": QuadraticDGP,
}


def get_dgp(
    spec: PopulationSpec,
    rng: Union[None, int, np.random.Generator] = None,
) -> BaseDGP:
    """Factory function for DGPs, keyed on ``spec.form``."""
    if spec.form not in DGPS:
        raise InvalidParameterError(
            f"Unknown population form: {spec.form}. Available: {list(DGPS.keys())}"
        )
    return DGPS[spec.form](spec, rng)


def generate(
    n: int,
    population_r2: float,
    population_form: str = "quadratic",
    rng: Union[None, int, np.random.Generator] = None,
    **spec_kwargs,
) -> Sample:
    """One-shot sample of size ``n`` from the named population."""
    spec = PopulationSpec(r2=population_r2, form=population_form, **spec_kwargs)
    return get_dgp(spec, rng).generate(n)
