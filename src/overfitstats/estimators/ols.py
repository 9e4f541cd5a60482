"""Ordinary least squares on formula-built design matrices.

Wraps statsmodels OLS behind the FormulaEstimatorBase interface and
provides the two model specifications used by the simulations:

- polynomial:  y ~ poly(x, degree=d, raw=True)
- empirical:   response ~ C(gender) * age + Big Five trait scores
"""

from __future__ import annotations

import warnings

import numpy as np
import statsmodels.api as sm

from .._typing import Float64Array
from ..exceptions import DegenerateFitError, InvalidParameterError
from .base import FormulaEstimatorBase

TRAIT_COLUMNS = (
    "openness",
    "conscientiousness",
    "extraversion",
    "agreeableness",
    "neuroticism",
)


def polynomial_formula(degree: int, predictor: str = "x", response: str = "y") -> str:
    """Raw polynomial of ``predictor`` with an intercept."""
    if int(degree) != degree or degree < 1:
        raise InvalidParameterError(f"polynomial degree must be a positive integer, got {degree}")
    return f"{response} ~ poly({predictor}, degree={int(degree)}, raw=True)"


def empirical_formula(response: str) -> str:
    """Gender-by-age interaction plus the five trait scores."""
    traits = " + ".join(TRAIT_COLUMNS)
    return f"{response} ~ C(gender) * age + {traits}"


class FormulaOLS(FormulaEstimatorBase):
    """OLS regression specified by an R-style formula.

    Parameters
    ----------
    formula : str, default="y ~ x"
        R-style formula. The design matrix is built with formulaic, so
        transforms such as ``poly()`` and ``C()`` are available and their
        encoding is reused when predicting on new rows.
    max_condition : float, default=1e12
        Condition number of the design matrix above which a
        RuntimeWarning is issued. Rank-deficient designs always raise.

    Attributes
    ----------
    results_ : statsmodels RegressionResults
        Fitted OLS results.
    fitted_values_ : Float64Array
        In-sample fitted values.
    n_params_ : int
        Number of estimated coefficients.

    Examples
    --------
    >>> from overfitstats.estimators import FormulaOLS, polynomial_formula
    >>> model = FormulaOLS(polynomial_formula(2)).fit(calibration.to_frame())
    >>> y_hat = model.predict(validation.to_frame())
    """

    def __init__(self, formula: str = "y ~ x", max_condition: float = 1e12):
        self.formula = formula
        self.max_condition = max_condition

    def _fit_impl(self, X: Float64Array, y: Float64Array):
        singular_values = np.linalg.svd(X, compute_uv=False)
        tol = singular_values.max() * max(X.shape) * np.finfo(np.float64).eps
        rank = int(np.sum(singular_values > tol))
        if rank < X.shape[1]:
            raise DegenerateFitError(
                f"design matrix of '{self.formula}' is rank deficient "
                f"(rank {rank} < {X.shape[1]} columns, {X.shape[0]} rows)"
            )

        condition = singular_values.max() / singular_values.min()
        if condition > self.max_condition:
            warnings.warn(
                f"Ill-conditioned design matrix (condition number {condition:.2e}). "
                "Fitted coefficients may be numerically unstable.",
                RuntimeWarning,
            )
        self.condition_number_ = float(condition)

        return sm.OLS(y, X).fit()

    def _predict_impl(self, X: Float64Array) -> Float64Array:
        return self.results_.predict(X)

    @property
    def params_(self) -> Float64Array:
        return np.asarray(self.results_.params)
