"""Fit statistics for observed vs. predicted values.

R² here is the squared Pearson correlation between observed and
predicted (or fitted) values, NOT 1 - SS_res / SS_tot. The two agree for
in-sample OLS fits with an intercept and diverge out of sample, where the
correlation ignores any shift or rescaling of the predictions.

- R²  = s_xy^2 / (s_xx * s_yy)      (centred cross-products)
- MSE = (1/n) Σ (observed_i - predicted_i)^2
"""

from __future__ import annotations

from dataclasses import dataclass, asdict

import numpy as np

from ._typing import ArrayLike
from .exceptions import DegenerateFitError, InvalidParameterError


@dataclass(frozen=True)
class FitStatistics:
    """(R², MSE) for one observed/predicted pair."""
    r2: float
    mse: float
    n_obs: int

    def to_dict(self) -> dict:
        return asdict(self)


def _as_pair(observed: ArrayLike, predicted: ArrayLike) -> tuple:
    obs = np.asarray(observed, dtype=np.float64).ravel()
    pred = np.asarray(predicted, dtype=np.float64).ravel()
    if obs.shape != pred.shape:
        raise InvalidParameterError(
            f"observed and predicted have inconsistent lengths: {obs.shape[0]} vs {pred.shape[0]}"
        )
    if obs.shape[0] < 2:
        raise InvalidParameterError("at least two observations are needed to compute R²")
    if not (np.isfinite(obs).all() and np.isfinite(pred).all()):
        raise InvalidParameterError("observed/predicted contain missing or non-finite values")
    return obs, pred


def squared_correlation(observed: ArrayLike, predicted: ArrayLike) -> float:
    """Squared Pearson correlation.

    Raises DegenerateFitError when either vector is constant: the
    correlation is undefined and no value is substituted.
    """
    obs, pred = _as_pair(observed, predicted)
    d_obs = obs - obs.mean()
    d_pred = pred - pred.mean()
    s_oo = float(np.dot(d_obs, d_obs))
    s_pp = float(np.dot(d_pred, d_pred))
    if s_pp == 0.0:
        raise DegenerateFitError("predicted values are constant; R² is undefined")
    if s_oo == 0.0:
        raise DegenerateFitError("observed values are constant; R² is undefined")
    s_op = float(np.dot(d_obs, d_pred))
    return s_op * s_op / (s_oo * s_pp)


def mean_squared_error(observed: ArrayLike, predicted: ArrayLike) -> float:
    """Mean of squared residuals (observed - predicted)."""
    obs, pred = _as_pair(observed, predicted)
    resid = obs - pred
    return float(np.mean(resid * resid))


def evaluate(observed: ArrayLike, predicted: ArrayLike) -> FitStatistics:
    """Compute FitStatistics(R², MSE) from observed vs. predicted values."""
    obs, pred = _as_pair(observed, predicted)
    return FitStatistics(
        r2=squared_correlation(obs, pred),
        mse=mean_squared_error(obs, pred),
        n_obs=int(obs.shape[0]),
    )
