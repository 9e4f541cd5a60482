"""Base estimator class for overfitstats.

This module provides the base class for formula-driven estimators,
implementing the sklearn estimator interface so that a configured model
can be cloned once per trial or fold.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import formulaic
import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.utils.validation import check_is_fitted

from .._typing import Float64Array
from ..exceptions import DegenerateFitError, InvalidParameterError
from ..metrics import squared_correlation


class FormulaEstimatorBase(RegressorMixin, BaseEstimator, ABC):
    """Abstract base class for estimators specified by an R-style formula.

    This class provides the sklearn-compatible interface with:
    - `fit(data)` on a DataFrame holding response and covariates
    - `predict(data)` for out-of-sample predictions on new rows
    - Support for `clone()` so every trial owns a fresh model

    All configuration happens in `__init__` (no side effects).
    All computation happens in `fit()`.

    Subclasses must implement `_fit_impl()` and `_predict_impl()`.
    """

    formula: str

    @abstractmethod
    def _fit_impl(self, X: Float64Array, y: Float64Array) -> Any:
        """Fit on a design matrix and return the results object."""
        pass

    @abstractmethod
    def _predict_impl(self, X: Float64Array) -> Float64Array:
        """Predict from a design matrix built with the fitted model spec."""
        pass

    def fit(self, data: pd.DataFrame) -> "FormulaEstimatorBase":
        """Fit the model.

        Parameters
        ----------
        data : DataFrame
            Rows used for fitting; must contain every variable named in
            the formula.

        Returns
        -------
        self
        """
        X, y = self._parse_formula(data)
        n_obs, n_params = X.shape
        if n_obs < n_params:
            raise DegenerateFitError(
                f"{n_obs} rows cannot identify {n_params} coefficients of '{self.formula}'"
            )
        self.results_ = self._fit_impl(X, y)
        self.n_obs_ = n_obs
        self.n_params_ = n_params
        self.fitted_values_ = np.asarray(self._predict_impl(X), dtype=np.float64)
        self.is_fitted_ = True
        return self

    def _parse_formula(self, data: pd.DataFrame) -> tuple[Float64Array, Float64Array]:
        """Parse R-style formula using formulaic."""
        if not isinstance(data, pd.DataFrame):
            raise InvalidParameterError("data must be a DataFrame when using a formula")
        if "~" not in self.formula:
            raise InvalidParameterError(f"formula needs a response: '{self.formula}'")

        model_matrix = formulaic.model_matrix(self.formula, data, na_action="raise")

        self.response_ = str(model_matrix.lhs.columns[0])
        self.model_spec_ = model_matrix.rhs.model_spec
        self.feature_names_ = list(model_matrix.rhs.columns)

        y_array = model_matrix.lhs.to_numpy().flatten().astype(np.float64)
        X_array = model_matrix.rhs.to_numpy().astype(np.float64)
        return X_array, y_array

    def design_matrix(self, data: pd.DataFrame) -> Float64Array:
        """Design matrix for new rows, reusing the encoding learned in fit()."""
        check_is_fitted(self, "results_")
        return (
            self.model_spec_.get_model_matrix(data)
            .to_numpy()
            .astype(np.float64)
        )

    def predict(self, data: pd.DataFrame) -> Float64Array:
        """Generate predictions.

        Parameters
        ----------
        data : DataFrame
            New rows containing the formula's covariates.

        Returns
        -------
        Float64Array
            Predicted values.
        """
        return np.asarray(self._predict_impl(self.design_matrix(data)), dtype=np.float64)

    def observed(self, data: pd.DataFrame) -> Float64Array:
        """Response column of ``data``."""
        check_is_fitted(self, "results_")
        return data[self.response_].to_numpy(dtype=np.float64)

    def score(self, data: pd.DataFrame, y: Any = None) -> float:
        """Return squared-correlation R² of predictions on ``data``."""
        return squared_correlation(self.observed(data), self.predict(data))
