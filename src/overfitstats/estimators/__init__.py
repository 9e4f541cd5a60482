"""Estimator classes for overfitstats."""

from .base import FormulaEstimatorBase
from .ols import TRAIT_COLUMNS, FormulaOLS, empirical_formula, polynomial_formula

__all__ = [
    "FormulaEstimatorBase",
    "FormulaOLS",
    "polynomial_formula",
    "empirical_formula",
    "TRAIT_COLUMNS",
]
