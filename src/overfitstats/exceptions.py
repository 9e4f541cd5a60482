"""Exception hierarchy for overfitstats.

Every error is fatal to the run that raised it: nothing here is retried
and no aggregate is produced from an incomplete set of trials.
"""

from __future__ import annotations


class OverfitStatsError(Exception):
    """Base class for all package errors."""


class InvalidParameterError(OverfitStatsError, ValueError):
    """A configuration value is out of range.

    Raised for a population R² outside (0, 1), a fold count larger than the
    number of rows, or train/test parts too small for the requested model.
    """


class DegenerateFitError(OverfitStatsError, ArithmeticError):
    """The model cannot be fitted or evaluated.

    Raised for rank-deficient design matrices (including fewer rows than
    coefficients) and for constant observed/predicted vectors, whose
    correlation is undefined.
    """


class DataSourceError(OverfitStatsError, IOError):
    """Tabular data could not be read or does not have the expected shape."""
