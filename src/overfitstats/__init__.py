"""
overfitstats: Overfitting and cross-validation by simulation.

Illustrates how in-sample fit statistics overstate out-of-sample
performance, and how resampling recovers an honest estimate.

Key Features
------------
- Known population model with noise calibrated to a target R²
- Repeated calibration/validation trials of polynomial regressions
- k-fold and Monte Carlo (leave-group-out) cross-validation
- R² as squared correlation of observed and predicted values, plus MSE
- Reproducible, parallelisable runs (one random stream per trial)

Basic Usage
-----------
>>> from overfitstats import run_trials, cross_validate_simulated, KFoldPartitioner
>>>
>>> # Calibration vs. validation fit of a quadratic model
>>> sim = run_trials(1000, cal_size=50, val_size=1000, population_r2=0.25, degree=2, seed=1)
>>> print(sim.summary())
>>>
>>> # 5-fold cross-validation of a cubic model on one 300-row sample
>>> cv = cross_validate_simulated(300, 0.16, 3, KFoldPartitioner(5), seed=1)
>>> print(f"whole-data R² {cv.whole.r2:.2f} vs cross-validated {cv.cv_r2:.2f}")
"""

__version__ = "0.1.0"

# Data generation
from .dgp import (
    REFERENCE_SIGNAL_SD,
    PopulationSpec,
    QuadraticDGP,
    Sample,
    analytic_signal_sd,
    generate,
    get_dgp,
    population_signal,
)

# Fitting and evaluation
from .estimators import FormulaOLS, empirical_formula, polynomial_formula
from .metrics import FitStatistics, evaluate, mean_squared_error, squared_correlation

# Partitioning
from .partition import (
    KFoldPartitioner,
    MonteCarloPartitioner,
    Partition,
    get_partitioner,
)

# Runners
from .engine import TrainTestPair, TrainTestSource, run_repeated, spawn_generators
from .trials import FreshDrawSource, run_trials
from .crossval import SplitSource, cross_validate, cross_validate_simulated

# Results
from .results import (
    AggregateReport,
    CrossValidationResults,
    SimulationResults,
    TrialResult,
    aggregate,
)

# Data and errors
from .data import load_personality_data, load_table
from .exceptions import (
    DataSourceError,
    DegenerateFitError,
    InvalidParameterError,
    OverfitStatsError,
)

__all__ = [
    # Version
    "__version__",
    # Data generation
    "REFERENCE_SIGNAL_SD",
    "PopulationSpec",
    "QuadraticDGP",
    "Sample",
    "analytic_signal_sd",
    "generate",
    "get_dgp",
    "population_signal",
    # Fitting and evaluation
    "FormulaOLS",
    "polynomial_formula",
    "empirical_formula",
    "FitStatistics",
    "evaluate",
    "squared_correlation",
    "mean_squared_error",
    # Partitioning
    "Partition",
    "KFoldPartitioner",
    "MonteCarloPartitioner",
    "get_partitioner",
    # Runners
    "TrainTestPair",
    "TrainTestSource",
    "run_repeated",
    "spawn_generators",
    "FreshDrawSource",
    "run_trials",
    "SplitSource",
    "cross_validate",
    "cross_validate_simulated",
    # Results
    "TrialResult",
    "AggregateReport",
    "SimulationResults",
    "CrossValidationResults",
    "aggregate",
    # Data and errors
    "load_table",
    "load_personality_data",
    "OverfitStatsError",
    "InvalidParameterError",
    "DegenerateFitError",
    "DataSourceError",
]
