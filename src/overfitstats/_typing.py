"""Type definitions for overfitstats.

This module provides type aliases using numpy.typing for clear,
consistent type annotations throughout the package.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Union

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    import pandas as pd

# Core numeric types
Float64Array = NDArray[np.float64]
Int64Array = NDArray[np.int64]

# Flexible input types (accept both numpy and pandas)
ArrayLike = Union[Float64Array, "pd.Series", list]
