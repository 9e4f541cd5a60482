"""Data loaders for the empirical example.

Reads a CSV (local path or URL) into a DataFrame and checks that the
columns the model needs are present and complete. Failures are surfaced
immediately as DataSourceError; nothing is retried.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence, Union

import pandas as pd

from .estimators.ols import TRAIT_COLUMNS
from .exceptions import DataSourceError

# Single-letter Big Five columns. A column literally named "C" would
# shadow formulaic's C() categorical operator.
BIG_FIVE_COLUMNS = dict(zip(("O", "C", "E", "A", "N"), TRAIT_COLUMNS))


def load_table(
    source: Union[str, Path],
    columns: Optional[Sequence[str]] = None,
    **read_csv_kwargs,
) -> pd.DataFrame:
    """Load a CSV file or URL.

    Args:
        source: Path or URL (anything pandas.read_csv accepts)
        columns: Columns that must be present and free of missing values;
            the result is restricted to them when given
        **read_csv_kwargs: Passed through to pandas.read_csv

    Returns:
        DataFrame with a fresh RangeIndex
    """
    try:
        df = pd.read_csv(source, **read_csv_kwargs)
    except (OSError, ValueError, pd.errors.ParserError) as err:
        raise DataSourceError(f"could not read tabular data from {source}: {err}") from err

    if df.empty:
        raise DataSourceError(f"{source} contains no rows")

    if columns is not None:
        missing = [c for c in columns if c not in df.columns]
        if missing:
            raise DataSourceError(
                f"{source} lacks required columns {missing}. Available: {list(df.columns)}"
            )
        df = df[list(columns)]
        n_missing = df.isna().sum()
        if n_missing.any():
            bad = {c: int(k) for c, k in n_missing.items() if k}
            raise DataSourceError(f"{source} has missing values in {bad}")

    return df.reset_index(drop=True)


def load_personality_data(
    source: Union[str, Path],
    response: str,
    **read_csv_kwargs,
) -> pd.DataFrame:
    """Load the gender/age/Big Five dataset used by the empirical example.

    Trait columns may be named O, C, E, A, N or spelled out; they are
    returned spelled out. ``gender`` becomes a categorical column and all
    other model columns numeric.
    """
    try:
        raw = pd.read_csv(source, **read_csv_kwargs)
    except (OSError, ValueError, pd.errors.ParserError) as err:
        raise DataSourceError(f"could not read tabular data from {source}: {err}") from err

    renamed = raw.rename(columns={k: v for k, v in BIG_FIVE_COLUMNS.items() if k in raw.columns})
    required = [response, "gender", "age", *TRAIT_COLUMNS]
    missing = [c for c in required if c not in renamed.columns]
    if missing:
        raise DataSourceError(
            f"{source} lacks required columns {missing}. Available: {list(raw.columns)}"
        )

    df = renamed[required].copy()
    if df.isna().any().any():
        bad = {c: int(k) for c, k in df.isna().sum().items() if k}
        raise DataSourceError(f"{source} has missing values in {bad}")

    numeric = [response, "age", *TRAIT_COLUMNS]
    try:
        df[numeric] = df[numeric].apply(pd.to_numeric)
    except (TypeError, ValueError) as err:
        raise DataSourceError(f"{source} has non-numeric values in {numeric}: {err}") from err
    df["gender"] = df["gender"].astype("category")

    return df.reset_index(drop=True)
