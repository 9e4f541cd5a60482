"""Summary formatting utilities for statsmodels-style output."""

from datetime import datetime
from typing import List, Optional, Sequence, Tuple

import numpy as np
from tabulate import tabulate


def format_value(value: Optional[float], digits: int = 2) -> str:
    """Format a statistic for display; missing values become '-'."""
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return "-"
    return f"{value:.{digits}f}"


def format_summary_header(
    title: str,
    left: Sequence[Tuple[str, str]] = (),
    right: Sequence[Tuple[str, str]] = (),
    width: int = 78,
) -> str:
    """
    Format statsmodels-style header block.

    Args:
        title: Main title (e.g., "Overfitting Simulation Results")
        left: (label, value) pairs for the left column
        right: (label, value) pairs for the right column
        width: Total width of output

    Returns:
        Formatted header string
    """
    lines = []
    sep = "=" * width

    lines.append(sep)
    lines.append(f"{title:^{width}}")
    lines.append(sep)

    now = datetime.now()
    left_col = list(left) + [("Date:", now.strftime("%a, %d %b %Y"))]
    right_col = list(right) + [("Time:", now.strftime("%H:%M:%S"))]

    half_width = width // 2
    for l_item, r_item in zip(left_col, right_col):
        left_str = f"{l_item[0]:<18}{l_item[1]:<{half_width - 18}}"
        right_str = f"{r_item[0]:<18}{r_item[1]}"
        lines.append(f"{left_str}{right_str}")

    # Handle unequal lengths
    if len(left_col) > len(right_col):
        for item in left_col[len(right_col):]:
            lines.append(f"{item[0]:<18}{item[1]}")
    elif len(right_col) > len(left_col):
        for item in right_col[len(left_col):]:
            lines.append(" " * half_width + f"{item[0]:<18}{item[1]}")

    lines.append(sep)

    return "\n".join(lines)


def format_statistics_table(
    rows: List[Tuple[str, Optional[float], Optional[float], Optional[float], Optional[float]]],
    digits: int = 2,
) -> str:
    """
    Format R²/MSE rows as a plain table.

    Args:
        rows: (label, r2, r2_se, mse, mse_se) tuples; missing values allowed
        digits: Decimal places

    Returns:
        Formatted table string
    """
    body = [
        [label] + [format_value(v, digits) for v in values]
        for label, *values in rows
    ]
    return tabulate(
        body,
        headers=["", "R²", "(se)", "MSE", "(se)"],
        tablefmt="simple",
        stralign="right",
        disable_numparse=True,
    )
