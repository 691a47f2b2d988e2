"""
Dense daily grid for monitoring records.

Builds the full cross product of athletes x calendar days x variables (x
levels in nominal mode) so every partition has exactly one row per day over
the global date span, whatever the sparsity of an individual athlete.
"""

import numpy as np
import pandas as pd

from ..errors import InvalidDateType
from .validate import ATHLETE, DATE, LEVEL, VARIABLE


def date_span(dates: pd.Series) -> pd.Index:
    """
    Every day from min(dates) to max(dates), inclusive.

    Datetime columns give a daily DatetimeIndex with the same dtype as the
    input; integer columns give a contiguous integer range.
    """
    lo, hi = dates.min(), dates.max()
    if pd.api.types.is_datetime64_any_dtype(dates):
        return pd.date_range(lo, hi, freq="D", name=DATE).astype(dates.dtype)
    if pd.api.types.is_integer_dtype(dates):
        return pd.Index(np.arange(int(lo), int(hi) + 1, dtype="int64"), name=DATE)
    raise InvalidDateType(f"Cannot build a daily span from dtype {dates.dtype}.")


def partition_columns(df: pd.DataFrame) -> list[str]:
    """Partition key: athlete, variable and, in nominal mode, level."""
    return [ATHLETE, VARIABLE] + ([LEVEL] if LEVEL in df.columns else [])


def sorted_unique(values: pd.Series) -> list:
    unique = pd.unique(values.dropna())
    try:
        return sorted(unique)
    except TypeError:
        return sorted(unique, key=str)


def build_grid(records: pd.DataFrame) -> pd.DataFrame:
    """
    Cross product of observed athletes, the full date span and observed variables.

    Args:
        records: Standardized records (athlete, date, variable[, level], value).
            A level column switches the grid to nominal mode.

    Returns:
        DataFrame with columns athlete, date, variable[, level], one row per
        key, sorted by athlete, variable[, level], date. Row count is
        athletes x days x variables (x levels). Index is a RangeIndex.
    """
    keys = partition_columns(records)
    levels = [sorted_unique(records[key]) for key in keys]
    span = date_span(records[DATE])
    product = pd.MultiIndex.from_product(levels + [span], names=keys + [DATE])
    grid = product.to_frame(index=False)
    return grid[[ATHLETE, DATE, VARIABLE] + keys[2:]]
