"""
Collapse same-day records onto the dense daily grid.

Each (athlete, date, variable[, level]) key with one or more records is
reduced to a single value with the day_aggregate function. Keys without any
record stay NA and are flagged as missing days.
"""

from collections.abc import Callable
from typing import Any

import numpy as np
import pandas as pd

from ..errors import EstimatorEvaluationError
from .grid import partition_columns
from .validate import DATE, MISSING_DAY, MISSING_ENTRY, VALUE


def _aggregate_one(
    day_aggregate: Callable[[np.ndarray], Any],
    values: np.ndarray,
    context: dict[str, Any],
) -> float:
    """Apply day_aggregate to one key's values; the result must be a scalar number."""
    try:
        result = day_aggregate(values)
    except Exception as e:
        raise EstimatorEvaluationError(
            f"day_aggregate raised {type(e).__name__}: {e}", window="day", **context
        ) from e
    if isinstance(result, np.ndarray) and result.ndim == 0:
        result = result.item()
    if result is None:
        return np.nan
    if not isinstance(result, (int, float, np.integer, np.floating, np.bool_)):
        raise EstimatorEvaluationError(
            f"day_aggregate must return a single number. Got: {type(result).__name__}",
            window="day",
            **context,
        )
    return float(result)


def aggregate_days(
    records: pd.DataFrame,
    grid: pd.DataFrame,
    day_aggregate: Callable[[np.ndarray], Any],
) -> pd.DataFrame:
    """
    Aggregate records per day and align them on the grid.

    day_aggregate receives a float ndarray of the day's recorded values with
    NaN left in place, so its own NA policy decides the result.

    Args:
        records: Standardized records (athlete, date, variable[, level], value).
            Values must be numeric (nominal records are expanded beforehand).
        grid: Output of build_grid for the same records.
        day_aggregate: Function of an ndarray returning one number.

    Returns:
        Grid rows (same order, RangeIndex) with value, missing_entry and
        missing_day. missing_day is True when no record exists for the key;
        missing_entry is True when the aggregated value is NA, which includes
        every missing day. Records can exist and still give a missing entry:
        a session logged without a value (or a day_aggregate returning NA)
        flags missing_entry on a recorded day. These are the rows the
        na_session policy replaces, separately from na_day.

    Raises:
        EstimatorEvaluationError: If day_aggregate raises or returns a non-scalar.
    """
    keys = partition_columns(grid) + [DATE]
    grid_cols = list(grid.columns)

    index: list[tuple] = []
    values: list[float] = []
    for key, group in records.groupby(keys, sort=True, observed=True)[VALUE]:
        context = dict(zip(keys, key))
        values.append(_aggregate_one(day_aggregate, group.to_numpy(dtype=float), context))
        index.append(key)

    aggregated = pd.DataFrame(index, columns=keys)
    aggregated[VALUE] = np.asarray(values, dtype=float)
    for key in keys:
        aggregated[key] = aggregated[key].astype(grid[key].dtype)

    out = grid.merge(aggregated, on=keys, how="left", indicator=True, validate="one_to_one")
    out[MISSING_DAY] = (out["_merge"] == "left_only").to_numpy()
    out[MISSING_ENTRY] = out[VALUE].isna().to_numpy()
    return out[grid_cols + [MISSING_ENTRY, MISSING_DAY, VALUE]].reset_index(drop=True)
