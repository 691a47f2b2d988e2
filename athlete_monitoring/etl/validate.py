"""
Input validation and column standardization for monitoring records.

Checks that the configured athlete/date/variable/value columns exist, that
the date column is datetime-like or integer-valued, and that the acute and
chronic windows are usable. Raises on the first violated rule; the prepare
pipeline never runs on invalid input.
"""

import datetime as dt
import logging
from typing import Any

import numpy as np
import pandas as pd

from ..errors import InvalidColumnReference, InvalidDateType, InvalidWindowSize, MonitoringError

logger = logging.getLogger(__name__)

# Canonical column names used from the grid onwards
ATHLETE = "athlete"
DATE = "date"
VARIABLE = "variable"
LEVEL = "level"
VALUE = "value"
MISSING_ENTRY = "missing_entry"
MISSING_DAY = "missing_day"

REQUIRED_MONITORING_COLUMNS = (ATHLETE, DATE, VARIABLE, VALUE)


def column_mapping(config: dict[str, Any] | None = None) -> dict[str, str]:
    """Map canonical names to input column names from config (athlete_column, ...)."""
    cfg = config or {}
    return {name: cfg.get(f"{name}_column", name) for name in REQUIRED_MONITORING_COLUMNS}


def validate_columns(df: pd.DataFrame, config: dict[str, Any] | None = None) -> None:
    """
    Raise InvalidColumnReference for the first configured column not in df.

    Also rejects an input without rows, since no date span can be derived.
    """
    for source in column_mapping(config).values():
        if source not in df.columns:
            raise InvalidColumnReference(source, list(df.columns))
    if df.empty:
        raise MonitoringError("Monitoring data has no rows; nothing to prepare.")


def validate_windows(acute: Any, chronic: Any) -> tuple[int, int]:
    """
    Validate acute and chronic window sizes.

    Both must be positive integers (integer-valued floats are accepted) and
    acute must not exceed chronic.

    Returns:
        (acute, chronic) as ints.

    Raises:
        InvalidWindowSize: On a non-integer, non-positive or misordered window.
    """
    sizes = {}
    for name, size in (("acute", acute), ("chronic", chronic)):
        if isinstance(size, bool) or not isinstance(size, (int, float, np.integer, np.floating)):
            raise InvalidWindowSize(f"{name} window must be a positive integer. Got: {size!r}.")
        if float(size) != int(size) or int(size) <= 0:
            raise InvalidWindowSize(f"{name} window must be a positive integer. Got: {size!r}.")
        sizes[name] = int(size)
    if sizes["acute"] > sizes["chronic"]:
        raise InvalidWindowSize(
            f"acute window ({sizes['acute']}) must not be larger than chronic window ({sizes['chronic']})."
        )
    return sizes["acute"], sizes["chronic"]


def normalize_dates(dates: pd.Series) -> pd.Series:
    """
    Return the date column as calendar days or integers.

    Datetime-like columns are normalized to midnight (time component dropped).
    Object columns holding only date/datetime instances are converted.
    Numeric columns must hold integer values and are cast to int64.

    Raises:
        InvalidDateType: For strings, booleans, fractional numbers or mixed objects.
    """
    if pd.api.types.is_datetime64_any_dtype(dates):
        return dates.dt.normalize()
    if pd.api.types.is_bool_dtype(dates):
        raise InvalidDateType(f"Date column '{dates.name}' must be datetime-like or numeric. Got dtype: bool.")
    if pd.api.types.is_numeric_dtype(dates):
        present = dates.dropna()
        if not np.all(np.mod(present.to_numpy(dtype=float), 1) == 0):
            raise InvalidDateType(f"Numeric date column '{dates.name}' must hold integer values.")
        return dates.astype("Int64")
    present = dates.dropna()
    if len(present) and all(isinstance(d, (dt.date, pd.Timestamp)) for d in present):
        return pd.to_datetime(dates).dt.normalize()
    raise InvalidDateType(
        f"Date column '{dates.name}' must be datetime-like or numeric. "
        f"Got dtype: {dates.dtype}. Use pd.to_datetime() before preparing."
    )


def is_nominal(values: pd.Series) -> bool:
    """Value columns that are not numeric (booleans included) are processed as nominal."""
    return pd.api.types.is_bool_dtype(values) or not pd.api.types.is_numeric_dtype(values)


def standardize(df: pd.DataFrame, config: dict[str, Any] | None = None) -> pd.DataFrame:
    """
    Select the four record columns under their canonical names.

    Validates columns and the date type, normalizes dates, and drops records
    whose athlete, date or variable is missing (logged as a warning). Does not
    mutate df.

    Returns:
        New DataFrame with columns athlete, date, variable, value.
    """
    validate_columns(df, config)
    mapping = column_mapping(config)
    out = pd.DataFrame({name: df[source] for name, source in mapping.items()})
    out[DATE] = normalize_dates(df[mapping[DATE]])

    keyless = out[[ATHLETE, DATE, VARIABLE]].isna().any(axis=1)
    if keyless.any():
        logger.warning("Dropping %d record(s) with missing athlete, date or variable", int(keyless.sum()))
        out = out.loc[~keyless]
    if out.empty:
        raise MonitoringError("No records left after dropping rows with missing athlete, date or variable.")
    if pd.api.types.is_integer_dtype(out[DATE]):
        out[DATE] = out[DATE].astype("int64")
    return out.reset_index(drop=True)
