"""
Missing-value policy for the aggregated daily grid.

Two independent imputation values: one for entries that exist but
aggregate to NA (na_session), one for days without any record (na_day).
"""

from typing import Any

import numpy as np
import pandas as pd

from .validate import MISSING_DAY, MISSING_ENTRY, VALUE


def _fill_value(value: Any) -> Any:
    return np.nan if value is None else value


def apply_missing_policy(
    df: pd.DataFrame,
    na_session: Any = np.nan,
    na_day: Any = np.nan,
) -> pd.DataFrame:
    """
    Impute missing entries, then missing days. Does not mutate df.

    Order is fixed: NA values on missing_entry rows become na_session, then
    every missing_day row becomes na_day. Since a missing day is also a
    missing entry, na_day wins on days without records. The flags are left
    untouched so summaries can still count what was imputed.

    Args:
        df: Output of aggregate_days (value, missing_entry, missing_day).
        na_session: Value for NA entries. Default NaN (leave as NA).
        na_day: Value for days without records, e.g. 0 for load measures.
            Default NaN (leave as NA).

    Returns:
        New DataFrame with imputed value column.
    """
    out = df.copy()
    values = out[VALUE].to_numpy(dtype=float, copy=True)
    entry_mask = out[MISSING_ENTRY].to_numpy(dtype=bool) & np.isnan(values)
    values[entry_mask] = _fill_value(na_session)
    values[out[MISSING_DAY].to_numpy(dtype=bool)] = _fill_value(na_day)
    out[VALUE] = values
    return out
