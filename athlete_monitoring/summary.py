"""
Summary table for prepared monitoring data.

Per athlete and variable: entry and missing counts, date span and
descriptive statistics of the daily values. Nominal data is summarized per
level with the level proportion instead of descriptive statistics.
"""

from typing import TYPE_CHECKING

import numpy as np
import pandas as pd

from .etl.validate import ATHLETE, DATE, LEVEL, MISSING_DAY, MISSING_ENTRY, VALUE, VARIABLE

if TYPE_CHECKING:
    from .prepared import PreparedMonitoring

# Scale factor making the MAD a consistent estimator of the SD for normal data
MAD_SCALE = 1.4826

COUNT_COLUMNS = ("day_entries", "missing_entries", "missing_days", "start_date", "stop_date")


def _counts(group: pd.DataFrame) -> dict:
    return {
        "day_entries": int(group[VALUE].notna().sum()),
        "missing_entries": int(group[MISSING_ENTRY].sum()),
        "missing_days": int(group[MISSING_DAY].sum()),
        "start_date": group[DATE].min(),
        "stop_date": group[DATE].max(),
    }


def _describe(values: pd.Series) -> dict:
    """Descriptive statistics ignoring NA; NaN when no value is present."""
    present = values.dropna().astype(float)
    if present.empty:
        return dict.fromkeys(("mean", "sd", "min", "max", "median", "iqr", "mad"), np.nan)
    median = present.median()
    return {
        "mean": present.mean(),
        "sd": present.std(ddof=1),
        "min": present.min(),
        "max": present.max(),
        "median": median,
        "iqr": present.quantile(0.75) - present.quantile(0.25),
        "mad": MAD_SCALE * (present - median).abs().median(),
    }


def summarize(prepared: "PreparedMonitoring") -> pd.DataFrame:
    """
    Build the summary table of a prepared object.

    Numeric: one row per (athlete, variable) with day_entries, missing_entries,
    missing_days, start_date, stop_date, mean, sd, min, max, median, iqr, mad.

    Nominal: one row per (athlete, variable, level) with the same counts and
    date span plus proportion (level sum / variable total).

    Counts refer to the imputed daily values: day_entries counts non-NA
    values, so days imputed with na_day count as entries.
    """
    data = prepared.data_wide
    if prepared.type == "nominal":
        keys = [ATHLETE, VARIABLE, LEVEL]
        rows = [{**dict(zip(keys, key)), **_counts(g)} for key, g in data.groupby(keys, sort=True, observed=True)]
        table = pd.DataFrame(rows, columns=keys + list(COUNT_COLUMNS))
        shares = prepared.proportions[keys + ["proportion"]]
        return table.merge(shares, on=keys, how="left")

    keys = [ATHLETE, VARIABLE]
    rows = [
        {**dict(zip(keys, key)), **_counts(g), **_describe(g[VALUE])}
        for key, g in data.groupby(keys, sort=True, observed=True)
    ]
    return pd.DataFrame(rows)
