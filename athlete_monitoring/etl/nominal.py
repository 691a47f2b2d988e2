"""
Nominal (categorical) value support.

A non-numeric value column is expanded into one numeric indicator series
per level, so the numeric grid/aggregate/rolling steps run unchanged with
the level as an extra partition key. Proportions per level are derived once
the daily values are final.
"""

import logging

import numpy as np
import pandas as pd

from .grid import sorted_unique
from .validate import ATHLETE, DATE, LEVEL, VALUE, VARIABLE

logger = logging.getLogger(__name__)


def discover_levels(values: pd.Series, max_levels_warning: int | None = 50) -> list:
    """
    Distinct non-null values over all records, sorted.

    Every level becomes its own partition for every athlete and variable, so a
    free-text column multiplies the grid size. A warning is logged when the
    number of levels exceeds max_levels_warning (None disables the check).
    """
    levels = sorted_unique(values)
    if max_levels_warning is not None and len(levels) > max_levels_warning:
        logger.warning(
            "Nominal value column has %d levels (warning threshold %d); grid grows by this factor",
            len(levels),
            max_levels_warning,
        )
    return levels


def expand_levels(records: pd.DataFrame, levels: list) -> pd.DataFrame:
    """
    Expand each record into one record per level with a numeric indicator.

    The indicator is 1.0 when the record's value equals the level, 0.0 when it
    holds another level and NaN when the value itself is missing. Every level
    therefore has a record wherever the variable was recorded, which keeps
    missing_day identical across the levels of a variable.

    Returns:
        New DataFrame with columns athlete, date, variable, level, value.
    """
    n_levels = len(levels)
    expanded = records.loc[records.index.repeat(n_levels)].reset_index(drop=True)
    raw = expanded[VALUE].to_numpy(dtype=object)
    level_col = np.array(list(levels) * len(records), dtype=object)
    missing = pd.isna(raw)
    matches = np.array([not na and r == lvl for r, lvl, na in zip(raw, level_col, missing)], dtype=bool)
    expanded[LEVEL] = level_col
    expanded[VALUE] = np.where(missing, np.nan, matches.astype(float))
    return expanded[[ATHLETE, DATE, VARIABLE, LEVEL, VALUE]]


def collapse_presence(df: pd.DataFrame) -> pd.DataFrame:
    """Turn aggregated level counts into presence flags (1.0 if > 0, else 0.0; NA kept)."""
    out = df.copy()
    values = out[VALUE].to_numpy(dtype=float)
    out[VALUE] = np.where(np.isnan(values), np.nan, (values > 0).astype(float))
    return out


def compute_proportions(df: pd.DataFrame) -> pd.DataFrame:
    """
    Share of each level in the variable total, per athlete and variable.

    Sums skip NA. A variable whose total is zero (no recorded level) gets a
    NaN proportion for all its levels.

    Returns:
        DataFrame with athlete, variable, level, level_sum, total_sum, proportion.
    """
    keys = [ATHLETE, VARIABLE, LEVEL]
    sums = df.groupby(keys, sort=True, observed=True)[VALUE].sum().rename("level_sum").reset_index()
    sums["total_sum"] = sums.groupby([ATHLETE, VARIABLE], sort=False)["level_sum"].transform("sum")
    sums["proportion"] = sums["level_sum"] / sums["total_sum"].replace(0, np.nan)
    return sums
