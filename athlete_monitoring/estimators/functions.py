"""
Default pluggable functions for the prepare pipeline.

Rolling and group summary estimators take a float ndarray (NaN included)
and return a mapping of name -> number. They skip NaN themselves; an
all-NaN input gives NaN estimates rather than warnings.
"""

import numpy as np
import pandas as pd


def _present(x: np.ndarray) -> np.ndarray:
    x = np.asarray(x, dtype=float)
    return x[~np.isnan(x)]


def _sd(x: np.ndarray) -> float:
    """Sample standard deviation (n - 1); NaN with fewer than two values."""
    return float(np.std(x, ddof=1)) if len(x) > 1 else np.nan


def sum_day_aggregate(x: np.ndarray) -> float:
    """Sum of same-day entries. NaN propagates: one NA entry makes the day NA."""
    return float(np.sum(np.asarray(x, dtype=float)))


def mean_day_aggregate(x: np.ndarray) -> float:
    """Mean of same-day entries ignoring NA; for variables that do not add up (e.g. wellness scores)."""
    present = _present(x)
    return float(np.mean(present)) if len(present) else np.nan


def default_rolling_estimators(x: np.ndarray) -> dict[str, float]:
    """
    mean, sd, cv (sd / mean) and conf (share of non-NA values in the window).
    """
    present = _present(x)
    mean = np.float64(np.mean(present)) if len(present) else np.float64(np.nan)
    sd = np.float64(_sd(present))
    with np.errstate(divide="ignore", invalid="ignore"):
        cv = sd / mean
    conf = len(present) / len(x) if len(x) else np.nan
    return {"mean": float(mean), "sd": float(sd), "cv": float(cv), "conf": float(conf)}


def default_group_summary_estimators(x: np.ndarray) -> dict[str, float]:
    """Median and interquartile band (25th/75th percentile, linear interpolation)."""
    present = _present(x)
    if not len(present):
        return {"median": np.nan, "lower": np.nan, "upper": np.nan}
    lower, median, upper = np.quantile(present, [0.25, 0.5, 0.75])
    return {"median": float(median), "lower": float(lower), "upper": float(upper)}


def identity_posthoc(df: pd.DataFrame) -> pd.DataFrame:
    """Default post-hoc estimator: no derived columns."""
    return df


def acute_chronic_posthoc(df: pd.DataFrame) -> pd.DataFrame:
    """
    Acute:chronic composites from mean/sd rolling estimators.

    ACD = acute.mean - chronic.mean, ACR = acute.mean / chronic.mean,
    ES = ACD / chronic.sd. Division by zero gives inf/NaN.
    """
    out = df.copy()
    acute = out["acute.mean"].astype(float)
    chronic = out["chronic.mean"].astype(float)
    with np.errstate(divide="ignore", invalid="ignore"):
        out["ACD"] = acute - chronic
        out["ACR"] = acute / chronic
        out["ES"] = out["ACD"] / out["chronic.sd"].astype(float)
    return out
