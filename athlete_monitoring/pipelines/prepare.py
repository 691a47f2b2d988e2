"""
Prepare pipeline for athlete monitoring data.

Accepts raw long-format records and config; builds the dense daily grid,
aggregates same-day entries, applies the missing-value policy, computes
acute/chronic rolling estimators, post-hoc estimators and cross-athlete
group summaries. No file I/O.
"""

import logging
from collections.abc import Callable
from types import MappingProxyType
from typing import Any

import numpy as np
import pandas as pd

from ..errors import MonitoringError
from ..estimators.functions import (
    default_group_summary_estimators,
    default_rolling_estimators,
    identity_posthoc,
    sum_day_aggregate,
)
from ..estimators.transformers import GroupSummaryTransformer, PosthocTransformer, RollingEstimatorTransformer
from ..etl.aggregate import aggregate_days
from ..etl.grid import build_grid
from ..etl.impute import apply_missing_policy
from ..etl.nominal import collapse_presence, compute_proportions, discover_levels, expand_levels
from ..etl.validate import VALUE, is_nominal, standardize, validate_windows
from ..prepared import PreparedMonitoring

logger = logging.getLogger(__name__)

DEFAULT_PREPARE_CONFIG: dict[str, Any] = {
    "athlete_column": "athlete",
    "date_column": "date",
    "variable_column": "variable",
    "value_column": "value",
    "acute": 7,
    "chronic": 28,
    "rolling_fill": np.nan,
    "na_session": np.nan,
    "na_day": np.nan,
    "use_counts": False,
    "max_levels_warning": 50,
}

# YAML null means "leave as NA" for these keys
_NA_KEYS = ("rolling_fill", "na_session", "na_day")


def resolve_config(config: dict[str, Any] | None = None) -> dict[str, Any]:
    """
    Merge config over DEFAULT_PREPARE_CONFIG.

    Accepts a flat dict or one nested under "prepare" (as loaded from YAML).
    Unknown keys are ignored; None for rolling_fill/na_session/na_day means NaN.
    """
    raw = config or {}
    cfg = raw["prepare"] if isinstance(raw.get("prepare"), dict) else raw
    resolved = {**DEFAULT_PREPARE_CONFIG, **{k: v for k, v in cfg.items() if k in DEFAULT_PREPARE_CONFIG}}
    for key in _NA_KEYS:
        if resolved[key] is None:
            resolved[key] = np.nan
    resolved["acute"], resolved["chronic"] = validate_windows(resolved["acute"], resolved["chronic"])
    return resolved


def prepare(
    df: pd.DataFrame,
    config: dict[str, Any] | None = None,
    *,
    day_aggregate: Callable[[np.ndarray], Any] | None = None,
    rolling_estimators: Callable[[np.ndarray], Any] | None = None,
    posthoc_estimators: Callable[[pd.DataFrame], pd.DataFrame] | None = None,
    group_summary_estimators: Callable[[np.ndarray], Any] | None = None,
) -> PreparedMonitoring:
    """
    Prepare athlete monitoring data.

    Steps, in order; any failure aborts the run without partial results:
      1. Validate columns, windows and date type; standardize column names.
      2. Nominal values only: expand each level into an indicator series.
      3. Grid: athletes x full date span x variables (x levels).
      4. Aggregate same-day entries with day_aggregate.
      5. Nominal presence mode only: collapse counts to 0/1.
      6. Missing-value policy (na_session, then na_day).
      7. Rolling acute/chronic estimators per partition.
      8. Post-hoc estimators over the whole table.
      9. Group summaries across athletes.

    Config shape (all optional; flat or nested under "prepare"):
        prepare:
          athlete_column: "athlete"
          date_column: "date"
          variable_column: "variable"
          value_column: "value"
          acute: 7
          chronic: 28
          rolling_fill: null
          na_session: null
          na_day: 0
          use_counts: false
          max_levels_warning: 50

    Args:
        df: Raw records, one row per athlete/date/variable entry. Not mutated.
        config: See above.
        day_aggregate: ndarray -> number for same-day entries (default sum).
        rolling_estimators: ndarray -> mapping name -> number (default mean,
            sd, cv, conf).
        posthoc_estimators: DataFrame -> DataFrame with the same rows
            (default identity).
        group_summary_estimators: ndarray -> mapping name -> number (default
            median, lower, upper).

    Returns:
        PreparedMonitoring with data_wide, group_summary and the config echo.

    Raises:
        InvalidColumnReference, InvalidDateType, InvalidWindowSize,
        PosthocShapeError, EstimatorEvaluationError.
    """
    cfg = resolve_config(config)
    day_aggregate = day_aggregate or sum_day_aggregate
    rolling_estimators = rolling_estimators or default_rolling_estimators
    posthoc_estimators = posthoc_estimators or identity_posthoc
    group_summary_estimators = group_summary_estimators or default_group_summary_estimators

    # 1. Validate + standardize
    records = standardize(df, cfg)
    logger.info("Prepare step: validate done (records=%d)", len(records))

    # 2. Nominal expansion
    nominal = is_nominal(records[VALUE])
    levels = None
    if nominal:
        levels = discover_levels(records[VALUE], cfg["max_levels_warning"])
        if not levels:
            raise MonitoringError("Nominal value column has no non-missing values; no levels to analyze.")
        logger.info(
            "Prepare step: nominal approach (levels=%s, use_counts=%s); each level is analyzed as a separate series",
            levels,
            cfg["use_counts"],
        )
        records = expand_levels(records, levels)

    # 3. Grid
    grid = build_grid(records)
    logger.info("Prepare step: grid done (rows=%d)", len(grid))

    # 4-6. Aggregate, presence, missing-value policy
    daily = aggregate_days(records, grid, day_aggregate)
    if nominal and not cfg["use_counts"]:
        daily = collapse_presence(daily)
    daily = apply_missing_policy(daily, cfg["na_session"], cfg["na_day"])
    logger.info(
        "Prepare step: aggregate done (missing_entries=%d, missing_days=%d)",
        int(daily["missing_entry"].sum()),
        int(daily["missing_day"].sum()),
    )

    # 7. Rolling estimators
    roll_cfg = {k: cfg[k] for k in ("acute", "chronic", "rolling_fill")}
    rolling = RollingEstimatorTransformer(rolling_estimators).fit_transform(daily, roll_cfg)
    data_wide = pd.concat([daily, rolling], axis=1)
    logger.info("Prepare step: rolling done (columns=%s)", list(rolling.columns))

    # 8. Post-hoc estimators
    data_wide = PosthocTransformer(posthoc_estimators).fit_transform(data_wide)
    logger.info("Prepare step: posthoc done (total cols=%d)", data_wide.shape[1])

    # 9. Group summaries
    group_summary = GroupSummaryTransformer(group_summary_estimators).fit_transform(data_wide)
    logger.info("Prepare step: group summary done (rows=%d)", len(group_summary))

    proportions = compute_proportions(data_wide) if nominal else None

    logger.info("Prepare pipeline complete (type=%s, rows=%d)", "nominal" if nominal else "numeric", len(data_wide))
    return PreparedMonitoring(
        type="nominal" if nominal else "numeric",
        data_wide=data_wide,
        group_summary=group_summary,
        config=MappingProxyType(dict(cfg)),
        day_aggregate=day_aggregate,
        rolling_estimators=rolling_estimators,
        posthoc_estimators=posthoc_estimators,
        group_summary_estimators=group_summary_estimators,
        levels=tuple(levels) if levels is not None else None,
        proportions=proportions,
    )
