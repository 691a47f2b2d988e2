"""
Cross-athlete group summaries of the estimator columns.

For each date/variable(/level) and each estimator column, the group summary
function is applied to the values of all athletes, e.g. median and IQR bands
for plotting an athlete against the squad.
"""

from collections.abc import Callable
from typing import Any

import numpy as np
import pandas as pd

from ...errors import EstimatorEvaluationError, InvalidColumnReference
from ...etl.validate import ATHLETE, DATE, LEVEL, MISSING_DAY, MISSING_ENTRY, VALUE, VARIABLE
from ..functions import default_group_summary_estimators
from .base import BaseMonitoringTransformer, as_named_estimates

GRID_COLUMNS = (ATHLETE, DATE, VARIABLE, LEVEL, MISSING_ENTRY, MISSING_DAY, VALUE)
GROUP_PREFIX = "group."


def estimator_columns(df: pd.DataFrame) -> list[str]:
    """Numeric columns beyond the grid fields: rolling and post-hoc estimators."""
    return [
        c
        for c in df.columns
        if c not in GRID_COLUMNS
        and pd.api.types.is_numeric_dtype(df[c])
        and not pd.api.types.is_bool_dtype(df[c])
    ]


class GroupSummaryTransformer(BaseMonitoringTransformer):
    """
    Group summary estimators across athletes.

    Returns a long table (not aligned with the input index): one row per
    (date, variable[, level], estimator) with one group.<name> column per
    output of the summary function.
    """

    def __init__(self, group_summary_estimators: Callable[[np.ndarray], Any] | None = None) -> None:
        self._estimators = group_summary_estimators or default_group_summary_estimators
        self._group_cols: list[str] = [DATE, VARIABLE]
        self._estimator_cols: list[str] = []
        self._names: list[str] | None = None
        self._fitted: bool = False

    def fit(self, df: pd.DataFrame, config: dict[str, Any] | None = None) -> "GroupSummaryTransformer":
        """
        Resolve group keys and estimator columns. Does not mutate df.

        Config: estimator_columns (default: every numeric non-grid column).
        """
        cfg = config or {}
        self._group_cols = [DATE, VARIABLE] + ([LEVEL] if LEVEL in df.columns else [])
        self._estimator_cols = list(cfg.get("estimator_columns") or estimator_columns(df))
        for col in self._group_cols + self._estimator_cols:
            if col not in df.columns:
                raise InvalidColumnReference(col, list(df.columns))
        self._fitted = True
        return self

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Summarize each estimator column across athletes per group key.

        Raises:
            EstimatorEvaluationError: If the summary function raises or returns
                an invalid or inconsistent mapping.
        """
        if not self._fitted:
            raise RuntimeError("GroupSummaryTransformer must be fitted before transform.")

        self._names = None
        rows: list[dict[str, Any]] = []
        for key, group in df.groupby(self._group_cols, sort=True, observed=True):
            context = dict(zip(self._group_cols, key))
            for column in self._estimator_cols:
                estimates = self._evaluate(group[column].to_numpy(dtype=float), context, column)
                rows.append({**context, "estimator": column, **{GROUP_PREFIX + k: v for k, v in estimates.items()}})

        names = [GROUP_PREFIX + n for n in (self._names or [])]
        out = pd.DataFrame(rows, columns=self._group_cols + ["estimator"] + names)
        if not out.empty:
            out[DATE] = out[DATE].astype(df[DATE].dtype)
        return out

    def _evaluate(self, values: np.ndarray, context: dict[str, Any], column: str) -> dict[str, float]:
        try:
            estimates = as_named_estimates(self._estimators(values))
        except Exception as e:
            raise EstimatorEvaluationError(
                f"group_summary_estimators failed: {type(e).__name__}: {e}", estimator=column, **context
            ) from e
        names = list(estimates)
        if self._names is None:
            self._names = names
        elif names != self._names:
            raise EstimatorEvaluationError(
                f"group_summary_estimators returned names {names}, expected {self._names}",
                estimator=column,
                **context,
            )
        return estimates
