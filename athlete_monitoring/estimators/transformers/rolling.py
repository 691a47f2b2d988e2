"""
Acute and chronic rolling estimators over the daily grid.

For every athlete/variable(/level) partition the user-supplied estimator
function is applied to each trailing acute and chronic window. Rows before
a full window is available get rolling_fill. Returns only the rolling
estimator columns, same index as input.
"""

from collections.abc import Callable
from typing import Any

import numpy as np
import pandas as pd
from numpy.lib.stride_tricks import sliding_window_view

from ...errors import EstimatorEvaluationError, InvalidColumnReference
from ...etl.grid import partition_columns
from ...etl.validate import DATE, VALUE, validate_windows
from ..functions import default_rolling_estimators
from .base import BaseMonitoringTransformer, as_named_estimates

WINDOW_NAMES = ("acute", "chronic")
_CONTEXT_KEYS = ("athlete", "variable", "level")


class RollingEstimatorTransformer(BaseMonitoringTransformer):
    """
    Trailing acute/chronic window estimators per partition.

    Causal: the window ending at day i covers days i-w+1 .. i of the same
    partition only. There is no partial-window computation: while i+1 < w
    every column of that window is rolling_fill. NA values are passed to
    the estimator as-is; the estimator decides how to treat them.

    Column names are <window>.<estimator>, e.g. acute.mean, chronic.sd. The
    estimator names are fixed by the first evaluation; any later evaluation
    returning other names is an error.
    """

    def __init__(self, rolling_estimators: Callable[[np.ndarray], Any] | None = None) -> None:
        self._estimators = rolling_estimators or default_rolling_estimators
        self._value_col: str = VALUE
        self._date_col: str = DATE
        self._partition_cols: list[str] = []
        self._windows: dict[str, int] = {"acute": 7, "chronic": 28}
        self._rolling_fill: Any = np.nan
        self._names: list[str] | None = None
        self._fitted: bool = False

    @property
    def estimator_names(self) -> list[str] | None:
        """Estimator names fixed by the last transform (None before any evaluation)."""
        return None if self._names is None else list(self._names)

    def fit(self, df: pd.DataFrame, config: dict[str, Any] | None = None) -> "RollingEstimatorTransformer":
        """
        Read config and validate columns exist. Does not mutate df.

        Config: acute (default 7), chronic (default 28), rolling_fill
        (default NaN), value_column (default "value"), date_column (default
        "date"), partition_columns (default athlete, variable[, level]).
        """
        cfg = config or {}
        acute, chronic = validate_windows(cfg.get("acute", 7), cfg.get("chronic", 28))
        self._windows = dict(zip(WINDOW_NAMES, (acute, chronic)))
        fill = cfg.get("rolling_fill", np.nan)
        self._rolling_fill = np.nan if fill is None else fill
        self._value_col = cfg.get("value_column", VALUE)
        self._date_col = cfg.get("date_column", DATE)
        self._partition_cols = list(cfg.get("partition_columns") or partition_columns(df))

        for col in [self._date_col, self._value_col] + self._partition_cols:
            if col not in df.columns:
                raise InvalidColumnReference(col, list(df.columns))
        self._fitted = True
        return self

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Compute acute and chronic estimator columns per partition.
        Does not mutate df. Returns only the rolling columns; same index.

        Raises:
            EstimatorEvaluationError: If the estimator raises or returns an
                invalid result; carries athlete, variable, level, window and
                the row index within the partition.
        """
        if not self._fitted:
            raise RuntimeError("RollingEstimatorTransformer must be fitted before transform.")

        self._names = None
        pieces: list[tuple[pd.Index, dict[str, list[dict[str, float] | None]]]] = []
        for key, group in df.groupby(self._partition_cols, sort=False, observed=True):
            g = group.sort_values(self._date_col)
            context = {k: v for k, v in zip(self._partition_cols, key) if k in _CONTEXT_KEYS}
            values = g[self._value_col].to_numpy(dtype=float)
            estimates = {
                window: self._estimate_window(values, size, window, context)
                for window, size in self._windows.items()
            }
            pieces.append((g.index, estimates))

        if self._names is None:
            # No partition reached a full window; ask the estimator for its names on an empty window
            self._names = list(self._evaluate(np.full(self._windows["acute"], np.nan), {}, "acute", None))

        columns = [f"{window}.{name}" for window in self._windows for name in self._names]
        parts = [self._to_frame(index, estimates) for index, estimates in pieces]
        if not parts:
            return pd.DataFrame(index=df.index, columns=columns, dtype=float)
        out = pd.concat(parts)
        return out.reindex(df.index)[columns]

    def _estimate_window(
        self,
        values: np.ndarray,
        size: int,
        window: str,
        context: dict[str, Any],
    ) -> list[dict[str, float] | None]:
        """One entry per day: None during warm-up, estimates once the window is full."""
        n = len(values)
        estimates: list[dict[str, float] | None] = [None] * min(size - 1, n)
        if n < size:
            return estimates
        for offset, trailing in enumerate(sliding_window_view(values, size)):
            row_index = offset + size - 1
            estimates.append(self._evaluate(trailing.copy(), context, window, row_index))
        return estimates

    def _evaluate(
        self,
        trailing: np.ndarray,
        context: dict[str, Any],
        window: str,
        row_index: int | None,
    ) -> dict[str, float]:
        try:
            estimates = as_named_estimates(self._estimators(trailing))
        except Exception as e:
            raise EstimatorEvaluationError(
                f"rolling_estimators failed: {type(e).__name__}: {e}",
                window=window,
                row_index=row_index,
                **context,
            ) from e
        names = list(estimates)
        if self._names is None:
            if not names:
                raise EstimatorEvaluationError(
                    "rolling_estimators returned no estimates", window=window, row_index=row_index, **context
                )
            self._names = names
        elif names != self._names:
            raise EstimatorEvaluationError(
                f"rolling_estimators returned names {names}, expected {self._names}",
                window=window,
                row_index=row_index,
                **context,
            )
        return estimates

    def _to_frame(self, index: pd.Index, estimates: dict[str, list[dict[str, float] | None]]) -> pd.DataFrame:
        """Rolling columns for one partition, warm-up rows set to rolling_fill."""
        result = pd.DataFrame(index=index)
        for window, rows in estimates.items():
            for name in self._names:
                result[f"{window}.{name}"] = [self._rolling_fill if row is None else row[name] for row in rows]
        return result
