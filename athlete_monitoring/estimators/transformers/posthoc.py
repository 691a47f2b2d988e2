"""
Post-hoc estimators over the full rolling result table.

Applies one user-supplied function to the whole table to derive composite
columns (e.g. acute - chronic differences). The function must keep the row
count and row order.
"""

from collections.abc import Callable
from typing import Any

import pandas as pd

from ...errors import PosthocShapeError
from ...etl.validate import ATHLETE, DATE, LEVEL, VARIABLE
from ..functions import identity_posthoc
from .base import BaseMonitoringTransformer


class PosthocTransformer(BaseMonitoringTransformer):
    """
    Single call of posthoc_estimators(table) over a copy of the table.

    Unlike the rolling transformer, transform returns the full table
    returned by the function (input columns plus derived columns). Row
    identity is checked on the index and on the grid key columns
    (athlete, date, variable[, level]).
    """

    def __init__(self, posthoc_estimators: Callable[[pd.DataFrame], pd.DataFrame] | None = None) -> None:
        self._posthoc = posthoc_estimators or identity_posthoc
        self._key_cols: list[str] = []
        self._fitted: bool = False

    def fit(self, df: pd.DataFrame, config: dict[str, Any] | None = None) -> "PosthocTransformer":
        """Record the grid key columns present in df. Config is not used."""
        self._key_cols = [c for c in (ATHLETE, DATE, VARIABLE, LEVEL) if c in df.columns]
        self._fitted = True
        return self

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Run the post-hoc function. Does not mutate df.

        Raises:
            PosthocShapeError: If the function raises, returns something other
                than a DataFrame, or changes row count, row order or keys.
        """
        if not self._fitted:
            raise RuntimeError("PosthocTransformer must be fitted before transform.")

        try:
            result = self._posthoc(df.copy())
        except Exception as e:
            raise PosthocShapeError(f"posthoc_estimators raised {type(e).__name__}: {e}") from e

        if not isinstance(result, pd.DataFrame):
            raise PosthocShapeError(
                f"posthoc_estimators must return a DataFrame. Got: {type(result).__name__}."
            )
        if len(result) != len(df):
            raise PosthocShapeError(
                f"posthoc_estimators changed the row count: {len(df)} rows in, {len(result)} rows out."
            )
        if not result.index.equals(df.index):
            raise PosthocShapeError("posthoc_estimators changed the row order or index.")
        missing = [c for c in self._key_cols if c not in result.columns]
        if missing:
            raise PosthocShapeError(f"posthoc_estimators dropped key columns: {missing}.")
        if not result[self._key_cols].equals(df[self._key_cols]):
            raise PosthocShapeError("posthoc_estimators changed the athlete/date/variable keys of the rows.")
        return result
