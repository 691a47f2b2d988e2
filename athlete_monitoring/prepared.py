"""
Prepared monitoring result.

Holds the rolling result table, the group summaries and the configuration
that produced them. Created once by prepare(); every view is a pure read
returning a new DataFrame.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from .estimators.transformers.group_summary import GRID_COLUMNS, estimator_columns
from .etl.validate import ATHLETE, DATE, LEVEL, VARIABLE
from .summary import summarize


@dataclass(frozen=True)
class PreparedMonitoring:
    """
    Output of the prepare pipeline.

    Attributes:
        type: "numeric" or "nominal".
        data_wide: One row per (athlete, date, variable[, level]) with
            missing_entry, missing_day, value, <window>.<estimator> and
            post-hoc columns.
        group_summary: One row per (date, variable[, level], estimator) with
            group.<name> columns.
        config: Resolved configuration (columns, windows, fill and NA policy).
        levels: Discovered levels (nominal only).
        proportions: Level share per (athlete, variable, level) (nominal only).

    Treat the frames as read-only; the views below never modify them.
    """

    type: str
    data_wide: pd.DataFrame = field(repr=False)
    group_summary: pd.DataFrame = field(repr=False)
    config: Mapping[str, Any]
    day_aggregate: Callable = field(repr=False)
    rolling_estimators: Callable = field(repr=False)
    posthoc_estimators: Callable = field(repr=False)
    group_summary_estimators: Callable = field(repr=False)
    levels: tuple | None = None
    proportions: pd.DataFrame | None = field(default=None, repr=False)

    @property
    def athletes(self) -> list:
        return list(pd.unique(self.data_wide[ATHLETE]))

    @property
    def variables(self) -> list:
        return list(pd.unique(self.data_wide[VARIABLE]))

    @property
    def estimators(self) -> list[str]:
        """Rolling and post-hoc estimator column names."""
        return estimator_columns(self.data_wide)

    @property
    def keys(self) -> list[str]:
        return [ATHLETE, DATE, VARIABLE] + ([LEVEL] if self.type == "nominal" else [])

    @property
    def data_long(self) -> pd.DataFrame:
        """
        Estimator columns melted to (estimator, estimate) rows, joined with
        the group summary of the same date/variable(/level)/estimator.
        """
        id_vars = [c for c in self.data_wide.columns if c in GRID_COLUMNS]
        long = self.data_wide.melt(
            id_vars=id_vars,
            value_vars=self.estimators,
            var_name="estimator",
            value_name="estimate",
        )
        group_keys = [DATE, VARIABLE] + ([LEVEL] if self.type == "nominal" else []) + ["estimator"]
        return long.merge(self.group_summary, on=group_keys, how="left")

    def select(
        self,
        athlete_name: Any = None,
        variable_name: Any = None,
        estimator_name: Any = None,
        last_n: int | None = None,
    ) -> pd.DataFrame:
        """
        Slice of data_long for a plot or table consumer.

        Each filter accepts a single value or a list; None keeps everything.
        last_n keeps the last n calendar days of the span.
        """
        long = self.data_long
        for column, wanted in ((ATHLETE, athlete_name), (VARIABLE, variable_name), ("estimator", estimator_name)):
            if wanted is None:
                continue
            wanted = list(wanted) if isinstance(wanted, (list, tuple, set)) else [wanted]
            long = long[long[column].isin(wanted)]
        if last_n is not None:
            if last_n <= 0:
                raise ValueError(f"last_n must be positive. Got: {last_n}.")
            dates = sorted(pd.unique(self.data_wide[DATE]))[-last_n:]
            long = long[long[DATE].isin(dates)]
        return long.reset_index(drop=True)

    def summary(self) -> pd.DataFrame:
        """Per athlete/variable(/level) summary table. See summary.summarize."""
        return summarize(self)
