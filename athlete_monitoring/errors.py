"""
Error taxonomy for athlete monitoring data preparation.

Every error aborts the whole prepare run; there are no partial results.
"""

from typing import Any


class MonitoringError(Exception):
    """Base class for errors raised while preparing monitoring data."""


class InvalidColumnReference(MonitoringError, ValueError):
    """A configured column (athlete, date, variable or value) is absent from the input."""

    def __init__(self, column: str, available: list[Any]) -> None:
        self.column = column
        self.available = list(available)
        super().__init__(f"Column '{column}' not found in data. Found: {self.available}.")


class InvalidDateType(MonitoringError, TypeError):
    """Date column is neither datetime-like nor integer-valued numeric."""


class InvalidWindowSize(MonitoringError, ValueError):
    """Acute/chronic window is not a positive integer, or acute > chronic."""


class PosthocShapeError(MonitoringError):
    """Post-hoc estimator function failed or changed row count/order."""


class EstimatorEvaluationError(MonitoringError):
    """
    A user-supplied function raised or returned an invalid result.

    Carries the partition context so the failing athlete/variable/window can
    be identified. Fields that do not apply to the failing stage are None.
    """

    def __init__(
        self,
        message: str,
        *,
        athlete: Any = None,
        variable: Any = None,
        level: Any = None,
        window: str | None = None,
        row_index: int | None = None,
        estimator: str | None = None,
        date: Any = None,
    ) -> None:
        self.athlete = athlete
        self.variable = variable
        self.level = level
        self.window = window
        self.row_index = row_index
        self.estimator = estimator
        self.date = date
        context = {
            "athlete": athlete,
            "variable": variable,
            "level": level,
            "window": window,
            "row_index": row_index,
            "estimator": estimator,
            "date": date,
        }
        ctx = ", ".join(f"{k}={v!r}" for k, v in context.items() if v is not None)
        super().__init__(f"{message} ({ctx})" if ctx else message)
