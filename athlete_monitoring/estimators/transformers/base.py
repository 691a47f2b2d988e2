"""
Base interface for monitoring estimator transformers.

fit() reads config and validates columns; transform() applies the
estimator to a prepared daily grid. No lookahead; no mutation of inputs.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

import numpy as np
import pandas as pd


class BaseMonitoringTransformer(ABC):
    """
    Abstract base for the estimator stages of the prepare pipeline.

    **Time safety:** For a row at day t, only that partition's rows at t or
    earlier may be used. Windows never cross athlete/variable/level
    partitions.

    **Immutability:** transform(df) must not mutate the input DataFrame.
    Return a new DataFrame. fit(df) may store configuration derived from df
    but must not modify df.
    """

    @abstractmethod
    def fit(self, df: pd.DataFrame, config: dict[str, Any] | None = None) -> "BaseMonitoringTransformer":
        """
        Read configuration and validate the columns of df.

        Args:
            df: Daily grid (athlete, date, variable[, level], value, ...).
            config: Optional transformer-specific config.

        Returns:
            self, for method chaining.
        """
        ...

    @abstractmethod
    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Apply the estimator using the fitted configuration. Does not mutate df.

        Returns:
            New DataFrame; the row contract is documented per transformer.
        """
        ...

    def fit_transform(self, df: pd.DataFrame, config: dict[str, Any] | None = None) -> pd.DataFrame:
        """Equivalent to self.fit(df, config).transform(df)."""
        return self.fit(df, config).transform(df)


def as_named_estimates(result: Any) -> dict[str, float]:
    """
    Normalize an estimator result to a dict of name -> float.

    Accepts a Mapping or a pandas Series. None values become NaN.

    Raises:
        TypeError: If result is not a mapping or holds non-numeric values.
    """
    if isinstance(result, pd.Series):
        result = result.to_dict()
    if not isinstance(result, Mapping):
        raise TypeError(f"estimator must return a mapping of name -> number. Got: {type(result).__name__}")
    estimates: dict[str, float] = {}
    for name, value in result.items():
        if value is None:
            estimates[str(name)] = np.nan
            continue
        if isinstance(value, np.ndarray) and value.ndim == 0:
            value = value.item()
        if isinstance(value, str) or not np.isscalar(value):
            raise TypeError(f"estimator output '{name}' must be a number. Got: {type(value).__name__}")
        estimates[str(name)] = float(value)
    return estimates
