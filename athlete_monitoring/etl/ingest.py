"""
Ingest raw monitoring records from CSV.

Loads long-format athlete/date/variable/value files with config-driven
encoding and date parsing. No preparation logic.
"""

from pathlib import Path
from typing import Any

import pandas as pd

from ..errors import InvalidColumnReference, InvalidDateType


def load_monitoring_csv(
    path: str | Path,
    config: dict[str, Any] | None = None,
    **read_csv_kwargs: Any,
) -> pd.DataFrame:
    """
    Load raw monitoring records from a CSV file.

    Args:
        path: Path to the CSV file.
        config: Optional ingest config. Expected keys (all optional):
            - date_column: Name of the date column (default "date").
            - date_format: strftime format passed to pd.to_datetime. Default
              "mixed": each value parsed on its own, so date-only and
              date-time entries may share the column.
            - parse_dates: If True, parse a non-numeric date column to
              datetime (default True). Numeric day indices are kept as is.
            - encoding: File encoding (default "utf-8").
        **read_csv_kwargs: Passed to pd.read_csv (e.g. sep, skiprows).

    Returns:
        DataFrame with raw records, date column parsed when requested.

    Raises:
        FileNotFoundError: If path does not exist.
        ValueError: If the file has no rows.
        InvalidColumnReference: If the date column is missing.
        InvalidDateType: If date parsing fails.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Monitoring CSV not found: {path}")

    cfg = config or {}
    encoding = cfg.get("encoding", "utf-8")
    date_column = cfg.get("date_column", "date")
    date_format = cfg.get("date_format") or "mixed"
    parse_dates = cfg.get("parse_dates", True)

    try:
        df = pd.read_csv(path, encoding=encoding, **read_csv_kwargs)
    except pd.errors.EmptyDataError:
        raise ValueError(f"Monitoring CSV is empty: {path}") from None

    if df.empty:
        raise ValueError(f"Monitoring CSV has no rows: {path}")
    if date_column not in df.columns:
        raise InvalidColumnReference(date_column, list(df.columns))

    if parse_dates and not pd.api.types.is_numeric_dtype(df[date_column]):
        try:
            df[date_column] = pd.to_datetime(df[date_column], format=date_format)
        except (ValueError, TypeError) as e:
            raise InvalidDateType(f"Failed to parse date column '{date_column}' in {path}: {e}") from e

    return df
