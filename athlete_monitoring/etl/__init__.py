# ETL package: ingest, validate, grid, aggregate, impute, nominal.

from . import aggregate, grid, impute, ingest, nominal, validate
from .aggregate import aggregate_days
from .grid import build_grid, date_span
from .impute import apply_missing_policy
from .ingest import load_monitoring_csv
from .nominal import collapse_presence, compute_proportions, discover_levels, expand_levels
from .validate import REQUIRED_MONITORING_COLUMNS, is_nominal, standardize, validate_columns, validate_windows

__all__ = [
    "REQUIRED_MONITORING_COLUMNS",
    "aggregate",
    "aggregate_days",
    "apply_missing_policy",
    "build_grid",
    "collapse_presence",
    "compute_proportions",
    "date_span",
    "discover_levels",
    "expand_levels",
    "grid",
    "impute",
    "ingest",
    "is_nominal",
    "load_monitoring_csv",
    "nominal",
    "standardize",
    "validate",
    "validate_columns",
    "validate_windows",
]
