# Estimators: default pluggable functions and the transformers applying them.

from .functions import (
    acute_chronic_posthoc,
    default_group_summary_estimators,
    default_rolling_estimators,
    identity_posthoc,
    mean_day_aggregate,
    sum_day_aggregate,
)
from .transformers import GroupSummaryTransformer, PosthocTransformer, RollingEstimatorTransformer

__all__ = [
    "GroupSummaryTransformer",
    "PosthocTransformer",
    "RollingEstimatorTransformer",
    "acute_chronic_posthoc",
    "default_group_summary_estimators",
    "default_rolling_estimators",
    "identity_posthoc",
    "mean_day_aggregate",
    "sum_day_aggregate",
]
