# Estimator transformers: base interface, rolling, post-hoc, group summary.

from .base import BaseMonitoringTransformer, as_named_estimates
from .group_summary import GroupSummaryTransformer, estimator_columns
from .posthoc import PosthocTransformer
from .rolling import RollingEstimatorTransformer

__all__ = [
    "BaseMonitoringTransformer",
    "GroupSummaryTransformer",
    "PosthocTransformer",
    "RollingEstimatorTransformer",
    "as_named_estimates",
    "estimator_columns",
]
