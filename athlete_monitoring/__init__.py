# Athlete monitoring: daily grid, acute/chronic rolling estimators, group summaries.

from .errors import (
    EstimatorEvaluationError,
    InvalidColumnReference,
    InvalidDateType,
    InvalidWindowSize,
    MonitoringError,
    PosthocShapeError,
)
from .pipelines import prepare
from .prepared import PreparedMonitoring
from .summary import summarize

__all__ = [
    "EstimatorEvaluationError",
    "InvalidColumnReference",
    "InvalidDateType",
    "InvalidWindowSize",
    "MonitoringError",
    "PosthocShapeError",
    "PreparedMonitoring",
    "prepare",
    "summarize",
]
