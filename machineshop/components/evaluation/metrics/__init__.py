from .registry import (
    BUILTIN_METRICS,
    DEFAULT_METRICS,
    accuracy,
    brier,
    cindex,
    concordance_index,
    cross_entropy,
    mae,
    mse,
    r2,
    rmse,
    roc_auc,
)
from .types import Metric, prediction_kind

__all__ = [
    "BUILTIN_METRICS",
    "DEFAULT_METRICS",
    "Metric",
    "prediction_kind",
    "accuracy",
    "brier",
    "cindex",
    "concordance_index",
    "cross_entropy",
    "mae",
    "mse",
    "r2",
    "rmse",
    "roc_auc",
]
