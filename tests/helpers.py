"""Instrumented model families and metrics shared by the tests."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from machineshop.components.evaluation.metrics.types import Metric
from machineshop.components.models.base import MLModel
from machineshop.core.data import Dataset

SCORE = Metric("score", lambda observed, predicted: float(np.mean(predicted)), maximize=True)
ERROR = Metric("error", lambda observed, predicted: float(np.mean(predicted)), maximize=False)


class ScheduledModel:
    """Model family whose k-th fit predicts the k-th scheduled value.

    Combined with :data:`SCORE` or :data:`ERROR` this gives each resampling
    cell a known metric value. ``None`` in the schedule makes that fit raise.
    Once the schedule is exhausted, fits predict ``params["value"]`` (or 0).
    """

    def __init__(self, name: str, schedule: Sequence[Optional[float]] = ()):
        self.name = name
        self.schedule = list(schedule)
        self.calls: List[Dict[str, Any]] = []

    def fit(self, data: Dataset, params: Dict[str, Any]) -> float:
        k = len(self.calls)
        self.calls.append({"n_cases": data.n_cases, "params": dict(params)})
        if k < len(self.schedule):
            value = self.schedule[k]
            if value is None:
                raise RuntimeError(f"{self.name}: scheduled failure at fit {k}")
            return float(value)
        return float(params.get("value", 0.0))

    def predict(self, fitted: float, X: Any, times=None) -> np.ndarray:
        return np.full(np.asarray(X).shape[0], fitted)

    def model(self, **params: Any) -> MLModel:
        return MLModel(
            name=self.name,
            response_types=("numeric", "factor", "survival"),
            fit=self.fit,
            predict=self.predict,
            params=params,
        )


class FailingModel:
    """Every fit raises."""

    def __init__(self, name: str = "failing"):
        self.name = name

    def fit(self, data: Dataset, params: Dict[str, Any]):
        raise ValueError("cannot fit")

    def predict(self, fitted, X, times=None):
        raise AssertionError("never fitted")

    def model(self) -> MLModel:
        return MLModel(self.name, ("numeric", "factor", "survival"), self.fit, self.predict)


class RecordingModel:
    """Predicts the training mean plus ``shift``; records the case ids it was fit on."""

    def __init__(self, name: str):
        self.name = name
        self.seen: List[frozenset] = []

    def fit(self, data: Dataset, params: Dict[str, Any]) -> float:
        self.seen.append(frozenset(np.asarray(data.X)[:, 0].astype(int).tolist()))
        return float(np.mean(data.y)) + float(params.get("shift", 0.0))

    def predict(self, fitted: float, X: Any, times=None) -> np.ndarray:
        return np.full(np.asarray(X).shape[0], fitted)

    def model(self) -> MLModel:
        return MLModel(self.name, ("numeric",), self.fit, self.predict)


def _column_fit(data: Dataset, params: Dict[str, Any]) -> int:
    return int(params["column"])


def _column_predict(column: int, X: Any, times=None) -> np.ndarray:
    return np.asarray(X, dtype=float)[:, column]


def column_model(column: int) -> MLModel:
    """Numeric 'model' that predicts one predictor column unchanged."""
    return MLModel(
        name=f"column{column}",
        response_types=("numeric", "survival"),
        fit=_column_fit,
        predict=_column_predict,
        params={"column": column},
    )
