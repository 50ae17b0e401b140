from __future__ import annotations

"""Dataset container shared by every component.

The formula/recipe layer that turns raw tables into model frames lives outside
this package; a :class:`Dataset` is already model-ready: predictors ``X``
(numpy array or pandas DataFrame), a response ``y`` and optional case weights
and stratification key.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from machineshop.contracts.choices import ResponseKind


@dataclass(frozen=True)
class Surv:
    """Right-censored survival response (follow-up time + event indicator)."""

    time: np.ndarray
    event: np.ndarray

    def __post_init__(self):
        time = np.asarray(self.time, dtype=float).ravel()
        event = np.asarray(self.event).astype(bool).ravel()
        if time.shape[0] != event.shape[0]:
            raise ValueError(f"time and event length mismatch: {time.shape[0]} vs {event.shape[0]}")
        object.__setattr__(self, "time", time)
        object.__setattr__(self, "event", event)

    def __len__(self) -> int:
        return int(self.time.shape[0])

    def __getitem__(self, idx) -> "Surv":
        return Surv(time=self.time[idx], event=self.event[idx])


def infer_response_kind(y: Any) -> ResponseKind:
    """Heuristic kind inference.

    Prefer passing ``response_kind`` explicitly when integer codes should be
    treated as numbers.
    """
    if isinstance(y, Surv):
        return "survival"
    arr = np.asarray(y)
    if arr.dtype.kind == "f":
        return "numeric"
    return "factor"


def _take(X: Any, idx: np.ndarray) -> Any:
    if isinstance(X, (pd.DataFrame, pd.Series)):
        return X.iloc[idx]
    return X[idx]


class Dataset:
    """Model-ready data.

    Parameters
    ----------
    X : array-like or DataFrame of shape (n_cases, n_predictors)
    y : array-like of length n_cases, or :class:`Surv`
    weights : optional case weights
    strata : optional case-grouping key used by stratified resampling
    response_kind : override for the inferred response kind
    levels : factor levels; inferred from ``y`` when omitted. Subsets keep the
        levels of their parent so probability columns stay aligned.
    """

    def __init__(
        self,
        X: Any,
        y: Any,
        *,
        weights: Optional[Sequence[float]] = None,
        strata: Optional[Sequence[Any]] = None,
        response_kind: Optional[ResponseKind] = None,
        levels: Optional[Sequence[Any]] = None,
    ):
        self.X = X if isinstance(X, pd.DataFrame) else np.asarray(X)
        if self.X.ndim == 1:
            self.X = self.X.reshape(-1, 1)
        self.y = y if isinstance(y, Surv) else np.asarray(y).ravel()
        self.response_kind: ResponseKind = response_kind or infer_response_kind(self.y)

        n = self.X.shape[0]
        if len(self.y) != n:
            raise ValueError(f"X and y length mismatch: {n} vs {len(self.y)}")

        self.weights = None if weights is None else np.asarray(weights, dtype=float).ravel()
        if self.weights is not None and self.weights.shape[0] != n:
            raise ValueError(f"weights length mismatch: {self.weights.shape[0]} vs {n}")

        self.strata = None if strata is None else np.asarray(strata).ravel()
        if self.strata is not None and self.strata.shape[0] != n:
            raise ValueError(f"strata length mismatch: {self.strata.shape[0]} vs {n}")

        if self.response_kind == "survival" and not isinstance(self.y, Surv):
            raise TypeError("survival responses must be given as Surv(time, event)")

        self.levels: Optional[List[Any]] = None
        if self.response_kind == "factor":
            self.levels = list(levels) if levels is not None else np.unique(self.y).tolist()

    # ------------------------------------------------------------------
    @property
    def n_cases(self) -> int:
        return int(self.X.shape[0])

    @property
    def predictor_names(self) -> List[str]:
        if isinstance(self.X, pd.DataFrame):
            return [str(c) for c in self.X.columns]
        return [f"x{j}" for j in range(self.X.shape[1])]

    def subset(self, idx: Sequence[int]) -> "Dataset":
        """Return the cases at ``idx`` (duplicates allowed, e.g. bootstrap draws)."""
        idx = np.asarray(idx, dtype=int).ravel()
        return Dataset(
            _take(self.X, idx),
            self.y[idx],
            weights=None if self.weights is None else self.weights[idx],
            strata=None if self.strata is None else self.strata[idx],
            response_kind=self.response_kind,
            levels=self.levels,
        )

    def with_X(self, X: Any) -> "Dataset":
        """Same response and case metadata with replacement predictors."""
        return Dataset(
            X,
            self.y,
            weights=self.weights,
            strata=self.strata,
            response_kind=self.response_kind,
            levels=self.levels,
        )

    def observed(self) -> Any:
        """Response in the form metrics consume.

        factor -> integer codes into ``levels``; numeric -> float array;
        survival -> :class:`Surv`.
        """
        if self.response_kind == "factor":
            index: Dict[Any, int] = {level: i for i, level in enumerate(self.levels or [])}
            try:
                return np.array([index[v] for v in self.y.tolist()], dtype=int)
            except KeyError as e:
                raise ValueError(f"response value {e.args[0]!r} is not among the factor levels") from e
        if self.response_kind == "numeric":
            return np.asarray(self.y, dtype=float)
        return self.y

    def stratification_key(self) -> np.ndarray:
        """Grouping key for stratified resampling."""
        if self.strata is not None:
            return self.strata
        if self.response_kind == "factor":
            return self.observed()
        if self.response_kind == "survival":
            return self.y.event.astype(int)
        y = np.asarray(self.y, dtype=float)
        cuts = np.unique(np.quantile(y, [0.25, 0.5, 0.75]))
        return np.digitize(y, cuts)

    def __len__(self) -> int:
        return self.n_cases

    def __repr__(self) -> str:
        return (
            f"Dataset(n_cases={self.n_cases}, n_predictors={self.X.shape[1]}, "
            f"response_kind={self.response_kind!r})"
        )
