from __future__ import annotations

"""sklearn-backed model families.

:func:`SklearnModel` adapts any pair of sklearn classifier/regressor classes to
the :class:`MLModel` contract; the named families below are thin
configurations of it with their own tuning-grid proposals.
"""

import inspect
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
from sklearn.ensemble import RandomForestClassifier, RandomForestRegressor
from sklearn.linear_model import LinearRegression, LogisticRegression
from sklearn.neighbors import KNeighborsClassifier, KNeighborsRegressor

from machineshop.contracts.choices import ResponseKind
from machineshop.core.data import Dataset

from .base import GridFunction, MLModel


@dataclass
class SklearnFit:
    """Fitted estimator plus what is needed to shape its predictions."""

    estimator: Any
    response_kind: ResponseKind
    n_levels: int = 0
    predictor_names: List[str] = field(default_factory=list)


def _filtered_kwargs(estimator_cls: type, params: Dict[str, Any]) -> Dict[str, Any]:
    """Drop None values and keep only kwargs accepted by the estimator."""
    allowed = set(inspect.signature(estimator_cls).parameters.keys())
    return {k: v for k, v in params.items() if v is not None and k in allowed}


def _accepts_sample_weight(estimator: Any) -> bool:
    return "sample_weight" in inspect.signature(estimator.fit).parameters


def SklearnModel(
    name: str,
    *,
    classifier: Optional[type] = None,
    regressor: Optional[type] = None,
    label: str = "",
    grid: Optional[GridFunction] = None,
    **params: Any,
) -> MLModel:
    """Wrap sklearn estimator classes as a model family.

    ``classifier`` serves factor responses, ``regressor`` numeric ones;
    ``params`` are the family defaults (None values fall back to the
    estimator's own defaults).
    """
    response_types: List[ResponseKind] = []
    if classifier is not None:
        response_types.append("factor")
    if regressor is not None:
        response_types.append("numeric")
    if not response_types:
        raise ValueError("SklearnModel needs a classifier and/or a regressor class")

    return MLModel(
        name=name,
        label=label or name,
        response_types=tuple(response_types),
        fit=_SklearnFitter(name=name, classifier=classifier, regressor=regressor),
        predict=predict_sklearn,
        params=dict(params),
        grid=grid,
        varimp=varimp_sklearn,
    )


# Module-level callables keep sklearn-backed families picklable.


@dataclass(frozen=True)
class _SklearnFitter:
    name: str
    classifier: Optional[type] = None
    regressor: Optional[type] = None

    def __call__(self, data: Dataset, fit_params: Dict[str, Any]) -> SklearnFit:
        estimator_cls = self.classifier if data.response_kind == "factor" else self.regressor
        if estimator_cls is None:
            raise TypeError(f"{self.name} does not support {data.response_kind!r} responses")
        estimator = estimator_cls(**_filtered_kwargs(estimator_cls, fit_params))
        X = np.asarray(data.X)
        y = data.observed()
        if data.weights is not None and _accepts_sample_weight(estimator):
            estimator.fit(X, y, sample_weight=data.weights)
        else:
            estimator.fit(X, y)
        return SklearnFit(
            estimator=estimator,
            response_kind=data.response_kind,
            n_levels=len(data.levels or []),
            predictor_names=data.predictor_names,
        )


def predict_sklearn(fitted: SklearnFit, X: Any, times: Optional[Sequence[float]] = None) -> np.ndarray:
    X = np.asarray(X)
    if fitted.response_kind == "factor":
        proba = fitted.estimator.predict_proba(X)
        # a training subset may lack some levels; keep columns aligned
        out = np.zeros((X.shape[0], fitted.n_levels), dtype=float)
        out[:, np.asarray(fitted.estimator.classes_, dtype=int)] = proba
        return out
    return np.asarray(fitted.estimator.predict(X), dtype=float)


def varimp_sklearn(fitted: SklearnFit) -> Dict[str, float]:
    est = fitted.estimator
    if hasattr(est, "feature_importances_"):
        values = np.asarray(est.feature_importances_, dtype=float)
    elif hasattr(est, "coef_"):
        coef = np.atleast_2d(np.asarray(est.coef_, dtype=float))
        values = np.mean(np.abs(coef), axis=0)
    else:
        raise TypeError(f"{type(est).__name__} defines no variable importance")
    return dict(zip(fitted.predictor_names, values.tolist()))


# -----------------------------
# Grid proposals
# -----------------------------


def seq_nvars(data: Dataset, length: int) -> List[int]:
    """Evenly spaced predictor counts in [1, n_predictors]."""
    nvars = int(data.X.shape[1])
    values = np.rint(np.linspace(1, nvars, length)).astype(int)
    return sorted(set(values.tolist()))


def _random_forest_grid(data: Dataset, length: int, random: bool) -> Dict[str, List[Any]]:
    params: Dict[str, List[Any]] = {"max_features": seq_nvars(data, length)}
    if random:
        leaf = np.rint(np.linspace(1, min(20, data.n_cases), length)).astype(int)
        params["min_samples_leaf"] = sorted(set(leaf.tolist()))
    return params


def _knn_grid(data: Dataset, length: int, random: bool) -> Dict[str, List[Any]]:
    upper = max(1, min(25, data.n_cases // 3))
    params: Dict[str, List[Any]] = {
        "n_neighbors": sorted(set(np.rint(np.linspace(1, upper, length)).astype(int).tolist()))
    }
    if random:
        params["weights"] = ["uniform", "distance"]
    return params


# -----------------------------
# Named families
# -----------------------------


def RandomForestModel(
    n_estimators: int = 100,
    max_features: Optional[int] = None,
    min_samples_leaf: Optional[int] = None,
    random_state: Optional[int] = 0,
) -> MLModel:
    """Breiman's random forests for factor and numeric responses.

    Tunable: ``max_features`` (and ``min_samples_leaf`` in random grids).
    """
    return SklearnModel(
        "RandomForestModel",
        classifier=RandomForestClassifier,
        regressor=RandomForestRegressor,
        label="Random Forests",
        grid=_random_forest_grid,
        n_estimators=n_estimators,
        max_features=max_features,
        min_samples_leaf=min_samples_leaf,
        random_state=random_state,
    )


def GLMModel(max_iter: int = 1000) -> MLModel:
    """Linear regression / multinomial logistic regression (no tuning grid)."""
    return SklearnModel(
        "GLMModel",
        classifier=LogisticRegression,
        regressor=LinearRegression,
        label="Generalized Linear Models",
        max_iter=max_iter,
    )


def KNNModel(n_neighbors: int = 7, weights: str = "uniform") -> MLModel:
    """k-nearest neighbours. Tunable: ``n_neighbors`` (and ``weights`` in random grids)."""
    return SklearnModel(
        "KNNModel",
        classifier=KNeighborsClassifier,
        regressor=KNeighborsRegressor,
        label="K-Nearest Neighbors",
        grid=_knn_grid,
        n_neighbors=n_neighbors,
        weights=weights,
    )
