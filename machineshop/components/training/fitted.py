from __future__ import annotations

"""Trained objects returned by the meta trainer.

All three expose ``predict(X, times=None)`` and the ``spec`` they were
trained from, so a trained object can be re-evaluated or nested as a child
without the caller knowing which kind it is.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np

from machineshop.contracts.choices import ResponseKind

from ..interfaces import TrainedObject


def _reject_survival_times(kind: ResponseKind, times: Optional[Sequence[float]]) -> None:
    if kind == "survival" and times is not None:
        raise ValueError(
            "survival ensembles are combined on predicted survival means; "
            "probabilities at fixed times are not available"
        )


@dataclass(eq=False)
class FittedModel:
    spec: Any
    fitted: Any
    response_kind: ResponseKind
    transformer: Optional[Any] = None

    def transform(self, X: Any) -> Any:
        if self.transformer is None:
            return X
        return np.asarray(self.transformer.transform(np.asarray(X)))

    def predict(self, X: Any, times: Optional[Sequence[float]] = None) -> np.ndarray:
        return np.asarray(self.spec.model.predict(self.fitted, self.transform(X), times))

    def varimp(self) -> Dict[str, float]:
        model = self.spec.model
        if model.varimp is None:
            raise TypeError(f"{model.name} does not define variable importance")
        return {str(k): float(v) for k, v in model.varimp(self.fitted).items()}


@dataclass(eq=False)
class StackedFit:
    """Base learners refit on the full data, combined with fixed weights."""

    spec: Any
    learners: List[TrainedObject]
    weights: np.ndarray
    response_kind: ResponseKind

    def predict(self, X: Any, times: Optional[Sequence[float]] = None) -> np.ndarray:
        _reject_survival_times(self.response_kind, times)
        out = None
        for w, learner in zip(self.weights, self.learners):
            pred = np.asarray(learner.predict(X, times), dtype=float)
            out = w * pred if out is None else out + w * pred
        return out


@dataclass(eq=False)
class SuperFit:
    """Base learners plus a meta-learner trained on their predictions."""

    spec: Any
    learners: List[TrainedObject]
    meta_fit: TrainedObject
    all_vars: bool
    response_kind: ResponseKind

    def meta_features(self, X: Any) -> np.ndarray:
        from ..ensembles.super_learner import meta_features

        preds = [learner.predict(X, None) for learner in self.learners]
        return meta_features(preds, X if self.all_vars else None)

    def predict(self, X: Any, times: Optional[Sequence[float]] = None) -> np.ndarray:
        _reject_survival_times(self.response_kind, times)
        return np.asarray(self.meta_fit.predict(self.meta_features(X), times))


def predicts_means_only(trained: Any) -> bool:
    """Survival ensembles only predict survival means, never probabilities at times."""
    return isinstance(trained, (StackedFit, SuperFit)) and trained.response_kind == "survival"


def scale_importance(values: Mapping[str, float]) -> Dict[str, float]:
    """Rescale importances to 0-100 (largest = 100)."""
    arr = np.abs(np.asarray(list(values.values()), dtype=float))
    top = float(arr.max()) if arr.size else 0.0
    if top <= 0 or not np.isfinite(top):
        return {k: 0.0 for k in values}
    return {k: 100.0 * v / top for k, v in zip(values.keys(), arr.tolist())}
