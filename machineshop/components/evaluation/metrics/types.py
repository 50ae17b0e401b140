from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

import numpy as np

from machineshop.contracts.choices import PredictionKind, ResponseKind


@dataclass(frozen=True)
class Metric:
    """A named scoring function with its optimization direction.

    ``fn(observed, predicted) -> float`` receives the response in the form
    produced by :meth:`Dataset.observed` and the predictions of a fitted
    model. ``types`` lists the supported (response kind, prediction kind)
    pairs.
    """

    name: str
    fn: Callable[[Any, np.ndarray], float]
    maximize: bool
    types: Tuple[Tuple[ResponseKind, PredictionKind], ...] = ()

    def supports(self, kind: ResponseKind, prediction: Optional[PredictionKind] = None) -> bool:
        if not self.types:
            return True
        return any(k == kind and (prediction is None or p == prediction) for k, p in self.types)

    def __call__(self, observed: Any, predicted: np.ndarray) -> float:
        return float(self.fn(observed, predicted))


def prediction_kind(kind: ResponseKind, times: Optional[Any] = None) -> PredictionKind:
    """Prediction type a model returns for a response kind."""
    if kind == "factor":
        return "prob"
    if kind == "numeric":
        return "numeric"
    return "surv_mean" if times is None else "surv_prob"
