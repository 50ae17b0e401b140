from __future__ import annotations

"""Model family contract.

An :class:`MLModel` is the only way the orchestration layer touches a learning
algorithm. It bundles the family's metadata (supported response kinds,
default parameters, how to propose tuning values) with three capabilities:

- ``fit(data, params) -> fitted object``
- ``predict(fitted object, X, times) -> predictions``
- ``varimp(fitted object) -> {predictor name: importance}`` (optional)

Predictions are typed per response kind: an (n, K) probability matrix aligned
with ``Dataset.levels`` for factors, a float vector for numeric responses,
predicted survival means (``times is None``) or an (n, len(times)) matrix of
survival probabilities for survival responses.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from machineshop.contracts.choices import ResponseKind
from machineshop.core.data import Dataset

FitFunction = Callable[[Dataset, Dict[str, Any]], Any]
PredictFunction = Callable[[Any, Any, Optional[Sequence[float]]], np.ndarray]
# grid(data, length, random) -> {param: candidate values}
GridFunction = Callable[[Dataset, int, bool], Dict[str, List[Any]]]
VarimpFunction = Callable[[Any], Mapping[str, float]]


@dataclass(frozen=True, eq=False)
class MLModel:
    name: str
    response_types: Tuple[ResponseKind, ...]
    fit: FitFunction
    predict: PredictFunction
    label: str = ""
    params: Mapping[str, Any] = field(default_factory=dict)
    grid: Optional[GridFunction] = None
    varimp: Optional[VarimpFunction] = None

    def supports(self, kind: ResponseKind) -> bool:
        return kind in self.response_types

    def __repr__(self) -> str:
        return f"MLModel({self.name!r}, response_types={list(self.response_types)})"
