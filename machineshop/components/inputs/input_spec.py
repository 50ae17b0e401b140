from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Tuple

import numpy as np
from sklearn.base import clone

from machineshop.core.data import Dataset


@dataclass(frozen=True, eq=False)
class InputSpec:
    """Preprocessing step applied to predictors before a model is fit.

    ``transformer`` is an unfitted sklearn transformer used as a template;
    every fit clones it, applies ``params`` and fits it on the training
    subset only, so evaluation cases never inform the preprocessing.
    """

    transformer: Any
    params: Mapping[str, Any] = field(default_factory=dict)
    name: str = ""

    @property
    def label(self) -> str:
        return self.name or type(self.transformer).__name__

    def with_params(self, params: Mapping[str, Any]) -> "InputSpec":
        return InputSpec(self.transformer, {**self.params, **params}, self.name)

    def fit_transform(self, data: Dataset) -> Tuple[Any, Dataset]:
        transformer = clone(self.transformer)
        if self.params:
            transformer.set_params(**dict(self.params))
        y = None if data.response_kind == "survival" else data.observed()
        Xt = transformer.fit_transform(np.asarray(data.X), y)
        return transformer, data.with_X(np.asarray(Xt))
