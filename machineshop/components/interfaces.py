from __future__ import annotations

from typing import Any, Callable, List, Optional, Protocol, Sequence, Tuple

import numpy as np

from machineshop.components.splitters.types import ResampleSplit
from machineshop.core.data import Dataset


class Splitter(Protocol):
    def split(
        self,
        n_cases: int,
        strata: Optional[np.ndarray] = None,
        seed: Optional[int] = None,
    ) -> List[ResampleSplit]:
        """Return every train/evaluation iteration for ``n_cases`` cases.

        The result is a list (re-enumerable), and identical for identical
        arguments.
        """
        ...


class TrainedObject(Protocol):
    """Anything the meta trainer returns: a fitted model or an ensemble."""

    def predict(self, X: Any, times: Optional[Sequence[float]] = None) -> np.ndarray:
        ...


# (candidate id, iteration id); assigned before a cell is dispatched
CellKey = Tuple[int, int]

# fit_fn(candidate, training data, cell key) -> fitted object
FitFn = Callable[[Any, Dataset, CellKey], Any]

# predict_fn(fitted object, evaluation data) -> predictions
PredictFn = Callable[[Any, Dataset], np.ndarray]
