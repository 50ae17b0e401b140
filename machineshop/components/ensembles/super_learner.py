from __future__ import annotations

from typing import Any, Optional, Sequence

import numpy as np
import pandas as pd

from machineshop.core.data import Dataset


def meta_features(predictions: Sequence[np.ndarray], X: Optional[Any] = None) -> np.ndarray:
    """Stack base-learner predictions column-wise for the meta-learner.

    Probability matrices contribute one column per level. With ``X`` the
    original predictors are appended after the prediction columns.
    """
    n = np.asarray(predictions[0]).shape[0]
    blocks = [np.asarray(p, dtype=float).reshape(n, -1) for p in predictions]
    if X is not None:
        Xv = X.to_numpy(dtype=float) if isinstance(X, pd.DataFrame) else np.asarray(X, dtype=float)
        blocks.append(Xv.reshape(n, -1))
    return np.hstack(blocks)


def meta_dataset(data: Dataset, predictions: Sequence[np.ndarray], all_vars: bool = False) -> Dataset:
    """Training data for the meta-learner: same response, predictions as predictors."""
    return Dataset(
        meta_features(predictions, data.X if all_vars else None),
        data.y,
        weights=data.weights,
        strata=data.strata,
        response_kind=data.response_kind,
        levels=data.levels,
    )
