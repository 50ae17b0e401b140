from __future__ import annotations

from typing import List, Optional

import numpy as np
from sklearn.model_selection import train_test_split

from .types import ResampleSplit


def holdout_split(
    n_cases: int,
    *,
    prop: float,
    strata: Optional[np.ndarray] = None,
    seed: Optional[int] = None,
) -> List[ResampleSplit]:
    """One disjoint training/evaluation split with ``prop`` of the cases for training."""
    idx = np.arange(n_cases)
    stratify = None
    if strata is not None:
        _, counts = np.unique(strata, return_counts=True)
        if counts.size > 1 and counts.min() >= 2:
            stratify = strata

    try:
        train_idx, eval_idx = train_test_split(
            idx, train_size=prop, stratify=stratify, random_state=seed
        )
    except ValueError:
        if stratify is None:
            raise
        # strata too small for the requested proportion
        train_idx, eval_idx = train_test_split(idx, train_size=prop, random_state=seed)

    return [
        ResampleSplit(
            iteration=1,
            train_idx=np.sort(np.asarray(train_idx, dtype=int)),
            eval_idx=np.sort(np.asarray(eval_idx, dtype=int)),
        )
    ]


def resubstitution(n_cases: int) -> ResampleSplit:
    everyone = np.arange(n_cases)
    return ResampleSplit(iteration=0, train_idx=everyone, eval_idx=everyone.copy(), tag="resub")
