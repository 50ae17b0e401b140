from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np
from sklearn.model_selection import KFold, StratifiedKFold

from machineshop.runtime.random.rng import RngManager

from .types import ResampleSplit

logger = logging.getLogger(__name__)


def _can_stratify(strata: Optional[np.ndarray], n_splits: int) -> bool:
    if strata is None:
        return False
    _, counts = np.unique(strata, return_counts=True)
    if counts.size < 2:
        return False
    if counts.min() < n_splits:
        logger.warning(
            "smallest stratum has %d cases (< %d folds); using unstratified folds",
            int(counts.min()),
            n_splits,
        )
        return False
    return True


def generate_folds(
    n_cases: int,
    *,
    n_splits: int,
    repeats: int = 1,
    strata: Optional[np.ndarray] = None,
    seed: Optional[int] = None,
    start: int = 1,
) -> List[ResampleSplit]:
    """Return one :class:`ResampleSplit` per fold per repeat.

    Each repeat draws an independent shuffled partition from its own child
    seed; every case lands in exactly one evaluation fold per repeat.
    """
    if n_cases < n_splits:
        raise ValueError(f"cannot split {n_cases} cases into {n_splits} folds")

    rngm = RngManager(seed)
    stratified = _can_stratify(strata, n_splits)
    placeholder = np.zeros((n_cases, 1))
    target = strata if stratified else None

    out: List[ResampleSplit] = []
    iteration = start
    for r in range(repeats):
        splitter_cls = StratifiedKFold if stratified else KFold
        splitter = splitter_cls(
            n_splits=n_splits,
            shuffle=True,
            random_state=rngm.child_seed(f"repeat{r}"),
        )
        for train_idx, eval_idx in splitter.split(placeholder, target):
            out.append(
                ResampleSplit(
                    iteration=iteration,
                    train_idx=np.asarray(train_idx, dtype=int),
                    eval_idx=np.asarray(eval_idx, dtype=int),
                )
            )
            iteration += 1
    return out
