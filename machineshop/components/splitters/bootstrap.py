from __future__ import annotations

from typing import List, Optional

import numpy as np

from machineshop.runtime.random.rng import RngManager

from .types import ResampleSplit

_MAX_REDRAWS = 100


def _draw(n_cases: int, rng: np.random.Generator, strata: Optional[np.ndarray]) -> np.ndarray:
    if strata is None:
        return rng.integers(0, n_cases, size=n_cases)
    parts = []
    for level in np.unique(strata):
        members = np.flatnonzero(strata == level)
        parts.append(rng.choice(members, size=members.size, replace=True))
    return np.sort(np.concatenate(parts))


def bootstrap_draws(
    n_cases: int,
    *,
    samples: int,
    strata: Optional[np.ndarray] = None,
    seed: Optional[int] = None,
    start: int = 1,
) -> List[ResampleSplit]:
    """Bootstrap training draws with the undrawn cases as evaluation set.

    Draws that leave no case out are redrawn so every iteration has something
    to evaluate on.
    """
    if n_cases < 2:
        raise ValueError("bootstrap resampling needs at least 2 cases")

    rngm = RngManager(seed)
    everyone = np.arange(n_cases)
    out: List[ResampleSplit] = []
    for b in range(samples):
        rng = rngm.child_generator(f"sample{b}")
        for _ in range(_MAX_REDRAWS):
            train_idx = _draw(n_cases, rng, strata)
            eval_idx = np.setdiff1d(everyone, train_idx)
            if eval_idx.size:
                break
        else:
            raise RuntimeError(f"bootstrap sample {b} never left a case out of the draw")
        out.append(ResampleSplit(iteration=start + b, train_idx=train_idx, eval_idx=eval_idx))
    return out
