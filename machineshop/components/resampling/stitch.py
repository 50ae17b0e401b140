from __future__ import annotations

from typing import Sequence

import numpy as np

from machineshop.errors import IncompleteCoverage

from .resampler import CellResult


def stitch_predictions(results: Sequence[CellResult], candidate: int, n_cases: int) -> np.ndarray:
    """Rebuild a full-length out-of-subset prediction array for one candidate.

    Predictions from every ``"resampled"`` cell are accumulated per original
    case index; cases evaluated more than once (repeated CV, bootstrap) get
    the average. A failed cell or a case that was never evaluated raises
    :class:`IncompleteCoverage`.
    """
    own = [r for r in results if r.candidate == candidate and r.tag == "resampled"]
    if not own:
        raise IncompleteCoverage(
            "the resample control produced no out-of-subset iterations; "
            "use cross-validation or a bootstrap control"
        )
    failed = [r.iteration for r in own if r.failed]
    if failed:
        raise IncompleteCoverage(
            f"candidate {candidate} failed in iteration(s) {failed}; "
            "its out-of-subset predictions are incomplete"
        )

    first = np.asarray(own[0].predictions)
    total = np.zeros((n_cases,) + first.shape[1:], dtype=float)
    counts = np.zeros(n_cases, dtype=int)
    for r in own:
        if r.predictions is None or r.eval_idx is None:
            raise ValueError("resampling was run without keep_predictions=True")
        # np.add.at handles repeated indices within one evaluation set
        np.add.at(total, r.eval_idx, np.asarray(r.predictions, dtype=float))
        np.add.at(counts, r.eval_idx, 1)

    missing = np.flatnonzero(counts == 0)
    if missing.size:
        raise IncompleteCoverage(
            f"{missing.size} of {n_cases} cases never appear in an evaluation set "
            f"(first: {missing[:5].tolist()}); the control does not cover every case"
        )
    shape = (n_cases,) + (1,) * (total.ndim - 1)
    return total / counts.reshape(shape)
