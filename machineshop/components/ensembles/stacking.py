from __future__ import annotations

"""Stacked regression weights.

Weights live on the simplex (``w >= 0``, ``sum(w) == 1``) and are fit to the
stitched out-of-subset predictions of the base learners:

- factor / numeric responses: constrained least squares (SLSQP). Factor
  predictions are probability matrices compared with the one-hot response,
  i.e. a Brier-type objective.
- survival responses: concordance of the combined survival means is
  maximized with Nelder-Mead over softmax-parametrized weights.
"""

import logging
from typing import Any, Optional, Sequence

import numpy as np
from scipy.optimize import minimize
from scipy.special import softmax

from machineshop.contracts.choices import ResponseKind

from ..evaluation.metrics.helpers import _onehot
from ..evaluation.metrics.registry import concordance_index

logger = logging.getLogger(__name__)


def normalize_weights(weights: Sequence[float]) -> np.ndarray:
    w = np.asarray(weights, dtype=float)
    if w.ndim != 1 or np.any(w < 0) or w.sum() <= 0:
        raise ValueError(f"invalid stacking weights: {w.tolist()}")
    return w / w.sum()


def _design(predictions: Sequence[np.ndarray], observed: Any, kind: ResponseKind):
    """Column per learner, rows per (case[, level])."""
    if kind == "factor":
        n_levels = np.asarray(predictions[0]).shape[1]
        target = _onehot(np.asarray(observed, dtype=int), n_levels).ravel()
        P = np.column_stack([np.asarray(p, dtype=float).ravel() for p in predictions])
        return P, target, n_levels
    target = np.asarray(observed, dtype=float).ravel()
    P = np.column_stack([np.asarray(p, dtype=float).ravel() for p in predictions])
    return P, target, 1


def least_squares_weights(
    P: np.ndarray,
    target: np.ndarray,
    case_weights: Optional[np.ndarray] = None,
) -> np.ndarray:
    """min ||sqrt(c) * (target - P w)||^2 subject to w >= 0, sum(w) = 1."""
    m = P.shape[1]
    c = np.ones(P.shape[0]) if case_weights is None else np.asarray(case_weights, dtype=float)

    def objective(w):
        r = target - P @ w
        return float(np.sum(c * r * r))

    def gradient(w):
        return -2.0 * P.T @ (c * (target - P @ w))

    res = minimize(
        objective,
        x0=np.full(m, 1.0 / m),
        jac=gradient,
        method="SLSQP",
        bounds=[(0.0, 1.0)] * m,
        constraints=({"type": "eq", "fun": lambda w: np.sum(w) - 1.0, "jac": lambda w: np.ones_like(w)},),
        options={"maxiter": 500, "ftol": 1e-12},
    )
    if not res.success:
        logger.warning("stacking weight optimization did not converge: %s", res.message)
    # clip solver round-off back onto the simplex
    w = np.clip(res.x, 0.0, None)
    return w / w.sum() if w.sum() > 0 else np.full(m, 1.0 / m)


def concordance_weights(P: np.ndarray, time: np.ndarray, event: np.ndarray) -> np.ndarray:
    """Softmax weights maximizing Harrell's C of the combined survival means."""
    m = P.shape[1]

    def objective(theta):
        return -concordance_index(time, event, P @ softmax(theta))

    # C is piecewise constant; a wide starting simplex is needed to see any change
    simplex = np.vstack([np.zeros(m), 2.0 * np.eye(m)])
    res = minimize(
        objective,
        x0=np.zeros(m),
        method="Nelder-Mead",
        options={"maxiter": 200 * m, "initial_simplex": simplex},
    )
    w = softmax(res.x)
    # keep the equal-weight start when the search found nothing better
    if objective(res.x) > objective(np.zeros(m)):
        w = np.full(m, 1.0 / m)
    return w


def estimate_weights(
    predictions: Sequence[np.ndarray],
    observed: Any,
    kind: ResponseKind,
    case_weights: Optional[np.ndarray] = None,
) -> np.ndarray:
    """Stacking weights for stitched base-learner predictions."""
    if len(predictions) < 2:
        raise ValueError("stacking needs predictions from at least 2 base learners")
    if kind == "survival":
        P = np.column_stack([np.asarray(p, dtype=float).ravel() for p in predictions])
        return concordance_weights(P, observed.time, observed.event)
    P, target, n_levels = _design(predictions, observed, kind)
    cw = None if case_weights is None else np.repeat(np.asarray(case_weights, dtype=float), n_levels)
    return least_squares_weights(P, target, cw)
