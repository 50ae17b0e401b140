from __future__ import annotations

"""Built-in metric implementations.

Metric bodies are intentionally small; the orchestration layer only relies on
the :class:`Metric` contract (name, direction, supported types). Factor
responses arrive as integer codes with an (n, K) probability matrix,
numeric responses as floats, survival responses as :class:`Surv` with
predicted survival means (or survival probabilities at fixed times).
"""

from typing import Dict, List

import numpy as np
from sklearn.metrics import (
    log_loss,
    mean_absolute_error,
    mean_squared_error,
    r2_score,
    roc_auc_score,
)

from machineshop.contracts.choices import ResponseKind
from machineshop.core.data import Surv

from .helpers import _as_1d, _as_2d, _check_len, _onehot
from .types import Metric


# -----------------------------
# Factor responses
# -----------------------------


def brier(observed: np.ndarray, predicted: np.ndarray) -> float:
    P = _as_2d(predicted)
    codes = _as_1d(observed).astype(int)
    _check_len(codes, P, "predicted")
    if P.shape[1] == 1:
        return float(np.mean((codes - P[:, 0]) ** 2))
    return float(np.mean(np.sum((_onehot(codes, P.shape[1]) - P) ** 2, axis=1)))


def accuracy(observed: np.ndarray, predicted: np.ndarray) -> float:
    P = _as_2d(predicted)
    codes = _as_1d(observed).astype(int)
    _check_len(codes, P, "predicted")
    if P.shape[1] == 1:
        return float(np.mean((P[:, 0] > 0.5).astype(int) == codes))
    return float(np.mean(np.argmax(P, axis=1) == codes))


def cross_entropy(observed: np.ndarray, predicted: np.ndarray) -> float:
    P = _as_2d(predicted)
    codes = _as_1d(observed).astype(int)
    _check_len(codes, P, "predicted")
    P = np.clip(P, 1e-15, 1.0)
    P = P / P.sum(axis=1, keepdims=True)
    return float(log_loss(codes, P, labels=list(range(P.shape[1]))))


def roc_auc(observed: np.ndarray, predicted: np.ndarray) -> float:
    P = _as_2d(predicted)
    codes = _as_1d(observed).astype(int)
    _check_len(codes, P, "predicted")
    if P.shape[1] <= 2:
        return float(roc_auc_score(codes, P[:, -1]))
    P = P / P.sum(axis=1, keepdims=True)
    return float(
        roc_auc_score(codes, P, multi_class="ovr", labels=list(range(P.shape[1])), average="macro")
    )


# -----------------------------
# Numeric responses
# -----------------------------


def rmse(observed: np.ndarray, predicted: np.ndarray) -> float:
    return float(np.sqrt(mean_squared_error(_as_1d(observed), _as_1d(predicted))))


def mse(observed: np.ndarray, predicted: np.ndarray) -> float:
    return float(mean_squared_error(_as_1d(observed), _as_1d(predicted)))


def mae(observed: np.ndarray, predicted: np.ndarray) -> float:
    return float(mean_absolute_error(_as_1d(observed), _as_1d(predicted)))


def r2(observed: np.ndarray, predicted: np.ndarray) -> float:
    return float(r2_score(_as_1d(observed), _as_1d(predicted)))


# -----------------------------
# Survival responses
# -----------------------------


def concordance_index(time: np.ndarray, event: np.ndarray, score: np.ndarray) -> float:
    """Harrell's C for right-censored data.

    ``score`` is oriented so that larger values mean longer survival. A pair
    is comparable when the earlier time is an observed event; tied scores
    count one half.
    """
    time = _as_1d(time).astype(float)
    event = _as_1d(event).astype(bool)
    score = _as_1d(score).astype(float)
    _check_len(time, score, "score")

    comparable = event[:, None] & (time[:, None] < time[None, :])
    n_pairs = int(comparable.sum())
    if n_pairs == 0:
        raise ValueError("no comparable pairs for the concordance index")
    s_i = score[:, None]
    s_j = score[None, :]
    concordant = np.sum(comparable & (s_i < s_j))
    tied = np.sum(comparable & (s_i == s_j))
    return float((concordant + 0.5 * tied) / n_pairs)


def cindex(observed: Surv, predicted: np.ndarray) -> float:
    pred = np.asarray(predicted, dtype=float)
    # survival probabilities at several times: average them into one score
    score = pred.mean(axis=1) if pred.ndim == 2 else pred
    return concordance_index(observed.time, observed.event, score)


_FACTOR = (("factor", "prob"),)
_NUMERIC = (("numeric", "numeric"),)
_SURVIVAL = (("survival", "surv_mean"), ("survival", "surv_prob"))

BUILTIN_METRICS: List[Metric] = [
    Metric("brier", brier, maximize=False, types=_FACTOR),
    Metric("accuracy", accuracy, maximize=True, types=_FACTOR),
    Metric("roc_auc", roc_auc, maximize=True, types=_FACTOR),
    Metric("cross_entropy", cross_entropy, maximize=False, types=_FACTOR),
    Metric("rmse", rmse, maximize=False, types=_NUMERIC),
    Metric("mse", mse, maximize=False, types=_NUMERIC),
    Metric("mae", mae, maximize=False, types=_NUMERIC),
    Metric("r2", r2, maximize=True, types=_NUMERIC),
    Metric("cindex", cindex, maximize=True, types=_SURVIVAL),
]

# First entry drives selection when a node names no metrics
DEFAULT_METRICS: Dict[ResponseKind, List[str]] = {
    "factor": ["brier", "accuracy", "roc_auc"],
    "numeric": ["rmse", "r2", "mae"],
    "survival": ["cindex"],
}
