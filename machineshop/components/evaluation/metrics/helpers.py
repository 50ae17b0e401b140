from __future__ import annotations

import numpy as np


def _as_1d(a) -> np.ndarray:
    return np.asarray(a).ravel()


def _as_2d(a) -> np.ndarray:
    arr = np.asarray(a, dtype=float)
    return arr.reshape(-1, 1) if arr.ndim == 1 else arr


def _check_len(y_true, y_pred_like, name: str) -> None:
    if len(y_true) != np.asarray(y_pred_like).shape[0]:
        raise ValueError(
            f"Length mismatch: y_true({len(y_true)}) vs {name}({np.asarray(y_pred_like).shape[0]})."
        )


def _onehot(codes: np.ndarray, n_levels: int) -> np.ndarray:
    out = np.zeros((codes.shape[0], n_levels), dtype=float)
    out[np.arange(codes.shape[0]), codes] = 1.0
    return out
