from __future__ import annotations

"""Literal-based "choice" types used across contracts.

Keep this file dependency-free (stdlib + typing only). Prefer importing choice
sets from here rather than repeating Literal[...] in multiple modules.
"""

from typing import Literal, TypeAlias


# -----------------------------
# Responses and predictions
# -----------------------------

# Kind of observed response a dataset carries
ResponseKind: TypeAlias = Literal["factor", "numeric", "survival"]

# Kind of prediction a fitted model returns
PredictionKind: TypeAlias = Literal["prob", "numeric", "surv_mean", "surv_prob"]


# -----------------------------
# Resampling
# -----------------------------

ControlMode: TypeAlias = Literal[
    "cv",
    "cv_optimism",
    "boot",
    "boot_optimism",
    "oob",
    "split",
    "train",
]

# Role of one resampling iteration
SplitTag: TypeAlias = Literal["resub", "resampled"]


# -----------------------------
# Tuning / selection
# -----------------------------

StatisticName: TypeAlias = Literal["mean", "median", "min", "max", "sd"]

# What a tuning grid is applied to
TuneTarget: TypeAlias = Literal["model", "input"]
