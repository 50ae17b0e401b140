from __future__ import annotations

"""Splitter return contracts.

Every resample control yields the same payload shape: one
:class:`ResampleSplit` per iteration, holding row indices into the *original*
dataset. Indices (not data copies) are what make predictions case-addressable
downstream, e.g. when stitching out-of-subset predictions for stacking.
"""

from dataclasses import dataclass

import numpy as np

from machineshop.contracts.choices import SplitTag


@dataclass(frozen=True)
class ResampleSplit:
    """A single train/evaluation iteration.

    Notes
    -----
    - ``train_idx`` may contain repeated indices (bootstrap draws).
    - ``tag == "resub"`` marks a resubstitution iteration (train = eval = all
      cases); optimism-corrected controls mix it with ``"resampled"`` ones.
    """

    iteration: int
    train_idx: np.ndarray
    eval_idx: np.ndarray
    tag: SplitTag = "resampled"
