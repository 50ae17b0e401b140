from __future__ import annotations

import hashlib
from typing import Optional

import numpy as np


class RngManager:
    """Named random streams derived from one root seed.

    Every source of randomness in a training run asks for a stream by name:
    ``"resample"`` for a node's splits, ``"grid"`` for random grid draws,
    ``"cell:c:i"`` for the subtree resolved inside resampling cell (c, i),
    ``"refit"``, ``"learner:k"`` and ``"meta"`` for the final fits. Names are
    hashed with the root, so a stream depends only on its path from the root
    and never on how many draws other streams made or in which order cells
    finished.
    """

    _MASK = 0xFFFFFFFF

    def __init__(self, seed: Optional[int], path: str = ""):
        self._root = 0 if seed is None else int(seed) & self._MASK
        self.path = path

    @property
    def root(self) -> int:
        return self._root

    def child_seed(self, name: str) -> int:
        """32-bit seed for ``name``; sklearn and numpy both accept it."""
        digest = hashlib.sha256(f"{self._root}/{name}".encode("utf-8")).digest()
        return int.from_bytes(digest[:4], "little")

    def child_generator(self, name: str) -> np.random.Generator:
        return np.random.default_rng(self.child_seed(name))

    def child(self, name: str) -> "RngManager":
        return RngManager(self.child_seed(name), f"{self.path}/{name}")

    def __repr__(self) -> str:
        return f"RngManager(root={self._root}, path={self.path or '/'!r})"
