from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from machineshop.contracts.control_configs import (
    BootControl,
    BootOptimismControl,
    CVControl,
    CVOptimismControl,
    OOBControl,
    SplitControl,
    TrainControl,
)

from ..interfaces import Splitter
from .bootstrap import bootstrap_draws
from .cv_split import generate_folds
from .holdout import holdout_split, resubstitution
from .types import ResampleSplit


def _effective_seed(cfg_seed: Optional[int], seed: Optional[int]) -> Optional[int]:
    return cfg_seed if cfg_seed is not None else seed


@dataclass
class CVSplitter(Splitter):
    cfg: CVControl

    def split(
        self, n_cases: int, strata: Optional[np.ndarray] = None, seed: Optional[int] = None
    ) -> List[ResampleSplit]:
        return generate_folds(
            n_cases,
            n_splits=self.cfg.folds,
            repeats=self.cfg.repeats,
            strata=strata if self.cfg.stratify else None,
            seed=_effective_seed(self.cfg.seed, seed),
        )


@dataclass
class CVOptimismSplitter(Splitter):
    cfg: CVOptimismControl

    def split(
        self, n_cases: int, strata: Optional[np.ndarray] = None, seed: Optional[int] = None
    ) -> List[ResampleSplit]:
        folds = generate_folds(
            n_cases,
            n_splits=self.cfg.folds,
            repeats=self.cfg.repeats,
            strata=strata if self.cfg.stratify else None,
            seed=_effective_seed(self.cfg.seed, seed),
        )
        return [resubstitution(n_cases)] + folds


@dataclass
class BootSplitter(Splitter):
    cfg: BootControl

    def split(
        self, n_cases: int, strata: Optional[np.ndarray] = None, seed: Optional[int] = None
    ) -> List[ResampleSplit]:
        return bootstrap_draws(
            n_cases,
            samples=self.cfg.samples,
            strata=strata if self.cfg.stratify else None,
            seed=_effective_seed(self.cfg.seed, seed),
        )


@dataclass
class BootOptimismSplitter(Splitter):
    cfg: BootOptimismControl

    def split(
        self, n_cases: int, strata: Optional[np.ndarray] = None, seed: Optional[int] = None
    ) -> List[ResampleSplit]:
        draws = bootstrap_draws(
            n_cases,
            samples=self.cfg.samples,
            strata=strata if self.cfg.stratify else None,
            seed=_effective_seed(self.cfg.seed, seed),
        )
        return [resubstitution(n_cases)] + draws


@dataclass
class OOBSplitter(Splitter):
    cfg: OOBControl

    def split(
        self, n_cases: int, strata: Optional[np.ndarray] = None, seed: Optional[int] = None
    ) -> List[ResampleSplit]:
        # plain draws over all cases; evaluation is the exact complement
        return bootstrap_draws(
            n_cases,
            samples=self.cfg.samples,
            strata=None,
            seed=_effective_seed(self.cfg.seed, seed),
        )


@dataclass
class HoldOutSplitter(Splitter):
    cfg: SplitControl

    def split(
        self, n_cases: int, strata: Optional[np.ndarray] = None, seed: Optional[int] = None
    ) -> List[ResampleSplit]:
        return holdout_split(
            n_cases,
            prop=self.cfg.prop,
            strata=strata if self.cfg.stratify else None,
            seed=_effective_seed(self.cfg.seed, seed),
        )


@dataclass
class TrainSplitter(Splitter):
    cfg: TrainControl

    def split(
        self, n_cases: int, strata: Optional[np.ndarray] = None, seed: Optional[int] = None
    ) -> List[ResampleSplit]:
        return [resubstitution(n_cases)]
