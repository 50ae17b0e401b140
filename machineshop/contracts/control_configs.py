from __future__ import annotations

"""Resample control contracts.

Each control is a small pydantic model tagged by ``mode``. The mode is the key
used by :mod:`machineshop.registries.controls` to build the matching splitter.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


class CVControl(BaseModel):
    """K-fold cross-validation, optionally repeated."""

    mode: Literal["cv"] = "cv"
    folds: int = Field(10, ge=2)
    repeats: int = Field(1, ge=1)
    stratify: bool = True
    seed: Optional[int] = None


class CVOptimismControl(BaseModel):
    """Optimism-corrected cross-validation (resub estimate + CV iterations)."""

    mode: Literal["cv_optimism"] = "cv_optimism"
    folds: int = Field(10, ge=2)
    repeats: int = Field(1, ge=1)
    stratify: bool = True
    seed: Optional[int] = None


class BootControl(BaseModel):
    """Bootstrap resampling; evaluation on the cases left out of each draw."""

    mode: Literal["boot"] = "boot"
    samples: int = Field(25, ge=1)
    stratify: bool = True
    seed: Optional[int] = None


class BootOptimismControl(BaseModel):
    """Optimism-corrected bootstrap (resub estimate + bootstrap iterations)."""

    mode: Literal["boot_optimism"] = "boot_optimism"
    samples: int = Field(25, ge=1)
    stratify: bool = True
    seed: Optional[int] = None


class OOBControl(BaseModel):
    """Out-of-bootstrap: evaluation strictly on the complement of each draw."""

    mode: Literal["oob"] = "oob"
    samples: int = Field(25, ge=1)
    seed: Optional[int] = None


class SplitControl(BaseModel):
    """A single training/test split."""

    mode: Literal["split"] = "split"
    prop: float = Field(2 / 3, gt=0.0, lt=1.0)
    stratify: bool = True
    seed: Optional[int] = None


class TrainControl(BaseModel):
    """Resubstitution: train and evaluate on all cases, once."""

    mode: Literal["train"] = "train"
    seed: Optional[int] = None


ControlConfig = Annotated[
    Union[
        CVControl,
        CVOptimismControl,
        BootControl,
        BootOptimismControl,
        OOBControl,
        SplitControl,
        TrainControl,
    ],
    Field(discriminator="mode"),
]

OPTIMISM_MODES = frozenset({"cv_optimism", "boot_optimism"})


def is_optimism_control(control: BaseModel) -> bool:
    return str(getattr(control, "mode", "")) in OPTIMISM_MODES
