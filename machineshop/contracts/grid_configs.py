from __future__ import annotations

"""Tuning grid contracts.

Two ways to describe a tuning grid:

- :class:`Grid` asks the model family for its own candidate values
  (``length`` values per tunable parameter, or ``random`` sampled points).
- :class:`ParameterGrid` names the parameters and their ranges explicitly.

Both are validated eagerly: a non-positive ``length`` or ``random`` raises
:class:`~machineshop.errors.InvalidGridSpec` before any fitting happens.
"""

import math
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

import numpy as np
from pydantic import BaseModel, Field, model_validator

from machineshop.errors import InvalidGridSpec


def check_grid_counts(length: Any, random: Optional[int]) -> None:
    """Raise :class:`InvalidGridSpec` for non-positive counts."""
    lengths = list(length.values()) if isinstance(length, dict) else [length]
    for value in lengths:
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            raise InvalidGridSpec(f"grid parameter 'length' must be an integer, got {value!r}")
        if value <= 0:
            raise InvalidGridSpec(f"grid parameter 'length' must be >= 1, got {value}")
    if random is not None:
        if isinstance(random, bool) or not isinstance(random, (int, np.integer)):
            raise InvalidGridSpec(f"number of 'random' grid points must be an integer, got {random!r}")
        if random <= 0:
            raise InvalidGridSpec(f"number of 'random' grid points must be >= 1, got {random}")


class Grid(BaseModel):
    """Model-driven grid: the model family supplies the candidate values."""

    length: int = 3
    random: Optional[int] = None

    @model_validator(mode="after")
    def _check_counts(self) -> "Grid":
        check_grid_counts(self.length, self.random)
        return self


# -----------------------------
# Parameter ranges
# -----------------------------


def _py(value: Any) -> Any:
    return value.item() if isinstance(value, np.generic) else value


class IntRange(BaseModel):
    kind: Literal["int"] = "int"
    low: int
    high: int

    def regular(self, length: int) -> List[int]:
        values = np.rint(np.linspace(self.low, self.high, length)).astype(int)
        return [int(v) for v in dict.fromkeys(values.tolist())]

    def sample(self, rng: np.random.Generator) -> int:
        return int(rng.integers(self.low, self.high + 1))


class FloatRange(BaseModel):
    kind: Literal["float"] = "float"
    low: float
    high: float
    log: bool = False

    def regular(self, length: int) -> List[float]:
        if self.log:
            values = np.geomspace(self.low, self.high, length)
        else:
            values = np.linspace(self.low, self.high, length)
        return [float(v) for v in values]

    def sample(self, rng: np.random.Generator) -> float:
        if self.log:
            return float(math.exp(rng.uniform(math.log(self.low), math.log(self.high))))
        return float(rng.uniform(self.low, self.high))


class Choice(BaseModel):
    kind: Literal["choice"] = "choice"
    values: List[Any]

    def regular(self, length: int) -> List[Any]:
        return [_py(v) for v in self.values[:length]]

    def sample(self, rng: np.random.Generator) -> Any:
        return _py(self.values[int(rng.integers(len(self.values)))])


ParamRange = Annotated[Union[IntRange, FloatRange, Choice], Field(discriminator="kind")]


class ParameterGrid(BaseModel):
    """Explicit parameter ranges.

    ``length`` may be a single number or a per-parameter mapping; parameters
    mapped to a missing entry use 3 values.
    """

    params: Dict[str, ParamRange] = Field(default_factory=dict)
    length: Union[int, Dict[str, int]] = 3
    random: Optional[int] = None
    fixed: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_counts(self) -> "ParameterGrid":
        check_grid_counts(self.length, self.random)
        return self

    def length_for(self, name: str) -> int:
        if isinstance(self.length, dict):
            return int(self.length.get(name, 3))
        return int(self.length)
