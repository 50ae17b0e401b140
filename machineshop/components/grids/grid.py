from __future__ import annotations

"""Grid realization: turn a grid description into concrete parameter rows.

Rows are plain dicts (parameter name -> value). Whatever the description, the
result honours the same rules:

- duplicate values per parameter and duplicate rows are removed (random
  grids are not backfilled, so they may come out smaller than requested);
- ``fixed`` parameters are added to every row;
- zero tunable dimensions yield exactly one empty row, so untuned models go
  through the same evaluation path as tuned ones.
"""

import itertools
from typing import Any, Dict, Hashable, List, Mapping, Optional, Sequence, Union

import numpy as np

from machineshop.contracts.grid_configs import Grid, ParameterGrid, check_grid_counts
from machineshop.core.data import Dataset
from machineshop.errors import InvalidGridSpec
from machineshop.runtime.random.rng import RngManager

from ..models.base import MLModel

GridLike = Union[Grid, ParameterGrid, Sequence[Mapping[str, Any]], Mapping[str, Sequence[Any]]]

ParamRow = Dict[str, Any]


def _hashable(value: Any) -> Hashable:
    if isinstance(value, np.generic):
        value = value.item()
    try:
        hash(value)
        return value
    except TypeError:
        return repr(value)


def _row_key(row: Mapping[str, Any]) -> tuple:
    return tuple((k, _hashable(row[k])) for k in sorted(row))


def _unique(values: Sequence[Any]) -> List[Any]:
    seen = set()
    out = []
    for v in values:
        key = _hashable(v)
        if key not in seen:
            seen.add(key)
            out.append(v)
    return out


def _dedupe_rows(rows: Sequence[ParamRow]) -> List[ParamRow]:
    seen = set()
    out = []
    for row in rows:
        key = _row_key(row)
        if key not in seen:
            seen.add(key)
            out.append(row)
    return out


def expand_params(
    params: Mapping[str, Sequence[Any]],
    random: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> List[ParamRow]:
    """Cartesian product of per-parameter values, or ``random`` sampled rows.

    Random rows draw each parameter independently; duplicates are collapsed.
    """
    dims = {name: _unique(list(values)) for name, values in params.items()}
    dims = {name: values for name, values in dims.items() if len(values) > 0}
    if not dims:
        return [{}]

    names = list(dims)
    if random is None:
        return _dedupe_rows(
            [dict(zip(names, combo)) for combo in itertools.product(*(dims[n] for n in names))]
        )

    rng = rng if rng is not None else RngManager(None).child_generator("grid")
    rows = [
        {name: dims[name][int(rng.integers(len(dims[name])))] for name in names}
        for _ in range(int(random))
    ]
    return _dedupe_rows(rows)


def _parameter_grid_rows(grid: ParameterGrid, rng: Optional[np.random.Generator]) -> List[ParamRow]:
    if not grid.params:
        return [{}]
    if grid.random is None:
        dims = {name: param.regular(grid.length_for(name)) for name, param in grid.params.items()}
        return expand_params(dims)
    rng = rng if rng is not None else RngManager(None).child_generator("grid")
    rows = [
        {name: param.sample(rng) for name, param in grid.params.items()}
        for _ in range(int(grid.random))
    ]
    return _dedupe_rows(rows)


def generate_grid(
    grid: GridLike,
    model: Optional[MLModel] = None,
    data: Optional[Dataset] = None,
    *,
    rng: Optional[np.random.Generator] = None,
    fixed: Optional[Mapping[str, Any]] = None,
) -> List[ParamRow]:
    """Realize ``grid`` into an ordered list of parameter rows.

    A :class:`Grid` needs the ``model`` (whose ``grid`` function proposes
    values) and the ``data`` it will be tuned on.
    """
    fixed = dict(fixed or {})

    if isinstance(grid, Grid):
        check_grid_counts(grid.length, grid.random)
        if model is None:
            raise ValueError("a model-driven Grid needs the model whose parameters are tuned")
        if model.grid is None:
            rows: List[ParamRow] = [{}]
        else:
            if data is None:
                raise ValueError("a model-driven Grid needs the training data")
            params = model.grid(data, int(grid.length), grid.random is not None)
            rows = expand_params(params, grid.random, rng)
    elif isinstance(grid, ParameterGrid):
        check_grid_counts(grid.length, grid.random)
        rows = _parameter_grid_rows(grid, rng)
        fixed = {**grid.fixed, **fixed}
    elif isinstance(grid, Mapping):
        rows = expand_params(grid)
    elif isinstance(grid, Sequence) and not isinstance(grid, (str, bytes)):
        rows = [dict(row) for row in grid] or [{}]
    else:
        raise InvalidGridSpec(f"unsupported grid object of type {type(grid).__name__}")

    if fixed:
        rows = [{**row, **fixed} for row in rows]
    return _dedupe_rows(rows)
