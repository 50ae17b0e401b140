"""Tests for grid contracts and grid realization."""

from __future__ import annotations

import numpy as np
import pytest

from machineshop.components.grids.grid import expand_params, generate_grid
from machineshop.components.models.builders import GLMModel, RandomForestModel
from machineshop.contracts.grid_configs import Choice, FloatRange, Grid, IntRange, ParameterGrid
from machineshop.errors import InvalidGridSpec


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestGridValidation:
    @pytest.mark.parametrize("length", [0, -2])
    def test_non_positive_length(self, length):
        with pytest.raises(InvalidGridSpec):
            Grid(length=length)

    @pytest.mark.parametrize("random", [0, -1])
    def test_non_positive_random(self, random):
        with pytest.raises(InvalidGridSpec):
            Grid(random=random)

    def test_parameter_grid_per_parameter_length(self):
        with pytest.raises(InvalidGridSpec):
            ParameterGrid(params={"a": IntRange(low=1, high=5)}, length={"a": 0})

    def test_defaults(self):
        grid = Grid()
        assert grid.length == 3
        assert grid.random is None


# ---------------------------------------------------------------------------
# Expansion
# ---------------------------------------------------------------------------


class TestExpandParams:
    def test_cartesian_product(self):
        rows = expand_params({"a": [1, 2], "b": ["x", "y", "z"]})
        assert len(rows) == 6
        assert rows[0] == {"a": 1, "b": "x"}
        assert all(set(r) == {"a", "b"} for r in rows)

    def test_duplicates_removed(self):
        rows = expand_params({"a": [1, 1, 2], "b": [3, 3]})
        assert rows == [{"a": 1, "b": 3}, {"a": 2, "b": 3}]

    def test_no_dimensions_gives_one_empty_row(self):
        assert expand_params({}) == [{}]

    def test_random_draws_are_unique_and_bounded(self):
        rng = np.random.default_rng(0)
        rows = expand_params({"a": [1, 2], "b": [1, 2]}, random=20, rng=rng)
        assert len(rows) <= 4
        keys = {tuple(sorted(r.items())) for r in rows}
        assert len(keys) == len(rows)

    def test_random_draws_reproducible(self):
        params = {"a": list(range(10)), "b": list(range(10))}
        first = expand_params(params, random=5, rng=np.random.default_rng(7))
        second = expand_params(params, random=5, rng=np.random.default_rng(7))
        assert first == second


class TestGenerateGrid:
    def test_model_grid_bounded_by_length_power(self, regression_data):
        rows = generate_grid(Grid(length=3), RandomForestModel(), regression_data)
        # one tunable dimension for regular random forest grids
        assert 1 <= len(rows) <= 3
        assert all("max_features" in r for r in rows)

    def test_model_without_grid_gives_one_empty_row(self, regression_data):
        assert generate_grid(Grid(length=5), GLMModel(), regression_data) == [{}]

    def test_model_grid_needs_model(self):
        with pytest.raises(ValueError):
            generate_grid(Grid())

    def test_parameter_grid_regular(self):
        grid = ParameterGrid(
            params={
                "alpha": FloatRange(low=0.01, high=1.0, log=True),
                "kind": Choice(values=["a", "b"]),
            },
            length=3,
        )
        rows = generate_grid(grid)
        assert len(rows) == 6
        alphas = sorted({r["alpha"] for r in rows})
        assert alphas[0] == pytest.approx(0.01)
        assert alphas[-1] == pytest.approx(1.0)

    def test_parameter_grid_random_within_ranges(self):
        grid = ParameterGrid(params={"k": IntRange(low=1, high=9)}, random=5)
        rows = generate_grid(grid, rng=np.random.default_rng(3))
        assert 1 <= len(rows) <= 5
        assert all(1 <= r["k"] <= 9 for r in rows)

    def test_fixed_added_to_every_row(self):
        grid = ParameterGrid(params={"k": Choice(values=[1, 2])}, fixed={"n": 10})
        rows = generate_grid(grid, fixed={"m": 0})
        assert rows == [{"k": 1, "n": 10, "m": 0}, {"k": 2, "n": 10, "m": 0}]

    def test_choice_truncated_to_length(self):
        grid = ParameterGrid(params={"a": Choice(values=[1, 2, 3, 4, 5])}, length=2)
        rows = generate_grid(grid)
        assert rows == [{"a": 1}, {"a": 2}]

    @pytest.mark.parametrize("length", [1, 2, 3])
    def test_rows_bounded_by_length_power(self, length):
        grid = ParameterGrid(
            params={
                "k": IntRange(low=1, high=20),
                "kind": Choice(values=["a", "b", "c", "d", "e"]),
            },
            length=length,
        )
        rows = generate_grid(grid)
        assert 1 <= len(rows) <= length**2

    def test_choice_per_parameter_length(self):
        grid = ParameterGrid(
            params={"kind": Choice(values=["a", "b", "c"]), "k": IntRange(low=1, high=3)},
            length={"kind": 1, "k": 3},
        )
        rows = generate_grid(grid)
        assert {r["kind"] for r in rows} == {"a"}
        assert len(rows) == 3

    def test_explicit_rows_kept_in_order(self):
        rows = generate_grid([{"a": 2}, {"a": 1}, {"a": 2}])
        assert rows == [{"a": 2}, {"a": 1}]

    def test_mapping_expanded(self):
        assert len(generate_grid({"a": [1, 2], "b": [3, 4]})) == 4

    def test_unsupported_object(self):
        with pytest.raises(InvalidGridSpec):
            generate_grid(42)
