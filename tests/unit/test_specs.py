"""Tests for specification tree nodes and constructors."""

from __future__ import annotations

import pytest
from sklearn.decomposition import PCA
from sklearn.preprocessing import StandardScaler

from helpers import ScheduledModel
from machineshop.components.inputs.input_spec import InputSpec
from machineshop.components.models.builders import GLMModel, KNNModel, RandomForestModel
from machineshop.components.specs import (
    ModelSpec,
    SelectedInput,
    SelectedModel,
    StackedModel,
    SuperModel,
    TunedInput,
    TunedModel,
    check_response_kind,
)
from machineshop.components.specs.nodes import apply_params, iter_leaves, response_types
from machineshop.contracts.grid_configs import Choice, Grid, ParameterGrid
from machineshop.errors import InsufficientBaseLearners, ResponseTypeMismatch


class TestConstructors:
    def test_models_wrapped_as_specs(self):
        node = SelectedModel(GLMModel(), KNNModel())
        assert all(isinstance(c, ModelSpec) for c in node.candidates)

    def test_list_argument_equivalent(self):
        assert len(SelectedModel([GLMModel(), KNNModel()]).candidates) == 2

    def test_tuned_model_defaults_to_model_grid(self):
        node = TunedModel(RandomForestModel())
        assert isinstance(node.grid, Grid)
        assert node.target == "model"

    def test_selected_input_pairs_every_input_with_model(self):
        node = SelectedInput(InputSpec(StandardScaler()), InputSpec(PCA()), model=GLMModel())
        assert [c.input.label for c in node.candidates] == ["StandardScaler", "PCA"]

    def test_tuned_input_over_nested_meta_node(self):
        pca = InputSpec(PCA())
        node = TunedInput(
            pca,
            SelectedModel(GLMModel(), KNNModel()),
            ParameterGrid(params={"n_components": Choice(values=[1, 2])}),
        )
        assert all(leaf.input is pca for leaf in iter_leaves(node.base))

    def test_tuned_input_rejects_model_grid(self):
        with pytest.raises(TypeError):
            TunedInput(InputSpec(PCA()), GLMModel(), Grid())

    def test_tuned_model_needs_plain_base(self):
        with pytest.raises(TypeError):
            TunedModel(SelectedModel(GLMModel(), KNNModel()))

    def test_super_model_default_meta_learner(self):
        node = SuperModel(GLMModel(), KNNModel())
        assert node.meta_learner.model.name == "GLMModel"


class TestEnsembleNodes:
    def test_stacked_needs_two_learners(self):
        with pytest.raises(InsufficientBaseLearners):
            StackedModel(GLMModel())

    def test_super_needs_two_learners(self):
        with pytest.raises(InsufficientBaseLearners):
            SuperModel(GLMModel(), model=KNNModel())

    def test_fixed_weights_validated(self):
        with pytest.raises(ValueError):
            StackedModel(GLMModel(), KNNModel(), weights=[1.0])
        with pytest.raises(ValueError):
            StackedModel(GLMModel(), KNNModel(), weights=[-1.0, 2.0])


class TestTreeHelpers:
    def test_apply_model_params(self):
        spec = ModelSpec(KNNModel(), params={"weights": "distance"})
        tuned = apply_params(spec, {"n_neighbors": 3}, "model")
        assert tuned.params == {"weights": "distance", "n_neighbors": 3}
        assert tuned.fit_params["n_neighbors"] == 3
        assert spec.params == {"weights": "distance"}

    def test_apply_input_params_reaches_every_leaf(self):
        node = SelectedInput(InputSpec(PCA()), model=SelectedModel(GLMModel(), KNNModel()))
        tuned = apply_params(node, {"n_components": 2}, "input")
        assert all(leaf.input.params == {"n_components": 2} for leaf in iter_leaves(tuned))

    def test_response_types(self):
        scheduled = ScheduledModel("s").model()
        assert "factor" in response_types(SelectedModel(GLMModel(), scheduled))
        assert response_types(StackedModel(GLMModel(), KNNModel())) == {"factor", "numeric"}

    def test_mismatch_detected_anywhere_in_tree(self):
        node = SelectedModel(GLMModel(), StackedModel(KNNModel(), RandomForestModel()))
        with pytest.raises(ResponseTypeMismatch) as err:
            check_response_kind(node, "survival")
        assert err.value.expected == "survival"

    def test_labels(self):
        spec = ModelSpec(KNNModel(), params={"n_neighbors": 3})
        assert spec.label == "KNNModel(n_neighbors=3)"
        assert TunedModel(KNNModel(), name="knn").label == "knn"
