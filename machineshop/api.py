"""Public machineshop API.

This module is the **stable public surface** for building specification trees,
training and evaluating them.

Prefer importing from here instead of reaching into internal subpackages:

    from machineshop.api import TunedModel, RandomForestModel, train

The underlying implementations live under :mod:`machineshop.use_cases` and
:mod:`machineshop.components`.
"""

from __future__ import annotations

from machineshop.use_cases.training import evaluate, train, varimp

# Specification tree
from machineshop.components.specs.constructors import (
    SelectedInput,
    SelectedModel,
    StackedModel,
    SuperModel,
    TunedInput,
    TunedModel,
)
from machineshop.components.specs.nodes import (
    ModelSpec,
    SelectedNode,
    StackedNode,
    SuperNode,
    TunedNode,
)
from machineshop.components.inputs.input_spec import InputSpec
from machineshop.components.models.base import MLModel
from machineshop.components.models.builders import GLMModel, KNNModel, RandomForestModel, SklearnModel

# Trained objects and audit records
from machineshop.components.training.fitted import FittedModel, StackedFit, SuperFit
from machineshop.components.training.meta_trainer import TrainResult, TrainStep
from machineshop.components.evaluation.performance import PerformanceTable
from machineshop.components.evaluation.selection import select
from machineshop.components.evaluation.metrics.types import Metric

# Configuration
from machineshop.contracts.control_configs import (
    BootControl,
    BootOptimismControl,
    CVControl,
    CVOptimismControl,
    OOBControl,
    SplitControl,
    TrainControl,
)
from machineshop.contracts.grid_configs import Choice, FloatRange, Grid, IntRange, ParameterGrid
from machineshop.contracts.train_config import TrainConfig
from machineshop.core.data import Dataset, Surv
from machineshop.core.progress import ProgressCallback
from machineshop.registries.metrics import register_metric, register_statistic
from machineshop.io.artifacts.serialization import load_trained, save_trained

__all__ = [
    # use-cases
    "train",
    "evaluate",
    "varimp",
    # specification tree
    "TunedModel",
    "TunedInput",
    "SelectedModel",
    "SelectedInput",
    "StackedModel",
    "SuperModel",
    "ModelSpec",
    "TunedNode",
    "SelectedNode",
    "StackedNode",
    "SuperNode",
    "InputSpec",
    "MLModel",
    "SklearnModel",
    "RandomForestModel",
    "GLMModel",
    "KNNModel",
    # results
    "FittedModel",
    "StackedFit",
    "SuperFit",
    "TrainResult",
    "TrainStep",
    "PerformanceTable",
    "select",
    "Metric",
    # configuration
    "CVControl",
    "CVOptimismControl",
    "BootControl",
    "BootOptimismControl",
    "OOBControl",
    "SplitControl",
    "TrainControl",
    "Grid",
    "ParameterGrid",
    "IntRange",
    "FloatRange",
    "Choice",
    "TrainConfig",
    "Dataset",
    "Surv",
    "ProgressCallback",
    "register_metric",
    "register_statistic",
    # persistence
    "save_trained",
    "load_trained",
]
