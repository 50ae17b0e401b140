"""Configuration contracts.

This package contains the pydantic models and Literal-based choice types used
to configure resampling, tuning grids and training runs.

Keep module imports explicit in most of the codebase:
    from machineshop.contracts.control_configs import CVControl
The names re-exported here are a small set of convenience imports.
"""

from machineshop.contracts.choices import (
    ControlMode,
    PredictionKind,
    ResponseKind,
    SplitTag,
    StatisticName,
    TuneTarget,
)
from machineshop.contracts.control_configs import (
    BootControl,
    BootOptimismControl,
    ControlConfig,
    CVControl,
    CVOptimismControl,
    OOBControl,
    SplitControl,
    TrainControl,
)
from machineshop.contracts.grid_configs import (
    Choice,
    FloatRange,
    Grid,
    IntRange,
    ParameterGrid,
)
from machineshop.contracts.train_config import TrainConfig

__all__ = [
    # choice types
    "ControlMode",
    "PredictionKind",
    "ResponseKind",
    "SplitTag",
    "StatisticName",
    "TuneTarget",
    # controls
    "BootControl",
    "BootOptimismControl",
    "ControlConfig",
    "CVControl",
    "CVOptimismControl",
    "OOBControl",
    "SplitControl",
    "TrainControl",
    # grids
    "Choice",
    "FloatRange",
    "Grid",
    "IntRange",
    "ParameterGrid",
    # training
    "TrainConfig",
]
