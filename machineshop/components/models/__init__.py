from .base import MLModel
from .builders import (
    GLMModel,
    KNNModel,
    RandomForestModel,
    SklearnFit,
    SklearnModel,
)

__all__ = [
    "MLModel",
    "SklearnModel",
    "SklearnFit",
    "RandomForestModel",
    "GLMModel",
    "KNNModel",
]
