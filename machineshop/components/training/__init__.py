from .fitted import FittedModel, StackedFit, SuperFit
from .meta_trainer import TrainContext, TrainResult, TrainStep, resolve

__all__ = ["FittedModel", "StackedFit", "SuperFit", "TrainContext", "TrainResult", "TrainStep", "resolve"]
