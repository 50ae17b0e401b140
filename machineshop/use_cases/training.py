from __future__ import annotations

"""Training and evaluation use-cases.

Both entry points thread an explicit :class:`TrainConfig`; nothing is read
from process-wide defaults.
"""

import logging
from typing import Any, Optional, Sequence, Union

import pandas as pd

from machineshop.components.evaluation.performance import PerformanceTable
from machineshop.components.models.base import MLModel
from machineshop.components.specs.nodes import SPEC_NODE_TYPES, SpecNode, as_spec, check_response_kind
from machineshop.components.training.fitted import FittedModel, scale_importance
from machineshop.components.training.meta_trainer import (
    TrainContext,
    TrainResult,
    check_metrics,
    resample_nodes,
    resolve,
)
from machineshop.contracts.control_configs import ControlConfig
from machineshop.contracts.train_config import TrainConfig
from machineshop.core.data import Dataset
from machineshop.core.progress import ProgressCallback
from machineshop.registries.metrics import MetricLike
from machineshop.runtime.random import RngManager

logger = logging.getLogger(__name__)


def _context(config: TrainConfig, dataset: Dataset, progress: Optional[ProgressCallback]) -> TrainContext:
    return TrainContext(config, dataset.response_kind, RngManager(config.seed), progress)


def train(
    spec: Union[MLModel, SpecNode],
    dataset: Dataset,
    config: Optional[TrainConfig] = None,
    *,
    progress: Optional[ProgressCallback] = None,
) -> TrainResult:
    """Resolve ``spec`` on ``dataset`` into a trained object plus its train steps.

    Raises :class:`ResponseTypeMismatch` before any fitting when a model in the
    tree cannot handle the response or a metric cannot score its predictions,
    and lets :class:`NoViableCandidate` propagate when a selection has nothing
    to choose from.
    """
    config = config or TrainConfig()
    node = as_spec(spec)
    check_response_kind(node, dataset.response_kind)
    ctx = _context(config, dataset, progress)
    check_metrics(node, ctx)

    logger.info("training %s on %r", node.label, dataset)
    steps = []
    model = resolve(node, dataset, ctx, steps)
    logger.info("training finished after %d meta step(s)", len(steps))
    return TrainResult(model=model, steps=steps)


def _as_candidate(obj: Any) -> SpecNode:
    if isinstance(obj, TrainResult):
        obj = obj.model
    if not isinstance(obj, SPEC_NODE_TYPES + (MLModel,)) and getattr(obj, "spec", None) is not None:
        # trained objects are re-resolved from their spec on every training subset
        return obj.spec
    return as_spec(obj)


def evaluate(
    spec_or_model: Any,
    dataset: Dataset,
    control: Optional[ControlConfig] = None,
    metrics: Optional[Sequence[MetricLike]] = None,
    *,
    config: Optional[TrainConfig] = None,
    progress: Optional[ProgressCallback] = None,
) -> PerformanceTable:
    """Resampled performance of one or more models/specs, without selection.

    ``spec_or_model`` may be a model family, a specification node, a trained
    object (its spec is used), or a list of any of these.
    """
    config = config or TrainConfig()
    if isinstance(spec_or_model, (list, tuple)) and not isinstance(spec_or_model, TrainResult):
        items = list(spec_or_model)
    else:
        items = [spec_or_model]
    if not items:
        raise ValueError("nothing to evaluate")
    nodes = [_as_candidate(item) for item in items]
    for node in nodes:
        check_response_kind(node, dataset.response_kind)

    ctx = _context(config, dataset, progress)
    for node in nodes:
        check_metrics(node, ctx)
    resolved = ctx.candidate_metrics(metrics if metrics is not None else config.metrics, nodes)
    return resample_nodes(nodes, dataset, ctx, control or config.control, resolved)


def varimp(trained: Any, scale: bool = True) -> pd.Series:
    """Variable importance of a fitted model, sorted in decreasing order.

    With ``scale`` the largest importance is 100.
    """
    model = trained.model if isinstance(trained, TrainResult) else trained
    if not isinstance(model, FittedModel):
        raise TypeError(f"variable importance needs a single fitted model, got {type(model).__name__}")
    values = model.varimp()
    if scale:
        values = scale_importance(values)
    return pd.Series(values, name="importance", dtype=float).sort_values(ascending=False)
