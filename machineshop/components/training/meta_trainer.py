from __future__ import annotations

"""Recursive resolution of a specification tree into a trained object.

:func:`resolve` is the single entry point for every node kind. Meta nodes
(tuned, selected, stacked, super) resample their candidates on the data
handed to them, pick or combine, then refit on that same data. Candidates
evaluated inside a resampling cell are resolved recursively on the cell's
training subset only, with their own child random stream, so nested
selection never sees the cases the parent is evaluating on.

Only the resolutions on the final refit path record :class:`TrainStep`
entries; steps produced inside resampling cells are discarded along with the
cell's fitted objects.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from machineshop.contracts.choices import ResponseKind
from machineshop.contracts.control_configs import ControlConfig
from machineshop.contracts.train_config import TrainConfig
from machineshop.core.data import Dataset
from machineshop.core.progress import ProgressCallback
from machineshop.registries.metrics import resolve_metrics
from machineshop.runtime.random import RngManager

from ..ensembles.stacking import estimate_weights, normalize_weights
from ..ensembles.super_learner import meta_dataset
from ..evaluation.metrics.types import Metric
from ..evaluation.performance import PerformanceTable
from ..evaluation.selection import select
from ..grids.grid import generate_grid
from ..interfaces import CellKey, TrainedObject
from ..resampling.resampler import Resampler, to_table
from ..resampling.stitch import stitch_predictions
from ..specs.nodes import (
    ModelSpec,
    SelectedNode,
    SpecNode,
    StackedNode,
    SuperNode,
    TunedNode,
    apply_params,
    children,
    node_label,
)
from .fitted import FittedModel, StackedFit, SuperFit, predicts_means_only

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrainStep:
    """Audit record of one resolved meta node."""

    kind: str
    label: str
    candidates: Tuple[str, ...]
    table: PerformanceTable
    metric: str
    statistic: str
    selected: Optional[int] = None
    value: Optional[float] = None
    # grid rows of a tuned node, in candidate order
    params: Optional[Tuple[dict, ...]] = None
    # stacking weights of a stacked node
    weights: Optional[np.ndarray] = None

    @property
    def winner(self) -> Optional[str]:
        return None if self.selected is None else self.candidates[self.selected]


class TrainResult(NamedTuple):
    model: TrainedObject
    steps: List[TrainStep]


@dataclass
class TrainContext:
    """Everything a resolution needs besides the node and the data."""

    config: TrainConfig
    kind: ResponseKind
    rngm: RngManager
    progress: Optional[ProgressCallback] = None
    nested: bool = False
    resampler: Resampler = field(init=False)

    def __post_init__(self):
        self.resampler = Resampler(
            # nested levels run inside an outer cell; only the top level fans out
            n_jobs=1 if self.nested else self.config.n_jobs,
            cell_budget=self.config.cell_budget,
            progress=None if self.nested else self.progress,
        )

    def child(self, name: str) -> "TrainContext":
        return TrainContext(self.config, self.kind, self.rngm.child(name), self.progress, self.nested)

    # node settings fall back to the configuration
    def control(self, node: Any) -> ControlConfig:
        return node.control if node.control is not None else self.config.control

    def metrics(self, node: Any) -> List[Metric]:
        metrics = getattr(node, "metrics", None)
        metrics = metrics if metrics is not None else self.config.metrics
        if isinstance(node, (StackedNode, SuperNode)):
            # base learners of an ensemble are compared on survival means
            return resolve_metrics(metrics, self.kind)
        return self.candidate_metrics(metrics, children(node))

    def candidate_metrics(self, metrics: Any, candidates: Sequence[SpecNode]) -> List[Metric]:
        """Metrics able to score every candidate's predictions."""
        resolved = resolve_metrics(metrics, self.kind, self.times)
        if self.kind == "survival" and self.times is not None and any(map(_has_ensemble, candidates)):
            # survival ensemble candidates are scored on their means
            resolve_metrics(metrics, self.kind)
        return resolved

    def statistic(self, node: Any):
        statistic = getattr(node, "statistic", None)
        return statistic if statistic is not None else self.config.statistic

    @property
    def times(self) -> Optional[List[float]]:
        return self.config.times


# Module-level callables so resampling cells can be shipped to joblib workers.


@dataclass(frozen=True)
class _NodeFitter:
    config: TrainConfig
    kind: ResponseKind
    rngm: RngManager

    @classmethod
    def from_context(cls, ctx: TrainContext) -> "_NodeFitter":
        return cls(ctx.config, ctx.kind, ctx.rngm)

    def __call__(self, candidate: SpecNode, data: Dataset, key: CellKey) -> TrainedObject:
        # each cell gets its own random stream and discards its steps
        ctx = TrainContext(self.config, self.kind, self.rngm.child(f"cell:{key[0]}:{key[1]}"), nested=True)
        return resolve(candidate, data, ctx, [])


@dataclass(frozen=True)
class _NodePredictor:
    times: Optional[Sequence[float]] = None

    def __call__(self, trained: TrainedObject, data: Dataset) -> np.ndarray:
        times = None if predicts_means_only(trained) else self.times
        return trained.predict(data.X, times)


def _has_ensemble(node: SpecNode) -> bool:
    return isinstance(node, (StackedNode, SuperNode)) or any(map(_has_ensemble, children(node)))


def check_metrics(node: SpecNode, ctx: TrainContext) -> None:
    """Resolve the metrics of every meta node so mismatches surface before any fit."""
    if isinstance(node, ModelSpec):
        return
    ctx.metrics(node)
    for child in children(node):
        check_metrics(child, ctx)


def _statistic_name(statistic: Any) -> str:
    return statistic if isinstance(statistic, str) else getattr(statistic, "__name__", repr(statistic))


def _log(ctx: TrainContext, msg: str, *args: Any) -> None:
    logger.log(logging.DEBUG if ctx.nested else logging.INFO, msg, *args)


# -----------------------------
# Resolution
# -----------------------------


def resolve(node: SpecNode, data: Dataset, ctx: TrainContext, steps: List[TrainStep]) -> TrainedObject:
    """Train ``node`` on ``data``; meta-node audit records are appended to ``steps``."""
    if isinstance(node, ModelSpec):
        return fit_model_spec(node, data)
    if isinstance(node, TunedNode):
        return _resolve_tuned(node, data, ctx, steps)
    if isinstance(node, SelectedNode):
        return _resolve_selected(node, data, ctx, steps)
    if isinstance(node, StackedNode):
        return _resolve_stacked(node, data, ctx, steps)
    if isinstance(node, SuperNode):
        return _resolve_super(node, data, ctx, steps)
    raise TypeError(f"unknown specification node {type(node).__name__}")


def fit_model_spec(spec: ModelSpec, data: Dataset) -> FittedModel:
    transformer = None
    if spec.input is not None:
        transformer, data = spec.input.fit_transform(data)
    fitted = spec.model.fit(data, spec.fit_params)
    return FittedModel(spec=spec, fitted=fitted, response_kind=data.response_kind, transformer=transformer)


def resample_nodes(
    nodes: Sequence[SpecNode],
    data: Dataset,
    ctx: TrainContext,
    control: ControlConfig,
    metrics: Sequence[Metric],
    labels: Optional[Sequence[str]] = None,
) -> PerformanceTable:
    """Resample specification nodes as candidates, each resolved per training subset."""
    return ctx.resampler.evaluate(
        data,
        control,
        nodes,
        _NodeFitter.from_context(ctx),
        _NodePredictor(ctx.times),
        metrics,
        labels=[node_label(c) for c in nodes] if labels is None else labels,
        seed=ctx.rngm.child_seed("resample"),
    )


def _select_among(
    kind: str,
    node: Any,
    candidates: Sequence[SpecNode],
    data: Dataset,
    ctx: TrainContext,
    params: Optional[Sequence[dict]] = None,
) -> Tuple[int, TrainStep]:
    metrics = ctx.metrics(node)
    statistic = ctx.statistic(node)
    labels = [node_label(c) for c in candidates]
    table = resample_nodes(candidates, data, ctx, ctx.control(node), metrics, labels)
    selection = select(table, metrics[0].name, statistic)
    step = TrainStep(
        kind=kind,
        label=node_label(node),
        candidates=tuple(labels),
        table=table,
        metric=metrics[0].name,
        statistic=_statistic_name(statistic),
        selected=selection.index,
        value=selection.value,
        params=None if params is None else tuple(dict(p) for p in params),
    )
    _log(
        ctx,
        "%s node: %d candidate(s), selected %r with %s %s = %.6g",
        kind,
        len(candidates),
        labels[selection.index],
        step.statistic,
        step.metric,
        selection.value,
    )
    return selection.index, step


def _resolve_tuned(node: TunedNode, data: Dataset, ctx: TrainContext, steps: List[TrainStep]) -> TrainedObject:
    model = node.base.model if isinstance(node.base, ModelSpec) and node.target == "model" else None
    rows = generate_grid(node.grid, model, data, rng=ctx.rngm.child_generator("grid"), fixed=node.fixed)
    candidates = [apply_params(node.base, row, node.target) for row in rows]
    index, step = _select_among("tuned", node, candidates, data, ctx, params=rows)
    steps.append(step)
    return resolve(candidates[index], data, ctx.child("refit"), steps)


def _resolve_selected(
    node: SelectedNode, data: Dataset, ctx: TrainContext, steps: List[TrainStep]
) -> TrainedObject:
    index, step = _select_among("selected", node, node.candidates, data, ctx)
    steps.append(step)
    return resolve(node.candidates[index], data, ctx.child("refit"), steps)


def _out_of_subset_predictions(
    node: Any, data: Dataset, ctx: TrainContext
) -> Tuple[List[np.ndarray], PerformanceTable, List[Metric]]:
    """Stitched predictions of every base learner plus their performance table."""
    metrics = ctx.metrics(node)
    learners = list(node.base_learners)
    labels = [node_label(c) for c in learners]
    # survival ensembles are combined on predicted means
    times = None if ctx.kind == "survival" else ctx.times
    results = ctx.resampler.run(
        data,
        ctx.control(node),
        learners,
        _NodeFitter.from_context(ctx),
        _NodePredictor(times),
        metrics,
        seed=ctx.rngm.child_seed("resample"),
        keep_predictions=True,
    )
    table = to_table(results, labels, metrics)
    preds = [stitch_predictions(results, i, data.n_cases) for i in range(len(learners))]
    return preds, table, metrics


def _refit_learners(node: Any, data: Dataset, ctx: TrainContext, steps: List[TrainStep]) -> List[TrainedObject]:
    return [resolve(c, data, ctx.child(f"learner:{i}"), steps) for i, c in enumerate(node.base_learners)]


def _resolve_stacked(
    node: StackedNode, data: Dataset, ctx: TrainContext, steps: List[TrainStep]
) -> StackedFit:
    preds, table, metrics = _out_of_subset_predictions(node, data, ctx)
    if node.weights is not None:
        weights = normalize_weights(node.weights)
    else:
        weights = estimate_weights(preds, data.observed(), ctx.kind, data.weights)
    step = TrainStep(
        kind="stacked",
        label=node_label(node),
        candidates=tuple(node_label(c) for c in node.base_learners),
        table=table,
        metric=metrics[0].name,
        statistic=_statistic_name(ctx.config.statistic),
        weights=weights,
    )
    steps.append(step)
    _log(ctx, "stacked node: weights %s", np.round(weights, 4).tolist())
    learners = _refit_learners(node, data, ctx, steps)
    return StackedFit(spec=node, learners=learners, weights=weights, response_kind=ctx.kind)


def _resolve_super(node: SuperNode, data: Dataset, ctx: TrainContext, steps: List[TrainStep]) -> SuperFit:
    preds, table, metrics = _out_of_subset_predictions(node, data, ctx)
    step = TrainStep(
        kind="super",
        label=node_label(node),
        candidates=tuple(node_label(c) for c in node.base_learners),
        table=table,
        metric=metrics[0].name,
        statistic=_statistic_name(ctx.config.statistic),
    )
    steps.append(step)
    _log(ctx, "super node: fitting meta-learner %r", node_label(node.meta_learner))
    meta_fit = resolve(node.meta_learner, meta_dataset(data, preds, node.all_vars), ctx.child("meta"), steps)
    learners = _refit_learners(node, data, ctx, steps)
    return SuperFit(
        spec=node,
        learners=learners,
        meta_fit=meta_fit,
        all_vars=node.all_vars,
        response_kind=ctx.kind,
    )
