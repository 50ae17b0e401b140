from __future__ import annotations

from typing import Callable, List, Optional, Sequence, Union

import numpy as np

from machineshop.contracts.choices import ResponseKind
from machineshop.registries.base import Registry

from machineshop.components.evaluation.metrics.types import Metric, prediction_kind
from machineshop.errors import ResponseTypeMismatch

# NOTE: the canonical metric implementations are in
# machineshop.components.evaluation.metrics. This module exposes the
# name -> Metric / name -> statistic lookups.

MetricLike = Union[str, Metric]
StatisticFn = Callable[[np.ndarray], float]

_METRICS: Registry[str, Metric] = Registry(_name="metrics")
_STATISTICS: Registry[str, StatisticFn] = Registry(_name="statistics")

_BUILTINS_LOADED = False


def _ensure_builtins() -> None:
    global _BUILTINS_LOADED
    if _BUILTINS_LOADED:
        return
    from machineshop.registries.builtins import metrics as _  # noqa: F401
    _BUILTINS_LOADED = True


def register_metric(metric: Metric) -> Metric:
    return _METRICS.add(metric.name, metric)


def register_statistic(name: str) -> Callable[[StatisticFn], StatisticFn]:
    return _STATISTICS.register(name)


def get_metric(name: MetricLike) -> Metric:
    if isinstance(name, Metric):
        return name
    _ensure_builtins()
    return _METRICS.get(str(name))


def list_metrics(kind: Optional[ResponseKind] = None) -> List[str]:
    _ensure_builtins()
    return [name for name in _METRICS.names() if kind is None or _METRICS.get(name).supports(kind)]


def default_metrics(kind: ResponseKind) -> List[Metric]:
    _ensure_builtins()
    from machineshop.components.evaluation.metrics.registry import DEFAULT_METRICS

    return [get_metric(name) for name in DEFAULT_METRICS[kind]]


def resolve_metrics(
    metrics: Optional[Sequence[MetricLike]],
    kind: ResponseKind,
    times: Optional[Sequence[float]] = None,
) -> List[Metric]:
    """Metric objects for ``metrics`` (or the defaults for ``kind``).

    Every metric must score the predictions a model returns for ``kind`` at
    ``times``; otherwise :class:`ResponseTypeMismatch` is raised.
    """
    if metrics is None or len(metrics) == 0:
        return default_metrics(kind)
    resolved = [get_metric(m) for m in metrics]
    names = [m.name for m in resolved]
    if len(set(names)) != len(names):
        raise ValueError(f"duplicate metric names: {names}")
    pred = prediction_kind(kind, times)
    for m in resolved:
        if not m.supports(kind, pred):
            raise ResponseTypeMismatch(
                f"metric {m.name!r} does not score {pred} predictions of {kind} responses",
                expected=(kind, pred),
                supported=m.types,
            )
    return resolved


def get_statistic(name: Union[str, StatisticFn]) -> StatisticFn:
    if callable(name):
        return name
    _ensure_builtins()
    return _STATISTICS.get(str(name))
