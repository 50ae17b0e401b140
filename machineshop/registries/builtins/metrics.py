"""Built-in metric and summary statistic registrations."""

from __future__ import annotations

import numpy as np

from machineshop.registries.metrics import register_metric, register_statistic

from machineshop.components.evaluation.metrics.registry import BUILTIN_METRICS

for _metric in BUILTIN_METRICS:
    register_metric(_metric)


@register_statistic("mean")
def _mean(values: np.ndarray) -> float:
    return float(np.mean(values))


@register_statistic("median")
def _median(values: np.ndarray) -> float:
    return float(np.median(values))


@register_statistic("min")
def _min(values: np.ndarray) -> float:
    return float(np.min(values))


@register_statistic("max")
def _max(values: np.ndarray) -> float:
    return float(np.max(values))


@register_statistic("sd")
def _sd(values: np.ndarray) -> float:
    return float(np.std(values, ddof=1)) if values.size > 1 else float("nan")
