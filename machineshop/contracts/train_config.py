from __future__ import annotations

from typing import Any, Callable, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .control_configs import ControlConfig, CVControl


class TrainConfig(BaseModel):
    """Explicit configuration threaded through ``train`` / ``evaluate``.

    Nodes of a specification tree that do not name their own control, metrics
    or statistic fall back to the values here. Metrics may be registered names
    or :class:`Metric` objects; the statistic may be a registered name or a
    callable reducing a vector of per-iteration values to one number.
    """

    control: ControlConfig = Field(default_factory=CVControl)
    # None -> defaults for the dataset's response kind; the first metric
    # drives selection.
    metrics: Optional[List[Any]] = None
    statistic: Union[str, Callable[..., float]] = "mean"
    # Parallel workers for resampling cells (joblib semantics, -1 = all cores)
    n_jobs: int = 1
    seed: Optional[int] = None
    # Survival evaluation times; None -> predicted survival means
    times: Optional[List[float]] = None
    # Wall-clock seconds allowed per resampling cell; overruns count as failures
    cell_budget: Optional[float] = Field(None, gt=0)

    @field_validator("metrics")
    @classmethod
    def _names_or_metrics(cls, v):
        if v is None:
            return v
        # imported here: the metric types sit above the contracts
        from machineshop.components.evaluation.metrics.types import Metric

        bad = [m for m in v if not isinstance(m, (str, Metric))]
        if bad:
            raise ValueError(f"metrics must be names or Metric objects, got {bad!r}")
        return v
