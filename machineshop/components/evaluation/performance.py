from __future__ import annotations

"""Performance tables.

A :class:`PerformanceTable` holds one record per (candidate, iteration,
metric). Failed cells are kept as explicit records (``failed=True``, value
NaN) so a table is never silently missing a cell that the resampler was asked
to compute.
"""

from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from machineshop.contracts.choices import SplitTag
from machineshop.components.evaluation.metrics.types import Metric
from machineshop.registries.metrics import StatisticFn, get_statistic

Key = Tuple[int, int, str]


@dataclass(frozen=True)
class PerformanceRecord:
    candidate: int
    iteration: int
    metric: str
    value: float
    tag: SplitTag = "resampled"
    # score of the same fit on its own training subset (optimism controls)
    train_value: Optional[float] = None
    failed: bool = False
    error: Optional[str] = None

    @property
    def key(self) -> Key:
        return (self.candidate, self.iteration, self.metric)


class PerformanceTable:
    """Metric values per candidate per resampling iteration."""

    def __init__(
        self,
        candidates: Sequence[str],
        metrics: Sequence[Metric],
        records: Iterable[PerformanceRecord] = (),
    ):
        self.candidates: List[str] = [str(c) for c in candidates]
        self.metrics: List[Metric] = list(metrics)
        self._records: Dict[Key, PerformanceRecord] = {}
        for record in records:
            self.append(record)

    # ------------------------------------------------------------------
    def append(self, record: PerformanceRecord) -> None:
        if record.key in self._records:
            raise ValueError(f"duplicate performance record for key {record.key}")
        if not 0 <= record.candidate < len(self.candidates):
            raise ValueError(f"unknown candidate id {record.candidate}")
        self._records[record.key] = record

    @property
    def records(self) -> List[PerformanceRecord]:
        order = {m.name: i for i, m in enumerate(self.metrics)}
        return sorted(
            self._records.values(),
            key=lambda r: (r.candidate, r.iteration, order.get(r.metric, len(order))),
        )

    def __len__(self) -> int:
        return len(self._records)

    @property
    def metric_names(self) -> List[str]:
        return [m.name for m in self.metrics]

    def metric(self, name: Optional[str] = None) -> Metric:
        if name is None:
            return self.metrics[0]
        for m in self.metrics:
            if m.name == name:
                return m
        raise KeyError(f"metric {name!r} is not in this table; have {self.metric_names}")

    def iterations(self) -> List[int]:
        return sorted({r.iteration for r in self._records.values()})

    @property
    def has_resub(self) -> bool:
        return any(r.tag == "resub" for r in self._records.values())

    def failures(self) -> List[PerformanceRecord]:
        return [r for r in self.records if r.failed]

    # ------------------------------------------------------------------
    def values(self, candidate: int, metric: Optional[str] = None) -> np.ndarray:
        """Per-iteration performance estimates in iteration order.

        With a resubstitution record alongside resampled ones (optimism
        controls) each estimate is corrected as
        ``resub - (train_value - value)``. Failed cells are NaN.
        """
        name = self.metric(metric).name
        rows = [r for r in self.records if r.candidate == candidate and r.metric == name]
        resub = [r for r in rows if r.tag == "resub"]
        resampled = [r for r in rows if r.tag == "resampled"]

        def _value(r: PerformanceRecord) -> float:
            return float("nan") if r.failed else float(r.value)

        if not resub:
            return np.array([_value(r) for r in resampled], dtype=float)
        if not resampled:
            return np.array([_value(r) for r in resub], dtype=float)

        apparent = _value(resub[0])
        out = []
        for r in resampled:
            if r.failed or r.train_value is None:
                out.append(float("nan"))
            else:
                out.append(apparent - (float(r.train_value) - float(r.value)))
        return np.array(out, dtype=float)

    def statistic(
        self,
        candidate: int,
        metric: Optional[str] = None,
        statistic: Union[str, StatisticFn] = "mean",
    ) -> float:
        """Summary of the finite per-iteration values; NaN when none exist."""
        vals = self.values(candidate, metric)
        vals = vals[np.isfinite(vals)]
        if vals.size == 0:
            return float("nan")
        return float(get_statistic(statistic)(vals))

    # ------------------------------------------------------------------
    def to_frame(self) -> pd.DataFrame:
        rows = []
        for r in self.records:
            row = asdict(r)
            row["candidate_label"] = self.candidates[r.candidate]
            rows.append(row)
        columns = [
            "candidate",
            "candidate_label",
            "iteration",
            "metric",
            "value",
            "tag",
            "train_value",
            "failed",
            "error",
        ]
        return pd.DataFrame(rows, columns=columns)

    def summary(self, statistics: Sequence[str] = ("mean", "sd", "min", "max")) -> pd.DataFrame:
        """One row per (candidate, metric), one column per statistic, plus failure counts."""
        rows = []
        for c, label in enumerate(self.candidates):
            for m in self.metrics:
                vals = self.values(c, m.name)
                row = {"candidate": label, "metric": m.name}
                for stat in statistics:
                    row[stat] = self.statistic(c, m.name, stat)
                row["n_failed"] = int(np.sum(~np.isfinite(vals)))
                rows.append(row)
        return pd.DataFrame(rows).set_index(["candidate", "metric"])

    def __repr__(self) -> str:
        return (
            f"PerformanceTable(candidates={len(self.candidates)}, "
            f"iterations={len(self.iterations())}, metrics={self.metric_names})"
        )
