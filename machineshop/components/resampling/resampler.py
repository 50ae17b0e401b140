from __future__ import annotations

"""Resampled evaluation of candidates.

One *cell* is a (candidate, iteration) pair: fit the candidate on the
iteration's training cases, predict its evaluation cases, and score the
predictions with every requested metric. Cells are independent; they are
keyed before dispatch and fanned out with joblib, so the merge into the
:class:`PerformanceTable` does not depend on completion order.

A cell that raises (in fit, predict or scoring) never aborts the run: it is
recorded as failed and the remaining cells carry on.
"""

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np
from joblib import Parallel, delayed

from machineshop.contracts.control_configs import ControlConfig, is_optimism_control
from machineshop.core.data import Dataset
from machineshop.core.progress import ProgressCallback
from machineshop.errors import FitFailure
from machineshop.registries.controls import make_splitter
from machineshop.registries.metrics import MetricLike, resolve_metrics

from ..evaluation.metrics.types import Metric
from ..evaluation.performance import PerformanceRecord, PerformanceTable
from ..interfaces import CellKey, FitFn, PredictFn, Splitter
from ..splitters.types import ResampleSplit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cell:
    candidate: int
    split: ResampleSplit

    @property
    def key(self) -> CellKey:
        return (self.candidate, self.split.iteration)


@dataclass
class CellResult:
    """Outcome of one cell.

    ``scores`` maps metric names to values (NaN for a metric that failed,
    with the reason in ``metric_errors``). ``error`` is set when the whole
    cell failed. ``eval_idx`` and ``predictions`` are only retained when the
    caller asks for them (stacking needs them to rebuild per-case vectors).
    """

    candidate: int
    iteration: int
    tag: str
    scores: Dict[str, float] = field(default_factory=dict)
    train_scores: Optional[Dict[str, float]] = None
    metric_errors: Dict[str, str] = field(default_factory=dict)
    error: Optional[FitFailure] = None
    eval_idx: Optional[np.ndarray] = None
    predictions: Optional[np.ndarray] = None
    elapsed: float = 0.0

    @property
    def key(self) -> CellKey:
        return (self.candidate, self.iteration)

    @property
    def failed(self) -> bool:
        return self.error is not None


def _score(metrics: Sequence[Metric], observed: Any, predicted: np.ndarray):
    scores: Dict[str, float] = {}
    errors: Dict[str, str] = {}
    for m in metrics:
        try:
            scores[m.name] = m(observed, predicted)
        except Exception as e:
            scores[m.name] = math.nan
            errors[m.name] = f"{type(e).__name__}: {e}"
    return scores, errors


def run_cell(
    cell: Cell,
    candidate: Any,
    dataset: Dataset,
    fit_fn: FitFn,
    predict_fn: PredictFn,
    metrics: Sequence[Metric],
    *,
    score_train: bool = False,
    cell_budget: Optional[float] = None,
    keep_predictions: bool = False,
) -> CellResult:
    """Fit, predict and score a single cell. Never raises."""
    split = cell.split
    result = CellResult(candidate=cell.candidate, iteration=split.iteration, tag=split.tag)
    start = time.perf_counter()
    try:
        train = dataset.subset(split.train_idx)
        evaluation = dataset.subset(split.eval_idx)
        fitted = fit_fn(candidate, train, cell.key)
        predictions = np.asarray(predict_fn(fitted, evaluation))
        result.scores, result.metric_errors = _score(metrics, evaluation.observed(), predictions)
        if score_train and split.tag == "resampled":
            train_pred = np.asarray(predict_fn(fitted, train))
            result.train_scores, _ = _score(metrics, train.observed(), train_pred)
        if keep_predictions:
            result.eval_idx = np.asarray(split.eval_idx, dtype=int)
            result.predictions = predictions
    except Exception as e:
        result.error = FitFailure.from_exception(e, candidate=cell.candidate, iteration=split.iteration)
    result.elapsed = time.perf_counter() - start

    # cooperative budget: the cell is not interrupted, its result is discarded
    if cell_budget is not None and result.error is None and result.elapsed > cell_budget:
        result.error = FitFailure(
            f"cell exceeded its budget ({result.elapsed:.3f}s > {cell_budget:.3f}s)",
            candidate=cell.candidate,
            iteration=split.iteration,
        )
        result.predictions = None
    return result


class Resampler:
    """Evaluate candidates under a resample control.

    Parameters
    ----------
    n_jobs : joblib worker count for cells (1 runs in-process).
    cell_budget : wall-clock seconds allowed per cell; slower cells count as
        failed.
    progress : optional callback ticked once per finished cell.
    """

    def __init__(
        self,
        *,
        n_jobs: int = 1,
        cell_budget: Optional[float] = None,
        progress: Optional[ProgressCallback] = None,
    ):
        self.n_jobs = n_jobs
        self.cell_budget = cell_budget
        self.progress = progress

    # ------------------------------------------------------------------
    @staticmethod
    def splits(
        dataset: Dataset,
        control: Union[ControlConfig, Splitter],
        seed: Optional[int] = None,
    ) -> List[ResampleSplit]:
        splitter = make_splitter(control) if hasattr(control, "mode") else control
        return list(splitter.split(dataset.n_cases, strata=dataset.stratification_key(), seed=seed))

    def run(
        self,
        dataset: Dataset,
        control: Union[ControlConfig, Splitter],
        candidates: Sequence[Any],
        fit_fn: FitFn,
        predict_fn: PredictFn,
        metrics: Sequence[Metric],
        *,
        seed: Optional[int] = None,
        score_train: Optional[bool] = None,
        keep_predictions: bool = False,
    ) -> List[CellResult]:
        """Run every cell and return results ordered by (candidate, iteration)."""
        if score_train is None:
            score_train = hasattr(control, "mode") and is_optimism_control(control)
        splits = self.splits(dataset, control, seed=seed)
        cells = [Cell(candidate=c, split=s) for c in range(len(candidates)) for s in splits]
        total = len(cells)
        logger.debug(
            "resampling %d candidate(s) x %d iteration(s) on %d cases",
            len(candidates),
            len(splits),
            dataset.n_cases,
        )

        if self.progress is not None:
            self.progress.init(total=total, label=f"Resampling 0/{total}")

        tasks = (
            delayed(run_cell)(
                cell,
                candidates[cell.candidate],
                dataset,
                fit_fn,
                predict_fn,
                metrics,
                score_train=score_train,
                cell_budget=self.cell_budget,
                keep_predictions=keep_predictions,
            )
            for cell in cells
        )
        results: Dict[CellKey, CellResult] = {}
        for done, result in enumerate(Parallel(n_jobs=self.n_jobs, return_as="generator")(tasks), start=1):
            if result.key in results:
                raise RuntimeError(f"duplicate resampling cell {result.key}")
            results[result.key] = result
            if result.failed:
                logger.warning(
                    "cell (candidate=%d, iteration=%d) failed: %s",
                    result.candidate,
                    result.iteration,
                    result.error,
                )
            if self.progress is not None:
                self.progress.update(current=done, label=f"Resampling {done}/{total}")

        if self.progress is not None:
            self.progress.finalize(label="Resampling done")
        return [results[cell.key] for cell in cells]

    def evaluate(
        self,
        dataset: Dataset,
        control: Union[ControlConfig, Splitter],
        candidates: Sequence[Any],
        fit_fn: FitFn,
        predict_fn: PredictFn,
        metrics: Optional[Sequence[MetricLike]] = None,
        *,
        labels: Optional[Sequence[str]] = None,
        seed: Optional[int] = None,
    ) -> PerformanceTable:
        resolved = resolve_metrics(metrics, dataset.response_kind)
        results = self.run(dataset, control, candidates, fit_fn, predict_fn, resolved, seed=seed)
        if labels is None:
            labels = [str(c) for c in candidates]
        return to_table(results, labels, resolved)


def to_table(
    results: Sequence[CellResult],
    labels: Sequence[str],
    metrics: Sequence[Metric],
) -> PerformanceTable:
    """One record per (cell, metric); failed cells and metrics are explicit."""
    table = PerformanceTable(labels, metrics)
    for result in results:
        for m in metrics:
            if result.failed:
                table.append(
                    PerformanceRecord(
                        candidate=result.candidate,
                        iteration=result.iteration,
                        metric=m.name,
                        value=math.nan,
                        tag=result.tag,
                        failed=True,
                        error=str(result.error),
                    )
                )
                continue
            error = result.metric_errors.get(m.name)
            train_value = None if result.train_scores is None else result.train_scores.get(m.name)
            table.append(
                PerformanceRecord(
                    candidate=result.candidate,
                    iteration=result.iteration,
                    metric=m.name,
                    value=result.scores[m.name],
                    tag=result.tag,
                    train_value=train_value,
                    failed=error is not None,
                    error=error,
                )
            )
    return table
