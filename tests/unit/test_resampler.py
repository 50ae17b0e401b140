"""Tests for the resampler and out-of-subset stitching."""

from __future__ import annotations

import math
import time

import numpy as np
import pytest

from helpers import ERROR, SCORE, FailingModel, ScheduledModel
from machineshop.components.evaluation.metrics.types import Metric
from machineshop.components.resampling import Resampler, stitch_predictions
from machineshop.contracts.control_configs import BootOptimismControl, CVControl, SplitControl
from machineshop.errors import IncompleteCoverage


class _Fit:
    """fit_fn/predict_fn pair over MLModel candidates."""

    def fit(self, model, data, key):
        return model, model.fit(data, dict(model.params))

    def predict(self, fitted, data):
        model, state = fitted
        return model.predict(state, data.X, None)


class _Progress:
    def __init__(self):
        self.events = []

    def init(self, *, total, label=None):
        self.events.append(("init", total))

    def update(self, *, current, label=None):
        self.events.append(("update", current))

    def finalize(self, *, label=None):
        self.events.append(("finalize", None))


class TestResamplerEvaluate:
    def test_known_scores(self, regression_data):
        a = ScheduledModel("a", [0.9, 0.8, 0.7]).model()
        b = ScheduledModel("b", [0.5, 0.6, 0.4]).model()
        f = _Fit()
        table = Resampler().evaluate(
            regression_data, CVControl(folds=3), [a, b], f.fit, f.predict, [SCORE], labels=["a", "b"], seed=0
        )
        assert len(table) == 6
        np.testing.assert_allclose(table.values(0, "score"), [0.9, 0.8, 0.7])
        np.testing.assert_allclose(table.values(1, "score"), [0.5, 0.6, 0.4])

    def test_failed_cell_recorded_and_isolated(self, regression_data):
        a = ScheduledModel("a", [0.9, None, 0.7]).model()
        b = ScheduledModel("b", [0.5, 0.6, 0.4]).model()
        f = _Fit()
        table = Resampler().evaluate(regression_data, CVControl(folds=3), [a, b], f.fit, f.predict, [SCORE])
        assert len(table) == 6
        failures = table.failures()
        assert [(r.candidate, r.iteration) for r in failures] == [(0, 2)]
        assert "scheduled failure" in failures[0].error
        np.testing.assert_allclose(table.values(1, "score"), [0.5, 0.6, 0.4])

    def test_metric_failure_is_per_metric(self, regression_data):
        def broken(observed, predicted):
            raise ZeroDivisionError("nope")

        bad = Metric("bad", broken, maximize=True)
        a = ScheduledModel("a", [0.1, 0.2]).model()
        f = _Fit()
        table = Resampler().evaluate(regression_data, CVControl(folds=2), [a], f.fit, f.predict, [ERROR, bad])
        assert np.all(np.isfinite(table.values(0, "error")))
        assert np.all(np.isnan(table.values(0, "bad")))

    def test_default_metrics_follow_response_kind(self, regression_data):
        a = ScheduledModel("a").model(value=0.0)
        f = _Fit()
        table = Resampler().evaluate(regression_data, CVControl(folds=2), [a], f.fit, f.predict)
        assert table.metric_names == ["rmse", "r2", "mae"]

    def test_cell_budget(self, regression_data):
        def slow_fit(model, data, key):
            time.sleep(0.05)
            return 0.0

        table = Resampler(cell_budget=0.001).evaluate(
            regression_data, CVControl(folds=2), ["slow"], slow_fit, lambda s, d: np.zeros(d.n_cases), [ERROR]
        )
        assert len(table.failures()) == 2
        assert "budget" in table.failures()[0].error

    def test_progress_ticks_once_per_cell(self, regression_data):
        progress = _Progress()
        a = ScheduledModel("a").model()
        f = _Fit()
        Resampler(progress=progress).evaluate(regression_data, CVControl(folds=4), [a], f.fit, f.predict, [SCORE])
        assert progress.events[0] == ("init", 4)
        assert [e for e in progress.events if e[0] == "update"][-1] == ("update", 4)
        assert progress.events[-1][0] == "finalize"

    def test_optimism_control_scores_training_subset(self, regression_data):
        a = ScheduledModel("a").model(value=0.25)
        f = _Fit()
        table = Resampler().evaluate(
            regression_data, BootOptimismControl(samples=3), [a], f.fit, f.predict, [ERROR]
        )
        records = table.records
        assert records[0].tag == "resub"
        assert all(r.train_value == pytest.approx(0.25) for r in records[1:])
        np.testing.assert_allclose(table.values(0, "error"), [0.25, 0.25, 0.25])

    def test_cell_keys_passed_to_fit(self, regression_data):
        seen = []

        def fit(candidate, data, key):
            seen.append(key)
            return 0.0

        Resampler().run(
            regression_data,
            CVControl(folds=3),
            ["x", "y"],
            fit,
            lambda s, d: np.zeros(d.n_cases),
            [ERROR],
        )
        assert seen == [(0, 1), (0, 2), (0, 3), (1, 1), (1, 2), (1, 3)]


class TestStitch:
    def _run(self, data, control, models):
        f = _Fit()
        return Resampler().run(data, control, models, f.fit, f.predict, [ERROR], seed=0, keep_predictions=True)

    def test_cv_covers_every_case(self, regression_data):
        model = ScheduledModel("a").model(value=1.0)
        results = self._run(regression_data, CVControl(folds=5), [model])
        stitched = stitch_predictions(results, 0, regression_data.n_cases)
        assert stitched.shape == (100,)
        np.testing.assert_allclose(stitched, 1.0)

    def test_repeated_cv_averages(self, regression_data):
        def fit(model, data, key):
            return float(key[1])

        results = Resampler().run(
            regression_data,
            CVControl(folds=2, repeats=2),
            ["m"],
            fit,
            lambda s, d: np.full(d.n_cases, s),
            [ERROR],
            keep_predictions=True,
        )
        stitched = stitch_predictions(results, 0, regression_data.n_cases)
        # each case: one prediction from iterations {1, 2} and one from {3, 4}
        assert np.all((stitched >= 2.0) & (stitched <= 3.0))

    def test_split_control_is_incomplete(self, regression_data):
        model = ScheduledModel("a").model()
        results = self._run(regression_data, SplitControl(), [model])
        with pytest.raises(IncompleteCoverage):
            stitch_predictions(results, 0, regression_data.n_cases)

    def test_failed_cell_is_incomplete(self, regression_data):
        results = self._run(regression_data, CVControl(folds=3), [FailingModel().model()])
        with pytest.raises(IncompleteCoverage):
            stitch_predictions(results, 0, regression_data.n_cases)

    def test_predictions_keep_case_indices(self, regression_data):
        results = self._run(regression_data, CVControl(folds=4), [ScheduledModel("a").model()])
        for r in results:
            assert r.eval_idx is not None
            assert r.predictions.shape[0] == r.eval_idx.shape[0]
        assert math.isclose(sum(len(r.eval_idx) for r in results), 100)
