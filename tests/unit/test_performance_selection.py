"""Tests for PerformanceTable and the selector."""

from __future__ import annotations

import math

import numpy as np
import pytest

from machineshop.components.evaluation.metrics.types import Metric
from machineshop.components.evaluation.performance import PerformanceRecord, PerformanceTable
from machineshop.components.evaluation.selection import select
from machineshop.errors import NoViableCandidate

ACC = Metric("acc", lambda o, p: 0.0, maximize=True)
ERR = Metric("err", lambda o, p: 0.0, maximize=False)


def _table(values, metric=ACC, failed=()):
    """values[c][i] -> record for candidate c, iteration i + 1."""
    table = PerformanceTable([f"c{c}" for c in range(len(values))], [metric])
    for c, row in enumerate(values):
        for i, v in enumerate(row, start=1):
            is_failed = (c, i) in failed
            table.append(
                PerformanceRecord(
                    candidate=c,
                    iteration=i,
                    metric=metric.name,
                    value=math.nan if is_failed else v,
                    failed=is_failed,
                    error="boom" if is_failed else None,
                )
            )
    return table


# ---------------------------------------------------------------------------
# PerformanceTable
# ---------------------------------------------------------------------------


class TestPerformanceTable:
    def test_duplicate_key_rejected(self):
        table = _table([[0.5]])
        with pytest.raises(ValueError):
            table.append(PerformanceRecord(candidate=0, iteration=1, metric="acc", value=0.1))

    def test_unknown_candidate_rejected(self):
        table = _table([[0.5]])
        with pytest.raises(ValueError):
            table.append(PerformanceRecord(candidate=3, iteration=1, metric="acc", value=0.1))

    def test_values_in_iteration_order(self):
        table = _table([[0.9, 0.8, 0.7]])
        np.testing.assert_allclose(table.values(0), [0.9, 0.8, 0.7])
        assert table.iterations() == [1, 2, 3]

    def test_failed_cells_are_nan_but_present(self):
        table = _table([[0.9, 0.8, 0.7]], failed={(0, 2)})
        assert len(table) == 3
        vals = table.values(0)
        assert math.isnan(vals[1])
        assert table.statistic(0) == pytest.approx(0.8)
        assert len(table.failures()) == 1

    def test_optimism_correction(self):
        table = PerformanceTable(["c0"], [ERR])
        table.append(PerformanceRecord(0, 0, "err", 0.10, tag="resub"))
        table.append(PerformanceRecord(0, 1, "err", 0.30, train_value=0.05))
        table.append(PerformanceRecord(0, 2, "err", 0.20, train_value=0.10))
        # resub - (train_value - value)
        np.testing.assert_allclose(table.values(0), [0.35, 0.20])
        assert table.has_resub

    def test_frames(self):
        table = _table([[0.9, 0.8], [0.1, 0.2]], failed={(1, 2)})
        frame = table.to_frame()
        assert len(frame) == 4
        assert set(frame["candidate_label"]) == {"c0", "c1"}
        summary = table.summary()
        assert summary.loc[("c0", "acc"), "mean"] == pytest.approx(0.85)
        assert summary.loc[("c1", "acc"), "n_failed"] == 1

    def test_unknown_metric(self):
        with pytest.raises(KeyError):
            _table([[0.5]]).metric("nope")


# ---------------------------------------------------------------------------
# Selector
# ---------------------------------------------------------------------------


class TestSelect:
    def test_maximize(self):
        sel = select(_table([[0.9, 0.8, 0.7], [0.5, 0.6, 0.4]]))
        assert sel.index == 0
        assert sel.value == pytest.approx(0.8)

    def test_minimize(self):
        sel = select(_table([[0.3, 0.3], [0.1, 0.2], [0.2, 0.2]], metric=ERR))
        assert sel.index == 1
        assert sel.value == pytest.approx(0.15)

    def test_tie_goes_to_first(self):
        sel = select(_table([[0.2, 0.6], [0.6, 0.6], [0.6, 0.2], [0.6, 0.6]]))
        assert sel.index == 1
        sel = select(_table([[0.6, 0.6], [0.6, 0.6]]))
        assert sel.index == 0

    def test_deterministic(self):
        table = _table([[0.2, 0.4], [0.3, 0.3]])
        assert {select(table).index for _ in range(5)} == {0}

    def test_other_statistic(self):
        table = _table([[0.1, 0.8, 0.8], [0.6, 0.6, 0.6]])
        assert select(table, statistic="mean").index == 1
        assert select(table, statistic="median").index == 0

    def test_disqualified_candidate_skipped(self):
        table = _table([[0.9, 0.9], [0.5, 0.5]], failed={(0, 1), (0, 2)})
        sel = select(table)
        assert sel.index == 1
        assert sel.scores[0] is None

    def test_all_failed(self):
        table = _table([[0.9], [0.5]], failed={(0, 1), (1, 1)})
        with pytest.raises(NoViableCandidate):
            select(table)
