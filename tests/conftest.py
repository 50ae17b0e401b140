"""Shared fixtures: deterministic synthetic datasets."""

from __future__ import annotations

import numpy as np
import pytest

from machineshop.core.data import Dataset, Surv


@pytest.fixture
def regression_data() -> Dataset:
    rng = np.random.default_rng(0)
    X = rng.normal(size=(100, 4))
    y = 1.5 * X[:, 0] - 2.0 * X[:, 1] + 0.1 * rng.normal(size=100)
    return Dataset(X, y)


@pytest.fixture
def classification_data() -> Dataset:
    rng = np.random.default_rng(1)
    X = rng.normal(size=(120, 4))
    y = np.where(X[:, 0] + 0.5 * X[:, 1] + 0.3 * rng.normal(size=120) > 0, "yes", "no")
    return Dataset(X, y)


@pytest.fixture
def survival_data() -> Dataset:
    rng = np.random.default_rng(2)
    X = rng.normal(size=(80, 3))
    time = np.exp(1.0 + 0.8 * X[:, 0] + 0.2 * rng.normal(size=80))
    event = rng.random(80) < 0.7
    return Dataset(X, Surv(time, event))


@pytest.fixture
def id_data() -> Dataset:
    """Numeric response; column 0 holds the original case index."""
    rng = np.random.default_rng(3)
    n = 30
    X = np.column_stack([np.arange(n, dtype=float), rng.normal(size=n)])
    y = X[:, 1] + 0.5 * rng.normal(size=n)
    return Dataset(X, y)
