"""Exception taxonomy.

These are lightweight so they can be raised from compute paths without
importing the training modules. Cell-level failures (:class:`FitFailure`) are
recorded in performance tables and never propagated by the resampler; the
remaining errors are fatal for the node (or call) that raises them.
"""

from __future__ import annotations

from typing import Any, Optional


class MachineShopError(Exception):
    """Base class for all package errors."""


class InvalidGridSpec(MachineShopError):
    """Raised when a grid has a non-positive ``length`` or ``random`` count."""


class FitFailure(MachineShopError):
    """One (candidate, iteration) cell failed to fit, predict or score."""

    def __init__(
        self,
        message: str,
        *,
        candidate: Optional[int] = None,
        iteration: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.candidate = candidate
        self.iteration = iteration
        self.cause = cause

    @classmethod
    def from_exception(cls, exc: BaseException, *, candidate: int, iteration: int) -> "FitFailure":
        return cls(
            f"{type(exc).__name__}: {exc}",
            candidate=candidate,
            iteration=iteration,
            cause=exc,
        )


class NoViableCandidate(MachineShopError):
    """Every candidate at a selection step was disqualified."""


class ResponseTypeMismatch(MachineShopError):
    """A candidate does not support the response kind of the dataset."""

    def __init__(self, message: str, *, expected: Any = None, supported: Any = None):
        super().__init__(message)
        self.expected = expected
        self.supported = supported


class InsufficientBaseLearners(MachineShopError):
    """Stacked and super nodes need at least two base learners."""


class IncompleteCoverage(MachineShopError):
    """Out-of-subset predictions do not cover every case of the dataset."""
