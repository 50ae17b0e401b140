from __future__ import annotations

import logging
import math
from typing import List, NamedTuple, Optional, Union

from machineshop.errors import NoViableCandidate
from machineshop.registries.metrics import StatisticFn

from .performance import PerformanceTable

logger = logging.getLogger(__name__)


class Selection(NamedTuple):
    index: int
    value: float
    # statistic per candidate in table order; None for disqualified ones
    scores: List[Optional[float]]


def select(
    table: PerformanceTable,
    metric: Optional[str] = None,
    statistic: Union[str, StatisticFn] = "mean",
) -> Selection:
    """Pick the candidate whose statistic of ``metric`` is best.

    The metric's ``maximize`` flag sets the direction. Ties go to the first
    candidate in table order. Candidates without a single finite value are
    disqualified; if all are, :class:`NoViableCandidate` is raised.
    """
    chosen = table.metric(metric)
    scores: List[Optional[float]] = []
    best_index: Optional[int] = None
    best_value = math.nan

    for c in range(len(table.candidates)):
        value = table.statistic(c, chosen.name, statistic)
        if not math.isfinite(value):
            scores.append(None)
            continue
        scores.append(value)
        if best_index is None:
            best_index, best_value = c, value
        elif (value > best_value) if chosen.maximize else (value < best_value):
            best_index, best_value = c, value

    if best_index is None:
        raise NoViableCandidate(
            f"no viable candidate among {len(table.candidates)} for metric "
            f"{chosen.name!r}: every resampling cell failed"
        )

    disqualified = [table.candidates[i] for i, s in enumerate(scores) if s is None]
    if disqualified:
        logger.warning("disqualified candidates (all cells failed): %s", disqualified)

    return Selection(index=best_index, value=best_value, scores=scores)
