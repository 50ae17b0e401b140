from __future__ import annotations

"""Progress hook for resampling.

Only the top level of a specification tree reports progress: one ``init`` per
resampled node, one ``update`` per finished (candidate, iteration) cell and a
closing ``finalize``. Nested levels run inside a single outer cell and stay
silent.
"""

from typing import Optional, Protocol


class ProgressCallback(Protocol):
    def init(self, *, total: int, label: Optional[str] = None) -> None:  # pragma: no cover
        """``total`` cells are about to run."""
        ...

    def update(self, *, current: int, label: Optional[str] = None) -> None:  # pragma: no cover
        """``current`` cells have finished, in completion order."""
        ...

    def finalize(self, *, label: Optional[str] = None) -> None:  # pragma: no cover
        ...
