from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Generic, List, Optional, TypeVar

K = TypeVar("K")
V = TypeVar("V")


@dataclass
class Registry(Generic[K, V]):
    """Name -> object lookup shared by the control, metric and statistic registries.

        _CONTROLS = Registry[str, SplitterFactory](_name="controls")

        @_CONTROLS.register("cv")
        def _cv(cfg):
            return CVSplitter(cfg=cfg)

    Registering an existing name replaces the previous entry, so user metrics
    and statistics may shadow the builtins.
    """

    _items: Dict[K, V] = field(default_factory=dict)
    _name: str = "registry"

    def register(self, key: K) -> Callable[[V], V]:
        def deco(value: V) -> V:
            return self.add(key, value)

        return deco

    def add(self, key: K, value: V) -> V:
        self._items[key] = value
        return value

    def get(self, key: K) -> V:
        try:
            return self._items[key]
        except KeyError:
            raise KeyError(f"unknown {self._name} entry {key!r}; known: {self.names()}") from None

    def try_get(self, key: K) -> Optional[V]:
        return self._items.get(key)

    def names(self) -> List[K]:
        return sorted(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items
