from __future__ import annotations

from typing import Any, Callable

from machineshop.registries.base import Registry

from machineshop.components.interfaces import Splitter

SplitterFactory = Callable[[Any], Splitter]

_CONTROLS: Registry[str, SplitterFactory] = Registry(_name="controls")

_BUILTINS_LOADED = False


def register_control(mode: str) -> Callable[[SplitterFactory], SplitterFactory]:
    return _CONTROLS.register(mode.lower())


def _ensure_builtins() -> None:
    global _BUILTINS_LOADED
    if _BUILTINS_LOADED:
        return
    from machineshop.registries.builtins import controls as _  # noqa: F401
    _BUILTINS_LOADED = True


def make_splitter(cfg: Any) -> Splitter:
    _ensure_builtins()
    mode = getattr(cfg, "mode", None)
    factory = _CONTROLS.try_get(str(mode).lower())
    if factory is None:
        raise ValueError(f"Unknown resample control mode: {mode!r}")
    return factory(cfg)


def list_control_modes() -> list[str]:
    _ensure_builtins()
    return _CONTROLS.names()
