"""Built-in resample control registrations."""

from __future__ import annotations

from machineshop.registries.controls import register_control

from machineshop.components.splitters.splitters import (
    BootOptimismSplitter,
    BootSplitter,
    CVOptimismSplitter,
    CVSplitter,
    HoldOutSplitter,
    OOBSplitter,
    TrainSplitter,
)


@register_control("cv")
def _cv(cfg):
    return CVSplitter(cfg=cfg)


@register_control("cv_optimism")
def _cv_optimism(cfg):
    return CVOptimismSplitter(cfg=cfg)


@register_control("boot")
def _boot(cfg):
    return BootSplitter(cfg=cfg)


@register_control("boot_optimism")
def _boot_optimism(cfg):
    return BootOptimismSplitter(cfg=cfg)


@register_control("oob")
def _oob(cfg):
    return OOBSplitter(cfg=cfg)


@register_control("split")
def _split(cfg):
    return HoldOutSplitter(cfg=cfg)


@register_control("train")
def _train(cfg):
    return TrainSplitter(cfg=cfg)
