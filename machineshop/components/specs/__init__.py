from .constructors import SelectedInput, SelectedModel, StackedModel, SuperModel, TunedInput, TunedModel
from .nodes import (
    ModelSpec,
    SelectedNode,
    SpecNode,
    StackedNode,
    SuperNode,
    TunedNode,
    as_spec,
    check_response_kind,
)

__all__ = [
    "ModelSpec",
    "SelectedInput",
    "SelectedModel",
    "SelectedNode",
    "SpecNode",
    "StackedModel",
    "StackedNode",
    "SuperModel",
    "SuperNode",
    "TunedInput",
    "TunedModel",
    "TunedNode",
    "as_spec",
    "check_response_kind",
]
