"""Model variants and trainable-parameter selection."""

from __future__ import annotations

import enum
from typing import Literal

from loguru import logger
from torch import nn

from image_training.models.twin import TwinNetwork

ParamMode = Literal["transfer", "full"]


class ModelKind(enum.Enum):
    """Single-path models take one tensor; twin models take a pair."""

    SINGLE = "single"
    TWIN = "twin"


def model_kind(model: nn.Module) -> ModelKind:
    return ModelKind.TWIN if isinstance(model, TwinNetwork) else ModelKind.SINGLE


def _children_with_params(module: nn.Module) -> list[nn.Module]:
    return [
        child
        for child in module.children()
        if any(True for _ in child.parameters())
    ]


def _head(model: nn.Module) -> nn.Module:
    """The final trainable block: ``head``, else ``fc``, else the last child with parameters."""
    for attr in ("head", "fc"):
        module = getattr(model, attr, None)
        if isinstance(module, nn.Module):
            return module
    children = _children_with_params(model)
    if not children:
        raise ValueError(f"{type(model).__name__} has no trainable child modules")
    return children[-1]


def select_trainable_parameters(
    model: nn.Module,
    mode: ParamMode = "transfer",
    trainable_path_layers: int = 1,
) -> list[nn.Parameter]:
    """Freeze everything outside the selection and return the selected parameters.

    - ``full``: every parameter.
    - ``transfer`` on a single-path model: only its head.
    - ``transfer`` on a twin model: the last ``trainable_path_layers``
      parameterised children of the shared path, plus the combinator.
    """
    if mode == "full":
        selected = list(model.parameters())
    elif mode == "transfer":
        if isinstance(model, TwinNetwork):
            path_children = _children_with_params(model.path)
            if trainable_path_layers > len(path_children):
                raise ValueError(
                    f"trainable_path_layers={trainable_path_layers} but the path "
                    f"has only {len(path_children)} parameterised layers"
                )
            modules = [*path_children[-trainable_path_layers:], model.combine]
        else:
            modules = [_head(model)]
        selected = [p for m in modules for p in m.parameters()]
    else:
        raise ValueError(f"Unknown parameter mode: {mode!r}. Use 'transfer' or 'full'.")

    selected_ids = {id(p) for p in selected}
    for p in model.parameters():
        p.requires_grad_(id(p) in selected_ids)

    logger.info(
        f"Trainable parameters ({mode}): "
        f"{sum(p.numel() for p in selected):,} of "
        f"{sum(p.numel() for p in model.parameters()):,}"
    )
    return selected
