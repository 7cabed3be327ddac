"""Scoped host -> accelerator transfer of batch tensors."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import torch
from lightning.fabric import Fabric


@contextmanager
def device_scope(fabric: Fabric, *tensors: torch.Tensor) -> Iterator[list[torch.Tensor]]:
    """Move ``tensors`` to the Fabric device as float32 for the duration of the block.

    Integer label tensors keep their dtype. The device copies are released on
    exit, including when the block raises, so nothing is kept alive on the
    accelerator between batches.
    """
    moved = [
        fabric.to_device(t if not t.is_floating_point() else t.float())
        for t in tensors
    ]
    try:
        yield moved
    finally:
        moved.clear()
