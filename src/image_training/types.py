"""Type aliases for image_training inter-module contracts."""

from collections.abc import Iterable
from typing import TypeAlias

import torch

# (inputs, labels) as produced by a batch container.
# inputs: float tensor of shape (B, C, H, W) with values in [0, 1].
# labels: shape (B,) for scalar labels, (B, C, H, W) for image targets.
Batch: TypeAlias = tuple[torch.Tensor, torch.Tensor]

# Twin batches are drawn in lockstep from two independent batch sources.
BatchSource: TypeAlias = Iterable[Batch]
TwinBatchSource: TypeAlias = tuple[Iterable[Batch], Iterable[Batch]]

# Model input: a single tensor, or a pair for twin networks.
ModelInput: TypeAlias = torch.Tensor | tuple[torch.Tensor, torch.Tensor]
