"""Task definitions: loss function and correctness count per prediction type."""

from __future__ import annotations

import torch
import torch.nn as nn
import torch.nn.functional as F


class Task(nn.Module):
    """Loss plus a per-batch count of correct predictions.

    ``correct`` returns a 0-dim tensor that may live on the accelerator;
    callers reduce it to host memory with ``.item()`` before accumulating.
    """

    name: str = "task"

    def forward(self, outputs: torch.Tensor, targets: torch.Tensor) -> torch.Tensor:
        raise NotImplementedError

    def correct(self, outputs: torch.Tensor, targets: torch.Tensor) -> torch.Tensor:
        raise NotImplementedError


class BinaryTask(Task):
    """Binary classification on raw logits.

    Outputs of shape ``(B,)`` or ``(B, 1)`` are flattened to match targets
    of shape ``(B,)``.
    """

    name = "binary"

    def __init__(self, threshold: float = 0.5) -> None:
        super().__init__()
        self.threshold = threshold

    def forward(self, outputs: torch.Tensor, targets: torch.Tensor) -> torch.Tensor:
        return F.binary_cross_entropy_with_logits(
            outputs.reshape(-1), targets.reshape(-1).float()
        )

    def correct(self, outputs: torch.Tensor, targets: torch.Tensor) -> torch.Tensor:
        preds = (torch.sigmoid(outputs.reshape(-1)) > self.threshold).float()
        return (preds == targets.reshape(-1).float()).sum()


class MulticlassTask(Task):
    """Single-label multi-class classification on logits of shape ``(B, C)``."""

    name = "multiclass"

    def forward(self, outputs: torch.Tensor, targets: torch.Tensor) -> torch.Tensor:
        return F.cross_entropy(outputs, targets.long())

    def correct(self, outputs: torch.Tensor, targets: torch.Tensor) -> torch.Tensor:
        return (outputs.argmax(dim=1) == targets.long()).sum()


class RegressionTask(Task):
    """Image-to-image regression with mean squared error.

    A sample counts as ``fraction of values within tolerance`` correct, so
    summing over a batch and dividing by the sample count stays in [0, 1].
    """

    name = "regression"

    def __init__(self, tolerance: float = 0.05) -> None:
        super().__init__()
        self.tolerance = tolerance

    def forward(self, outputs: torch.Tensor, targets: torch.Tensor) -> torch.Tensor:
        return F.mse_loss(outputs, targets)

    def correct(self, outputs: torch.Tensor, targets: torch.Tensor) -> torch.Tensor:
        close = (outputs - targets).abs() <= self.tolerance
        return close.flatten(1).float().mean(dim=1).sum()


def build_task(name: str, tolerance: float = 0.05) -> Task:
    """Factory for tasks.

    Parameters
    ----------
    name:
        ``"binary"``, ``"multiclass"`` or ``"regression"``.
    tolerance:
        Per-value tolerance for regression correctness (ignored otherwise).
    """
    if name == "binary":
        return BinaryTask()
    if name == "multiclass":
        return MulticlassTask()
    if name == "regression":
        return RegressionTask(tolerance=tolerance)
    msg = f"Unknown task: {name!r}. Use 'binary', 'multiclass' or 'regression'."
    raise ValueError(msg)
