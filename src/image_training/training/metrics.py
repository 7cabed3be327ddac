"""Per-run validation history."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class TrainingMetrics:
    """Validation accuracy and loss for every epoch of one run.

    Both lists are pre-allocated with zeros; epoch ``e`` (1-based) is stored
    at index ``e - 1`` once that epoch completes.
    """

    n_epochs: int
    val_acc: list[float] = field(init=False)
    val_loss: list[float] = field(init=False)

    def __post_init__(self) -> None:
        if self.n_epochs <= 0:
            raise ValueError(f"n_epochs must be positive, got {self.n_epochs}")
        self.val_acc = [0.0] * self.n_epochs
        self.val_loss = [0.0] * self.n_epochs

    def record(self, epoch: int, acc: float, loss: float) -> None:
        if not 1 <= epoch <= self.n_epochs:
            raise IndexError(f"Epoch {epoch} outside 1..{self.n_epochs}")
        self.val_acc[epoch - 1] = acc
        self.val_loss[epoch - 1] = loss

    def best_epoch(self) -> int:
        """1-based epoch with the highest accuracy; the last one wins ties."""
        best = max(self.val_acc)
        return max(i for i, acc in enumerate(self.val_acc) if acc == best) + 1

    def as_dict(self) -> dict[str, list[float]]:
        return {"val_acc": list(self.val_acc), "val_loss": list(self.val_loss)}
