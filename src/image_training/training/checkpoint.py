"""Best-model checkpoint persistence."""

from __future__ import annotations

from pathlib import Path

from lightning.fabric import Fabric
from loguru import logger
from torch import nn

from image_training.errors import CheckpointWriteError


class CheckpointWriter:
    """Writes ``<directory>/<name>.pt`` whenever validation accuracy reaches a new best.

    The best accuracy starts at 0.0 and ties count as improvements, so the
    weights of the last tying epoch are the ones kept on disk.

    Args:
        fabric: Fabric used for (rank-aware) saving.
        directory: Directory for the checkpoint file. Created on first write.
        name: Run identifier; the file is overwritten in place.
        strict: Raise :class:`CheckpointWriteError` on a failed write instead
            of logging and carrying on.
    """

    def __init__(
        self,
        fabric: Fabric,
        directory: str | Path,
        name: str,
        *,
        strict: bool = False,
    ) -> None:
        if not name:
            raise ValueError("Checkpoint name must not be empty")
        self.fabric = fabric
        self.path = Path(directory) / f"{name}.pt"
        self.strict = strict
        self.best_acc = 0.0
        self.writes = 0

    def is_improvement(self, acc: float) -> bool:
        return acc >= self.best_acc

    def update(self, model: nn.Module, acc: float, epoch: int) -> bool:
        """Save ``model`` if ``acc`` is a new (or tied) best. Returns whether it was."""
        if not self.is_improvement(acc):
            logger.info(
                f"Epoch {epoch}: val acc {acc:.4f} below best {self.best_acc:.4f}, "
                "keeping previous checkpoint"
            )
            return False
        logger.info(f"New best accuracy: {acc:.4f}! Saving model out to {self.path}")
        self.best_acc = acc
        self.save(model, epoch=epoch, acc=acc)
        return True

    def save(self, model: nn.Module, *, epoch: int, acc: float) -> None:
        state = {"model": model, "epoch": epoch, "val_acc": acc}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.fabric.save(self.path, state)
        except (OSError, RuntimeError) as e:
            if self.strict:
                raise CheckpointWriteError(self.path, str(e)) from e
            logger.error(f"Failed to write checkpoint {self.path}: {e}")
            return
        self.writes += 1
