"""Epoch loop: train, validate, record metrics, keep the best checkpoint."""

from __future__ import annotations

from collections.abc import Iterator, Sized
from typing import Any

import torch
from lightning.fabric import Fabric
from loguru import logger
from torch import nn
from tqdm import tqdm

from image_training.config import TrainerConfig
from image_training.models.base import ModelKind, model_kind, select_trainable_parameters
from image_training.tasks import Task
from image_training.training.checkpoint import CheckpointWriter
from image_training.training.device import device_scope
from image_training.training.metrics import TrainingMetrics
from image_training.training.reporting import save_history_plot
from image_training.types import BatchSource, ModelInput, TwinBatchSource


def twin_targets(first: torch.Tensor, second: torch.Tensor) -> torch.Tensor:
    """1.0 where the two label tensors agree, 0.0 elsewhere."""
    return (first == second).float()


def _batch_count(source: Any) -> int | None:
    if isinstance(source, Sized):
        return len(source)
    return None


class Trainer:
    """Trains a single-path or twin model with a plain nested epoch/batch loop.

    The model variant is fixed at construction: twin models (``TwinNetwork``)
    consume pairs of batch sources in lockstep and learn whether the two
    labels match; every other ``nn.Module`` consumes one batch source.

    Only the parameters chosen by ``config.param_mode`` are handed to the
    Adam optimizer; the rest are frozen.

    Args:
        model: Model to train. Returned (unwrapped) by :meth:`fit`.
        task: Loss and correctness definition (see :mod:`image_training.tasks`).
        checkpoint_name: File stem for the best checkpoint.
        config: Loop hyperparameters.
        fabric: Pre-built Fabric; one is created from ``config.accelerator``
            when omitted.
    """

    def __init__(
        self,
        model: nn.Module,
        task: Task,
        checkpoint_name: str,
        config: TrainerConfig | None = None,
        fabric: Fabric | None = None,
    ) -> None:
        self.config = config or TrainerConfig()
        self.kind = model_kind(model)
        self.task = task
        self.fabric = fabric or Fabric(
            accelerator=self.config.accelerator, devices=1, precision="32-true"
        )

        params = select_trainable_parameters(
            model, self.config.param_mode, self.config.trainable_path_layers
        )
        optimizer = torch.optim.Adam(params, lr=self.config.learning_rate)
        self.module = model
        self.model, self.optimizer = self.fabric.setup(model, optimizer)

        self.checkpoint = CheckpointWriter(
            self.fabric,
            self.config.checkpoint_dir,
            checkpoint_name,
            strict=self.config.strict_checkpoint,
        )
        logger.debug(
            f"Trainer: {self.kind.value} {type(model).__name__} on {self.fabric.device}"
        )

    # ------------------------------------------------------------------
    # Batch plumbing
    # ------------------------------------------------------------------

    def _count(self, source: Any) -> int | None:
        if self.kind is ModelKind.TWIN:
            first, second = source
            counts = [_batch_count(first), _batch_count(second)]
            if None in counts:
                return None
            return min(counts)  # type: ignore[type-var]
        return _batch_count(source)

    def _iter_batches(self, source: Any) -> Iterator[tuple[torch.Tensor, ...]]:
        """Flat tensor tuples: ``(inputs, targets)`` or ``(first, second, targets)``."""
        if self.kind is ModelKind.SINGLE:
            for inputs, targets in source:
                yield inputs, targets
            return

        first_source, second_source = source
        for (x1, y1), (x2, y2) in zip(first_source, second_source):
            n = min(len(y1), len(y2))
            if n < len(y1) or n < len(y2):
                logger.debug(f"Truncating uneven twin batch ({len(y1)}, {len(y2)}) to {n}")
            yield x1[:n], x2[:n], twin_targets(y1[:n], y2[:n])

    def _inputs(self, batch: list[torch.Tensor]) -> ModelInput:
        if self.kind is ModelKind.TWIN:
            return batch[0], batch[1]
        return batch[0]

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def train_epoch(self, batches: Any, epoch: int, total: int | None = None) -> None:
        """One optimization pass over ``batches``. No metric bookkeeping."""
        self.model.train()
        progress = tqdm(
            self._iter_batches(batches),
            total=total,
            desc=f"Epoch {epoch} [train]",
            disable=not self.config.progress,
            leave=False,
        )
        for tensors in progress:
            with device_scope(self.fabric, *tensors) as batch:
                outputs = self.model(self._inputs(batch))
                loss = self.task(outputs, batch[-1])
                self.optimizer.zero_grad()
                self.fabric.backward(loss)
                self.optimizer.step()

    def evaluate(self, batches: Any, desc: str = "val") -> tuple[float, float]:
        """Return ``(accuracy, loss)`` per sample over ``batches``, without updates.

        Correct counts and losses are reduced to host floats per batch before
        they are accumulated.
        """
        self.model.eval()
        correct = 0.0
        loss_sum = 0.0
        seen = 0
        progress = tqdm(
            self._iter_batches(batches),
            total=self._count(batches),
            desc=desc,
            disable=not self.config.progress,
            leave=False,
        )
        with torch.no_grad():
            for tensors in progress:
                with device_scope(self.fabric, *tensors) as batch:
                    outputs = self.model(self._inputs(batch))
                    targets = batch[-1]
                    count = targets.shape[0]
                    correct += self.task.correct(outputs, targets).item()
                    loss_sum += self.task(outputs, targets).item() * count
                    seen += count
        if seen == 0:
            raise ValueError(f"No samples to evaluate in {desc} batches")
        return correct / seen, loss_sum / seen

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def fit(self, train_batches: Any, val_batches: Any) -> tuple[nn.Module, TrainingMetrics]:
        """Run ``config.epochs`` epochs of training + validation.

        Single-path: ``train_batches``/``val_batches`` are iterables of
        ``(inputs, labels)``. Twin: each is a pair of such iterables.
        Loaders are re-iterated every epoch, so shuffling loaders reshuffle.
        """
        epochs = self.config.epochs
        metrics = TrainingMetrics(epochs)
        train_total = self._count(train_batches)

        logger.info(f"Beginning training loop for {epochs} epoch(s)...")
        for epoch in range(1, epochs + 1):
            logger.info(f"Training epoch {epoch}...")
            self.train_epoch(train_batches, epoch, total=train_total)

            logger.info(f"Validating epoch {epoch}...")
            acc, loss = self.evaluate(val_batches)
            metrics.record(epoch, acc, loss)
            logger.info(f"Epoch {epoch}: val_acc={acc:.4f} val_loss={loss:.4f}")

            self.checkpoint.update(self.module, acc, epoch)

        logger.info(
            f"Training complete. Best val_acc={self.checkpoint.best_acc:.4f} "
            f"(epoch {metrics.best_epoch()})"
        )
        if self.config.history_dir is not None:
            save_history_plot(metrics, self.config.history_dir)
        return self.module, metrics


def train(
    model: nn.Module,
    task: Task,
    checkpoint_name: str,
    train_batches: BatchSource | TwinBatchSource,
    val_batches: BatchSource | TwinBatchSource,
    config: TrainerConfig | None = None,
) -> tuple[nn.Module, TrainingMetrics]:
    """Build a :class:`Trainer` and run it."""
    trainer = Trainer(model, task, checkpoint_name, config=config)
    return trainer.fit(train_batches, val_batches)
