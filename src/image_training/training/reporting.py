"""Model summary table and validation history plots."""

from __future__ import annotations

from pathlib import Path

import matplotlib
import matplotlib.pyplot as plt
from loguru import logger
from rich import box
from rich.console import Console
from rich.table import Table
from torch import nn

from image_training.training.metrics import TrainingMetrics


def log_model_info(model: nn.Module, console: Console | None = None) -> dict[str, float]:
    """Print a rich table with parameter counts and size, and log the same line.

    Returns the computed statistics.
    """
    total_params = sum(p.numel() for p in model.parameters())
    trainable_params = sum(p.numel() for p in model.parameters() if p.requires_grad)
    param_size = sum(p.numel() * p.element_size() for p in model.parameters())
    buffer_size = sum(b.numel() * b.element_size() for b in model.buffers())
    model_size_mb = (param_size + buffer_size) / (1024 * 1024)

    table = Table(
        title="Model Information",
        header_style="bold magenta",
        box=box.SQUARE,
        show_lines=True,
    )
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Model Class", type(model).__name__)
    table.add_row("Total Parameters", f"{total_params / 1e6:.2f} M")
    table.add_row("Trainable Parameters", f"{trainable_params / 1e6:.2f} M")
    table.add_row("Model Size", f"{model_size_mb:.2f} MB")
    (console or Console()).print(table)

    logger.info(
        f"Model: {type(model).__name__} | "
        f"Params: {total_params:,} ({trainable_params:,} trainable) | "
        f"Size: {model_size_mb:.2f} MB"
    )
    return {
        "total_params": total_params,
        "trainable_params": trainable_params,
        "model_size_mb": model_size_mb,
    }


def save_history_plot(metrics: TrainingMetrics, output_dir: str | Path) -> Path:
    """Write ``validation_history.png`` with accuracy and loss per epoch."""
    matplotlib.use("Agg")
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    epochs = list(range(1, metrics.n_epochs + 1))

    fig, (ax_acc, ax_loss) = plt.subplots(1, 2, figsize=(12, 5))
    ax_acc.plot(epochs, metrics.val_acc, marker="s", label="Val Accuracy")
    ax_acc.set_title("Validation Accuracy")
    ax_acc.set_xlabel("Epoch")
    ax_acc.set_ylim(0.0, 1.0)
    ax_loss.plot(epochs, metrics.val_loss, marker="o", color="tab:orange", label="Val Loss")
    ax_loss.set_title("Validation Loss")
    ax_loss.set_xlabel("Epoch")
    for ax in (ax_acc, ax_loss):
        ax.legend()
        ax.grid(True, linestyle="--", alpha=0.7)
    fig.tight_layout()

    path = output_dir / "validation_history.png"
    fig.savefig(path, dpi=150)
    plt.close(fig)
    logger.info(f"Validation history plot saved to {path}")
    return path
