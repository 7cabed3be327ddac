"""Training loop, metrics and checkpointing."""

from image_training.training.checkpoint import CheckpointWriter
from image_training.training.device import device_scope
from image_training.training.loop import Trainer, train, twin_targets
from image_training.training.metrics import TrainingMetrics
from image_training.training.reporting import log_model_info, save_history_plot

__all__ = [
    "CheckpointWriter",
    "Trainer",
    "TrainingMetrics",
    "device_scope",
    "log_model_info",
    "save_history_plot",
    "train",
    "twin_targets",
]
