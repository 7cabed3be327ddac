"""Pydantic frozen configuration models for image_training."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator


class DataConfig(BaseModel, frozen=True):
    """Configuration for manifests, batch containers and loaders.

    All fields are validated at construction time and the model is frozen.
    """

    data_root: str = ""
    train_csv: str = "train_labels.csv"
    test_csv: str = "test_labels.csv"
    train_dir: str = "train"
    test_dir: str = "test"
    input_dir: str = "gray"
    target_dir: str = "original"
    batch_size: int = Field(default=64, gt=0)
    split_at: float = Field(default=0.7, gt=0.0, lt=1.0)
    channels: int = 3
    target_channels: int = 3
    image_size: int | None = None
    num_workers: int = Field(default=0, ge=0)
    seed: int = 42

    @field_validator("channels", "target_channels")
    @classmethod
    def _supported_channels(cls, value: int) -> int:
        if value not in (1, 3):
            msg = f"channels must be 1 (grayscale) or 3 (RGB), got {value}"
            raise ValueError(msg)
        return value

    @property
    def image_mode(self) -> str:
        """PIL mode matching ``channels``."""
        return "RGB" if self.channels == 3 else "L"

    @property
    def target_mode(self) -> str:
        """PIL mode matching ``target_channels``."""
        return "RGB" if self.target_channels == 3 else "L"


class TrainerConfig(BaseModel, frozen=True):
    """Configuration for the epoch loop, optimizer and checkpointing."""

    epochs: int = Field(default=10, gt=0)
    learning_rate: float = Field(default=1e-3, gt=0.0)
    checkpoint_dir: str = "checkpoints"
    accelerator: str = "auto"
    param_mode: Literal["transfer", "full"] = "transfer"
    trainable_path_layers: int = Field(default=1, ge=1)
    tolerance: float = Field(default=0.05, gt=0.0)
    strict_checkpoint: bool = False
    history_dir: str | None = None
    progress: bool = True

    @model_validator(mode="after")
    def _history_dir_not_empty(self) -> "TrainerConfig":
        """An empty history_dir means no plots, same as None."""
        if self.history_dir == "":
            # Use object.__setattr__ because model is frozen
            object.__setattr__(self, "history_dir", None)
        return self
