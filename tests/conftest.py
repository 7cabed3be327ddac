"""Shared pytest fixtures for image_training tests."""

from pathlib import Path

import pytest
from lightning.fabric import Fabric
from PIL import Image

from image_training.config import DataConfig, TrainerConfig

IMAGE_SIZE = 64


def write_image(
    path: Path,
    color: tuple[int, int, int] | int = (128, 128, 128),
    size: tuple[int, int] = (IMAGE_SIZE, IMAGE_SIZE),
    mode: str = "RGB",
) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new(mode, size, color=color).save(path)
    return path


@pytest.fixture()
def csv_dataset_dir(tmp_path: Path) -> Path:
    """Minimal CSV-manifest dataset.

    - train/: 4 images, labels 0, 0, 1, 1 (listed in train_labels.csv)
    - test/:  2 images, labels 0, 1 (listed in test_labels.csv)

    Class-0 images are dark, class-1 images bright, all 64x64 RGB PNGs.
    """
    rows = ["filename,label"]
    for i, label in enumerate([0, 0, 1, 1]):
        name = f"img_{i:02d}.png"
        write_image(tmp_path / "train" / name, color=(40 + 180 * label,) * 3)
        rows.append(f"{name},{label}")
    (tmp_path / "train_labels.csv").write_text("\n".join(rows) + "\n")

    rows = ["filename,label"]
    for i, label in enumerate([0, 1]):
        name = f"test_{i:02d}.png"
        write_image(tmp_path / "test" / name, color=(40 + 180 * label,) * 3)
        rows.append(f"{name},{label}")
    (tmp_path / "test_labels.csv").write_text("\n".join(rows) + "\n")
    return tmp_path


@pytest.fixture()
def data_config(csv_dataset_dir: Path) -> DataConfig:
    return DataConfig(data_root=str(csv_dataset_dir), batch_size=2, split_at=0.5, seed=0)


@pytest.fixture()
def trainer_config(tmp_path: Path) -> TrainerConfig:
    return TrainerConfig(
        epochs=2,
        accelerator="cpu",
        checkpoint_dir=str(tmp_path / "checkpoints"),
        param_mode="full",
        progress=False,
    )


@pytest.fixture()
def cpu_fabric() -> Fabric:
    return Fabric(accelerator="cpu", devices=1)
