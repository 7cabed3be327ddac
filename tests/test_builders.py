"""Tests for experiment batch-source builders."""

from pathlib import Path

import pytest
import torch

from conftest import write_image
from image_training.config import DataConfig
from image_training.data.builders import (
    build_batches,
    build_classification_batches,
    build_folder_batches,
    build_twin_batches,
)


def _count(loader: object) -> int:
    return sum(labels.shape[0] for _, labels in loader)  # type: ignore[attr-defined]


class TestBuilders:
    def test_classification_split_sizes(self, data_config: DataConfig) -> None:
        sources = build_classification_batches(data_config)
        assert _count(sources.train) == 2
        assert _count(sources.val) == 2
        assert _count(sources.test) == 2

    def test_split_fixed_across_epochs(self, data_config: DataConfig) -> None:
        sources = build_classification_batches(data_config)
        epoch_1 = sorted(img.mean().item() for imgs, _ in sources.train for img in imgs)
        epoch_2 = sorted(img.mean().item() for imgs, _ in sources.train for img in imgs)
        assert epoch_1 == epoch_2

    def test_twin_yields_two_loaders_per_split(self, data_config: DataConfig) -> None:
        sources = build_twin_batches(data_config)
        first, second = sources.train
        assert _count(first) == _count(second) == 2

    def test_folder_builder_encodes_classes(self, tmp_path: Path) -> None:
        for cls in ("A", "B", "C"):
            for i in range(2):
                write_image(tmp_path / "train" / cls / f"{i}.png", size=(8, 8))
        config = DataConfig(data_root=str(tmp_path), batch_size=4, split_at=0.5)
        sources = build_folder_batches(config)
        labels = torch.cat([y for _, y in sources.train])
        assert labels.dtype == torch.long
        assert set(labels.tolist()) <= {0, 1, 2}
        assert sources.test is None

    def test_multiclass_csv_labels(self, csv_dataset_dir: Path) -> None:
        config = DataConfig(data_root=str(csv_dataset_dir), batch_size=4, split_at=0.5)
        sources = build_batches("baseline", config, "multiclass")
        _, labels = next(iter(sources.test))
        assert labels.dtype == torch.long

    def test_unknown_experiment(self, data_config: DataConfig) -> None:
        with pytest.raises(ValueError, match="Unknown experiment"):
            build_batches("gan", data_config, "binary")


@pytest.fixture()
def categorical_dataset_dir(tmp_path: Path) -> Path:
    """CSV dataset whose labels are category names instead of numbers."""
    for split, names in (("train", ["cat", "cat", "dog", "dog"]), ("test", ["cat", "dog"])):
        rows = ["filename,label"]
        for i, name in enumerate(names):
            filename = f"{split}_{i}.png"
            write_image(tmp_path / split / filename, size=(64, 64))
            rows.append(f"{filename},{name}")
        (tmp_path / f"{split}_labels.csv").write_text("\n".join(rows) + "\n")
    return tmp_path


class TestCategoricalLabels:
    def test_twin_loaders_encode_categories(self, categorical_dataset_dir: Path) -> None:
        config = DataConfig(
            data_root=str(categorical_dataset_dir), batch_size=2, split_at=0.5, seed=0
        )
        sources = build_twin_batches(config)
        for loader in (*sources.train, *sources.val, *sources.test):
            for _, labels in loader:
                assert labels.dtype == torch.long
                assert set(labels.tolist()) <= {0, 1}

    def test_baseline_binary_encodes_categories(self, categorical_dataset_dir: Path) -> None:
        config = DataConfig(data_root=str(categorical_dataset_dir), batch_size=4, split_at=0.5)
        sources = build_batches("baseline", config, "binary")
        _, labels = next(iter(sources.test))
        # sorted classes: cat -> 0, dog -> 1
        assert labels.tolist() == [0, 1]
