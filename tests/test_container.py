"""Unit tests for ImageBatchContainer and ImagePairContainer."""

from pathlib import Path

import pytest
import torch

from conftest import IMAGE_SIZE, write_image
from image_training.config import DataConfig
from image_training.data.container import ImageBatchContainer, ImagePairContainer
from image_training.data.manifest import Manifest
from image_training.errors import DecodeError, ManifestError, ShapeMismatchError


@pytest.fixture()
def train_manifest(csv_dataset_dir: Path) -> Manifest:
    return Manifest.from_csv(csv_dataset_dir / "train_labels.csv", csv_dataset_dir / "train")


class TestImageBatchContainer:
    def test_len_equals_manifest_rows(self, train_manifest: Manifest) -> None:
        assert len(ImageBatchContainer(train_manifest)) == 4

    def test_batch_shape(self, train_manifest: Manifest) -> None:
        images, labels = ImageBatchContainer(train_manifest)[[0, 2, 3]]
        assert images.shape == (3, 3, IMAGE_SIZE, IMAGE_SIZE)
        assert labels.shape == (3,)

    def test_values_scaled_to_unit_range(self, train_manifest: Manifest) -> None:
        images, _ = ImageBatchContainer(train_manifest)[[0, 3]]
        assert images.dtype == torch.float32
        assert images.min() >= 0.0
        assert images.max() <= 1.0
        assert torch.allclose(images[0], torch.full_like(images[0], 40 / 255))
        assert torch.allclose(images[1], torch.full_like(images[1], 220 / 255))

    def test_labels_follow_index_order(self, train_manifest: Manifest) -> None:
        _, labels = ImageBatchContainer(train_manifest)[[3, 0, 2]]
        assert labels.tolist() == [1.0, 0.0, 1.0]
        assert labels.dtype == torch.float32

    def test_single_int_index(self, train_manifest: Manifest) -> None:
        images, labels = ImageBatchContainer(train_manifest)[1]
        assert images.shape[0] == 1
        assert labels.shape == (1,)

    def test_class_to_idx_encodes_long_labels(self, tmp_path: Path) -> None:
        write_image(tmp_path / "a.png")
        write_image(tmp_path / "b.png")
        manifest = Manifest.from_columns(["a.png", "b.png"], ["dog", "cat"], tmp_path)
        container = ImageBatchContainer(manifest, class_to_idx=manifest.class_to_idx())
        _, labels = container[[0, 1]]
        assert labels.dtype == torch.long
        assert labels.tolist() == [1, 0]

    def test_string_labels_without_mapping_raise(self, tmp_path: Path) -> None:
        write_image(tmp_path / "a.png")
        manifest = Manifest.from_columns(["a.png"], ["dog"], tmp_path)
        with pytest.raises(ManifestError):
            ImageBatchContainer(manifest)[[0]]

    @pytest.mark.parametrize("idx", [-1, 4])
    def test_out_of_range_index_raises(self, train_manifest: Manifest, idx: int) -> None:
        with pytest.raises(IndexError):
            ImageBatchContainer(train_manifest)[[0, idx]]

    def test_missing_file_raises_decode_error(self, tmp_path: Path) -> None:
        manifest = Manifest.from_columns(["missing.png"], [0], tmp_path)
        with pytest.raises(DecodeError) as exc_info:
            ImageBatchContainer(manifest)[[0]]
        assert exc_info.value.path == tmp_path / "missing.png"
        assert "missing.png" in str(exc_info.value)

    def test_corrupt_file_raises_decode_error(self, tmp_path: Path) -> None:
        (tmp_path / "broken.png").write_bytes(b"not an image")
        manifest = Manifest.from_columns(["broken.png"], [0], tmp_path)
        with pytest.raises(DecodeError):
            ImageBatchContainer(manifest)[[0]]

    def test_mismatched_sizes_raise(self, tmp_path: Path) -> None:
        write_image(tmp_path / "a.png", size=(32, 32))
        write_image(tmp_path / "b.png", size=(32, 48))
        manifest = Manifest.from_columns(["a.png", "b.png"], [0, 1], tmp_path)
        with pytest.raises(ShapeMismatchError) as exc_info:
            ImageBatchContainer(manifest)[[0, 1]]
        assert exc_info.value.expected == (32, 32)
        assert exc_info.value.actual == (48, 32)

    def test_image_size_resizes(self, tmp_path: Path) -> None:
        write_image(tmp_path / "a.png", size=(32, 32))
        write_image(tmp_path / "b.png", size=(32, 48))
        manifest = Manifest.from_columns(["a.png", "b.png"], [0, 1], tmp_path)
        images, _ = ImageBatchContainer(manifest, DataConfig(image_size=16))[[0, 1]]
        assert images.shape == (2, 3, 16, 16)

    def test_grayscale_channels(self, train_manifest: Manifest) -> None:
        images, _ = ImageBatchContainer(train_manifest, DataConfig(channels=1))[[0]]
        assert images.shape == (1, 1, IMAGE_SIZE, IMAGE_SIZE)

    def test_no_caching_rereads_files(self, tmp_path: Path) -> None:
        path = write_image(tmp_path / "a.png", color=(0, 0, 0))
        container = ImageBatchContainer(Manifest.from_columns(["a.png"], [0], tmp_path))
        first, _ = container[[0]]
        write_image(path, color=(255, 255, 255))
        second, _ = container[[0]]
        assert first.max() == 0.0
        assert second.min() == 1.0


class TestImagePairContainer:
    def test_targets_are_images(self, tmp_path: Path) -> None:
        for name in ("x.png", "y.png"):
            write_image(tmp_path / "gray" / name, color=100, mode="L", size=(16, 16))
            write_image(tmp_path / "original" / name, color=(255, 0, 0), size=(16, 16))
        manifest = Manifest.from_paired_folders(tmp_path / "gray", tmp_path / "original")
        inputs, targets = ImagePairContainer(manifest, DataConfig(channels=1))[[0, 1]]
        assert inputs.shape == (2, 1, 16, 16)
        assert targets.shape == (2, 3, 16, 16)
        assert torch.all(targets[:, 0] == 1.0)
        assert torch.all(targets[:, 1:] == 0.0)
