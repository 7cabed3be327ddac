"""Batch containers: materialize a whole batch of images from a manifest on demand."""

from __future__ import annotations

from collections.abc import Callable, Hashable, Sequence
from pathlib import Path

import torch
from loguru import logger
from PIL import Image
from torch.utils.data import Dataset
from torchvision.transforms import v2

from image_training.config import DataConfig
from image_training.data.manifest import Manifest
from image_training.errors import DecodeError, ManifestError, ShapeMismatchError
from image_training.types import Batch


def build_image_transform(image_size: int | None = None) -> v2.Compose:
    """PIL image -> float32 tensor (C, H, W) with values in [0, 1].

    With ``image_size`` set, images are first resized to a square of that size.
    """
    steps: list[v2.Transform] = []
    if image_size is not None:
        steps.append(v2.Resize((image_size, image_size)))
    steps += [v2.ToImage(), v2.ToDtype(torch.float32, scale=True)]
    return v2.Compose(steps)


class ImageBatchContainer(Dataset[Batch]):
    """Maps a sequence of indices to a stacked ``(images, labels)`` batch.

    Images are re-read from disk on every access; nothing is cached. All
    images of a batch must decode to the same height and width.

    Args:
        manifest: Samples to serve. Owned by the container, never mutated.
        config: Supplies the PIL mode (``channels``) and optional resize.
        class_to_idx: When given, labels are encoded to int64 class indices.
            Otherwise labels must be numeric and are returned as float32.
        transform: Overrides the default PIL -> tensor conversion.
    """

    def __init__(
        self,
        manifest: Manifest,
        config: DataConfig | None = None,
        class_to_idx: dict[Hashable, int] | None = None,
        transform: Callable[[Image.Image], torch.Tensor] | None = None,
    ) -> None:
        self.manifest = manifest
        self.config = config or DataConfig()
        self.class_to_idx = class_to_idx
        self.transform = transform or build_image_transform(self.config.image_size)

    def __len__(self) -> int:
        return len(self.manifest)

    def __getitem__(self, indices: int | Sequence[int]) -> Batch:
        if isinstance(indices, int):
            indices = [indices]
        n = len(self)
        for idx in indices:
            if not 0 <= idx < n:
                raise IndexError(f"Index {idx} out of range for {n} samples")
        samples = [self.manifest[i] for i in indices]
        images = self._load_stack([s.path for s in samples], self.config.image_mode)
        labels = self._encode_labels([s.label for s in samples])
        return images, labels

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def _decode(self, path: Path, mode: str) -> torch.Tensor:
        try:
            with Image.open(path) as img:
                img = img.convert(mode)
        except (OSError, ValueError) as e:
            raise DecodeError(path, str(e)) from e
        return self.transform(img)

    def _load_stack(self, paths: list[Path], mode: str) -> torch.Tensor:
        """Decode ``paths`` and stack them into (B, C, H, W)."""
        tensors: list[torch.Tensor] = []
        for path in paths:
            tensor = self._decode(path, mode)
            if tensors and tensor.shape[-2:] != tensors[0].shape[-2:]:
                raise ShapeMismatchError(
                    path,
                    expected=tuple(tensors[0].shape[-2:]),
                    actual=tuple(tensor.shape[-2:]),
                )
            tensors.append(tensor)
        logger.debug(f"Decoded batch of {len(tensors)} images")
        return torch.stack(tensors)

    def _encode_labels(self, labels: list[object]) -> torch.Tensor:
        if self.class_to_idx is not None:
            try:
                return torch.tensor(
                    [self.class_to_idx[label] for label in labels],  # type: ignore[index]
                    dtype=torch.long,
                )
            except KeyError as e:
                raise ManifestError(f"Label {e.args[0]!r} missing from class_to_idx") from e
        if any(isinstance(label, str) for label in labels):
            msg = "Non-numeric labels need a class_to_idx mapping"
            raise ManifestError(msg)
        return torch.tensor(labels, dtype=torch.float32)


class ImagePairContainer(ImageBatchContainer):
    """Image-to-image variant: each sample's label is a target image path.

    Returns ``(inputs, targets)`` where both are (B, C, H, W) float tensors.
    Inputs use ``config.channels``, targets ``config.target_channels``.
    """

    def __init__(
        self,
        manifest: Manifest,
        config: DataConfig | None = None,
        transform: Callable[[Image.Image], torch.Tensor] | None = None,
    ) -> None:
        super().__init__(manifest, config, class_to_idx=None, transform=transform)

    def _encode_labels(self, labels: list[object]) -> torch.Tensor:
        return self._load_stack(
            [Path(str(label)) for label in labels], self.config.target_mode
        )
