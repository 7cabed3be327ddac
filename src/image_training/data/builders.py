"""Assemble train/val/test batch sources for each experiment layout."""

from __future__ import annotations

from collections.abc import Hashable
from pathlib import Path
from typing import Any, NamedTuple

from loguru import logger

from image_training.config import DataConfig
from image_training.data.container import ImageBatchContainer, ImagePairContainer
from image_training.data.loader import make_batch_loader
from image_training.data.manifest import Manifest, split_manifest


class BatchSources(NamedTuple):
    """Batch sources handed to the trainer. ``test`` is None when there is no test split."""

    train: Any
    val: Any
    test: Any | None


def _loader(container: ImageBatchContainer, config: DataConfig, *, seed: int | None) -> Any:
    return make_batch_loader(
        container,
        config.batch_size,
        shuffle=seed is not None,
        seed=seed,
        num_workers=config.num_workers,
    )


def _csv_manifests(config: DataConfig) -> tuple[Manifest, Manifest]:
    root = Path(config.data_root)
    train = Manifest.from_csv(root / config.train_csv, root / config.train_dir)
    test = Manifest.from_csv(root / config.test_csv, root / config.test_dir)
    return train, test


def _label_mapping(manifest: Manifest, task_name: str) -> dict[Hashable, int] | None:
    """Class indices for multi-class tasks and for categorical (string) labels."""
    if task_name == "multiclass" or any(isinstance(label, str) for label in manifest.labels):
        return manifest.class_to_idx()
    return None


def build_classification_batches(config: DataConfig, task_name: str = "binary") -> BatchSources:
    """CSV manifests (filename, label) for train and test; train split into train/val.

    Multi-class and categorical labels are encoded with a mapping built from
    the full train manifest and shared with val/test.
    """
    train_manifest, test_manifest = _csv_manifests(config)
    class_to_idx = _label_mapping(train_manifest, task_name)
    train_set, val_set = split_manifest(train_manifest, config.split_at, config.seed)

    def container(manifest: Manifest) -> ImageBatchContainer:
        return ImageBatchContainer(manifest, config, class_to_idx=class_to_idx)

    return BatchSources(
        train=_loader(container(train_set), config, seed=config.seed),
        val=_loader(container(val_set), config, seed=config.seed + 1),
        test=_loader(container(test_manifest), config, seed=None),
    )


def build_twin_batches(config: DataConfig, task_name: str = "binary") -> BatchSources:
    """Like :func:`build_classification_batches`, but every split yields two
    independently shuffled loaders to be drawn in lockstep.

    Categorical labels are mapped to class indices so pairs can be compared.
    """
    train_manifest, test_manifest = _csv_manifests(config)
    class_to_idx = _label_mapping(train_manifest, task_name)
    train_set, val_set = split_manifest(train_manifest, config.split_at, config.seed)

    def pair(manifest: Manifest, seed: int) -> tuple[Any, Any]:
        container = ImageBatchContainer(manifest, config, class_to_idx=class_to_idx)
        return (
            _loader(container, config, seed=seed),
            _loader(container, config, seed=seed + 1000),
        )

    return BatchSources(
        train=pair(train_set, config.seed),
        val=pair(val_set, config.seed + 1),
        test=pair(test_manifest, config.seed + 2),
    )


def build_folder_batches(config: DataConfig, task_name: str = "multiclass") -> BatchSources:
    """Images under ``data_root/train_dir/<class>/``; split into train/val, no test."""
    manifest = Manifest.from_folder(Path(config.data_root) / config.train_dir)
    class_to_idx = manifest.class_to_idx()
    logger.info(f"Found {len(class_to_idx)} classes in {config.data_root}")
    train_set, val_set = split_manifest(manifest, config.split_at, config.seed)
    return BatchSources(
        train=_loader(ImageBatchContainer(train_set, config, class_to_idx), config, seed=config.seed),
        val=_loader(ImageBatchContainer(val_set, config, class_to_idx), config, seed=None),
        test=None,
    )


def build_colorize_batches(config: DataConfig, task_name: str = "regression") -> BatchSources:
    """Grayscale inputs in ``input_dir`` paired with colour targets in ``target_dir``."""
    root = Path(config.data_root)
    manifest = Manifest.from_paired_folders(root / config.input_dir, root / config.target_dir)
    train_set, val_set = split_manifest(manifest, config.split_at, config.seed)
    return BatchSources(
        train=_loader(ImagePairContainer(train_set, config), config, seed=config.seed),
        val=_loader(ImagePairContainer(val_set, config), config, seed=None),
        test=None,
    )


_BUILDERS = {
    "baseline": build_classification_batches,
    "twin": build_twin_batches,
    "folder": build_folder_batches,
    "colorize": build_colorize_batches,
}


def build_batches(experiment: str, config: DataConfig, task_name: str) -> BatchSources:
    """Dispatch to the builder for ``experiment``."""
    try:
        builder = _BUILDERS[experiment]
    except KeyError:
        msg = f"Unknown experiment: {experiment!r}. Use one of {sorted(_BUILDERS)}."
        raise ValueError(msg) from None
    return builder(config, task_name)
