"""Sample manifests: ordered (image path, label) tables."""

from __future__ import annotations

import math
from collections.abc import Hashable, Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd
import torch
from loguru import logger

from image_training.data.utils import IMAGE_EXTENSIONS, find_counterpart, get_files
from image_training.errors import ManifestError


@dataclass(frozen=True)
class Sample:
    """One manifest row.

    ``label`` is a scalar for classification manifests and a target image
    ``Path`` for paired image-to-image manifests.
    """

    path: Path
    label: Any


@dataclass(frozen=True)
class Manifest:
    """Immutable ordered sequence of samples.

    Index ``i`` of ``paths`` and ``labels`` always refers to the same sample.
    """

    samples: tuple[Sample, ...]

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_columns(
        cls,
        filenames: Sequence[str | Path],
        labels: Sequence[Any],
        base_dir: str | Path = "",
    ) -> Manifest:
        """Build from parallel filename and label sequences.

        Filenames are relative to ``base_dir``.
        """
        if len(filenames) != len(labels):
            msg = (
                f"Manifest has {len(filenames)} filenames but {len(labels)} "
                "labels; rows must be index-aligned"
            )
            raise ManifestError(msg)
        base = Path(base_dir)
        samples = tuple(
            Sample(path=base / str(name), label=label)
            for name, label in zip(filenames, labels)
        )
        return cls(samples)

    @classmethod
    def from_table(cls, table: pd.DataFrame, base_dir: str | Path = "") -> Manifest:
        """Build from a table whose first column holds filenames and second labels.

        Any further columns are ignored.
        """
        if table.shape[1] < 2:
            msg = (
                f"Manifest table needs at least 2 columns (filename, label), "
                f"got {table.shape[1]}: {list(table.columns)}"
            )
            raise ManifestError(msg)
        filenames = table.iloc[:, 0].astype(str).tolist()
        labels = table.iloc[:, 1].tolist()
        return cls.from_columns(filenames, labels, base_dir)

    @classmethod
    def from_csv(cls, csv_path: str | Path, base_dir: str | Path = "") -> Manifest:
        """Read a CSV manifest with pandas and build via :meth:`from_table`."""
        csv_path = Path(csv_path)
        try:
            table = pd.read_csv(csv_path)
        except FileNotFoundError as e:
            raise ManifestError(f"Manifest file not found: {csv_path}") from e
        except pd.errors.EmptyDataError as e:
            raise ManifestError(f"Manifest file is empty: {csv_path}") from e
        manifest = cls.from_table(table, base_dir)
        logger.debug(f"Manifest: loaded {len(manifest)} rows from {csv_path}")
        return manifest

    @classmethod
    def from_folder(
        cls,
        root: str | Path,
        extensions: tuple[str, ...] = IMAGE_EXTENSIONS,
    ) -> Manifest:
        """One sample per image under ``root``, labelled by its parent directory name."""
        root = Path(root)
        files = get_files(root, extensions)
        if not files:
            raise ManifestError(f"No images with extensions {extensions} under {root}")
        samples = tuple(Sample(path=p, label=p.parent.name) for p in files)
        logger.debug(f"Manifest: {len(samples)} images in folders under {root}")
        return cls(samples)

    @classmethod
    def from_paired_folders(
        cls,
        input_dir: str | Path,
        target_dir: str | Path,
        extensions: tuple[str, ...] = IMAGE_EXTENSIONS,
    ) -> Manifest:
        """Pair every image in ``input_dir`` with the same relative path in ``target_dir``.

        Used for image-to-image tasks (e.g. grayscale -> colour), where the
        label of a sample is the target image path. The target may use a
        different image extension than the input.
        """
        input_dir = Path(input_dir)
        target_dir = Path(target_dir)
        files = get_files(input_dir, extensions)
        if not files:
            raise ManifestError(f"No images with extensions {extensions} under {input_dir}")
        samples = []
        for path in files:
            target = find_counterpart(path, input_dir, target_dir, extensions)
            if target is None:
                raise ManifestError(f"No target image in {target_dir} for input {path}")
            samples.append(Sample(path=path, label=target))
        return cls(tuple(samples))

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.samples)

    def __getitem__(self, idx: int) -> Sample:
        return self.samples[idx]

    def __iter__(self) -> Iterator[Sample]:
        return iter(self.samples)

    @property
    def paths(self) -> list[Path]:
        return [s.path for s in self.samples]

    @property
    def labels(self) -> list[Any]:
        return [s.label for s in self.samples]

    def classes(self) -> list[Hashable]:
        """Sorted unique labels."""
        return sorted(set(self.labels))

    def class_to_idx(self) -> dict[Hashable, int]:
        """Sorted-label to index mapping.

        MUST be built from the training manifest and shared with val/test.
        """
        return {cls: i for i, cls in enumerate(self.classes())}

    def subset(self, indices: Sequence[int]) -> Manifest:
        return Manifest(tuple(self.samples[i] for i in indices))


def split_manifest(
    manifest: Manifest, at: float = 0.7, seed: int = 42
) -> tuple[Manifest, Manifest]:
    """Shuffle once and split into ``(first, rest)``.

    ``len(first) == floor(at * len(manifest))``. The same seed always
    produces the same partition, so train/val membership is fixed for a run.
    """
    if not 0.0 < at < 1.0:
        raise ValueError(f"Split fraction must be in (0, 1), got {at}")
    n = len(manifest)
    generator = torch.Generator().manual_seed(seed)
    order = torch.randperm(n, generator=generator).tolist()
    cut = math.floor(at * n)
    first, rest = manifest.subset(order[:cut]), manifest.subset(order[cut:])
    logger.info(f"Split {n} samples at {at}: {len(first)} / {len(rest)}")
    return first, rest
