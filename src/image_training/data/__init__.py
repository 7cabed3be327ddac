"""Data pipeline for image_training."""

from image_training.data.builders import BatchSources, build_batches
from image_training.data.container import (
    ImageBatchContainer,
    ImagePairContainer,
    build_image_transform,
)
from image_training.data.loader import make_batch_loader
from image_training.data.manifest import Manifest, Sample, split_manifest

__all__ = [
    "BatchSources",
    "ImageBatchContainer",
    "ImagePairContainer",
    "Manifest",
    "Sample",
    "build_batches",
    "build_image_transform",
    "make_batch_loader",
    "split_manifest",
]
