"""DataLoaders that request whole batches from a batch container."""

from __future__ import annotations

import torch
from torch.utils.data import BatchSampler, DataLoader, RandomSampler, SequentialSampler

from image_training.data.container import ImageBatchContainer
from image_training.types import Batch


def make_batch_loader(
    container: ImageBatchContainer,
    batch_size: int,
    *,
    shuffle: bool = False,
    seed: int | None = None,
    num_workers: int = 0,
) -> DataLoader[Batch]:
    """Wrap ``container`` so each step calls ``container[list_of_indices]`` once.

    Automatic batching is disabled (``batch_size=None``): the BatchSampler
    yields index lists and the container stacks them itself. With
    ``shuffle=True`` a new order is drawn every time the loader is iterated,
    i.e. once per epoch.
    """
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    if shuffle:
        generator = torch.Generator()
        if seed is not None:
            generator.manual_seed(seed)
        base_sampler: RandomSampler | SequentialSampler = RandomSampler(
            container, generator=generator
        )
    else:
        base_sampler = SequentialSampler(container)
    return DataLoader(
        container,
        sampler=BatchSampler(base_sampler, batch_size=batch_size, drop_last=False),
        batch_size=None,
        num_workers=num_workers,
    )
