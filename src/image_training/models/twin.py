"""Twin (siamese) networks: one shared path applied to both inputs."""

from __future__ import annotations

import torch
import torchvision.models as tv_models
from torch import nn

from image_training.utils.hydra import register


class TwinNetwork(nn.Module):
    """Feeds both inputs through the same ``path`` and merges them with ``combine``.

    Parameters are shared between the two branches. ``combine`` receives the
    two embeddings and returns one logit per pair, shape ``(B, 1)``.
    """

    def __init__(self, path: nn.Module, combine: nn.Module) -> None:
        super().__init__()
        self.path = path
        self.combine = combine

    def forward(self, inputs: tuple[torch.Tensor, torch.Tensor]) -> torch.Tensor:
        first, second = inputs
        return self.combine(self.path(first), self.path(second))  # type: ignore[no-any-return]


def _pooled(size: int, kernel: int) -> int:
    return (size - kernel) // kernel + 1


def cnn_path_feature_size(image_size: int) -> int:
    """Spatial side length after the three conv/pool stages of :class:`TwinCNN`."""
    size = _pooled(image_size - 4, 3)
    size = _pooled(size - 4, 2)
    size = _pooled(size - 2, 2)
    return size


@register(name="twin_cnn", group="model", image_size=256, in_channels=3, embedding_dim=32)
class TwinCNN(TwinNetwork):
    """Twin network over a small from-scratch CNN path.

    For 256x256 inputs the flattened feature map is 19 * 19 * 72.
    Inputs below 40 pixels leave nothing to flatten and are rejected.
    """

    def __init__(
        self,
        image_size: int = 256,
        in_channels: int = 3,
        embedding_dim: int = 32,
    ) -> None:
        side = cnn_path_feature_size(image_size)
        if side < 1:
            raise ValueError(f"image_size={image_size} is too small for TwinCNN")
        path = nn.Sequential(
            nn.Conv2d(in_channels, 18, kernel_size=5),
            nn.ReLU(),
            nn.MaxPool2d(3, stride=3),
            nn.Conv2d(18, 36, kernel_size=5),
            nn.ReLU(),
            nn.MaxPool2d(2, stride=2),
            nn.Conv2d(36, 72, kernel_size=3),
            nn.ReLU(),
            nn.MaxPool2d(2, stride=2),
            nn.Flatten(),
            nn.Linear(side * side * 72, 64),
            nn.ReLU(),
            nn.Linear(64, embedding_dim),
            nn.ReLU(),
        )
        super().__init__(path, nn.Bilinear(embedding_dim, embedding_dim, 1))


@register(name="twin_resnet18", group="model", embedding_dim=32, pretrained=True)
class TwinResNet18(TwinNetwork):
    """Twin network whose path is ResNet18 with fc replaced by Linear(512, embedding_dim).

    Pass pretrained=False in tests to skip the ~44MB weight download.
    """

    def __init__(self, embedding_dim: int = 32, pretrained: bool = True) -> None:
        weights = tv_models.ResNet18_Weights.DEFAULT if pretrained else None
        backbone = tv_models.resnet18(weights=weights)
        backbone.fc = nn.Linear(backbone.fc.in_features, embedding_dim)
        super().__init__(backbone, nn.Bilinear(embedding_dim, embedding_dim, 1))
