"""Single-path ResNet18 classifier for transfer learning."""

from __future__ import annotations

import torch
import torchvision.models as tv_models
from torch import nn

from image_training.utils.hydra import register


@register(name="resnet18", group="model", num_outputs=1, pretrained=True, in_channels=3)
class ResNet18Classifier(nn.Module):
    """ResNet18 backbone with its fc replaced by a fresh ``head``.

    ``head`` is Linear(512, num_outputs); use ``num_outputs=1`` for binary
    logits. With ``param_mode="transfer"`` only the head is trained.
    Pass pretrained=False in tests to skip the ~44MB weight download.
    """

    def __init__(
        self,
        num_outputs: int = 1,
        pretrained: bool = True,
        in_channels: int = 3,
    ) -> None:
        super().__init__()
        weights = tv_models.ResNet18_Weights.DEFAULT if pretrained else None
        backbone = tv_models.resnet18(weights=weights)
        if in_channels != 3:
            backbone.conv1 = nn.Conv2d(
                in_channels, 64, kernel_size=7, stride=2, padding=3, bias=False
            )
        in_features = backbone.fc.in_features
        backbone.fc = nn.Identity()
        self.backbone = backbone
        self.head = nn.Linear(in_features, num_outputs)

    def forward(self, images: torch.Tensor) -> torch.Tensor:
        return self.head(self.backbone(images))  # type: ignore[no-any-return]
