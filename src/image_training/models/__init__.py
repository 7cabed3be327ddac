"""Model implementations. Importing this package registers them with Hydra."""

from image_training.models.base import ModelKind, model_kind, select_trainable_parameters
from image_training.models.classifier import ResNet18Classifier
from image_training.models.twin import TwinCNN, TwinNetwork, TwinResNet18
from image_training.models.unet import UNet

__all__ = [
    "ModelKind",
    "ResNet18Classifier",
    "TwinCNN",
    "TwinNetwork",
    "TwinResNet18",
    "UNet",
    "model_kind",
    "select_trainable_parameters",
]
