"""Image classification, twin-network and colorization training with a hand-written loop."""

__version__ = "0.0.1"
