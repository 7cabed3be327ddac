"""Smoke test: verify the image_training package is importable."""

import image_training


def test_package_version() -> None:
    """Package must declare a __version__ string."""
    assert isinstance(image_training.__version__, str)
    assert image_training.__version__ == "0.0.1"
