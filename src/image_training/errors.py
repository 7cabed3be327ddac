"""Exception hierarchy for image_training.

Errors raised inside a DataLoader worker are rebuilt in the main process
as ``ErrorType(message)``, where the message is the worker's formatted
traceback. ``DecodeError`` and ``ShapeMismatchError`` accept that single
argument and recover their fields from the text they originally produced.
"""

from __future__ import annotations

import re
from pathlib import Path


class ImageTrainingError(Exception):
    """Base class for all image_training failures."""


class ManifestError(ImageTrainingError):
    """Manifest columns are missing or filenames and labels disagree in length."""


def _from_worker(text: str) -> bool:
    return "\n" in text


def _parse_shape(text: str) -> tuple[int, ...]:
    return tuple(int(v) for v in text.split(",") if v.strip())


class DecodeError(ImageTrainingError):
    """An image file could not be opened or decoded."""

    _pattern = re.compile(r"Failed to decode image (?P<path>.+?)(?:: .*)?$", re.MULTILINE)

    def __init__(self, path: Path | str, reason: str = "") -> None:
        text = str(path)
        if not reason and _from_worker(text):
            match = self._pattern.search(text)
            self.path = Path(match["path"]) if match else None
            self.reason = ""
            super().__init__(text)
            return

        self.path = Path(path)
        self.reason = reason
        msg = f"Failed to decode image {self.path}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class ShapeMismatchError(ImageTrainingError):
    """Decoded images in one batch disagree in spatial dimensions."""

    _pattern = re.compile(
        r"Image (?P<path>.+?) has shape \((?P<actual>[\d, ]*)\), "
        r"expected \((?P<expected>[\d, ]*)\)"
    )

    def __init__(
        self,
        path: Path | str,
        expected: tuple[int, ...] | None = None,
        actual: tuple[int, ...] | None = None,
    ) -> None:
        text = str(path)
        if expected is None and actual is None and _from_worker(text):
            match = self._pattern.search(text)
            self.path = Path(match["path"]) if match else None
            self.expected = _parse_shape(match["expected"]) if match else None
            self.actual = _parse_shape(match["actual"]) if match else None
            super().__init__(text)
            return

        self.path = Path(path)
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Image {self.path} has shape {actual}, expected {expected} "
            "to match the rest of the batch"
        )


class CheckpointWriteError(ImageTrainingError):
    """Persisting a checkpoint to storage failed."""

    def __init__(self, path: Path | str, reason: str = "") -> None:
        self.path = Path(path)
        msg = f"Failed to write checkpoint {self.path}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
