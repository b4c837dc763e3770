from __future__ import annotations

from pathlib import Path
from typing import Optional


class CoverTaggerError(Exception):
    """Base class for failures that are reported per folder, row or file."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class ArgumentError(CoverTaggerError):
    """Missing or invalid command line arguments; fatal for the whole run."""


class NotFoundError(CoverTaggerError):
    pass


class InvalidRowError(NotFoundError):
    """A manifest row lacks the folder or the image value."""


class EmptyResultError(CoverTaggerError):
    pass


class ImageProcessingError(CoverTaggerError):
    pass


class TagWriteError(CoverTaggerError):
    pass


class ManifestFormatError(CoverTaggerError):
    """The manifest cannot be decoded or parsed past some line."""
