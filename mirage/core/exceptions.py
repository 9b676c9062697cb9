"""
Exception hierarchy for mirage.

Every error raised by the library derives from MirageError and from the
closest built-in exception, so callers can catch either.
"""

from pathlib import Path
from typing import Optional, Union


class MirageError(Exception):
    """Base class for all mirage errors."""


class InvalidDimensionsError(MirageError, ValueError):
    """Raised when a raster width or height is not a positive integer."""

    def __init__(self, width, height):
        self.width = width
        self.height = height
        super().__init__(f"Width and height must be positive integers, got {width}x{height}")


class ImageSaveError(MirageError, OSError):
    """Raised when an image cannot be encoded or written."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.path = path


class ImageLoadError(MirageError, OSError):
    """Raised when an input image cannot be opened or decoded."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.path = path


class TransformError(MirageError, ValueError):
    """Raised for unknown transforms or invalid transform arguments."""


class ConfigError(MirageError, ValueError):
    """Raised when a configuration file cannot be read or is invalid."""
