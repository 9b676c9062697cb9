"""
In-memory RGB8 raster used as the hand-off between rendering and export.
"""

import numbers
import numpy as np
from typing import Optional, Tuple

from .exceptions import InvalidDimensionsError

CHANNELS = 3


def validate_dimensions(width, height) -> None:
    """Raise InvalidDimensionsError unless both sides are positive integers."""
    for value in (width, height):
        if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value <= 0:
            raise InvalidDimensionsError(width, height)


class Raster:
    """Row-major RGB8 pixel buffer of shape (height, width, 3)."""

    def __init__(self, pixels: np.ndarray):
        """
        Wrap an existing pixel array.

        Args:
            pixels: uint8 array shaped (height, width, 3)
        """
        if pixels.ndim != 3 or pixels.shape[2] != CHANNELS:
            raise ValueError(f"Expected RGB pixel array (H, W, 3), got {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise ValueError(f"Expected uint8 pixels, got {pixels.dtype}")
        validate_dimensions(pixels.shape[1], pixels.shape[0])
        self.pixels = pixels

        # How the pixels were produced; set by the renderer
        self.channel_overflow: Optional[str] = None
        self.parallel = False

    @classmethod
    def allocate(cls, width: int, height: int) -> 'Raster':
        """Allocate an unfilled raster; every row must be written before use."""
        validate_dimensions(width, height)
        return cls(np.empty((height, width, CHANNELS), dtype=np.uint8))

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height), matching Pillow's convention."""
        return self.width, self.height

    @property
    def red(self) -> np.ndarray:
        return self.pixels[:, :, 0]

    @property
    def green(self) -> np.ndarray:
        return self.pixels[:, :, 1]

    @property
    def blue(self) -> np.ndarray:
        return self.pixels[:, :, 2]

    @property
    def frozen(self) -> bool:
        return not self.pixels.flags.writeable

    def write_rows(self, y_start: int, rows: np.ndarray) -> None:
        """Copy a band of fully computed rows into the raster."""
        if self.frozen:
            raise ValueError("Raster is frozen and can no longer be written")
        y_end = y_start + rows.shape[0]
        if y_start < 0 or y_end > self.height or rows.shape[1:] != (self.width, CHANNELS):
            raise ValueError(f"Row band {y_start}:{y_end} with shape {rows.shape} "
                             f"does not fit a {self.width}x{self.height} raster")
        self.pixels[y_start:y_end] = rows

    def freeze(self) -> 'Raster':
        """Mark the raster complete; further writes raise."""
        self.pixels.flags.writeable = False
        return self

    def get_pixel(self, x: int, y: int) -> Tuple[int, int, int]:
        """Return the (red, green, blue) value at column x, row y."""
        red, green, blue = self.pixels[y, x]
        return int(red), int(green), int(blue)

    def tobytes(self) -> bytes:
        return self.pixels.tobytes()

    def __eq__(self, other) -> bool:
        if not isinstance(other, Raster):
            return NotImplemented
        return self.pixels.shape == other.pixels.shape and np.array_equal(self.pixels, other.pixels)

    __hash__ = None

    def __repr__(self) -> str:
        return f"Raster({self.width}x{self.height})"
