"""
Core mathematical functions for fractal iteration.

This module provides the escape-time iteration for the Julia set
z -> z^2 + c with c = -0.4 + 0.6i, the pixel to complex-plane mapping,
and the red/blue gradient used as the image background. All arithmetic
is single precision (float32 / complex64).
"""

import numpy as np
from typing import Optional
import logging

from .raster import validate_dimensions

logger = logging.getLogger(__name__)

JULIA_C = np.complex64(complex(-0.4, 0.6))
MAX_ITERATIONS = 255
ESCAPE_RADIUS = 2.0

# The plane spans [-1.5, 1.5) on both axes regardless of aspect ratio
PLANE_SPAN = 3.0
PLANE_OFFSET = 1.5

GRADIENT_FACTOR = 0.3
CHANNEL_OVERFLOW_MODES = ('wrap', 'saturate')


class ComplexPlane:
    """Maps pixel coordinates of a width x height raster onto the complex plane.

    The row index drives the real axis (scaled by the width) and the column
    index drives the imaginary axis (scaled by the height).
    """

    def __init__(self, width: int, height: int):
        """
        Initialize plane resolution and per-axis scale factors.

        Args:
            width, height: Raster resolution in pixels
        """
        validate_dimensions(width, height)
        self.width = width
        self.height = height

        self.x_scale = np.float32(PLANE_SPAN) / np.float32(width)
        self.y_scale = np.float32(PLANE_SPAN) / np.float32(height)

    def create_complex_array(self, y_start: int = 0, y_end: Optional[int] = None) -> np.ndarray:
        """
        Create the complex starting points for a band of rows.

        Args:
            y_start: First row (inclusive)
            y_end: Last row (exclusive), defaults to the raster height

        Returns:
            complex64 array shaped (rows, width)
        """
        if y_end is None:
            y_end = self.height

        ys = np.arange(y_start, y_end, dtype=np.float32)
        xs = np.arange(self.width, dtype=np.float32)
        offset = np.float32(PLANE_OFFSET)

        z = np.empty((ys.size, xs.size), dtype=np.complex64)
        z.real = (ys * self.x_scale - offset)[:, np.newaxis]
        z.imag = (xs * self.y_scale - offset)[np.newaxis, :]
        return z

    def pixel_to_complex(self, x: int, y: int) -> np.complex64:
        """Convert pixel coordinates to the point the iteration starts from."""
        offset = np.float32(PLANE_OFFSET)
        real = np.float32(y) * self.x_scale - offset
        imag = np.float32(x) * self.y_scale - offset
        return np.complex64(complex(real, imag))


def pixel_to_complex(x: int, y: int, width: int, height: int) -> np.complex64:
    """Starting point for pixel (x, y) of a width x height raster."""
    return ComplexPlane(width, height).pixel_to_complex(x, y)


def escape_count(z0: complex, c: complex = JULIA_C, max_iterations: int = MAX_ITERATIONS,
                 escape_radius: float = ESCAPE_RADIUS) -> int:
    """
    Count iterations of z -> z^2 + c before |z| exceeds the escape radius.

    Args:
        z0: Starting point
        c: Julia set constant
        max_iterations: Iteration cap
        escape_radius: Escape bound on |z|

    Returns:
        Number of iterations performed, in [0, max_iterations]
    """
    z0 = np.complex64(z0)
    c = np.complex64(c)
    re, im = z0.real, z0.imag
    radius = np.float32(escape_radius)

    count = 0
    with np.errstate(over='ignore', invalid='ignore'):
        while count < max_iterations and np.hypot(re, im) <= radius:
            re, im = re * re - im * im + c.real, re * im + im * re + c.imag
            count += 1
    return count


def julia_escape_counts(z: np.ndarray, c: complex = JULIA_C, max_iterations: int = MAX_ITERATIONS,
                        escape_radius: float = ESCAPE_RADIUS) -> np.ndarray:
    """
    Vectorized escape_count over an array of starting points.

    Real and imaginary parts are iterated as separate float32 arrays in
    the same order as escape_count, so both produce identical counts.
    Only points still inside the escape radius are advanced on each pass.

    Args:
        z: Starting points (any shape)
        c: Julia set constant
        max_iterations: Iteration cap (at most 255)
        escape_radius: Escape bound on |z|

    Returns:
        uint8 array of iteration counts with the same shape as z
    """
    if not 0 <= max_iterations <= 255:
        raise ValueError("max_iterations must be within [0, 255] for 8-bit counts")

    flat = np.asarray(z, dtype=np.complex64).ravel()
    re = flat.real.copy()
    im = flat.imag.copy()
    c = np.complex64(c)
    radius = np.float32(escape_radius)
    counts = np.zeros(flat.shape, dtype=np.uint8)

    with np.errstate(over='ignore', invalid='ignore'):
        active = np.flatnonzero(np.hypot(re, im) <= radius)

        for _ in range(max_iterations):
            if active.size == 0:
                break

            a = re[active]
            b = im[active]
            next_re = a * a - b * b + c.real
            next_im = a * b + b * a + c.imag
            re[active] = next_re
            im[active] = next_im
            counts[active] += 1

            active = active[np.hypot(next_re, next_im) <= radius]

    return counts.reshape(np.shape(z))


def gradient_channel(coords: np.ndarray, overflow: str = 'wrap') -> np.ndarray:
    """
    Background channel value floor(0.3 * coord) narrowed to 8 bits.

    Args:
        coords: Pixel coordinates along one axis
        overflow: 'wrap' (modulo 256) or 'saturate' (clamp to 255)

    Returns:
        uint8 array shaped like coords
    """
    if overflow not in CHANNEL_OVERFLOW_MODES:
        raise ValueError(f"overflow must be one of {CHANNEL_OVERFLOW_MODES}, got '{overflow}'")

    scaled = np.float32(GRADIENT_FACTOR) * np.asarray(coords, dtype=np.float32)
    values = np.floor(scaled).astype(np.int64)

    if overflow == 'wrap':
        return (values % 256).astype(np.uint8)
    return np.minimum(values, 255).astype(np.uint8)


def compute_rows(width: int, height: int, y_start: int, y_end: int,
                 overflow: str = 'wrap') -> np.ndarray:
    """
    Compute fully colored pixels for rows [y_start, y_end).

    Args:
        width, height: Full raster resolution (sets the plane scale)
        y_start, y_end: Row range to compute
        overflow: Narrowing rule for the red and blue gradient

    Returns:
        uint8 array shaped (y_end - y_start, width, 3)
    """
    plane = ComplexPlane(width, height)
    if not 0 <= y_start <= y_end <= height:
        raise ValueError(f"Invalid row range {y_start}:{y_end} for height {height}")

    rows = np.empty((y_end - y_start, width, 3), dtype=np.uint8)
    rows[:, :, 0] = gradient_channel(np.arange(width), overflow)[np.newaxis, :]
    rows[:, :, 1] = julia_escape_counts(plane.create_complex_array(y_start, y_end))
    rows[:, :, 2] = gradient_channel(np.arange(y_start, y_end), overflow)[:, np.newaxis]

    logger.debug(f"Computed rows {y_start}:{y_end} of {width}x{height}")
    return rows
