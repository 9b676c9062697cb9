"""
Fractal rendering and image editing toolkit.

This library synthesizes Julia-set fractal images with a per-pixel
escape-time iteration and wraps a handful of simple image edits
(blur, brighten, crop, rotate, invert, grayscale) around Pillow.

Key Features:
- Single-precision escape-time rendering with an RGB8 gradient background
- Optional row-band parallel rendering across processes
- PNG export with embedded render metadata
- A small command-line tool for fractals and image edits

Example usage:
    >>> from mirage import FractalRenderer
    >>> renderer = FractalRenderer()
    >>> raster = renderer.render(800, 600)
    >>> renderer.render_to_file("fractal.png", 800, 600)
"""

__version__ = "1.0.0"
__author__ = "Mirage Team"

from mirage.core.exceptions import (
    MirageError,
    InvalidDimensionsError,
    ImageSaveError,
    ImageLoadError,
    TransformError,
    ConfigError,
)
from mirage.core.raster import Raster
from mirage.core.math_functions import escape_count, julia_escape_counts, JULIA_C
from mirage.rendering.image_output import ImageExporter, RenderMetadata

# Main API classes
from mirage.api import FractalRenderer, RenderConfig

__all__ = [
    "FractalRenderer",
    "RenderConfig",
    "Raster",
    "ImageExporter",
    "RenderMetadata",
    "escape_count",
    "julia_escape_counts",
    "JULIA_C",
    "MirageError",
    "InvalidDimensionsError",
    "ImageSaveError",
    "ImageLoadError",
    "TransformError",
    "ConfigError",
]
