"""
Main API classes for fractal generation.

This module provides the high-level interface for fractal generation,
combining the escape-time math, the parallel backend and image export.
"""

from typing import Optional, Union, Dict, Any
from dataclasses import dataclass, asdict, fields
from pathlib import Path
import logging
import numbers
import time

from .core.exceptions import ConfigError
from .core.math_functions import (
    JULIA_C, MAX_ITERATIONS, ESCAPE_RADIUS, CHANNEL_OVERFLOW_MODES, compute_rows,
)
from .core.raster import Raster, validate_dimensions
from .rendering.image_output import ImageExporter, RenderMetadata
from .acceleration.multiprocessing import MultiprocessingAccelerator, get_optimal_process_count
from . import __version__

logger = logging.getLogger(__name__)


@dataclass
class RenderConfig:
    """Configuration for fractal rendering."""

    # Quality
    channel_overflow: str = 'wrap'  # 'wrap' or 'saturate' for red/blue

    # Performance
    use_multiprocessing: bool = False
    num_processes: Optional[int] = None
    band_height: int = 64
    parallel_threshold: int = 250_000  # pixels

    # Output
    save_metadata: bool = True
    jpeg_quality: int = 95

    def validate(self):
        """Validate configuration parameters."""
        for name in ('use_multiprocessing', 'save_metadata'):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"{name} must be true or false, got {getattr(self, name)!r}")

        for name in ('num_processes', 'band_height', 'parallel_threshold', 'jpeg_quality'):
            value = getattr(self, name)
            if value is None and name == 'num_processes':
                continue
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise ConfigError(f"{name} must be an integer, got {value!r}")

        if self.channel_overflow not in CHANNEL_OVERFLOW_MODES:
            raise ConfigError(f"channel_overflow must be one of {CHANNEL_OVERFLOW_MODES}, "
                              f"got '{self.channel_overflow}'")

        if self.num_processes is not None and self.num_processes < 1:
            raise ConfigError("num_processes must be >= 1")

        if self.band_height < 1:
            raise ConfigError("band_height must be >= 1")

        if self.parallel_threshold < 0:
            raise ConfigError("parallel_threshold must be >= 0")

        if not 1 <= self.jpeg_quality <= 100:
            raise ConfigError("jpeg_quality must be within 1-100")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RenderConfig':
        """Create a validated config, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
        config = cls(**data)
        config.validate()
        return config


class FractalRenderer:
    """Julia-set fractal renderer producing RGB8 rasters."""

    def __init__(self, config: Optional[RenderConfig] = None):
        """
        Initialize fractal renderer.

        Args:
            config: Rendering configuration (uses defaults if None)
        """
        self.config = config or RenderConfig()
        self.config.validate()

        self.image_exporter = ImageExporter()
        self.accelerator = None

        if self.config.use_multiprocessing:
            num_proc = self.config.num_processes or get_optimal_process_count()
            self.accelerator = MultiprocessingAccelerator(num_proc, self.config.band_height)
            logger.info(f"Multiprocessing enabled: {num_proc} processes")

    def render(self, width: int, height: int) -> Raster:
        """
        Render the fractal into a new raster.

        Args:
            width, height: Raster resolution in pixels

        Returns:
            Completed, read-only raster

        Raises:
            InvalidDimensionsError: width or height is not a positive integer
        """
        validate_dimensions(width, height)
        start_time = time.time()

        parallel = self._use_parallel(width, height)
        if parallel:
            logger.info(f"Using multiprocessing render: {width}x{height}")
            raster = self.accelerator.render_parallel(width, height, self.config.channel_overflow)
        else:
            logger.debug(f"Using sequential render: {width}x{height}")
            raster = Raster.allocate(width, height)
            raster.write_rows(0, compute_rows(width, height, 0, height, self.config.channel_overflow))

        raster.channel_overflow = self.config.channel_overflow
        raster.parallel = parallel
        raster.freeze()
        logger.info(f"Render complete: {width}x{height} in {time.time() - start_time:.2f}s")
        return raster

    def render_to_file(self, output_path: Union[str, Path], width: int, height: int) -> Raster:
        """
        Render the fractal and save it; the extension selects the format.

        Raises:
            InvalidDimensionsError: width or height is not a positive integer
            ImageSaveError: the image could not be encoded or written
        """
        start_time = time.time()
        raster = self.render(width, height)
        self.save(raster, output_path, time.time() - start_time)
        return raster

    def save(self, raster: Raster, output_path: Union[str, Path], render_time: float = 0.0) -> Path:
        """
        Hand a completed raster to the image exporter.

        Metadata describes how the raster was rendered, which may differ from
        this renderer's own configuration.
        """
        metadata = None
        if self.config.save_metadata:
            metadata = RenderMetadata(
                width=raster.width,
                height=raster.height,
                julia_constant={'real': float(JULIA_C.real), 'imag': float(JULIA_C.imag)},
                max_iterations=MAX_ITERATIONS,
                escape_radius=ESCAPE_RADIUS,
                channel_overflow=raster.channel_overflow or self.config.channel_overflow,
                render_time_seconds=render_time,
                parallel=raster.parallel,
                software_version=__version__,
            )

        return self.image_exporter.save_image(raster, output_path, metadata, self.config.jpeg_quality)

    def _use_parallel(self, width: int, height: int) -> bool:
        return (self.accelerator is not None and
                width * height >= self.config.parallel_threshold)


def render(width: int, height: int, config: Optional[RenderConfig] = None) -> Raster:
    """Render a raster with a one-off renderer."""
    return FractalRenderer(config).render(width, height)
