"""
Image export and format handling for fractal rendering.

This module is the persistence collaborator for the renderer: it encodes
an RGB8 raster in the format implied by the output path's extension and
writes it to disk, optionally embedding render metadata in PNG files.
"""

import numpy as np
from typing import Dict, Any, Optional, Union
from pathlib import Path
from dataclasses import dataclass, asdict, field
import json
import logging
from datetime import datetime

from PIL import Image, PngImagePlugin

from ..core.exceptions import ImageSaveError
from ..core.raster import Raster

logger = logging.getLogger(__name__)

METADATA_KEY = "MirageMetadata"


@dataclass
class RenderMetadata:
    """Metadata for fractal renders."""

    width: int
    height: int
    julia_constant: Dict[str, float]
    max_iterations: int
    escape_radius: float
    channel_overflow: str

    render_time_seconds: float
    parallel: bool = False

    timestamp: str = ""
    software_version: str = "1.0.0"

    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Set default timestamp if not provided."""
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Convert metadata to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RenderMetadata':
        """Create metadata from dictionary."""
        return cls(**data)

    def to_json(self, indent: int = 2) -> str:
        """Convert metadata to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> 'RenderMetadata':
        """Create metadata from JSON string."""
        return cls.from_dict(json.loads(json_str))


class ImageExporter:
    """Encodes rasters to image files chosen by extension."""

    def __init__(self):
        self.supported_formats = {
            '.png': 'PNG',
            '.bmp': 'BMP',
            '.gif': 'GIF',
            '.jpg': 'JPEG',
            '.jpeg': 'JPEG',
            '.tif': 'TIFF',
            '.tiff': 'TIFF',
            '.ppm': 'PPM',
            '.webp': 'WEBP',
        }

    def save_image(self, image: Union[Raster, np.ndarray], filepath: Union[str, Path],
                   metadata: Optional[RenderMetadata] = None, quality: int = 95) -> Path:
        """
        Save an RGB8 raster to file.

        Args:
            image: Raster or uint8 array shaped (height, width, 3)
            filepath: Output file path; the extension selects the format
            metadata: Render metadata to embed (PNG only)
            quality: JPEG/WebP quality (1-100)

        Returns:
            The path written

        Raises:
            ImageSaveError: unsupported extension, encoder failure or
                unwritable path; the original error is chained
        """
        filepath = Path(filepath)
        suffix = filepath.suffix.lower()

        if suffix not in self.supported_formats:
            supported = ', '.join(sorted(self.supported_formats))
            raise ImageSaveError(f"Failed writing {filepath}: unsupported format '{suffix}'. "
                                 f"Supported: {supported}", filepath)

        pixels = self._prepare_image_array(image)
        pil_image = Image.fromarray(pixels)
        image_format = self.supported_formats[suffix]

        save_kwargs: Dict[str, Any] = {}
        if image_format == 'PNG' and metadata is not None:
            save_kwargs['pnginfo'] = self._build_pnginfo(metadata)
        elif image_format in ('JPEG', 'WEBP'):
            save_kwargs['quality'] = quality

        try:
            pil_image.save(filepath, image_format, **save_kwargs)
        except (OSError, ValueError, KeyError) as e:
            raise ImageSaveError(f"Failed writing {filepath}: {e}", filepath) from e

        logger.info(f"Saved image: {filepath} ({pil_image.size[0]}x{pil_image.size[1]})")
        return filepath

    def _prepare_image_array(self, image: Union[Raster, np.ndarray]) -> np.ndarray:
        """Validate the pixel array for export."""
        pixels = image.pixels if isinstance(image, Raster) else np.asarray(image)

        if pixels.ndim != 3 or pixels.shape[2] != 3:
            raise ValueError(f"Expected RGB image array (H, W, 3), got {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise ValueError(f"Expected uint8 image array, got {pixels.dtype}")

        return np.ascontiguousarray(pixels)

    def _build_pnginfo(self, metadata: RenderMetadata) -> PngImagePlugin.PngInfo:
        pnginfo = PngImagePlugin.PngInfo()
        pnginfo.add_text("Title", "Julia set fractal")
        pnginfo.add_text("Software", f"mirage v{metadata.software_version}")
        pnginfo.add_text("Creation Time", metadata.timestamp)
        pnginfo.add_text(METADATA_KEY, metadata.to_json())
        return pnginfo

    def extract_metadata_from_image(self, filepath: Union[str, Path]) -> Optional[RenderMetadata]:
        """
        Extract render metadata from a saved PNG.

        Returns:
            Extracted metadata or None when the file carries none
        """
        with Image.open(filepath) as img:
            text = getattr(img, 'text', {})
            if METADATA_KEY in text:
                return RenderMetadata.from_json(text[METADATA_KEY])
        return None
