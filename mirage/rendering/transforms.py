"""
Simple image edits delegated to Pillow.

Each transform takes a PIL image and returns a new one. Color edits
leave an alpha channel untouched.
"""

from typing import Callable, Dict, Optional, Tuple, Union
from pathlib import Path
import logging

from PIL import Image, ImageColor, ImageFilter, ImageOps

from ..core.exceptions import ImageLoadError, ImageSaveError, TransformError
from ..core.raster import validate_dimensions

logger = logging.getLogger(__name__)

# Clockwise rotation in degrees -> Pillow transpose operation
ROTATIONS = {
    90: Image.Transpose.ROTATE_270,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_90,
}


def load_image(path: Union[str, Path]) -> Image.Image:
    """Open and fully decode an image file."""
    try:
        with Image.open(path) as img:
            img.load()
            return img.copy()
    except OSError as e:
        raise ImageLoadError(f"Failed to open {path}: {e}", path) from e


def save_image(img: Image.Image, path: Union[str, Path]) -> Path:
    """Save an image; Pillow picks the format from the extension."""
    path = Path(path)
    try:
        img.save(path)
    except (OSError, ValueError, KeyError) as e:
        raise ImageSaveError(f"Failed writing {path}: {e}", path) from e
    logger.info(f"Saved image: {path} ({img.size[0]}x{img.size[1]})")
    return path


def _split_alpha(img: Image.Image) -> Tuple[Image.Image, Optional[Image.Image]]:
    if img.mode in ('RGBA', 'LA'):
        return img.convert(img.mode[:-1]), img.getchannel('A')
    if img.mode not in ('RGB', 'L'):
        img = img.convert('RGBA' if 'transparency' in img.info else 'RGB')
        return _split_alpha(img)
    return img, None


def _merge_alpha(img: Image.Image, alpha: Optional[Image.Image]) -> Image.Image:
    if alpha is None:
        return img
    img = img.convert(img.mode + 'A')
    img.putalpha(alpha)
    return img


def blur(img: Image.Image, sigma: float) -> Image.Image:
    """Gaussian blur with the given standard deviation."""
    if sigma < 0:
        raise TransformError(f"Blur sigma must be non-negative, got {sigma}")
    return img.filter(ImageFilter.GaussianBlur(radius=sigma))


def brighten(img: Image.Image, amount: int) -> Image.Image:
    """Add amount to every color channel, clamped to [0, 255]."""
    color, alpha = _split_alpha(img)
    lut = [min(255, max(0, value + amount)) for value in range(256)]
    return _merge_alpha(color.point(lut * len(color.getbands())), alpha)


def crop(img: Image.Image, x: int, y: int, width: int, height: int) -> Image.Image:
    """Crop to the box at (x, y), clamped to the image bounds."""
    if min(x, y, width, height) < 0:
        raise TransformError("Crop coordinates and size must be non-negative")

    left = min(x, img.width)
    upper = min(y, img.height)
    right = min(left + width, img.width)
    lower = min(upper + height, img.height)
    if right <= left or lower <= upper:
        raise TransformError(f"Crop box ({x}, {y}, {width}, {height}) lies outside "
                             f"the {img.width}x{img.height} image")
    return img.crop((left, upper, right, lower))


def rotate(img: Image.Image, degrees: int) -> Image.Image:
    """Rotate clockwise by 90, 180 or 270 degrees."""
    if degrees not in ROTATIONS:
        raise TransformError(f"Rotation must be 90, 180 or 270 degrees, got {degrees}")
    return img.transpose(ROTATIONS[degrees])


def invert(img: Image.Image) -> Image.Image:
    color, alpha = _split_alpha(img)
    return _merge_alpha(ImageOps.invert(color), alpha)


def grayscale(img: Image.Image) -> Image.Image:
    color, alpha = _split_alpha(img)
    return _merge_alpha(ImageOps.grayscale(color), alpha)


def generate_solid(width: int, height: int, color: str) -> Image.Image:
    """
    Create a solid RGB image.

    Args:
        width, height: Image size in pixels
        color: Any color string Pillow understands ("#ff8800", "red", "rgb(0,0,255)")
    """
    validate_dimensions(width, height)
    try:
        rgb = ImageColor.getrgb(color)[:3]
    except ValueError as e:
        raise TransformError(f"Invalid color '{color}': {e}") from e
    return Image.new('RGB', (width, height), rgb)


TRANSFORMS: Dict[str, Callable[..., Image.Image]] = {
    'blur': blur,
    'brighten': brighten,
    'crop': crop,
    'rotate': rotate,
    'invert': invert,
    'grayscale': grayscale,
}


def apply_transform(img: Image.Image, name: str, **params) -> Image.Image:
    """
    Apply a named transform.

    Args:
        img: Source image
        name: One of TRANSFORMS
        **params: Arguments for the transform

    Returns:
        Transformed image
    """
    transform = TRANSFORMS.get(name.lower())
    if transform is None:
        available = ', '.join(TRANSFORMS)
        raise TransformError(f"Unknown transform '{name}'. Available: {available}")

    try:
        result = transform(img, **params)
    except TypeError as e:
        raise TransformError(f"Invalid arguments for '{name}': {e}") from e

    logger.debug(f"Applied {name} {params}")
    return result


def transform_file(infile: Union[str, Path], outfile: Union[str, Path], name: str, **params) -> Path:
    """Load infile, apply a named transform and save to outfile."""
    img = load_image(infile)
    return save_image(apply_transform(img, name, **params), outfile)
