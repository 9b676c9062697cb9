import numpy as np
import pytest
from PIL import Image

from mirage import FractalRenderer


@pytest.fixture(scope="session")
def raster_100():
    """A 100x100 render shared across tests; rasters are read-only."""
    return FractalRenderer().render(100, 100)


@pytest.fixture
def sample_image():
    """16x8 RGB image with distinct values in every pixel."""
    xs = np.arange(16, dtype=np.uint8)[np.newaxis, :]
    ys = np.arange(8, dtype=np.uint8)[:, np.newaxis]
    pixels = np.zeros((8, 16, 3), dtype=np.uint8)
    pixels[:, :, 0] = xs * 10
    pixels[:, :, 1] = ys * 20
    pixels[:, :, 2] = 200
    return Image.fromarray(pixels)


@pytest.fixture
def sample_image_path(tmp_path, sample_image):
    path = tmp_path / "input.png"
    sample_image.save(path)
    return path
