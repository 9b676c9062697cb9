import numpy as np
import pytest
from PIL import Image

from mirage import ImageExporter, ImageSaveError, Raster, RenderMetadata


@pytest.fixture
def raster():
    pixels = np.zeros((6, 10, 3), dtype=np.uint8)
    pixels[:, :, 0] = np.arange(10, dtype=np.uint8) * 25
    pixels[:, :, 1] = 128
    return Raster(pixels)


@pytest.fixture
def metadata():
    return RenderMetadata(
        width=10, height=6, julia_constant={'real': -0.4, 'imag': 0.6},
        max_iterations=255, escape_radius=2.0, channel_overflow='wrap',
        render_time_seconds=0.01,
    )


@pytest.mark.parametrize("suffix", [".png", ".bmp", ".tif", ".ppm"])
def test_lossless_formats_round_trip(tmp_path, raster, suffix):
    path = tmp_path / f"out{suffix}"
    ImageExporter().save_image(raster, path)
    with Image.open(path) as img:
        assert img.size == (10, 6)
        np.testing.assert_array_equal(np.asarray(img.convert('RGB')), raster.pixels)


def test_jpeg_keeps_dimensions(tmp_path, raster):
    path = tmp_path / "out.JPG"
    ImageExporter().save_image(raster, path, quality=80)
    with Image.open(path) as img:
        assert img.format == 'JPEG'
        assert img.size == (10, 6)


def test_accepts_plain_arrays(tmp_path, raster):
    path = tmp_path / "out.png"
    ImageExporter().save_image(raster.pixels, path)
    assert path.exists()


def test_rejects_non_rgb8_arrays(tmp_path):
    with pytest.raises(ValueError):
        ImageExporter().save_image(np.zeros((4, 4), dtype=np.uint8), tmp_path / "x.png")
    with pytest.raises(ValueError):
        ImageExporter().save_image(np.zeros((4, 4, 3), dtype=np.float64), tmp_path / "x.png")


def test_metadata_round_trip(tmp_path, raster, metadata):
    exporter = ImageExporter()
    path = exporter.save_image(raster, tmp_path / "out.png", metadata)
    restored = exporter.extract_metadata_from_image(path)
    assert restored == metadata


def test_metadata_json_round_trip(metadata):
    assert RenderMetadata.from_json(metadata.to_json()) == metadata
    assert metadata.timestamp


def test_unsupported_extension(tmp_path, raster):
    path = tmp_path / "out.xyz"
    with pytest.raises(ImageSaveError) as excinfo:
        ImageExporter().save_image(raster, path)
    assert excinfo.value.path == path
    assert ".xyz" in str(excinfo.value)
    assert not path.exists()


def test_missing_directory(tmp_path, raster):
    path = tmp_path / "nope" / "out.png"
    with pytest.raises(ImageSaveError) as excinfo:
        ImageExporter().save_image(raster, path)
    assert excinfo.value.path == path
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)
    assert isinstance(excinfo.value, OSError)
