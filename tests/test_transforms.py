import numpy as np
import pytest
from PIL import Image

from mirage import ImageLoadError, ImageSaveError, InvalidDimensionsError, TransformError
from mirage.rendering import transforms


def solid(color, size=(4, 2), mode='RGB'):
    return Image.new(mode, size, color)


class TestBrighten:

    def test_adds_and_clamps(self):
        result = transforms.brighten(solid((10, 250, 100)), 10)
        assert result.getpixel((0, 0)) == (20, 255, 110)

    def test_negative_amount_darkens(self):
        result = transforms.brighten(solid((10, 250, 100)), -20)
        assert result.getpixel((0, 0)) == (0, 230, 80)

    def test_alpha_untouched(self):
        result = transforms.brighten(solid((10, 20, 30, 128), mode='RGBA'), 5)
        assert result.mode == 'RGBA'
        assert result.getpixel((0, 0)) == (15, 25, 35, 128)


class TestInvertAndGrayscale:

    def test_invert(self):
        assert transforms.invert(solid((10, 20, 30))).getpixel((0, 0)) == (245, 235, 225)

    def test_invert_keeps_alpha(self):
        result = transforms.invert(solid((0, 0, 0, 77), mode='RGBA'))
        assert result.getpixel((0, 0)) == (255, 255, 255, 77)

    def test_grayscale_channels_equal(self, sample_image):
        result = transforms.grayscale(sample_image)
        assert result.mode == 'L'
        rgb = np.asarray(result.convert('RGB'))
        assert np.all(rgb[:, :, 0] == rgb[:, :, 1])
        assert np.all(rgb[:, :, 1] == rgb[:, :, 2])


class TestGeometry:

    def test_rotate_clockwise(self):
        img = solid((0, 0, 0), size=(4, 2))
        img.putpixel((0, 0), (255, 0, 0))
        result = transforms.rotate(img, 90)
        assert result.size == (2, 4)
        assert result.getpixel((1, 0)) == (255, 0, 0)

    def test_rotate_180_and_270(self, sample_image):
        assert transforms.rotate(sample_image, 180).size == (16, 8)
        assert transforms.rotate(sample_image, 270).size == (8, 16)
        twice = transforms.rotate(transforms.rotate(sample_image, 90), 270)
        np.testing.assert_array_equal(np.asarray(twice), np.asarray(sample_image))

    def test_rotate_rejects_other_angles(self, sample_image):
        with pytest.raises(TransformError):
            transforms.rotate(sample_image, 45)

    def test_crop(self, sample_image):
        result = transforms.crop(sample_image, 2, 1, 5, 3)
        assert result.size == (5, 3)
        assert result.getpixel((0, 0)) == sample_image.getpixel((2, 1))

    def test_crop_is_clamped(self, sample_image):
        assert transforms.crop(sample_image, 10, 5, 100, 100).size == (6, 3)

    def test_crop_outside_image(self, sample_image):
        with pytest.raises(TransformError):
            transforms.crop(sample_image, 20, 20, 5, 5)


class TestBlur:

    def test_uniform_image_unchanged(self):
        result = transforms.blur(solid((90, 90, 90), size=(8, 8)), 2.0)
        assert np.all(np.asarray(result) == 90)

    def test_reduces_variance(self):
        checker = np.indices((16, 16)).sum(axis=0) % 2 * 255
        img = Image.fromarray(np.stack([checker] * 3, axis=-1).astype(np.uint8))
        blurred = transforms.blur(img, 1.5)
        assert np.asarray(blurred).var() < np.asarray(img).var()

    def test_negative_sigma(self, sample_image):
        with pytest.raises(TransformError):
            transforms.blur(sample_image, -1)


class TestGenerateSolid:

    def test_hex_color(self):
        img = transforms.generate_solid(4, 3, "#ff8800")
        assert img.size == (4, 3)
        assert img.getpixel((3, 2)) == (255, 136, 0)

    def test_named_color(self):
        assert transforms.generate_solid(1, 1, "blue").getpixel((0, 0)) == (0, 0, 255)

    def test_invalid_color(self):
        with pytest.raises(TransformError):
            transforms.generate_solid(2, 2, "not-a-color")

    def test_invalid_size(self):
        with pytest.raises(InvalidDimensionsError):
            transforms.generate_solid(0, 2, "red")


class TestDispatch:

    def test_apply_by_name(self, sample_image):
        result = transforms.apply_transform(sample_image, 'Rotate', degrees=90)
        assert result.size == (8, 16)

    def test_unknown_name(self, sample_image):
        with pytest.raises(TransformError):
            transforms.apply_transform(sample_image, 'sharpen')

    def test_bad_arguments(self, sample_image):
        with pytest.raises(TransformError):
            transforms.apply_transform(sample_image, 'crop', x=1)

    def test_transform_file(self, sample_image_path, tmp_path):
        out = tmp_path / "inverted.png"
        transforms.transform_file(sample_image_path, out, 'invert')
        with Image.open(out) as img:
            assert img.getpixel((0, 0)) == (255, 255, 55)


class TestFiles:

    def test_load_missing(self, tmp_path):
        with pytest.raises(ImageLoadError) as excinfo:
            transforms.load_image(tmp_path / "missing.png")
        assert isinstance(excinfo.value.__cause__, FileNotFoundError)

    def test_load_not_an_image(self, tmp_path):
        path = tmp_path / "bogus.png"
        path.write_text("not an image")
        with pytest.raises(ImageLoadError):
            transforms.load_image(path)

    def test_load_returns_decoded_copy(self, sample_image_path, sample_image):
        img = transforms.load_image(sample_image_path)
        np.testing.assert_array_equal(np.asarray(img), np.asarray(sample_image))

    def test_save_unknown_extension(self, sample_image, tmp_path):
        with pytest.raises(ImageSaveError) as excinfo:
            transforms.save_image(sample_image, tmp_path / "out.unknown")
        assert excinfo.value.path == tmp_path / "out.unknown"
