"""
Tests for RasterImage construction and pixel access.
"""

import numpy as np
import pytest
from PIL import Image

from sprite_slicer.raster import InvalidInputError, PixelIndexError, RasterImage, Rectangle


class TestConstruction:
    def test_from_buffer(self):
        data = bytes(range(2 * 3 * 4))
        image = RasterImage.from_buffer(2, 3, data)
        assert image.size == (2, 3)
        assert image.rgba_at(1, 0) == (4, 5, 6, 7)
        assert image.rgba_at(0, 1) == (8, 9, 10, 11)

    def test_buffer_length_mismatch(self):
        with pytest.raises(InvalidInputError):
            RasterImage.from_buffer(2, 2, bytes(15))

    def test_negative_dimensions(self):
        with pytest.raises(InvalidInputError):
            RasterImage.from_buffer(-1, 2, b"")
        with pytest.raises(InvalidInputError):
            RasterImage.blank(3, -2)

    @pytest.mark.parametrize("values", [
        np.full((2, 2, 4), 256, dtype=np.int32),
        np.full((2, 2, 4), -1, dtype=np.int16),
        np.full((2, 2, 4), 0.5),
        np.ones((2, 2, 4), dtype=bool),
    ])
    def test_rejects_samples_outside_byte_range(self, values):
        with pytest.raises(InvalidInputError):
            RasterImage(values)

    def test_accepts_wider_integers_in_range(self):
        image = RasterImage(np.full((1, 1, 4), 255, dtype=np.int64))
        assert image.rgba_at(0, 0) == (255, 255, 255, 255)
        assert image.pixels.dtype == np.uint8

    def test_wrong_shape(self):
        with pytest.raises(InvalidInputError):
            RasterImage(np.zeros((4, 4, 3), dtype=np.uint8))

    def test_invalid_input_is_value_error(self):
        assert issubclass(InvalidInputError, ValueError)

    def test_copies_source_buffer(self):
        pixels = np.zeros((2, 2, 4), dtype=np.uint8)
        image = RasterImage(pixels)
        pixels[0, 0, 3] = 255
        assert image.alpha_at(0, 0) == 0

    def test_buffer_is_read_only(self):
        image = RasterImage.blank(2, 2)
        with pytest.raises(ValueError):
            image.pixels[0, 0, 3] = 255

    def test_zero_size(self):
        image = RasterImage.blank(0, 5)
        assert image.is_empty()
        assert image.size == (0, 5)

    def test_from_pil_converts_to_rgba(self):
        image = RasterImage.from_pil(Image.new("RGB", (3, 2), (10, 20, 30)))
        assert image.size == (3, 2)
        assert image.rgba_at(2, 1) == (10, 20, 30, 255)

    def test_to_pil(self):
        img = RasterImage.blank(4, 3, (1, 2, 3, 4)).to_pil()
        assert img.mode == "RGBA"
        assert img.size == (4, 3)
        assert img.getpixel((3, 2)) == (1, 2, 3, 4)


class TestPixelAccess:
    def test_alpha_and_rgb(self):
        image = RasterImage.blank(3, 3, (9, 8, 7, 200))
        assert image.alpha_at(2, 2) == 200
        assert image.rgb_at(0, 1) == (9, 8, 7)

    @pytest.mark.parametrize("x, y", [(-1, 0), (0, -1), (3, 0), (0, 2)])
    def test_out_of_range(self, x, y):
        image = RasterImage.blank(3, 2)
        with pytest.raises(PixelIndexError):
            image.alpha_at(x, y)

    def test_out_of_range_is_index_error(self):
        with pytest.raises(IndexError):
            RasterImage.blank(1, 1).rgb_at(1, 1)


class TestTransforms:
    def test_with_alpha_returns_copy(self):
        image = RasterImage.blank(2, 2, (5, 5, 5, 255))
        cleared = image.with_alpha(np.zeros((2, 2), dtype=np.uint8))
        assert cleared.alpha_at(1, 1) == 0
        assert image.alpha_at(1, 1) == 255

    def test_crop(self):
        pixels = np.zeros((4, 4, 4), dtype=np.uint8)
        pixels[2, 3] = (1, 2, 3, 4)
        cropped = RasterImage(pixels).crop(Rectangle(2, 1, 2, 2))
        assert cropped.size == (2, 2)
        assert cropped.rgba_at(1, 1) == (1, 2, 3, 4)

    def test_crop_outside(self):
        with pytest.raises(PixelIndexError):
            RasterImage.blank(4, 4).crop(Rectangle(2, 2, 3, 1))

    def test_equality(self):
        assert RasterImage.blank(2, 2) == RasterImage.blank(2, 2)
        assert RasterImage.blank(2, 2) != RasterImage.blank(2, 2, (0, 0, 0, 1))


class TestRectangle:
    def test_edges_and_box(self):
        rect = Rectangle(3, 4, 5, 6)
        assert (rect.right, rect.bottom) == (8, 10)
        assert rect.to_box() == (3, 4, 8, 10)
