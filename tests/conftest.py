import numpy as np
import pytest

from sprite_slicer.raster import RasterImage


def make_sheet(
    width: int,
    height: int,
    rects: list[tuple[int, int, int, int]],
    color: tuple[int, int, int, int] = (200, 40, 40, 255),
) -> RasterImage:
    """Transparent image with the given (x, y, w, h) rectangles filled."""
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    for x, y, w, h in rects:
        pixels[y:y + h, x:x + w] = color
    return RasterImage(pixels)


@pytest.fixture
def sheet_factory():
    return make_sheet
