"""
Fast solid-colour background removal.

Picks the most common (quantized) colour along the image border and makes
every pixel close to it transparent. No feathering or edge cleanup.
"""

from collections import Counter
from dataclasses import dataclass

import numpy as np

from .raster import RasterImage

DEFAULT_TOLERANCE = 30
QUANTIZE_STEP = 10


@dataclass(frozen=True)
class BackgroundColorSample:
    r: int
    g: int
    b: int
    count: int

    @property
    def rgb(self) -> tuple[int, int, int]:
        return self.r, self.g, self.b


def border_samples(image: RasterImage) -> np.ndarray:
    """
    RGB values of every border pixel as an (n, 3) int array.

    Order: for each x the top then bottom pixel, then for each y the left
    then right pixel. Corners appear more than once.
    """
    rgb = image.rgb.astype(np.int32)
    height, width = image.height, image.width
    top_bottom = np.stack([rgb[0, :], rgb[height - 1, :]], axis=1).reshape(-1, 3)
    left_right = np.stack([rgb[:, 0], rgb[:, width - 1]], axis=1).reshape(-1, 3)
    return np.concatenate([top_bottom, left_right])


def quantize(values: np.ndarray, step: int = QUANTIZE_STEP) -> np.ndarray:
    """Round each channel to the nearest multiple of step (halves round up)."""
    return (np.floor(values / step + 0.5) * step).astype(np.int32)


def detect_background_color(image: RasterImage) -> BackgroundColorSample | None:
    """Most frequent quantized border colour; ties go to the first one sampled."""
    if image.is_empty():
        return None

    buckets = Counter(tuple(int(c) for c in color) for color in quantize(border_samples(image)))
    # most_common keeps first-seen order among equal counts
    (r, g, b), count = buckets.most_common(1)[0]
    return BackgroundColorSample(r, g, b, count)


def remove_solid_background(image: RasterImage, tolerance: int = DEFAULT_TOLERANCE) -> RasterImage:
    """
    Make pixels close to the border colour transparent.

    A pixel is background when the sum of absolute RGB differences to the
    detected colour is below tolerance * 3. Other pixels keep their alpha.
    """
    bg = detect_background_color(image)
    if bg is None:
        return image

    diff = np.abs(image.rgb.astype(np.int32) - np.array(bg.rgb, dtype=np.int32)).sum(axis=2)
    alpha = np.where(diff < tolerance * 3, 0, image.alpha).astype(np.uint8)
    return image.with_alpha(alpha)
