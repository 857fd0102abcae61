"""
Immutable RGBA raster used by every detection and slicing routine.

Pixels are stored as a read-only (height, width, 4) uint8 numpy array,
origin top-left, row-major. Transforms never touch the buffer in place;
they copy it and wrap the result in a new RasterImage.
"""

from dataclasses import dataclass

import numpy as np
from PIL import Image


class InvalidInputError(ValueError):
    """Malformed image or grid input (negative size, wrong buffer length)."""


class PixelIndexError(IndexError):
    """Pixel access outside the image bounds."""


@dataclass(frozen=True)
class Rectangle:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def to_box(self) -> tuple[int, int, int, int]:
        """(left, upper, right, lower) as expected by PIL.Image.crop."""
        return (self.x, self.y, self.right, self.bottom)


class RasterImage:
    """Width x height grid of RGBA samples."""

    def __init__(self, pixels: np.ndarray):
        pixels = np.asarray(pixels)
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise InvalidInputError(f"Expected (height, width, 4) RGBA array, got shape {pixels.shape}")
        if pixels.dtype != np.uint8:
            out_of_range = pixels.size > 0 and (pixels.min() < 0 or pixels.max() > 255)
            if pixels.dtype == np.bool_ or not np.issubdtype(pixels.dtype, np.integer) or out_of_range:
                raise InvalidInputError(f"RGBA samples must be integers in 0-255, got {pixels.dtype} array")
        # Always copy so callers can't mutate our buffer through their reference
        pixels = np.array(pixels, dtype=np.uint8, copy=True)
        pixels.flags.writeable = False
        self._pixels = pixels

    @classmethod
    def from_buffer(cls, width: int, height: int, data: bytes | bytearray | np.ndarray) -> "RasterImage":
        """Build from a flat RGBA byte buffer (4 bytes per pixel, row-major)."""
        if width < 0 or height < 0:
            raise InvalidInputError(f"Image dimensions must be non-negative, got {width}x{height}")
        flat = np.frombuffer(bytes(data), dtype=np.uint8) if not isinstance(data, np.ndarray) else data.ravel()
        expected = width * height * 4
        if flat.size != expected:
            raise InvalidInputError(f"Buffer holds {flat.size} bytes, expected {expected} for {width}x{height} RGBA")
        return cls(flat.reshape(height, width, 4))

    @classmethod
    def blank(cls, width: int, height: int, color: tuple[int, int, int, int] = (0, 0, 0, 0)) -> "RasterImage":
        if width < 0 or height < 0:
            raise InvalidInputError(f"Image dimensions must be non-negative, got {width}x{height}")
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[:, :] = color
        return cls(pixels)

    @classmethod
    def from_pil(cls, img: Image.Image) -> "RasterImage":
        if img.mode != "RGBA":
            img = img.convert("RGBA")
        return cls(np.array(img))

    def to_pil(self) -> Image.Image:
        return Image.fromarray(np.array(self._pixels))

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def pixels(self) -> np.ndarray:
        """Read-only view of the underlying (height, width, 4) array."""
        return self._pixels

    @property
    def alpha(self) -> np.ndarray:
        return self._pixels[:, :, 3]

    @property
    def rgb(self) -> np.ndarray:
        return self._pixels[:, :, :3]

    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def _check(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise PixelIndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} image")

    def alpha_at(self, x: int, y: int) -> int:
        self._check(x, y)
        return int(self._pixels[y, x, 3])

    def rgb_at(self, x: int, y: int) -> tuple[int, int, int]:
        self._check(x, y)
        r, g, b = self._pixels[y, x, :3]
        return int(r), int(g), int(b)

    def rgba_at(self, x: int, y: int) -> tuple[int, int, int, int]:
        self._check(x, y)
        r, g, b, a = self._pixels[y, x]
        return int(r), int(g), int(b), int(a)

    def with_alpha(self, alpha: np.ndarray) -> "RasterImage":
        """Copy of this image with the alpha channel replaced."""
        pixels = np.array(self._pixels)
        pixels[:, :, 3] = alpha
        return RasterImage(pixels)

    def crop(self, rect: Rectangle) -> "RasterImage":
        if rect.x < 0 or rect.y < 0 or rect.right > self.width or rect.bottom > self.height:
            raise PixelIndexError(f"{rect} outside {self.width}x{self.height} image")
        return RasterImage(self._pixels[rect.y:rect.bottom, rect.x:rect.right])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RasterImage):
            return NotImplemented
        return self._pixels.shape == other._pixels.shape and bool(np.array_equal(self._pixels, other._pixels))

    def __repr__(self) -> str:
        return f"RasterImage({self.width}x{self.height})"
