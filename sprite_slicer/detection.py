"""
Sprite boundary detection for sprite sheets with transparent backgrounds.

The default detector projects alpha occupancy onto both axes, splits each
projection into runs of occupied columns/rows, and accepts every
(row run, column run) intersection that actually holds content. A uniform
grid is then inferred from where the detected sprites start.
"""

import math
from dataclasses import dataclass, field
from typing import Callable

import numpy as np
from scipy import ndimage

from .grid import GridSettings
from .raster import RasterImage, Rectangle

ALPHA_THRESHOLD = 10  # Pixels with alpha at or below this count as transparent
POSITION_TOLERANCE = 5  # Sprite starts closer than this share a grid row/column

ProgressCallback = Callable[[int, str], None]


@dataclass(frozen=True)
class RunInterval:
    start: int
    end: int  # inclusive

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Run start {self.start} is after end {self.end}")

    @property
    def length(self) -> int:
        return self.end - self.start + 1


@dataclass(frozen=True)
class DetectedSprite:
    rect: Rectangle
    # Which runs produced this box; None when found by component labelling
    row_run: RunInterval | None = field(default=None, compare=False)
    column_run: RunInterval | None = field(default=None, compare=False)

    @property
    def x(self) -> int:
        return self.rect.x

    @property
    def y(self) -> int:
        return self.rect.y

    @property
    def width(self) -> int:
        return self.rect.width

    @property
    def height(self) -> int:
        return self.rect.height


@dataclass(frozen=True)
class DetectionResult:
    sprites: list[DetectedSprite]
    suggested_grid: GridSettings | None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def content_mask(image: RasterImage, alpha_threshold: int = ALPHA_THRESHOLD) -> np.ndarray:
    """Boolean (height, width) mask of pixels with alpha above the threshold."""
    return image.alpha > alpha_threshold


def project_axes(image: RasterImage, alpha_threshold: int = ALPHA_THRESHOLD) -> tuple[np.ndarray, np.ndarray]:
    """
    Project alpha occupancy onto the X and Y axes.

    Returns:
        (column_has_content, row_has_content), boolean arrays of length
        width and height respectively.
    """
    mask = content_mask(image, alpha_threshold)
    return mask.any(axis=0), mask.any(axis=1)


def find_runs(flags) -> list[RunInterval]:
    """Maximal runs of consecutive True values, in scan order."""
    runs = []
    in_run = False
    start = 0

    for i, flag in enumerate(flags):
        if flag and not in_run:
            in_run = True
            start = i
        elif not flag and in_run:
            in_run = False
            runs.append(RunInterval(start, i - 1))

    # A run touching the end of the axis still counts
    if in_run:
        runs.append(RunInterval(start, len(flags) - 1))

    return runs


def build_boundary_grid(
    image: RasterImage,
    row_runs: list[RunInterval],
    column_runs: list[RunInterval],
    alpha_threshold: int = ALPHA_THRESHOLD,
) -> list[DetectedSprite]:
    """
    Turn every (row run, column run) pair into a candidate box and keep the
    ones that contain at least one opaque pixel.

    Row and column runs can cross over empty space when sprites are not laid
    out on a full grid (L-shapes, diagonals), so each candidate is checked.
    """
    mask = content_mask(image, alpha_threshold)
    sprites = []

    for row in row_runs:
        for col in column_runs:
            if not mask[row.start:row.end + 1, col.start:col.end + 1].any():
                continue
            rect = Rectangle(x=col.start, y=row.start, width=col.length, height=row.length)
            sprites.append(DetectedSprite(rect, row_run=row, column_run=col))

    return sprites


def find_connected_sprites(image: RasterImage, alpha_threshold: int = ALPHA_THRESHOLD) -> list[DetectedSprite]:
    """
    Bounding boxes of 4-connected opaque regions.

    Handles layouts where sprites overlap on both axes, at the cost of
    splitting sprites made of disjoint parts. Boxes are ordered by their
    top-left corner (row first).
    """
    mask = content_mask(image, alpha_threshold)
    if not mask.any():
        return []

    labeled, _ = ndimage.label(mask)
    sprites = []
    for slice_obj in ndimage.find_objects(labeled):
        if slice_obj is None:
            continue
        y_slice, x_slice = slice_obj
        rect = Rectangle(
            x=x_slice.start,
            y=y_slice.start,
            width=x_slice.stop - x_slice.start,
            height=y_slice.stop - y_slice.start,
        )
        sprites.append(DetectedSprite(rect))

    sprites.sort(key=lambda s: (s.y, s.x))
    return sprites


def merge_nearby_positions(positions: list[int], tolerance: int = POSITION_TOLERANCE) -> list[int]:
    """
    Collapse sorted positions that sit within tolerance of the last kept one.

    Each kept position absorbs the positions after it up to tolerance away.
    Distance to the immediate predecessor plays no part: in 0, 4, 8 with
    tolerance 5, 4 merges into 0 but 8 starts a new group.
    """
    if not positions:
        return []

    merged = [positions[0]]
    for pos in positions[1:]:
        if pos - merged[-1] > tolerance:
            merged.append(pos)

    return merged


def infer_grid(
    sprites: list[DetectedSprite],
    image_width: int,
    image_height: int,
    tolerance: int = POSITION_TOLERANCE,
) -> GridSettings | None:
    """Suggest grid settings that fit the detected sprites, or None if there are none."""
    if not sprites:
        return None

    row_positions = sorted({s.y for s in sprites})
    col_positions = sorted({s.x for s in sprites})

    rows = len(merge_nearby_positions(row_positions, tolerance))
    columns = len(merge_nearby_positions(col_positions, tolerance))

    avg_width = _round_half_up(sum(s.width for s in sprites) / len(sprites))
    avg_height = _round_half_up(sum(s.height for s in sprites) / len(sprites))

    # Offset is the raw top-left-most start, not a cluster value
    offset_x = min((s.x for s in sprites), default=image_width)
    offset_y = min((s.y for s in sprites), default=image_height)

    return GridSettings(
        columns=max(1, columns),
        rows=max(1, rows),
        cell_width=avg_width,
        cell_height=avg_height,
        offset_x=offset_x,
        offset_y=offset_y,
    )


DETECTION_METHODS = ("projection", "components")


def detect_sprite_boundaries(
    image: RasterImage,
    on_progress: ProgressCallback | None = None,
    alpha_threshold: int = ALPHA_THRESHOLD,
    method: str = "projection",
    tolerance: int = POSITION_TOLERANCE,
) -> DetectionResult:
    """
    Detect individual sprites and suggest a grid for them.

    Args:
        image: Sheet to analyze
        on_progress: Called with (percent, message) at each pipeline milestone
        alpha_threshold: Alpha values above this count as content
        method: "projection" (row/column runs) or "components" (connected regions)
        tolerance: Max distance between sprite starts sharing a grid row/column

    Returns:
        DetectionResult; empty sprites and no grid when nothing is opaque
    """
    if method not in DETECTION_METHODS:
        raise ValueError(f"Unknown detection method {method!r}, expected one of {DETECTION_METHODS}")

    def report(progress: int, message: str) -> None:
        if on_progress is not None:
            on_progress(progress, message)

    report(10, "Loading image...")
    report(20, "Analyzing pixel data...")
    report(40, "Detecting sprite boundaries...")

    if image.is_empty():
        sprites = []
    elif method == "components":
        sprites = find_connected_sprites(image, alpha_threshold)
    else:
        column_has_content, row_has_content = project_axes(image, alpha_threshold)
        sprites = build_boundary_grid(
            image,
            find_runs(row_has_content),
            find_runs(column_has_content),
            alpha_threshold,
        )

    report(70, "Calculating optimal grid...")
    suggested_grid = infer_grid(sprites, image.width, image.height, tolerance)

    report(100, "Detection complete!")
    return DetectionResult(sprites=sprites, suggested_grid=suggested_grid)


def has_transparency(image: RasterImage) -> bool:
    """True if any pixel is not fully opaque."""
    return bool((image.alpha < 255).any())
