"""Grid settings and the cell rectangles they describe."""

import numbers
from dataclasses import dataclass, fields, replace
from typing import Iterator

from .raster import InvalidInputError, Rectangle


@dataclass(frozen=True)
class GridSettings:
    columns: int
    rows: int
    cell_width: int
    cell_height: int
    offset_x: int = 0
    offset_y: int = 0
    spacing_x: int = 0
    spacing_y: int = 0

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value < 0:
                raise InvalidInputError(f"{f.name} must be a non-negative integer, got {value!r}")
        if self.columns < 1 or self.rows < 1:
            raise InvalidInputError(f"Grid needs at least one column and row, got {self.columns}x{self.rows}")

    def cell_origin(self, row: int, col: int) -> tuple[int, int]:
        x = self.offset_x + col * (self.cell_width + self.spacing_x)
        y = self.offset_y + row * (self.cell_height + self.spacing_y)
        return x, y


DEFAULT_GRID = GridSettings(columns=4, rows=4, cell_width=32, cell_height=32)


def apply_suggested_grid(current: GridSettings, suggested: GridSettings) -> GridSettings:
    """Take layout and cell size from a detection suggestion, keep the current spacing."""
    return replace(
        current,
        columns=suggested.columns,
        rows=suggested.rows,
        cell_width=suggested.cell_width,
        cell_height=suggested.cell_height,
        offset_x=suggested.offset_x,
        offset_y=suggested.offset_y,
    )


def iter_cells(image_width: int, image_height: int, settings: GridSettings) -> Iterator[tuple[int, int, Rectangle]]:
    """
    Yield (row, col, rect) for every grid cell that overlaps the image, row-major.

    Cells running past the right/bottom edge are clamped to the image; cells
    starting at or past it are skipped.
    """
    if image_width < 0 or image_height < 0:
        raise InvalidInputError(f"Image dimensions must be non-negative, got {image_width}x{image_height}")

    for row in range(settings.rows):
        for col in range(settings.columns):
            x, y = settings.cell_origin(row, col)
            if x >= image_width or y >= image_height:
                continue
            width = min(settings.cell_width, image_width - x)
            height = min(settings.cell_height, image_height - y)
            if width <= 0 or height <= 0:
                continue
            yield row, col, Rectangle(x, y, width, height)


def slice_grid(image_width: int, image_height: int, settings: GridSettings) -> list[Rectangle]:
    return [rect for _, _, rect in iter_cells(image_width, image_height, settings)]


# Selections in the editor address cells as "col-row"


def cell_key(col: int, row: int) -> str:
    return f"{col}-{row}"


def parse_cell_key(key: str) -> tuple[int, int]:
    """(col, row) from a "col-row" key."""
    try:
        col, row = (int(part) for part in key.split("-"))
    except ValueError:
        raise InvalidInputError(f"Malformed cell key {key!r}, expected 'col-row'") from None
    return col, row


def all_cell_keys(settings: GridSettings) -> list[str]:
    return [cell_key(col, row) for row in range(settings.rows) for col in range(settings.columns)]


def sort_cell_keys(keys, settings: GridSettings) -> list[str]:
    """Order cell keys row-major (reading order)."""

    def index(key: str) -> int:
        col, row = parse_cell_key(key)
        return row * settings.columns + col

    return sorted(set(keys), key=index)


def slice_name(base_name: str, row: int, col: int) -> str:
    return f"{base_name}_slice_{row + 1}-{col + 1}"


def slice_selected(
    image_width: int,
    image_height: int,
    settings: GridSettings,
    keys,
) -> list[tuple[str, Rectangle]]:
    """
    Rectangles for the selected cells, in reading order, keyed by cell.

    Selected cells that fall outside the image are dropped.
    """
    wanted = set(sort_cell_keys(keys, settings))
    return [
        (cell_key(col, row), rect)
        for row, col, rect in iter_cells(image_width, image_height, settings)
        if cell_key(col, row) in wanted
    ]
