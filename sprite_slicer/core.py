"""
Slice a sprite sheet into individual sprite images.

The sheet is cut either by explicit grid settings or by a grid suggested from
the sheet's own transparency (sprites separated by fully transparent rows and
columns). Each slice is written as an image, and a JSON frame pack records
where every slice came from in the sheet.
"""

from pathlib import Path

from PIL import Image

from .background import DEFAULT_TOLERANCE, detect_background_color, remove_solid_background
from .detection import ALPHA_THRESHOLD, detect_sprite_boundaries
from .export import SliceRecord, build_frame_pack, crop_slice, save_debug_grid, save_image, write_frame_pack
from .grid import (
    DEFAULT_GRID,
    GridSettings,
    all_cell_keys,
    apply_suggested_grid,
    parse_cell_key,
    slice_name,
    slice_selected,
)
from .raster import RasterImage


def slice_sprite_sheet(
    input_path: str | Path,
    output_dir: str | Path | None = None,
    settings: GridSettings | None = None,
    detect: bool = False,
    method: str = "projection",
    boxes: bool = False,
    cells: list[str] | None = None,
    alpha_threshold: int = ALPHA_THRESHOLD,
    remove_background: bool = False,
    tolerance: int = DEFAULT_TOLERANCE,
    fmt: str = "png",
    quality: int = 92,
    slice_background: str = "transparent",
    verbose: bool = True,
    debug: bool = False,
) -> list[SliceRecord]:
    """
    Slice a sprite sheet and write the slices plus a frame pack.

    Args:
        input_path: Path to the sprite sheet
        output_dir: Where to write slices (default: <input stem>_slices next to the input)
        settings: Grid to slice by; the default grid if omitted and not detecting
        detect: Detect sprites and slice by the suggested grid (spacing kept from settings)
        method: Detection method, "projection" or "components"
        boxes: Export each detected sprite box instead of grid cells (needs detect, not cells)
        cells: Only export these "col-row" cells
        alpha_threshold: Alpha values above this count as sprite content
        remove_background: Make the dominant border colour transparent first
        tolerance: Background colour tolerance
        fmt: Output format (png, webp, jpeg, svg)
        quality: Quality for lossy formats
        slice_background: Fill behind each slice (transparent, black, white)
        verbose: Print progress info
        debug: Save the sheet with slice rectangles outlined

    Returns:
        One record per written slice, in reading order
    """
    if boxes and not detect:
        raise ValueError("--boxes requires --detect")
    if boxes and cells is not None:
        raise ValueError("--cells selects grid cells and can't be combined with --boxes")

    input_path = Path(input_path)
    if output_dir is None:
        output_dir = input_path.parent / f"{input_path.stem}_slices"
    output_dir = Path(output_dir)

    with Image.open(input_path) as src:
        img = src.convert("RGBA")
    raster = RasterImage.from_pil(img)

    if verbose:
        print(f"Input image: {raster.width}x{raster.height}")

    if remove_background:
        bg = detect_background_color(raster)
        raster = remove_solid_background(raster, tolerance)
        img = raster.to_pil()
        if verbose and bg is not None:
            print(f"Removed background #{min(bg.r, 255):02x}{min(bg.g, 255):02x}{min(bg.b, 255):02x} "
                  f"({bg.count} border samples, tolerance {tolerance})")

    if settings is None:
        settings = DEFAULT_GRID

    named_rects = []
    if detect:
        def progress(percent: int, message: str) -> None:
            print(f"  {percent:3d}% {message}")

        result = detect_sprite_boundaries(
            raster,
            on_progress=progress if verbose else None,
            alpha_threshold=alpha_threshold,
            method=method,
        )
        if result.suggested_grid is None:
            if verbose:
                print("No sprites detected (is the background transparent?)")
            return []

        settings = apply_suggested_grid(settings, result.suggested_grid)
        if verbose:
            print(f"Detected {len(result.sprites)} sprites in "
                  f"{settings.columns}x{settings.rows} grid "
                  f"(cell {settings.cell_width}x{settings.cell_height}, "
                  f"offset {settings.offset_x},{settings.offset_y})")

        if boxes:
            named_rects = [
                (f"{input_path.stem}_sprite_{i + 1}", sprite.rect)
                for i, sprite in enumerate(result.sprites)
            ]

    if not named_rects:
        keys = cells if cells is not None else all_cell_keys(settings)
        for key, rect in slice_selected(raster.width, raster.height, settings, keys):
            col, row = parse_cell_key(key)
            named_rects.append((slice_name(input_path.stem, row, col), rect))

    if verbose:
        print(f"Slicing {len(named_rects)} cells")

    if not named_rects:
        return []

    output_dir.mkdir(parents=True, exist_ok=True)

    records = []
    for name, rect in named_rects:
        sprite = crop_slice(img, rect, slice_background)
        path = save_image(sprite, output_dir / name, fmt=fmt, quality=quality)
        records.append(SliceRecord(name=name, rect=rect, path=path))

    pack = build_frame_pack(records, source=input_path.name, size=raster.size)
    pack_path = write_frame_pack(pack, output_dir / f"{input_path.stem}.json")

    if debug:
        debug_path = output_dir / f"{input_path.stem}_grid.png"
        save_debug_grid(img, [rect for _, rect in named_rects], debug_path)
        if verbose:
            print(f"Debug grid saved to: {debug_path}")

    if verbose:
        print(f"Saved {len(records)} slices to: {output_dir}")
        print(f"Frame pack: {pack_path}")

    return records
