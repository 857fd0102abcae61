"""Command-line interface for sprite-slicer."""

import argparse
from pathlib import Path

from .background import DEFAULT_TOLERANCE
from .core import slice_sprite_sheet
from .detection import ALPHA_THRESHOLD, DETECTION_METHODS
from .export import EXPORT_FORMATS, SLICE_BACKGROUNDS
from .grid import DEFAULT_GRID, GridSettings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Slice a sprite sheet into individual sprites by grid or by detected boundaries"
    )
    parser.add_argument("input", help="Input sprite sheet path")
    parser.add_argument("-o", "--output", help="Output directory (default: <input>_slices)")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress output")
    parser.add_argument("--debug", action="store_true", help="Save debug image with slice rectangles")

    grid = parser.add_argument_group("grid")
    grid.add_argument("--columns", type=int, default=DEFAULT_GRID.columns)
    grid.add_argument("--rows", type=int, default=DEFAULT_GRID.rows)
    grid.add_argument("--cell-width", type=int, default=DEFAULT_GRID.cell_width)
    grid.add_argument("--cell-height", type=int, default=DEFAULT_GRID.cell_height)
    grid.add_argument("--offset-x", type=int, default=0)
    grid.add_argument("--offset-y", type=int, default=0)
    grid.add_argument("--spacing-x", type=int, default=0)
    grid.add_argument("--spacing-y", type=int, default=0)
    grid.add_argument("--cells", nargs="+", metavar="COL-ROW", help="Only export these cells")

    detection = parser.add_argument_group("detection")
    detection.add_argument("--detect", action="store_true",
                           help="Detect sprites and slice by the suggested grid (keeps --spacing-*)")
    detection.add_argument("--method", choices=DETECTION_METHODS, default="projection")
    detection.add_argument("--boxes", action="store_true", help="With --detect, export each detected sprite box")
    detection.add_argument("--alpha-threshold", type=int, default=ALPHA_THRESHOLD)
    detection.add_argument("--remove-background", action="store_true",
                           help="Make the dominant border colour transparent before slicing")
    detection.add_argument("--tolerance", type=int, default=DEFAULT_TOLERANCE)

    output = parser.add_argument_group("output")
    output.add_argument("--format", choices=EXPORT_FORMATS, default="png")
    output.add_argument("--quality", type=int, default=92, help="Quality for webp/jpeg (0-100)")
    output.add_argument("--background", choices=tuple(SLICE_BACKGROUNDS), default="transparent",
                        help="Fill behind each slice")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Default output path
    if args.output is None:
        input_path = Path(args.input)
        args.output = input_path.parent / f"{input_path.stem}_slices"

    try:
        settings = GridSettings(
            columns=args.columns,
            rows=args.rows,
            cell_width=args.cell_width,
            cell_height=args.cell_height,
            offset_x=args.offset_x,
            offset_y=args.offset_y,
            spacing_x=args.spacing_x,
            spacing_y=args.spacing_y,
        )
        slice_sprite_sheet(
            args.input,
            args.output,
            settings=settings,
            detect=args.detect,
            method=args.method,
            boxes=args.boxes,
            cells=args.cells,
            alpha_threshold=args.alpha_threshold,
            remove_background=args.remove_background,
            tolerance=args.tolerance,
            fmt=args.format,
            quality=args.quality,
            slice_background=args.background,
            verbose=not args.quiet,
            debug=args.debug,
        )
    except (ValueError, OSError) as e:
        parser.error(str(e))


if __name__ == "__main__":
    main()
