"""Writing slices to disk and describing them in a frame pack."""

import base64
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path

from PIL import Image, ImageDraw

from .raster import Rectangle

APP_NAME = "Sprite Slicer Pro v1.0"

EXPORT_FORMATS = ("png", "webp", "jpeg", "svg")
EXTENSIONS = {"png": "png", "webp": "webp", "jpeg": "jpg", "svg": "svg"}

SLICE_BACKGROUNDS = {
    "transparent": (0, 0, 0, 0),
    "black": (0, 0, 0, 255),
    "white": (255, 255, 255, 255),
}


@dataclass(frozen=True)
class SliceRecord:
    name: str
    rect: Rectangle
    path: Path | None = None


def crop_slice(img: Image.Image, rect: Rectangle, background: str = "transparent") -> Image.Image:
    """Cut rect out of img onto a cell filled with the chosen background."""
    if background not in SLICE_BACKGROUNDS:
        raise ValueError(f"Unknown slice background {background!r}, expected one of {tuple(SLICE_BACKGROUNDS)}")

    cell = Image.new("RGBA", (rect.width, rect.height), SLICE_BACKGROUNDS[background])
    region = img.convert("RGBA").crop(rect.to_box())
    return Image.alpha_composite(cell, region)


def flatten_to_white(img: Image.Image) -> Image.Image:
    """Composite onto opaque white (JPEG has no alpha)."""
    rgba = img.convert("RGBA")
    flat = Image.new("RGB", rgba.size, (255, 255, 255))
    flat.paste(rgba, mask=rgba.getchannel("A"))
    return flat


def wrap_in_svg(img: Image.Image) -> str:
    """SVG document embedding img as a base64 PNG."""
    buf = BytesIO()
    img.save(buf, format="PNG")
    data_uri = "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")
    width, height = img.size
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<svg xmlns="http://www.w3.org/2000/svg"\n'
        '     xmlns:xlink="http://www.w3.org/1999/xlink"\n'
        f'     width="{width}"\n'
        f'     height="{height}"\n'
        f'     viewBox="0 0 {width} {height}">\n'
        f'  <image width="{width}" height="{height}" xlink:href="{data_uri}"/>\n'
        "</svg>\n"
    )


def save_image(img: Image.Image, stem: str | Path, fmt: str = "png", quality: int = 92) -> Path:
    """
    Save img as stem + the extension for fmt.

    Args:
        img: Image to write
        stem: Output path without extension
        fmt: One of png, webp, jpeg, svg
        quality: 0-100, used by webp and jpeg

    Returns:
        The path written
    """
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unknown export format {fmt!r}, expected one of {EXPORT_FORMATS}")

    stem = Path(stem)
    path = stem.with_name(f"{stem.name}.{EXTENSIONS[fmt]}")

    if fmt == "png":
        img.save(path, format="PNG")
    elif fmt == "webp":
        img.save(path, format="WEBP", quality=quality)
    elif fmt == "jpeg":
        flatten_to_white(img).save(path, format="JPEG", quality=quality)
    else:
        path.write_text(wrap_in_svg(img), encoding="utf-8")

    return path


def build_frame_pack(
    records: list[SliceRecord],
    source: str,
    size: tuple[int, int],
    generated: datetime | None = None,
) -> dict:
    """
    Frame pack JSON: written file name -> source rectangle, plus sheet metadata.

    Records without a path are keyed as PNG.
    """
    if generated is None:
        generated = datetime.now(timezone.utc)

    frames = {
        (record.path.name if record.path is not None else f"{record.name}.png"): {
            "x": record.rect.x,
            "y": record.rect.y,
            "w": record.rect.width,
            "h": record.rect.height,
        }
        for record in records
    }
    return {
        "frames": frames,
        "meta": {
            "source": source,
            "size": {"w": size[0], "h": size[1]},
            "generated": generated.isoformat(),
            "app": APP_NAME,
        },
    }


def write_frame_pack(pack: dict, path: str | Path) -> Path:
    path = Path(path)
    with path.open("w", encoding="utf-8") as f:
        json.dump(pack, f, indent=2)
    return path


def save_debug_grid(img: Image.Image, rects: list[Rectangle], output_path: str | Path) -> None:
    """Save a copy of the sheet with every slice rectangle outlined."""
    debug_img = img.copy().convert("RGBA")
    draw = ImageDraw.Draw(debug_img)

    for rect in rects:
        draw.rectangle([(rect.x, rect.y), (rect.right - 1, rect.bottom - 1)], outline=(255, 0, 255, 255))

    debug_img.save(output_path)
