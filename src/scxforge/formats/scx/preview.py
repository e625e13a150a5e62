"""
Preview bitmap <-> Pillow image conversion.

The embedded preview is a paletted bottom-up DIB; Pillow works top-down, so
rows are flipped and the 4-byte row padding is stripped on the way out.
"""

import logging
from pathlib import Path
from typing import Union

from PIL import Image

from .model import PALETTE_SIZE, Bitmap

logger = logging.getLogger(__name__)


def bitmap_to_image(bitmap: Bitmap) -> Image.Image:
    """Build a mode 'P' image from an embedded bitmap."""
    if bitmap.is_empty:
        raise ValueError("Scenario has no preview bitmap")

    stride = bitmap.row_stride
    rows = [bitmap.pixels[y * stride:y * stride + bitmap.width] for y in range(bitmap.height)]
    img = Image.frombytes('P', (bitmap.width, bitmap.height), b"".join(reversed(rows)))

    rgb = []
    for i in range(0, PALETTE_SIZE, 4):
        rgb.extend(bitmap.palette[i:i + 3])
    img.putpalette(rgb)
    return img


def image_to_bitmap(img: Image.Image, orientation: int = 1) -> Bitmap:
    """Quantize an image to 256 colours and pack it as an embedded bitmap."""
    if img.mode != 'P':
        img = img.convert('RGB').convert('P', palette=Image.Palette.ADAPTIVE, colors=256)
    width, height = img.size

    palette = bytearray(PALETTE_SIZE)
    rgb = (img.getpalette() or [])[:256 * 3]
    for i in range(len(rgb) // 3):
        palette[i * 4:i * 4 + 3] = bytes(rgb[i * 3:i * 3 + 3])

    stride = (width + 3) & ~3
    data = img.tobytes()
    rows = [data[y * width:(y + 1) * width].ljust(stride, b"\0") for y in range(height)]
    return Bitmap(width=width, height=height, orientation=orientation,
                  palette=bytes(palette), pixels=b"".join(reversed(rows)))


def export_png(bitmap: Bitmap, path: Union[str, Path]) -> Path:
    """Write the preview bitmap to a PNG file."""
    path = Path(path)
    bitmap_to_image(bitmap).save(path, format="PNG")
    logger.info(f"Exported {bitmap.width}x{bitmap.height} preview to {path}")
    return path
