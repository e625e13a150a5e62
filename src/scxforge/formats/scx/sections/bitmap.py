"""
BITMAP section - embedded preview image.

    u32 width, u32 height, u16 orientation
    if width and height are non-zero:
        256 x 4 byte palette, pixel rows padded to 4 bytes
"""

import logging
from typing import TYPE_CHECKING

from ....errors import ValueOutOfRange
from ..edition import CapabilityTable
from ..model import PALETTE_SIZE, Bitmap
from .base import SectionCodec, register_section

if TYPE_CHECKING:
    from ..model import Scenario
    from ....utils.binary import IoBuffer

logger = logging.getLogger(__name__)


@register_section("bitmap")
class BitmapCodec(SectionCodec):

    def read(self, io: 'IoBuffer', scenario: 'Scenario', caps: CapabilityTable):
        if not caps.supports_bitmap:
            scenario.bitmap = Bitmap()
            return

        bitmap = Bitmap(
            width=io.read_uint32("width"),
            height=io.read_uint32("height"),
            orientation=io.read_uint16("orientation"),
        )
        if not bitmap.is_empty:
            bitmap.palette = io.read_bytes(PALETTE_SIZE, "palette")
            bitmap.pixels = io.read_bytes(bitmap.pixel_size, "pixels")
            logger.debug(f"BITMAP: {bitmap.width}x{bitmap.height}")
        scenario.bitmap = bitmap

    def write(self, io: 'IoBuffer', scenario: 'Scenario', caps: CapabilityTable):
        bitmap = scenario.bitmap
        if not caps.supports_bitmap:
            if not bitmap.is_empty:
                self.skipped("a preview bitmap", scenario)
            return

        io.write_uint32(bitmap.width, "width")
        io.write_uint32(bitmap.height, "height")
        io.write_uint16(bitmap.orientation, "orientation")
        if bitmap.is_empty:
            return
        if len(bitmap.palette) != PALETTE_SIZE:
            raise ValueOutOfRange(len(bitmap.palette), f"{PALETTE_SIZE} palette bytes",
                                  section=self.name, field="palette")
        if len(bitmap.pixels) != bitmap.pixel_size:
            raise ValueOutOfRange(len(bitmap.pixels), f"{bitmap.pixel_size} pixel bytes",
                                  section=self.name, field="pixels")
        io.write_bytes(bytes(bitmap.palette))
        io.write_bytes(bytes(bitmap.pixels))
