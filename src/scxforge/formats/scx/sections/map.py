"""
MAP section - terrain grid.

    u32 width, u32 height
    per tile, row-major: u8 terrain, u8 elevation, layer, u8 overlay

The layer field is one byte wide before the definitive edition and two bytes
wide from it on.
"""

import logging
import struct
from typing import TYPE_CHECKING

from ....errors import ValueOutOfRange
from ..edition import CapabilityTable
from ..model import Tile, TileGrid
from .base import SectionCodec, register_section

if TYPE_CHECKING:
    from ..model import Scenario
    from ....utils.binary import IoBuffer

logger = logging.getLogger(__name__)

_TILE_FORMATS = {1: struct.Struct("<BBBB"), 2: struct.Struct("<BBHB")}


def layer_limit(width: int) -> int:
    return (1 << (8 * width)) - 1


def check_layers(grid: TileGrid, width: int):
    """Fail on the first tile whose layer does not fit `width` bytes."""
    limit = layer_limit(width)
    for i, tile in enumerate(grid.tiles):
        if not 0 <= tile.layer <= limit:
            raise ValueOutOfRange(tile.layer, f"0..{limit}", section="map", field="layer", index=i)


@register_section("map")
class MapCodec(SectionCodec):

    def read(self, io: 'IoBuffer', scenario: 'Scenario', caps: CapabilityTable):
        width = io.read_uint32("width")
        height = io.read_uint32("height")
        tile_format = _TILE_FORMATS[caps.tile_layer_width]
        count = width * height
        io.require(count * tile_format.size, "tiles")

        data = io.read_bytes(count * tile_format.size, "tiles")
        tiles = [Tile(terrain, elevation, layer, overlay)
                 for terrain, elevation, layer, overlay in tile_format.iter_unpack(data)]
        scenario.map = TileGrid(width, height, tiles)
        logger.debug(f"MAP: {width}x{height} tiles")

    def write(self, io: 'IoBuffer', scenario: 'Scenario', caps: CapabilityTable):
        grid = scenario.map
        if len(grid.tiles) != grid.width * grid.height:
            raise ValueOutOfRange(len(grid.tiles), f"{grid.width}x{grid.height} tiles",
                                  section=self.name, field="tiles")
        io.write_uint32(grid.width, "width")
        io.write_uint32(grid.height, "height")

        width = caps.tile_layer_width
        for i, tile in enumerate(grid.tiles):
            io.write_uint(tile.terrain, 1, "terrain", i)
            io.write_uint(tile.elevation, 1, "elevation", i)
            io.write_uint(tile.layer, width, "layer", i)
            io.write_uint(tile.overlay, 1, "overlay", i)
