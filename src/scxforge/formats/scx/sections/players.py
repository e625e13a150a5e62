"""
PLAYERS section - one record per player slot.

    name            256-byte buffer (early editions) or u16-prefixed string
    i32 civilization, u32 active, u32 human
    i32 gold, wood, food, stone, [i32 ore, goods]
    [i32 color]
    u32 object count, then per object:
        f32 x, y, z, i32 id, u16 type, u8 state, f32 angle,
        [i16 frame, i32 garrisoned in]
"""

import logging
from typing import TYPE_CHECKING

from ..edition import PLAYER_NAME_BUFFER, CapabilityTable
from ..model import PlayerRecord, Resources, ScenarioObject
from .base import SectionCodec, register_section

if TYPE_CHECKING:
    from ..model import Scenario
    from ....utils.binary import IoBuffer

logger = logging.getLogger(__name__)

# Bytes per object without and with the frame/garrison extension.
_OBJECT_SIZE = 23
_OBJECT_EXTENSION_SIZE = 6


@register_section("players")
class PlayersCodec(SectionCodec):

    def read(self, io: 'IoBuffer', scenario: 'Scenario', caps: CapabilityTable):
        scenario.players = [self._read_player(io, caps)
                            for _ in range(scenario.header.player_count)]
        logger.debug(f"PLAYERS: {len(scenario.players)} slots, {scenario.object_count} objects")

    def _read_player(self, io: 'IoBuffer', caps: CapabilityTable) -> PlayerRecord:
        player = PlayerRecord()
        if caps.fixed_player_names:
            player.name = io.read_cstring(PLAYER_NAME_BUFFER, "name")
        else:
            player.name = io.read_pascal_string("name")
        player.civilization = io.read_int32("civilization")
        player.active = io.read_bool32("active")
        player.human = io.read_bool32("human")

        res = Resources(
            gold=io.read_int32("gold"),
            wood=io.read_int32("wood"),
            food=io.read_int32("food"),
            stone=io.read_int32("stone"),
        )
        if caps.extended_resources:
            res.ore = io.read_int32("ore")
            res.goods = io.read_int32("goods")
        player.resources = res

        if caps.player_colors:
            player.color = io.read_int32("color")

        count = io.read_uint32("objects")
        object_size = _OBJECT_SIZE + (_OBJECT_EXTENSION_SIZE if caps.object_extensions else 0)
        io.require(count * object_size, "objects")
        player.objects = [self._read_object(io, caps) for _ in range(count)]
        return player

    def _read_object(self, io: 'IoBuffer', caps: CapabilityTable) -> ScenarioObject:
        obj = ScenarioObject(
            x=io.read_float("x"),
            y=io.read_float("y"),
            z=io.read_float("z"),
            object_id=io.read_int32("object_id"),
            object_type=io.read_uint16("object_type"),
            state=io.read_uint8("state"),
            angle=io.read_float("angle"),
        )
        if caps.object_extensions:
            obj.frame = io.read_int16("frame")
            obj.garrisoned_in = io.read_int32("garrisoned_in")
        return obj

    def write(self, io: 'IoBuffer', scenario: 'Scenario', caps: CapabilityTable):
        skipped = set()
        for player in scenario.players:
            self._write_player(io, scenario, caps, player, skipped)
        for what in sorted(skipped):
            self.skipped(what, scenario)

    def _write_player(self, io: 'IoBuffer', scenario: 'Scenario', caps: CapabilityTable,
                      player: PlayerRecord, skipped: set):
        if caps.fixed_player_names:
            io.write_cstring(player.name, PLAYER_NAME_BUFFER, "name")
        else:
            io.write_pascal_string(player.name, "name")
        io.write_int32(player.civilization, "civilization")
        io.write_bool32(player.active)
        io.write_bool32(player.human)

        res = player.resources
        io.write_int32(res.gold, "gold")
        io.write_int32(res.wood, "wood")
        io.write_int32(res.food, "food")
        io.write_int32(res.stone, "stone")
        if caps.extended_resources:
            io.write_int32(self.required(res.ore, "ore", scenario), "ore")
            io.write_int32(self.required(res.goods, "goods", scenario), "goods")
        elif res.ore is not None or res.goods is not None:
            skipped.add("ore and goods")

        if caps.player_colors:
            io.write_int32(self.required(player.color, "color", scenario), "color")
        elif player.color is not None:
            skipped.add("player colors")

        io.write_uint32(len(player.objects), "objects")
        for i, obj in enumerate(player.objects):
            io.write_float(obj.x, "x", i)
            io.write_float(obj.y, "y", i)
            io.write_float(obj.z, "z", i)
            io.write_int(obj.object_id, 4, "object_id", i)
            io.write_uint(obj.object_type, 2, "object_type", i)
            io.write_uint(obj.state, 1, "state", i)
            io.write_float(obj.angle, "angle", i)
            if caps.object_extensions:
                io.write_int(self.required(obj.frame, "frame", scenario), 2, "frame", i)
                io.write_int(self.required(obj.garrisoned_in, "garrisoned_in", scenario), 4,
                             "garrisoned_in", i)
            elif obj.frame is not None or obj.garrisoned_in is not None:
                skipped.add("object frames and garrisons")
