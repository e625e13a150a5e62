"""
HEADER section - uncompressed scenario header.

    u32 size of the remaining header
    u32 version
    u32 timestamp (unix seconds)
    description, u16 or u32 length prefix depending on edition
    u32 any single player victory
    u32 player count
    [dlc options]   u32 version (1000), i32 data set, u32 n, i32 x n packages
    [author name]   u32-prefixed string
"""

import logging
from typing import TYPE_CHECKING

from ....errors import ValueOutOfRange
from ....utils.binary import IoBuffer
from ..edition import CapabilityTable
from ..model import DataSet, DLCOptions, DLCPackage, Header
from .base import SectionCodec, register_section

if TYPE_CHECKING:
    from ..model import Scenario

logger = logging.getLogger(__name__)


def _enum_value(enum_cls, value: int, io: IoBuffer, field: str, index=None):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValueOutOfRange(value, f"valid {enum_cls.__name__}", section=io.section,
                              field=field, index=index) from None


@register_section("header")
class HeaderCodec(SectionCodec):
    """Codec for the header that precedes the compressed body."""

    def read(self, io: IoBuffer, scenario: 'Scenario', caps: CapabilityTable):
        size = io.read_uint32("size")
        body = IoBuffer.from_bytes(io.read_bytes(size, "header"))
        body.section = self.name

        header = Header()
        header.version = body.read_uint32("version")
        header.timestamp = body.read_uint32("timestamp")
        header.description = body.read_prefixed_string(caps.string_prefix_width, "description")
        header.any_sp_victory = body.read_bool32("any_sp_victory")
        header.player_count = body.read_uint32("player_count")
        if header.player_count > caps.max_players:
            raise ValueOutOfRange(header.player_count, f"at most {caps.max_players} players",
                                  section=self.name, field="player_count")

        if caps.dlc_options:
            header.dlc_options = self._read_dlc_options(body)
        if caps.author_name:
            header.author_name = body.read_prefixed_string(4, "author_name")

        if body.has_more:
            logger.warning(f"HEADER: {body.remaining} unread bytes at end of header")
        if header.version != caps.header_version:
            logger.debug(f"HEADER: version {header.version}, {scenario.edition} normally writes {caps.header_version}")
        logger.debug(f"HEADER: version={header.version}, players={header.player_count}")
        scenario.header = header

    def _read_dlc_options(self, io: IoBuffer) -> DLCOptions:
        # Files written before the structure was versioned start with the data set.
        version = io.read_int32("dlc_version")
        if version in (0, 1):
            data_set = version
            version = 0
        else:
            data_set = io.read_int32("dlc_data_set")
        options = DLCOptions(version=version,
                             data_set=_enum_value(DataSet, data_set, io, "dlc_data_set"))
        count = io.read_uint32("dlc_dependencies")
        io.require(count * 4, "dlc_dependencies")
        options.dependencies = [
            _enum_value(DLCPackage, io.read_int32("dlc_dependencies"), io, "dlc_dependencies", i)
            for i in range(count)
        ]
        return options

    def write(self, io: IoBuffer, scenario: 'Scenario', caps: CapabilityTable):
        header = scenario.header
        if header.player_count != len(scenario.players):
            raise ValueOutOfRange(header.player_count, f"must equal {len(scenario.players)} player slots",
                                  section=self.name, field="player_count")
        if header.player_count > caps.max_players:
            raise ValueOutOfRange(header.player_count, f"at most {caps.max_players} players",
                                  section=self.name, field="player_count")

        body = IoBuffer.writer()
        body.section = self.name
        body.write_uint32(header.version, "version")
        body.write_uint32(header.timestamp, "timestamp")
        body.write_prefixed_string(header.description, caps.string_prefix_width, "description")
        body.write_bool32(header.any_sp_victory)
        body.write_uint32(header.player_count, "player_count")

        if caps.dlc_options:
            self._write_dlc_options(body, self.required(header.dlc_options, "dlc_options", scenario))
        elif header.dlc_options is not None:
            self.skipped("DLC options", scenario)

        if caps.author_name:
            body.write_prefixed_string(self.required(header.author_name, "author_name", scenario),
                                       4, "author_name")
        elif header.author_name:
            self.skipped("an author name", scenario)

        data = body.getvalue()
        io.write_uint32(len(data), "size")
        io.write_bytes(data)

    def _write_dlc_options(self, io: IoBuffer, options: DLCOptions):
        if options.version != 0:
            io.write_int32(options.version, "dlc_version")
        io.write_int32(int(options.data_set), "dlc_data_set")
        io.write_uint32(len(options.dependencies), "dlc_dependencies")
        for package in options.dependencies:
            io.write_int32(int(package), "dlc_dependencies")
