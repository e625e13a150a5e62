"""
AI section - per-player AI flags and embedded AI scripts.

    u32 n, u8 use ai x n
    u32 file count, per file: u32-str filename, u32-str content
"""

import logging
from typing import TYPE_CHECKING

from ....errors import ValueOutOfRange
from ..edition import CapabilityTable
from ..model import AIFile, AIInfo
from .base import SectionCodec, register_section

if TYPE_CHECKING:
    from ..model import Scenario
    from ....utils.binary import IoBuffer

logger = logging.getLogger(__name__)


@register_section("ai")
class AICodec(SectionCodec):

    def read(self, io: 'IoBuffer', scenario: 'Scenario', caps: CapabilityTable):
        if not caps.supports_ai_info:
            scenario.ai_info = AIInfo()
            return

        count = io.read_uint32("use_ai")
        if count != scenario.header.player_count:
            raise ValueOutOfRange(count, f"one flag per player ({scenario.header.player_count})",
                                  section=self.name, field="use_ai")
        info = AIInfo(use_ai=[io.read_uint8("use_ai") != 0 for _ in range(count)])
        files = io.read_uint32("files")
        for _ in range(files):
            filename = io.read_prefixed_string(4, "filename")
            content = io.read_prefixed_string(4, "content")
            info.files.append(AIFile(filename, content))
        scenario.ai_info = info
        logger.debug(f"AI: {len(info.files)} files")

    def write(self, io: 'IoBuffer', scenario: 'Scenario', caps: CapabilityTable):
        info = scenario.ai_info
        if not caps.supports_ai_info:
            if not info.is_empty:
                self.skipped("AI info", scenario)
            return

        count = len(scenario.players)
        if len(info.use_ai) != count:
            raise ValueOutOfRange(len(info.use_ai), f"one flag per player ({count})",
                                  section=self.name, field="use_ai")
        io.write_uint32(count, "use_ai")
        for flag in info.use_ai:
            io.write_byte(1 if flag else 0)
        io.write_uint32(len(info.files), "files")
        for ai_file in info.files:
            io.write_prefixed_string(ai_file.filename, 4, "filename")
            io.write_prefixed_string(ai_file.content, 4, "content")
