"""
DIPLOMACY section - stances between players and global victory settings.

    per slot: u8 allied victory, u16 n, i8 stance x n
    victory:  i32 conquest, ruins, artifacts, discoveries, exploration, gold
              [i32 mode, score, time limit]
              [u8 lock teams]
"""

import logging
from typing import TYPE_CHECKING

from ....errors import ValueOutOfRange
from ..edition import CapabilityTable
from ..model import DiplomaticStance, VictorySettings
from .base import SectionCodec, register_section

if TYPE_CHECKING:
    from ..model import Scenario
    from ....utils.binary import IoBuffer

logger = logging.getLogger(__name__)

_VICTORY_FIELDS = ("conquest", "ruins", "artifacts", "discoveries", "exploration", "gold")
_EXTENDED_VICTORY_FIELDS = ("mode", "score", "time_limit")


@register_section("diplomacy")
class DiplomacyCodec(SectionCodec):

    def read(self, io: 'IoBuffer', scenario: 'Scenario', caps: CapabilityTable):
        count = scenario.header.player_count
        for slot, player in enumerate(scenario.players):
            player.allied_victory = io.read_uint8("allied_victory") != 0
            n = io.read_uint16("diplomacy")
            if n != count:
                raise ValueOutOfRange(n, f"one stance per player ({count})", section=self.name,
                                      field="diplomacy", index=slot)
            player.diplomacy = [self._stance(io.read_sbyte("diplomacy"), slot)
                                for _ in range(n)]

        victory = VictorySettings()
        for name in _VICTORY_FIELDS:
            setattr(victory, name, io.read_int32(name))
        if caps.extended_victory:
            for name in _EXTENDED_VICTORY_FIELDS:
                setattr(victory, name, io.read_int32(name))
        if caps.lock_teams:
            victory.lock_teams = io.read_uint8("lock_teams") != 0
        scenario.victory = victory

    def _stance(self, value: int, slot: int) -> DiplomaticStance:
        try:
            return DiplomaticStance(value)
        except ValueError:
            raise ValueOutOfRange(value, "stance 0, 1 or 3", section=self.name,
                                  field="diplomacy", index=slot) from None

    def write(self, io: 'IoBuffer', scenario: 'Scenario', caps: CapabilityTable):
        count = len(scenario.players)
        for slot, player in enumerate(scenario.players):
            if len(player.diplomacy) != count:
                raise ValueOutOfRange(len(player.diplomacy), f"one stance per player ({count})",
                                      section=self.name, field="diplomacy", index=slot)
            io.write_byte(1 if player.allied_victory else 0)
            io.write_uint16(count, "diplomacy")
            for stance in player.diplomacy:
                io.write_sbyte(int(self._stance(int(stance), slot)), "diplomacy")

        victory = scenario.victory
        for name in _VICTORY_FIELDS:
            io.write_int32(getattr(victory, name), name)

        if caps.extended_victory:
            for name in _EXTENDED_VICTORY_FIELDS:
                io.write_int32(self.required(getattr(victory, name), name, scenario), name)
        elif any(getattr(victory, name) is not None for name in _EXTENDED_VICTORY_FIELDS):
            self.skipped("victory mode, score and time limit", scenario)

        if caps.lock_teams:
            io.write_byte(1 if self.required(victory.lock_teams, "lock_teams", scenario) else 0)
        elif victory.lock_teams is not None:
            self.skipped("team locking", scenario)
