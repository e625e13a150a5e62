"""
Conversion Engine

Moves a scenario aggregate from its edition to another one:

1. same edition: the aggregate itself is returned, nothing is copied
2. everything else happens on a deep copy, so a failure leaves the input
   untouched
3. player slots are padded or cut to the target bound; cutting an active
   slot is an error
4. sections the target cannot hold are cleared, with a LossyConversion
   note when they had content
5. edition-specific fields are synthesized with defaults or cleared
6. values that would not fit the target's narrower fields are rejected
7. header version and edition are set to the target's

The result always encodes cleanly in the target edition.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..errors import InvalidString, LossyConversion, PlayerCountExceeded, StringTooLong
from ..formats.scx.edition import PLAYER_NAME_BUFFER, CapabilityTable, Edition, capabilities
from ..formats.scx.model import (
    AIInfo, Bitmap, DiplomaticStance, DLCOptions, PlayerRecord, Resources, Scenario,
)
from ..formats.scx.sections.map import check_layers
from ..formats.scx.sections.triggers import SHORT_DESCRIPTION_VERSION
from ..utils.binary import TEXT_ENCODING, prefix_limit

logger = logging.getLogger(__name__)

# Defaults for fields that only exist in some editions.
DEFAULT_ORE = 100
DEFAULT_GOODS = 0
DEFAULT_FRAME = 0
NOT_GARRISONED = -1


@dataclass
class ConversionResult:
    """Converted scenario plus advisory notes about dropped content."""
    scenario: Scenario
    notes: List[LossyConversion] = field(default_factory=list)
    source: Optional[Edition] = None
    target: Optional[Edition] = None

    @property
    def lossy(self) -> bool:
        return bool(self.notes)


class _Notes:
    """Collects one note per dropped section or field."""

    def __init__(self):
        self.notes: List[LossyConversion] = []
        self._seen = set()

    def add(self, section: str, detail: str = ""):
        key = (section, detail)
        if key not in self._seen:
            self._seen.add(key)
            self.notes.append(LossyConversion(section, detail))
            logger.debug(f"Lossy: {section} {detail}")


def convert(scenario: Scenario, target: Edition) -> ConversionResult:
    """Convert `scenario` to `target`. The input aggregate is never modified."""
    source = scenario.edition
    if source == target:
        return ConversionResult(scenario, [], source, target)

    logger.info(f"Converting scenario {source} -> {target}")
    result = copy.deepcopy(scenario)
    notes = _Notes()
    caps = capabilities(target)

    _resize_players(result, caps)
    _convert_sections(result, caps, notes)
    _convert_header(result, caps, notes)
    _convert_players(result, caps, notes)
    _convert_victory(result, caps, notes)
    _convert_triggers(result, caps, notes)
    _check_narrowing(result, caps)

    result.header.version = caps.header_version
    result.edition = target
    return ConversionResult(result, notes.notes, source, target)


def _blank_slot(index: int, count: int) -> PlayerRecord:
    return PlayerRecord(
        name=f"Player {index + 1}",
        active=False,
        diplomacy=[DiplomaticStance.NEUTRAL] * count,
        resources=Resources(),
    )


def _resize_players(scenario: Scenario, caps: CapabilityTable):
    players = scenario.players
    source_max = capabilities(scenario.edition).max_players
    limit = caps.max_players

    if len(players) > limit:
        for slot in range(limit, len(players)):
            if players[slot].active:
                raise PlayerCountExceeded(slot, limit)
        logger.debug(f"Cutting {len(players) - limit} inactive player slots")
        del players[limit:]
    elif limit > source_max:
        while len(players) < limit:
            players.append(_blank_slot(len(players), limit))

    count = len(players)
    for player in players:
        if len(player.diplomacy) > count:
            del player.diplomacy[count:]
        else:
            player.diplomacy.extend([DiplomaticStance.NEUTRAL] * (count - len(player.diplomacy)))
    scenario.header.player_count = count


def _convert_sections(scenario: Scenario, caps: CapabilityTable, notes: _Notes):
    count = len(scenario.players)

    if not caps.supports_triggers and scenario.triggers:
        notes.add("triggers", f"{len(scenario.triggers)} triggers dropped")
    if not caps.supports_triggers:
        scenario.triggers = []

    if caps.supports_ai_info:
        use_ai = scenario.ai_info.use_ai
        if len(use_ai) > count:
            del use_ai[count:]
        else:
            use_ai.extend([False] * (count - len(use_ai)))
    else:
        if not scenario.ai_info.is_empty:
            notes.add("ai_info", f"{len(scenario.ai_info.files)} AI files dropped")
        scenario.ai_info = AIInfo()

    if not caps.supports_bitmap:
        if not scenario.bitmap.is_empty:
            notes.add("bitmap", f"{scenario.bitmap.width}x{scenario.bitmap.height} preview dropped")
        scenario.bitmap = Bitmap()


def _adapt(record, attr: str, present: bool, default, notes: _Notes, section: str):
    """Synthesize `attr` when the target has it, clear it when it does not."""
    value = getattr(record, attr)
    if present:
        if value is None:
            setattr(record, attr, default)
    elif value is not None:
        if value != default:
            notes.add(section, f"{attr} cleared")
        setattr(record, attr, None)


def _convert_header(scenario: Scenario, caps: CapabilityTable, notes: _Notes):
    header = scenario.header
    _adapt(header, "dlc_options", caps.dlc_options, DLCOptions(), notes, "header")
    _adapt(header, "author_name", caps.author_name, "", notes, "header")


def _convert_players(scenario: Scenario, caps: CapabilityTable, notes: _Notes):
    for slot, player in enumerate(scenario.players):
        _adapt(player.resources, "ore", caps.extended_resources, DEFAULT_ORE, notes, "players")
        _adapt(player.resources, "goods", caps.extended_resources, DEFAULT_GOODS, notes, "players")
        _adapt(player, "color", caps.player_colors, slot, notes, "players")
        for obj in player.objects:
            _adapt(obj, "frame", caps.object_extensions, DEFAULT_FRAME, notes, "players")
            _adapt(obj, "garrisoned_in", caps.object_extensions, NOT_GARRISONED, notes, "players")


def _convert_victory(scenario: Scenario, caps: CapabilityTable, notes: _Notes):
    victory = scenario.victory
    for attr in ("mode", "score", "time_limit"):
        _adapt(victory, attr, caps.extended_victory, 0, notes, "victory")
    _adapt(victory, "lock_teams", caps.lock_teams, False, notes, "victory")


def _convert_triggers(scenario: Scenario, caps: CapabilityTable, notes: _Notes):
    if caps.trigger_version is None:
        return
    has_short = caps.trigger_version >= SHORT_DESCRIPTION_VERSION
    for trigger in scenario.triggers:
        _adapt(trigger, "start_time", not has_short, 0, notes, "triggers")
        _adapt(trigger, "short_description", has_short, "", notes, "triggers")


def _encoded_length(text: str, section: str, field_name: str, index: Optional[int] = None) -> int:
    if "\0" in text:
        raise InvalidString("embedded NUL", section=section, field=field_name, index=index)
    try:
        return len(text.encode(TEXT_ENCODING))
    except UnicodeEncodeError as e:
        raise InvalidString(str(e), section=section, field=field_name, index=index) from e


def _check_narrowing(scenario: Scenario, caps: CapabilityTable):
    check_layers(scenario.map, caps.tile_layer_width)

    length = _encoded_length(scenario.header.description, "header", "description")
    limit = prefix_limit(caps.string_prefix_width)
    if length and length + 1 > limit:
        raise StringTooLong(length + 1, limit, section="header", field="description")

    for slot, player in enumerate(scenario.players):
        length = _encoded_length(player.name, "players", "name", slot)
        if caps.fixed_player_names:
            if length >= PLAYER_NAME_BUFFER:
                raise StringTooLong(length, PLAYER_NAME_BUFFER - 1, section="players",
                                    field="name", index=slot)
        elif length and length + 1 > prefix_limit(2):
            raise StringTooLong(length + 1, prefix_limit(2), section="players",
                                field="name", index=slot)
