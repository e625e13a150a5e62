"""
Scenario Editions

The scenario format shipped in six editions of the same engine. Every file
starts with a 4-byte ASCII tag naming its edition; everything the codecs need
to know about an edition (player bound, field widths, which sections exist)
lives in the capability table below rather than in version checks spread
across the section codecs.

Edition tags:
    aoe  1.10   original release
    ror  1.11   expansion
    aoc  1.21   conquerors
    hd   1.22   hd re-release
    wk   1.30   community patch
    de   1.37   definitive
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ...errors import UnknownEditionTag


class CompressionVariant(Enum):
    """How the body of a scenario is compressed."""
    RAW_DEFLATE = "raw-deflate"


class Edition(Enum):
    """Closed set of supported editions, ordered chronologically."""

    ORIGINAL = (0, "aoe", b"1.10")
    EXPANSION = (1, "ror", b"1.11")
    CONQUERORS = (2, "aoc", b"1.21")
    HD = (3, "hd", b"1.22")
    COMMUNITY_PATCHED = (4, "wk", b"1.30")
    DEFINITIVE = (5, "de", b"1.37")

    def __init__(self, ordinal: int, token: str, tag: bytes):
        self.ordinal = ordinal
        self.token = token
        self.tag = tag

    def __lt__(self, other: 'Edition') -> bool:
        if not isinstance(other, Edition):
            return NotImplemented
        return self.ordinal < other.ordinal

    def __le__(self, other: 'Edition') -> bool:
        if not isinstance(other, Edition):
            return NotImplemented
        return self.ordinal <= other.ordinal

    def is_upgrade_to(self, other: 'Edition') -> bool:
        """True when `other` is a later generation than this edition."""
        return other.ordinal > self.ordinal

    @classmethod
    def from_token(cls, token: str) -> 'Edition':
        """Look up an edition by its short token (aoe, ror, aoc, hd, wk, de)."""
        for edition in cls:
            if edition.token == token:
                return edition
        raise UnknownEditionTag(token)

    def __str__(self) -> str:
        return self.token


@dataclass(frozen=True)
class CapabilityTable:
    """Static per-edition feature and field-width table."""
    max_players: int
    tile_layer_width: int
    supports_triggers: bool
    supports_ai_info: bool
    supports_bitmap: bool
    compression_variant: CompressionVariant
    header_version: int
    string_prefix_width: int
    fixed_player_names: bool
    extended_resources: bool
    player_colors: bool
    object_extensions: bool
    extended_victory: bool
    lock_teams: bool
    dlc_options: bool
    author_name: bool
    trigger_version: Optional[float]


# Size of the fixed player name buffer in the early editions.
PLAYER_NAME_BUFFER = 256

_CAPABILITIES = {
    Edition.ORIGINAL: CapabilityTable(
        max_players=4, tile_layer_width=1,
        supports_triggers=False, supports_ai_info=False, supports_bitmap=False,
        compression_variant=CompressionVariant.RAW_DEFLATE,
        header_version=2, string_prefix_width=2,
        fixed_player_names=True, extended_resources=False, player_colors=False,
        object_extensions=False, extended_victory=False, lock_teams=False,
        dlc_options=False, author_name=False, trigger_version=None,
    ),
    Edition.EXPANSION: CapabilityTable(
        max_players=8, tile_layer_width=1,
        supports_triggers=False, supports_ai_info=True, supports_bitmap=False,
        compression_variant=CompressionVariant.RAW_DEFLATE,
        header_version=2, string_prefix_width=2,
        fixed_player_names=True, extended_resources=False, player_colors=False,
        object_extensions=False, extended_victory=False, lock_teams=False,
        dlc_options=False, author_name=False, trigger_version=None,
    ),
    Edition.CONQUERORS: CapabilityTable(
        max_players=8, tile_layer_width=1,
        supports_triggers=True, supports_ai_info=True, supports_bitmap=True,
        compression_variant=CompressionVariant.RAW_DEFLATE,
        header_version=2, string_prefix_width=4,
        fixed_player_names=False, extended_resources=True, player_colors=False,
        object_extensions=True, extended_victory=True, lock_teams=False,
        dlc_options=False, author_name=False, trigger_version=1.6,
    ),
    Edition.HD: CapabilityTable(
        max_players=8, tile_layer_width=1,
        supports_triggers=True, supports_ai_info=True, supports_bitmap=True,
        compression_variant=CompressionVariant.RAW_DEFLATE,
        header_version=3, string_prefix_width=4,
        fixed_player_names=False, extended_resources=True, player_colors=True,
        object_extensions=True, extended_victory=True, lock_teams=True,
        dlc_options=True, author_name=False, trigger_version=1.6,
    ),
    Edition.COMMUNITY_PATCHED: CapabilityTable(
        max_players=8, tile_layer_width=1,
        supports_triggers=True, supports_ai_info=True, supports_bitmap=True,
        compression_variant=CompressionVariant.RAW_DEFLATE,
        header_version=2, string_prefix_width=4,
        fixed_player_names=False, extended_resources=True, player_colors=False,
        object_extensions=True, extended_victory=True, lock_teams=False,
        dlc_options=False, author_name=False, trigger_version=1.6,
    ),
    Edition.DEFINITIVE: CapabilityTable(
        max_players=8, tile_layer_width=2,
        supports_triggers=True, supports_ai_info=True, supports_bitmap=True,
        compression_variant=CompressionVariant.RAW_DEFLATE,
        header_version=5, string_prefix_width=4,
        fixed_player_names=False, extended_resources=True, player_colors=True,
        object_extensions=True, extended_victory=True, lock_teams=True,
        dlc_options=True, author_name=True, trigger_version=2.2,
    ),
}

_BY_TAG = {edition.tag: edition for edition in Edition}

TAG_SIZE = 4


def capabilities(edition: Edition) -> CapabilityTable:
    """Capability table for an edition."""
    return _CAPABILITIES[edition]


def parse(tag: bytes) -> Edition:
    """Identify the edition from the 4-byte tag at the start of a file."""
    edition = _BY_TAG.get(bytes(tag))
    if edition is None:
        raise UnknownEditionTag(bytes(tag))
    return edition


__all__ = [
    'CompressionVariant',
    'Edition',
    'CapabilityTable',
    'PLAYER_NAME_BUFFER',
    'TAG_SIZE',
    'capabilities',
    'parse',
]
