"""Section codecs. Importing this package registers every codec."""

from .base import (
    SectionCodec,
    SECTION_TYPES,
    BODY_SECTIONS,
    register_section,
    get_section_codec,
    body_codecs,
)
from .header import HeaderCodec
from .map import MapCodec, check_layers, layer_limit
from .players import PlayersCodec
from .diplomacy import DiplomacyCodec
from .triggers import TriggersCodec
from .ai import AICodec
from .bitmap import BitmapCodec

__all__ = [
    'SectionCodec',
    'SECTION_TYPES',
    'BODY_SECTIONS',
    'register_section',
    'get_section_codec',
    'body_codecs',
    'HeaderCodec',
    'MapCodec',
    'check_layers',
    'layer_limit',
    'PlayersCodec',
    'DiplomacyCodec',
    'TriggersCodec',
    'AICodec',
    'BitmapCodec',
]
