"""Edition conversion and id remapping."""

from .engine import ConversionResult, convert
from .remap import (
    IdRemapping,
    RemapStats,
    HD_TO_COMMUNITY,
    CONQUERORS_TO_COMMUNITY,
    auto_remapping,
    remap_ids,
)

__all__ = [
    'ConversionResult',
    'convert',
    'IdRemapping',
    'RemapStats',
    'HD_TO_COMMUNITY',
    'CONQUERORS_TO_COMMUNITY',
    'auto_remapping',
    'remap_ids',
]
