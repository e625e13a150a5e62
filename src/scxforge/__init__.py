"""
scxforge - scenario file codec and cross-edition converter.

    from scxforge import read_file, save, Edition

    scenario = read_file("map.scx")
    data = save(scenario, Edition.COMMUNITY_PATCHED)
"""

__version__ = "0.4.0"

from .errors import (
    ScenarioError,
    UnknownEditionTag,
    TruncatedInput,
    CorruptCompressedBlock,
    StringTooLong,
    ValueOutOfRange,
    MissingRequiredField,
    PlayerCountExceeded,
    InvalidString,
    LossyConversion,
)
from .formats.scx import (
    Edition,
    Scenario,
    capabilities,
    load,
    save,
    read_file,
    write_file,
)
from .convert import ConversionResult, convert

__all__ = [
    'ScenarioError', 'UnknownEditionTag', 'TruncatedInput', 'CorruptCompressedBlock',
    'StringTooLong', 'ValueOutOfRange', 'MissingRequiredField', 'PlayerCountExceeded',
    'InvalidString', 'LossyConversion',
    'Edition', 'Scenario', 'capabilities', 'load', 'save', 'read_file', 'write_file',
    'ConversionResult', 'convert',
]
