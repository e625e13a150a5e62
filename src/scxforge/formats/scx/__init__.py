"""Scenario (SCX) format support."""

from .edition import (
    CompressionVariant,
    Edition,
    CapabilityTable,
    capabilities,
    parse,
)
from .model import (
    DiplomaticStance,
    DataSet,
    DLCPackage,
    DLCOptions,
    Header,
    Tile,
    TileGrid,
    Resources,
    ScenarioObject,
    PlayerRecord,
    VictorySettings,
    TriggerCondition,
    TriggerEffect,
    Trigger,
    AIFile,
    AIInfo,
    Bitmap,
    Scenario,
)
from .scenario_file import load, save, encode, read_file, write_file, peek_edition

__all__ = [
    'CompressionVariant', 'Edition', 'CapabilityTable', 'capabilities', 'parse',
    'DiplomaticStance', 'DataSet', 'DLCPackage', 'DLCOptions', 'Header', 'Tile',
    'TileGrid', 'Resources', 'ScenarioObject', 'PlayerRecord', 'VictorySettings',
    'TriggerCondition', 'TriggerEffect', 'Trigger', 'AIFile', 'AIInfo', 'Bitmap',
    'Scenario',
    'load', 'save', 'encode', 'read_file', 'write_file', 'peek_edition',
]
