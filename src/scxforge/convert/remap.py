"""
Unit and terrain id remapping.

Scenarios made for the HD and conquerors editions refer to some unit and
terrain ids that the community patch repurposed. Remapping rewrites those
ids on placed objects, map tiles and trigger conditions/effects. It is never
applied implicitly; callers ask for it (`scxforge convert --remap`).
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..formats.scx.edition import Edition
from ..formats.scx.model import Scenario, TriggerCondition, TriggerEffect

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdRemapping:
    """Unit type and terrain id substitution tables."""
    name: str
    object_ids: Dict[int, int] = field(default_factory=dict)
    terrain_ids: Dict[int, int] = field(default_factory=dict)


@dataclass
class RemapStats:
    objects: int = 0
    tiles: int = 0
    trigger_properties: int = 0

    @property
    def total(self) -> int:
        return self.objects + self.tiles + self.trigger_properties


# Swaps needed for the community patch tech tree.
_TECH_TREE_SWAPS: List[Tuple[int, int]] = [
    (1103, 529),  # Fire Galley, Fire Ship
    (529, 1103),  # Fire Ship, Fire Galley
    (1104, 527),  # Demolition Raft, Demolition Ship
    (527, 1104),  # Demolition Ship, Demolition Raft
]

# Later pairs win, so HD's own fire and demolition ships override the swaps.
_HD_OBJECTS: List[Tuple[int, int]] = _TECH_TREE_SWAPS + [
    (1001, 106),   # Organ Gun
    (1003, 114),   # Elite Organ Gun
    (1006, 183),   # Elite Caravel
    (1007, 203),   # Camel Archer
    (1009, 208),   # Elite Camel Archer
    (1010, 223),   # Genitour
    (1012, 230),   # Elite Genitour
    (1013, 260),   # Gbeto
    (1015, 418),   # Elite Gbeto
    (1016, 453),   # Shotel Warrior
    (1018, 459),   # Elite Shotel Warrior
    (1103, 467),   # Fire Ship
    (1105, 494),   # Siege Tower
    (1104, 653),   # Demolition Ship
    (947, 699),    # Cutting Mangonel
    (948, 701),    # Cutting Onager
    (1079, 732),   # Genitour placeholder
    (1021, 734),   # Feitoria
    (1120, 760),   # Ballista Elephant
    (1155, 762),   # Imperial Skirmisher
    (1134, 766),   # Elite Battle Elephant
    (1132, 774),   # Battle Elephant
    (1131, 782),   # Elite Rattan Archer
    (1129, 784),   # Rattan Archer
    (1128, 811),   # Elite Arambai
    (1126, 823),   # Arambai
    (1125, 830),   # Elite Karambit
    (1123, 836),   # Karambit
    (946, 848),    # Noncut Ballista Elephant
    (1004, 861),   # Caravel
    (1122, 891),   # Elite Ballista Elephant
]

_COMMON_TERRAIN: List[Tuple[int, int]] = [
    (11, 3),   # Dirt 2 -> Dirt 3
    (16, 0),   # Grass-ish -> Grass
    (20, 19),  # Oak Forest -> Pine Forest
]

_HD_TERRAIN: List[Tuple[int, int]] = [
    (38, 33),  # Snow Road -> Snow Dirt
    (45, 38),  # Cracked Earth -> Snow Road
    (54, 11),  # Mangrove Terrain
    (55, 20),  # Mangrove Forest
    (50, 41),  # Acacia Forest
    (49, 16),  # Baobab Forest
] + _COMMON_TERRAIN

HD_TO_COMMUNITY = IdRemapping("hd-to-wk", dict(_HD_OBJECTS), dict(_HD_TERRAIN))
CONQUERORS_TO_COMMUNITY = IdRemapping("aoc-to-wk", dict(_TECH_TREE_SWAPS), dict(_COMMON_TERRAIN))


def auto_remapping(edition: Edition) -> Optional[IdRemapping]:
    """Remapping table for scenarios coming from `edition`, if one exists."""
    if edition is Edition.HD:
        return HD_TO_COMMUNITY
    if edition in (Edition.ORIGINAL, Edition.EXPANSION, Edition.CONQUERORS):
        return CONQUERORS_TO_COMMUNITY
    return None


def _remap_property(properties: List[int], index: int, table: Dict[int, int]) -> int:
    if index < len(properties) and properties[index] in table:
        properties[index] = table[properties[index]]
        return 1
    return 0


def remap_ids(scenario: Scenario, mapping: IdRemapping) -> RemapStats:
    """
    Rewrite unit and terrain ids in place.

    Every id is looked up in its original value, so swaps (a -> b, b -> a)
    exchange ids instead of collapsing them.
    """
    stats = RemapStats()
    objects = mapping.object_ids

    for player in scenario.players:
        for obj in player.objects:
            if obj.object_type in objects:
                obj.object_type = objects[obj.object_type]
                stats.objects += 1

    for tile in scenario.map:
        if tile.terrain in mapping.terrain_ids:
            tile.terrain = mapping.terrain_ids[tile.terrain]
            stats.tiles += 1

    for trigger in scenario.triggers:
        for cond in trigger.conditions:
            stats.trigger_properties += _remap_property(
                cond.properties, TriggerCondition.UNIT_TYPE_PROPERTY, objects)
            stats.trigger_properties += _remap_property(
                cond.properties, TriggerCondition.OBJECT_TYPE_PROPERTY, objects)
        for effect in trigger.effects:
            stats.trigger_properties += _remap_property(
                effect.properties, TriggerEffect.UNIT_TYPE_PROPERTY, objects)
            stats.trigger_properties += _remap_property(
                effect.properties, TriggerEffect.OBJECT_TYPE_PROPERTY, objects)

    logger.info(f"Remap {mapping.name}: {stats.objects} objects, {stats.tiles} tiles, "
                f"{stats.trigger_properties} trigger properties")
    return stats
