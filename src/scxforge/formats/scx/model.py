"""
Scenario Aggregate

One in-memory shape for a scenario of any edition. Fields that only some
editions store are Optional; None means "this edition has no such field".
The conversion engine is what moves an aggregate between those shapes.
"""

import time
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterator, List, Optional

from .edition import Edition, capabilities


class DiplomaticStance(IntEnum):
    """Stance of one player toward another."""
    ALLY = 0
    NEUTRAL = 1
    ENEMY = 3


class DataSet(IntEnum):
    """Base data set a DLC-aware scenario is built on."""
    BASE_GAME = 0
    EXPANSIONS = 1


class DLCPackage(IntEnum):
    """Expansion packs a scenario can depend on."""
    AGE_OF_KINGS = 0
    AGE_OF_CONQUERORS = 1
    DLC_AGE_OF_KINGS = 2
    DLC_AGE_OF_CONQUERORS = 3
    THE_FORGOTTEN = 4
    AFRICAN_KINGDOMS = 5
    RISE_OF_THE_RAJAS = 6
    LAST_KHANS = 7


DLC_OPTIONS_VERSION = 1000


@dataclass
class DLCOptions:
    version: int = DLC_OPTIONS_VERSION
    data_set: DataSet = DataSet.BASE_GAME
    dependencies: List[DLCPackage] = field(default_factory=lambda: [
        DLCPackage.AGE_OF_KINGS, DLCPackage.AGE_OF_CONQUERORS,
    ])


@dataclass
class Header:
    """Uncompressed scenario header."""
    version: int = 2
    timestamp: int = 0
    description: str = ""
    any_sp_victory: bool = False
    player_count: int = 0
    dlc_options: Optional[DLCOptions] = None
    author_name: Optional[str] = None

    def touch(self):
        """Set the timestamp to now."""
        self.timestamp = int(time.time())


@dataclass
class Tile:
    terrain: int = 0
    elevation: int = 0
    layer: int = 0
    overlay: int = 0


@dataclass
class TileGrid:
    """Row-major grid of map tiles."""
    width: int = 0
    height: int = 0
    tiles: List[Tile] = field(default_factory=list)

    @classmethod
    def blank(cls, width: int, height: int, terrain: int = 0) -> 'TileGrid':
        return cls(width, height, [Tile(terrain=terrain) for _ in range(width * height)])

    def __iter__(self) -> Iterator[Tile]:
        return iter(self.tiles)

    def __len__(self) -> int:
        return len(self.tiles)


@dataclass
class Resources:
    gold: int = 0
    wood: int = 0
    food: int = 0
    stone: int = 0
    ore: Optional[int] = None
    goods: Optional[int] = None


@dataclass
class ScenarioObject:
    """A unit, building or other object placed on the map."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    object_id: int = 0
    object_type: int = 0
    state: int = 2
    angle: float = 0.0
    frame: Optional[int] = None
    # -1 when the object is not inside another object.
    garrisoned_in: Optional[int] = None


@dataclass
class PlayerRecord:
    name: str = ""
    civilization: int = 1
    active: bool = False
    human: bool = False
    resources: Resources = field(default_factory=Resources)
    color: Optional[int] = None
    diplomacy: List[DiplomaticStance] = field(default_factory=list)
    allied_victory: bool = False
    objects: List[ScenarioObject] = field(default_factory=list)


@dataclass
class VictorySettings:
    """Global victory conditions."""
    conquest: int = 1
    ruins: int = 0
    artifacts: int = 0
    discoveries: int = 0
    exploration: int = 0
    gold: int = 0
    mode: Optional[int] = None
    score: Optional[int] = None
    time_limit: Optional[int] = None
    lock_teams: Optional[bool] = None


@dataclass
class TriggerCondition:
    condition_type: int = 0
    properties: List[int] = field(default_factory=list)

    # Property slots holding unit and object type ids.
    UNIT_TYPE_PROPERTY = 4
    OBJECT_TYPE_PROPERTY = 14


@dataclass
class TriggerEffect:
    effect_type: int = 0
    properties: List[int] = field(default_factory=list)
    chat_text: str = ""
    audio_file: str = ""
    objects: List[int] = field(default_factory=list)

    UNIT_TYPE_PROPERTY = 6
    OBJECT_TYPE_PROPERTY = 21


@dataclass
class Trigger:
    """A trigger with its conditions and effects in display order."""
    name: str = ""
    description: str = ""
    enabled: bool = True
    looping: bool = False
    is_objective: bool = False
    objective_order: int = 0
    start_time: Optional[int] = None
    short_description: Optional[str] = None
    conditions: List[TriggerCondition] = field(default_factory=list)
    effects: List[TriggerEffect] = field(default_factory=list)


@dataclass
class AIFile:
    filename: str = ""
    content: str = ""


@dataclass
class AIInfo:
    """Per-player AI flags and embedded AI scripts."""
    use_ai: List[bool] = field(default_factory=list)
    files: List[AIFile] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.files and not any(self.use_ai)


PALETTE_SIZE = 256 * 4


@dataclass
class Bitmap:
    """
    Preview image embedded in the scenario.

    8-bit paletted; `palette` is 256 RGBA quads and every pixel row is padded
    to a multiple of 4 bytes. Rows are stored bottom-up as in a BMP file.
    A zero-sized bitmap means no preview.
    """
    width: int = 0
    height: int = 0
    orientation: int = 1
    palette: bytes = bytes(PALETTE_SIZE)
    pixels: bytes = b""

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    @property
    def row_stride(self) -> int:
        return (self.width + 3) & ~3

    @property
    def pixel_size(self) -> int:
        return self.row_stride * self.height


@dataclass
class Scenario:
    """A complete scenario, independent of any on-disk edition."""
    edition: Edition
    header: Header = field(default_factory=Header)
    map: TileGrid = field(default_factory=TileGrid)
    players: List[PlayerRecord] = field(default_factory=list)
    victory: VictorySettings = field(default_factory=VictorySettings)
    triggers: List[Trigger] = field(default_factory=list)
    ai_info: AIInfo = field(default_factory=AIInfo)
    bitmap: Bitmap = field(default_factory=Bitmap)

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def active_players(self) -> List[PlayerRecord]:
        return [p for p in self.players if p.active]

    @property
    def object_count(self) -> int:
        return sum(len(p.objects) for p in self.players)

    def requires_dlc(self, package: DLCPackage) -> bool:
        """True when the header lists `package` as a dependency. Always false without DLC options."""
        options = self.header.dlc_options
        return options is not None and package in options.dependencies

    @classmethod
    def new(cls, edition: Edition, width: int = 0, height: int = 0,
            players: Optional[int] = None) -> 'Scenario':
        """
        Build an empty scenario that encodes cleanly in `edition`.

        `players` defaults to the edition maximum; the first two slots are
        active, one human and one computer.
        """
        caps = capabilities(edition)
        count = caps.max_players if players is None else players
        if not 0 <= count <= caps.max_players:
            raise ValueError(f"{edition} allows at most {caps.max_players} players, got {count}")

        slots = []
        for i in range(count):
            player = PlayerRecord(
                name=f"Player {i + 1}",
                active=i < 2,
                human=i == 0,
                diplomacy=[DiplomaticStance.NEUTRAL] * count,
            )
            if caps.extended_resources:
                player.resources.ore = 100
                player.resources.goods = 0
            if caps.player_colors:
                player.color = i
            slots.append(player)

        header = Header(version=caps.header_version, player_count=count)
        if caps.dlc_options:
            header.dlc_options = DLCOptions()
        if caps.author_name:
            header.author_name = ""
        header.touch()

        victory = VictorySettings()
        if caps.extended_victory:
            victory.mode = 0
            victory.score = 0
            victory.time_limit = 0
        if caps.lock_teams:
            victory.lock_teams = False

        ai_info = AIInfo(use_ai=[False] * count) if caps.supports_ai_info else AIInfo()

        return cls(
            edition=edition,
            header=header,
            map=TileGrid.blank(width, height),
            players=slots,
            victory=victory,
            ai_info=ai_info,
        )


__all__ = [
    'DiplomaticStance', 'DataSet', 'DLCPackage', 'DLC_OPTIONS_VERSION', 'DLCOptions',
    'Header', 'Tile', 'TileGrid', 'Resources', 'ScenarioObject', 'PlayerRecord',
    'VictorySettings', 'TriggerCondition', 'TriggerEffect', 'Trigger',
    'AIFile', 'AIInfo', 'PALETTE_SIZE', 'Bitmap', 'Scenario',
]
