"""Shared scenario builders for the test suite."""

import pytest

from scxforge.formats.scx.edition import Edition, capabilities
from scxforge.formats.scx.model import (
    AIFile,
    Bitmap,
    DiplomaticStance,
    PALETTE_SIZE,
    Scenario,
    ScenarioObject,
    Trigger,
    TriggerCondition,
    TriggerEffect,
)


def make_bitmap(width: int = 5, height: int = 3) -> Bitmap:
    stride = (width + 3) & ~3
    palette = bytes(i % 256 for i in range(PALETTE_SIZE))
    pixels = bytes((x + y * 7) % 256 if x < width else 0
                   for y in range(height) for x in range(stride))
    return Bitmap(width=width, height=height, orientation=1, palette=palette, pixels=pixels)


def make_trigger(edition: Edition, name: str = "Reinforcements") -> Trigger:
    caps = capabilities(edition)
    trigger = Trigger(
        name=name,
        description="Send help when the castle falls",
        enabled=True,
        looping=False,
        is_objective=True,
        objective_order=2,
        conditions=[
            TriggerCondition(condition_type=3, properties=[0, 1, 2, 3, 529, 5, 6, 7, 8, 9, 10, 11, 12, 13, 1104]),
            TriggerCondition(condition_type=10, properties=[60]),
        ],
        effects=[
            TriggerEffect(effect_type=11, properties=[1, 2, 3, 4, 5, 6, 1103], chat_text="Hold the line!",
                          audio_file="horn.wav", objects=[7, 8]),
        ],
    )
    if caps.trigger_version < 1.8:
        trigger.start_time = 5
    else:
        trigger.short_description = "Help arrives"
    return trigger


def make_scenario(edition: Edition, width: int = 6, height: int = 4) -> Scenario:
    """A scenario using every feature `edition` can store."""
    caps = capabilities(edition)
    scenario = Scenario.new(edition, width, height)
    scenario.header.description = "Defend the river crossing"
    scenario.header.timestamp = 1234567890
    if caps.author_name:
        scenario.header.author_name = "Mapper"

    for i, tile in enumerate(scenario.map):
        tile.terrain = i % 40
        tile.elevation = i % 3
        tile.layer = (i * 50) % 256
        tile.overlay = i % 2
    if caps.tile_layer_width == 2:
        scenario.map.tiles[-1].layer = 300

    first, second = scenario.players[0], scenario.players[1]
    first.name = "Ælfred"
    first.civilization = 4
    first.resources.gold = 200
    first.resources.wood = -5
    first.diplomacy[1] = DiplomaticStance.ENEMY
    second.diplomacy[0] = DiplomaticStance.ENEMY
    second.allied_victory = True
    for n, player in enumerate((first, second)):
        obj = ScenarioObject(x=1.5 + n, y=2.25, z=0.0, object_id=100 + n, object_type=83,
                             state=2, angle=0.5)
        if caps.object_extensions:
            obj.frame = 3
            obj.garrisoned_in = -1
        player.objects.append(obj)

    scenario.victory.conquest = 1
    scenario.victory.gold = 1000
    if caps.extended_victory:
        scenario.victory.mode = 2
        scenario.victory.score = 900
        scenario.victory.time_limit = 600
    if caps.lock_teams:
        scenario.victory.lock_teams = True

    if caps.supports_triggers:
        scenario.triggers = [make_trigger(edition), make_trigger(edition, "Victory")]
    if caps.supports_ai_info:
        scenario.ai_info.use_ai[1] = True
        scenario.ai_info.files.append(AIFile("rush.ai", "(defrule (true) => (chat-to-all \"hi\"))"))
    if caps.supports_bitmap:
        scenario.bitmap = make_bitmap()
    return scenario


@pytest.fixture(params=list(Edition), ids=lambda e: e.token)
def edition(request) -> Edition:
    return request.param


@pytest.fixture
def scenario(edition) -> Scenario:
    return make_scenario(edition)
