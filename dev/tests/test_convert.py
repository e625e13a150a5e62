import copy

import pytest

from conftest import make_bitmap, make_scenario
from scxforge.convert.engine import NOT_GARRISONED, convert
from scxforge.errors import (
    InvalidString, LossyConversion, PlayerCountExceeded, StringTooLong, ValueOutOfRange,
)
from scxforge.formats.scx.edition import Edition, capabilities
from scxforge.formats.scx.model import AIFile, DiplomaticStance, DLCPackage, Scenario
from scxforge.formats.scx.scenario_file import encode, load


def _make_convertible(scenario: Scenario) -> Scenario:
    """Narrow layers so the scenario fits every edition's grid."""
    for tile in scenario.map:
        tile.layer = min(tile.layer, 255)
    return scenario


def test_identity_conversion_returns_same_aggregate(scenario):
    result = convert(scenario, scenario.edition)
    assert result.scenario is scenario
    assert result.notes == []


@pytest.mark.parametrize("target", list(Edition), ids=lambda e: e.token)
def test_conversion_is_idempotent(scenario, target):
    _make_convertible(scenario)
    once = convert(scenario, target).scenario
    twice = convert(once, target).scenario
    assert twice == once


@pytest.mark.parametrize("target", list(Edition), ids=lambda e: e.token)
def test_converted_scenario_always_encodes(edition, target):
    scenario = _make_convertible(make_scenario(edition))
    result = convert(scenario, target)
    assert load(encode(result.scenario)) == result.scenario
    assert result.scenario.edition is target
    assert result.scenario.header.version == capabilities(target).header_version


def test_input_is_untouched(scenario):
    _make_convertible(scenario)
    before = copy.deepcopy(scenario)
    target = Edition.EXPANSION if scenario.edition is not Edition.EXPANSION else Edition.DEFINITIVE
    convert(scenario, target)
    assert scenario == before


def test_failed_conversion_leaves_input_untouched():
    scenario = make_scenario(Edition.DEFINITIVE)
    before = copy.deepcopy(scenario)
    with pytest.raises(ValueOutOfRange):
        convert(scenario, Edition.HD)
    assert scenario == before


def test_definitive_to_hd_rejects_wide_layer():
    scenario = make_scenario(Edition.DEFINITIVE)
    with pytest.raises(ValueOutOfRange) as exc:
        convert(scenario, Edition.HD)
    assert exc.value.section == "map"
    assert exc.value.field == "layer"
    assert exc.value.index == len(scenario.map) - 1


def test_downgrade_drops_triggers_with_note():
    scenario = make_scenario(Edition.CONQUERORS)
    result = convert(scenario, Edition.EXPANSION)
    assert result.scenario.triggers == []
    assert "triggers" in [note.section for note in result.notes]
    assert all(isinstance(note, LossyConversion) for note in result.notes)


def test_dropping_empty_sections_is_silent():
    scenario = Scenario.new(Edition.CONQUERORS, 2, 2)
    result = convert(scenario, Edition.EXPANSION)
    assert result.notes == []


def test_downgrade_to_original_drops_ai_and_bitmap():
    scenario = make_scenario(Edition.HD)
    for player in scenario.players[2:]:
        player.active = False
    result = convert(scenario, Edition.ORIGINAL)
    sections = {note.section for note in result.notes}
    assert {"triggers", "ai_info", "bitmap"} <= sections
    assert result.scenario.ai_info.is_empty
    assert result.scenario.bitmap.is_empty


def test_cutting_active_slot_fails():
    scenario = make_scenario(Edition.CONQUERORS)
    scenario.players[5].active = True
    with pytest.raises(PlayerCountExceeded) as exc:
        convert(scenario, Edition.ORIGINAL)
    assert exc.value.slot == 5
    assert exc.value.limit == 4


def test_cutting_inactive_slots_resizes_everything():
    scenario = make_scenario(Edition.CONQUERORS)
    result = convert(scenario, Edition.ORIGINAL).scenario
    assert len(result.players) == 4
    assert result.header.player_count == 4
    assert all(len(p.diplomacy) == 4 for p in result.players)
    assert result.players[0].diplomacy[1] == DiplomaticStance.ENEMY


def test_upgrade_from_original_pads_slots():
    scenario = make_scenario(Edition.ORIGINAL)
    result = convert(scenario, Edition.CONQUERORS).scenario
    assert len(result.players) == 8
    assert all(not p.active for p in result.players[4:])
    assert all(len(p.diplomacy) == 8 for p in result.players)
    assert result.players[6].diplomacy == [DiplomaticStance.NEUTRAL] * 8
    assert result.ai_info.use_ai == [False] * 8


def test_upgrade_synthesizes_defaults():
    scenario = make_scenario(Edition.EXPANSION)
    result = convert(scenario, Edition.DEFINITIVE)
    converted = result.scenario
    assert result.notes == []
    assert converted.players[0].resources.ore == 100
    assert converted.players[0].resources.goods == 0
    assert [p.color for p in converted.players] == list(range(8))
    obj = converted.players[0].objects[0]
    assert obj.frame == 0
    assert obj.garrisoned_in == NOT_GARRISONED
    assert converted.victory.lock_teams is False
    assert converted.victory.time_limit == 0
    assert converted.header.author_name == ""
    assert converted.header.dlc_options is not None
    assert converted.triggers == []
    assert converted.bitmap.is_empty


def test_trigger_fields_follow_trigger_version():
    up = convert(make_scenario(Edition.HD), Edition.DEFINITIVE).scenario
    assert all(t.short_description == "" and t.start_time is None for t in up.triggers)

    down = convert(_make_convertible(make_scenario(Edition.DEFINITIVE)), Edition.COMMUNITY_PATCHED)
    # a non-empty short description is lost
    assert LossyConversion("triggers", "short_description cleared") in down.notes
    assert all(t.start_time == 0 for t in down.scenario.triggers)


def test_clearing_non_default_values_is_noted():
    scenario = make_scenario(Edition.HD)
    scenario.players[1].color = 7
    result = convert(scenario, Edition.COMMUNITY_PATCHED)
    assert LossyConversion("players", "color cleared") in result.notes
    assert LossyConversion("victory", "lock_teams cleared") in result.notes
    assert all(p.color is None for p in result.scenario.players)


def test_notes_are_not_repeated():
    scenario = make_scenario(Edition.HD)
    for player in scenario.players:
        player.color = 7
    result = convert(scenario, Edition.COMMUNITY_PATCHED)
    assert len(result.notes) == len(set(result.notes))


def test_ai_files_survive_between_supporting_editions():
    scenario = make_scenario(Edition.EXPANSION)
    scenario.ai_info.files.append(AIFile("turtle.ai", "(defrule)"))
    result = convert(scenario, Edition.DEFINITIVE).scenario
    assert [f.filename for f in result.ai_info.files] == ["rush.ai", "turtle.ai"]


def test_name_too_long_for_fixed_buffer():
    scenario = make_scenario(Edition.CONQUERORS)
    scenario.players[0].name = "N" * 300
    with pytest.raises(StringTooLong) as exc:
        convert(scenario, Edition.EXPANSION)
    assert exc.value.field == "name"
    assert exc.value.index == 0


def test_description_too_long_for_short_prefix():
    scenario = make_scenario(Edition.CONQUERORS, 2, 2)
    scenario.header.description = "d" * 70000
    with pytest.raises(StringTooLong) as exc:
        convert(scenario, Edition.EXPANSION)
    assert exc.value.section == "header"


def test_bitmap_is_kept_between_supporting_editions():
    scenario = make_scenario(Edition.CONQUERORS)
    scenario.bitmap = make_bitmap(9, 2)
    assert convert(scenario, Edition.HD).scenario.bitmap == scenario.bitmap


def test_all_eight_active_slots_cannot_become_original():
    scenario = make_scenario(Edition.CONQUERORS)
    for player in scenario.players:
        player.active = True
    with pytest.raises(PlayerCountExceeded) as exc:
        convert(scenario, Edition.ORIGINAL)
    assert exc.value.slot == 4
    assert all(p.active for p in scenario.players)
    assert len(scenario.players) == 8


def test_three_active_slots_fit_original():
    scenario = make_scenario(Edition.CONQUERORS)
    scenario.players[2].active = True
    result = convert(scenario, Edition.ORIGINAL).scenario
    assert len(result.players) == 4
    assert [p.active for p in result.players] == [True, True, True, False]
    assert result.header.player_count == 4
    encode(result)


def test_embedded_nul_fails_conversion():
    scenario = make_scenario(Edition.HD)
    scenario.players[1].name = "Red\0Team"
    with pytest.raises(InvalidString) as exc:
        convert(scenario, Edition.COMMUNITY_PATCHED)
    assert exc.value.index == 1


def test_dlc_requirements_follow_the_edition():
    scenario = make_scenario(Edition.HD)
    assert scenario.requires_dlc(DLCPackage.AGE_OF_CONQUERORS)
    assert not scenario.requires_dlc(DLCPackage.THE_FORGOTTEN)
    converted = convert(scenario, Edition.CONQUERORS).scenario
    assert not converted.requires_dlc(DLCPackage.AGE_OF_CONQUERORS)
