import logging
import struct

import pytest

from conftest import make_scenario, make_trigger
from scxforge.errors import MissingRequiredField, TruncatedInput, ValueOutOfRange
from scxforge.formats.scx.edition import Edition
from scxforge.formats.scx.model import Scenario
from scxforge.formats.scx.sections import (
    BODY_SECTIONS,
    SECTION_TYPES,
    DiplomacyCodec,
    HeaderCodec,
    MapCodec,
    PlayersCodec,
    TriggersCodec,
    get_section_codec,
)
from scxforge.utils.binary import IoBuffer


def _encode(codec, scenario) -> bytes:
    io = IoBuffer.writer()
    codec.encode(io, scenario)
    return io.getvalue()


def _decode(codec, data: bytes, scenario: Scenario) -> Scenario:
    codec.decode(IoBuffer.from_bytes(data), scenario)
    return scenario


def test_every_body_section_is_registered():
    for name in BODY_SECTIONS:
        assert name in SECTION_TYPES
    assert isinstance(get_section_codec("header"), HeaderCodec)
    assert get_section_codec("campaign") is None


# ─────────────────────────────────────────────────────────────
# MAP
# ─────────────────────────────────────────────────────────────

def test_tile_layer_is_one_byte_before_definitive():
    scenario = make_scenario(Edition.HD, 2, 2)
    data = _encode(MapCodec(), scenario)
    assert len(data) == 8 + 4 * 4


def test_tile_layer_is_two_bytes_in_definitive():
    scenario = make_scenario(Edition.DEFINITIVE, 2, 2)
    data = _encode(MapCodec(), scenario)
    assert len(data) == 8 + 4 * 5
    decoded = _decode(MapCodec(), data, Scenario(Edition.DEFINITIVE))
    assert decoded.map == scenario.map


def test_wide_layer_is_rejected_not_truncated():
    scenario = make_scenario(Edition.CONQUERORS, 3, 1)
    scenario.map.tiles[2].layer = 256
    with pytest.raises(ValueOutOfRange) as exc:
        _encode(MapCodec(), scenario)
    assert exc.value.section == "map"
    assert exc.value.field == "layer"
    assert exc.value.index == 2


def test_short_tile_data_is_truncated_input():
    data = struct.pack("<II", 10, 10) + bytes(12)
    with pytest.raises(TruncatedInput) as exc:
        _decode(MapCodec(), data, Scenario(Edition.CONQUERORS))
    assert exc.value.section == "map"


# ─────────────────────────────────────────────────────────────
# HEADER / PLAYERS
# ─────────────────────────────────────────────────────────────

def test_header_round_trip_with_dlc_and_author():
    scenario = make_scenario(Edition.DEFINITIVE)
    decoded = _decode(HeaderCodec(), _encode(HeaderCodec(), scenario), Scenario(Edition.DEFINITIVE))
    assert decoded.header == scenario.header


def test_header_player_count_must_match_slots():
    scenario = make_scenario(Edition.CONQUERORS)
    scenario.header.player_count = 3
    with pytest.raises(ValueOutOfRange) as exc:
        _encode(HeaderCodec(), scenario)
    assert exc.value.field == "player_count"


def test_header_player_count_above_edition_bound():
    data = _encode(HeaderCodec(), Scenario.new(Edition.CONQUERORS))
    # Patch player count (after size, version, timestamp, description, victory flag)
    body = bytearray(data)
    offset = 4 + 4 + 4 + 4 + 4
    struct.pack_into("<I", body, offset, 9)
    with pytest.raises(ValueOutOfRange):
        _decode(HeaderCodec(), bytes(body), Scenario(Edition.CONQUERORS))


def test_original_edition_uses_fixed_name_buffer():
    scenario = Scenario.new(Edition.ORIGINAL, players=1)
    data = _encode(PlayersCodec(), scenario)
    # name buffer + civ, active, human + 4 resources + object count
    assert len(data) == 256 + 12 + 16 + 4


def test_missing_required_field_is_reported():
    scenario = make_scenario(Edition.HD)
    scenario.players[3].color = None
    with pytest.raises(MissingRequiredField) as exc:
        _encode(PlayersCodec(), scenario)
    assert exc.value.section == "players"
    assert exc.value.field == "color"


def test_players_round_trip_with_objects(edition):
    scenario = make_scenario(edition)
    data = _encode(PlayersCodec(), scenario)
    decoded = Scenario(edition)
    decoded.header.player_count = scenario.header.player_count
    _decode(PlayersCodec(), data, decoded)
    for got, want in zip(decoded.players, scenario.players):
        assert got.name == want.name
        assert got.resources == want.resources
        assert got.objects == want.objects


def test_unsupported_content_is_skipped_with_warning(caplog):
    scenario = make_scenario(Edition.EXPANSION)
    scenario.players[0].color = 5
    with caplog.at_level(logging.WARNING, logger="scxforge"):
        data = _encode(PlayersCodec(), scenario)
    assert "player colors" in caplog.text
    clean = make_scenario(Edition.EXPANSION)
    assert data == _encode(PlayersCodec(), clean)


# ─────────────────────────────────────────────────────────────
# DIPLOMACY
# ─────────────────────────────────────────────────────────────

def _diplomacy_scenario():
    scenario = make_scenario(Edition.CONQUERORS)
    target = Scenario(Edition.CONQUERORS)
    target.header.player_count = scenario.header.player_count
    target.players = [type(p)() for p in scenario.players]
    return scenario, target


def test_diplomacy_round_trip():
    scenario, target = _diplomacy_scenario()
    _decode(DiplomacyCodec(), _encode(DiplomacyCodec(), scenario), target)
    assert [p.diplomacy for p in target.players] == [p.diplomacy for p in scenario.players]
    assert target.victory == scenario.victory


def test_invalid_stance_is_rejected():
    scenario, target = _diplomacy_scenario()
    data = bytearray(_encode(DiplomacyCodec(), scenario))
    # slot 0: allied flag, u16 count, then the first stance byte
    data[3] = 2
    with pytest.raises(ValueOutOfRange) as exc:
        _decode(DiplomacyCodec(), bytes(data), target)
    assert exc.value.field == "diplomacy"
    assert exc.value.index == 0


def test_diplomacy_vector_length_is_checked_on_encode():
    scenario = make_scenario(Edition.CONQUERORS)
    scenario.players[2].diplomacy.pop()
    with pytest.raises(ValueOutOfRange) as exc:
        _encode(DiplomacyCodec(), scenario)
    assert exc.value.index == 2


# ─────────────────────────────────────────────────────────────
# TRIGGERS
# ─────────────────────────────────────────────────────────────

def test_trigger_display_order_is_applied_on_decode():
    scenario = make_scenario(Edition.CONQUERORS)
    data = _encode(TriggersCodec(), scenario)
    patched = data[:-8] + struct.pack("<ii", 1, 0)
    decoded = _decode(TriggersCodec(), patched, Scenario(Edition.CONQUERORS))
    assert [t.name for t in decoded.triggers] == ["Victory", "Reinforcements"]


def test_trigger_order_must_be_a_permutation():
    scenario = make_scenario(Edition.CONQUERORS)
    data = _encode(TriggersCodec(), scenario)
    patched = data[:-8] + struct.pack("<ii", 0, 0)
    with pytest.raises(ValueOutOfRange) as exc:
        _decode(TriggersCodec(), patched, Scenario(Edition.CONQUERORS))
    assert exc.value.field == "order"


def test_trigger_version_must_match_edition():
    scenario = make_scenario(Edition.CONQUERORS)
    data = _encode(TriggersCodec(), scenario)
    patched = struct.pack("<d", 2.2) + data[8:]
    with pytest.raises(ValueOutOfRange) as exc:
        _decode(TriggersCodec(), patched, Scenario(Edition.CONQUERORS))
    assert exc.value.field == "version"


def test_definitive_triggers_carry_short_description():
    scenario = make_scenario(Edition.DEFINITIVE)
    decoded = _decode(TriggersCodec(), _encode(TriggersCodec(), scenario), Scenario(Edition.DEFINITIVE))
    assert decoded.triggers == scenario.triggers
    assert decoded.triggers[0].short_description == "Help arrives"
    assert decoded.triggers[0].start_time is None


def test_start_time_required_before_short_descriptions():
    scenario = make_scenario(Edition.HD)
    scenario.triggers = [make_trigger(Edition.HD)]
    scenario.triggers[0].start_time = None
    with pytest.raises(MissingRequiredField):
        _encode(TriggersCodec(), scenario)


def test_triggers_section_is_empty_without_support():
    scenario = make_scenario(Edition.EXPANSION)
    assert _encode(TriggersCodec(), scenario) == b""
