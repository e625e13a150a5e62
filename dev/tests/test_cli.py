import json
import logging

import pytest

from conftest import make_scenario
from scxforge.cli import format_yaml, main
from scxforge.formats.scx.edition import Edition
from scxforge.formats.scx.scenario_file import read_file, save


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger = logging.getLogger("scxforge")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def hd_file(tmp_path):
    path = tmp_path / "river.scx"
    path.write_bytes(save(make_scenario(Edition.HD)))
    return path


def _run(capsys, *argv):
    code = main(list(argv))
    out, err = capsys.readouterr()
    return code, out, err


def test_inspect_table(capsys, hd_file):
    code, out, _ = _run(capsys, "--config", str(hd_file.parent / "none.json"), "inspect", str(hd_file))
    assert code == 0
    assert "Edition: hd (hd)" in out
    assert "Ælfred" in out
    assert "requires age_of_kings, age_of_conquerors" in out
    assert "PLAYERS (2 active)" in out


def test_inspect_json(capsys, hd_file):
    code, out, _ = _run(capsys, "--format", "json", "inspect", str(hd_file))
    assert code == 0
    info = json.loads(out)
    assert info["token"] == "hd"
    assert info["map"] == {"width": 6, "height": 4}
    assert info["triggers"] == 2
    assert info["ai_files"] == ["rush.ai"]
    assert info["active_players"] == 2
    assert info["dlc"]["data_set"] == "base_game"
    assert info["dlc"]["dependencies"] == ["age_of_kings", "age_of_conquerors"]


def test_inspect_yaml(capsys, hd_file):
    code, out, _ = _run(capsys, "--format", "yaml", "inspect", str(hd_file))
    assert code == 0
    assert "token: \"hd\"" in out
    assert "  - slot: 1" in out


def test_convert_with_remap(capsys, hd_file, tmp_path):
    out_path = tmp_path / "river_wk.scx"
    code, out, _ = _run(capsys, "--format", "json", "convert", str(hd_file), str(out_path),
                        "--to", "wk", "--remap")
    assert code == 0
    info = json.loads(out)
    assert info["source"] == "hd"
    assert info["target"] == "wk"
    assert info["remapped"]["trigger_properties"] > 0
    assert read_file(out_path).edition is Edition.COMMUNITY_PATCHED


def test_remap_only_applies_to_community_patch_target(capsys, tmp_path):
    scenario = make_scenario(Edition.HD)
    scenario.players[0].objects[0].object_type = 1001
    src = tmp_path / "organ.scx"
    src.write_bytes(save(scenario))

    out_path = tmp_path / "organ_de.scx"
    code, out, _ = _run(capsys, "--format", "json", "convert", str(src), str(out_path),
                        "--to", "de", "--remap")
    assert code == 0
    assert json.loads(out)["remapped"] is None
    assert read_file(out_path).players[0].objects[0].object_type == 1001

    out_path = tmp_path / "organ_wk.scx"
    code, _, _ = _run(capsys, "convert", str(src), str(out_path), "--to", "wk", "--remap")
    assert code == 0
    assert read_file(out_path).players[0].objects[0].object_type == 106


def test_convert_reports_lossy(capsys, hd_file, tmp_path):
    code, out, _ = _run(capsys, "--format", "json", "convert", str(hd_file),
                        str(tmp_path / "old.scx"), "--to", "aoe")
    assert code == 0
    info = json.loads(out)
    assert info["lossy"] is True
    assert info["notes"]


def test_convert_uses_settings_target(capsys, hd_file, tmp_path):
    config = tmp_path / "settings.json"
    config.write_text(json.dumps({"default_target": "aoc", "create_backup": True}))
    out_path = tmp_path / "out.scx"
    out_path.write_bytes(b"previous")
    code, _, _ = _run(capsys, "--config", str(config), "convert", str(hd_file), str(out_path))
    assert code == 0
    assert read_file(out_path).edition is Edition.CONQUERORS
    assert (tmp_path / "out.scx.bak").read_bytes() == b"previous"


def test_convert_failure_exit_code(capsys, tmp_path):
    scenario = make_scenario(Edition.CONQUERORS)
    scenario.players[7].active = True
    src = tmp_path / "big.scx"
    src.write_bytes(save(scenario))
    code, _, err = _run(capsys, "convert", str(src), str(tmp_path / "small.scx"), "--to", "aoe")
    assert code == 1
    assert "ERROR" in err
    assert not (tmp_path / "small.scx").exists()


def test_load_failure_exit_code(capsys, tmp_path):
    bad = tmp_path / "bad.scx"
    bad.write_bytes(b"nope")
    code, _, err = _run(capsys, "inspect", str(bad))
    assert code == 1
    assert "Unknown edition tag" in err


def test_editions(capsys):
    code, out, _ = _run(capsys, "--format", "json", "editions")
    assert code == 0
    rows = json.loads(out)["editions"]
    assert [r["token"] for r in rows] == ["aoe", "ror", "aoc", "hd", "wk", "de"]
    assert rows[0]["max_players"] == 4


def test_export_bitmap(capsys, hd_file, tmp_path):
    png = tmp_path / "preview.png"
    code, _, _ = _run(capsys, "export-bitmap", str(hd_file), str(png))
    assert code == 0
    assert png.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_export_bitmap_without_preview(capsys, tmp_path):
    src = tmp_path / "old.scx"
    src.write_bytes(save(make_scenario(Edition.EXPANSION)))
    code, _, err = _run(capsys, "export-bitmap", str(src), str(tmp_path / "x.png"))
    assert code == 1
    assert "no preview" in err


def test_bad_log_level(capsys):
    code, _, err = _run(capsys, "--log-level", "chatty", "editions")
    assert code == 2


def test_format_yaml_nesting():
    text = format_yaml({"a": 1, "b": {"c": None}, "d": [{"e": True}], "f": []})
    assert text.splitlines() == ["a: 1", "b:", "  c: null", "d:", "  - e: true", "f: []"]
