import json

import pytest

from tessera.cli import main
from tessera.io import load_map
from tessera.map import Layer


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("TESSERA_CONFIG", raising=False)
    for name in ("TESSERA_MAP_WIDTH", "TESSERA_MAP_HEIGHT", "TESSERA_TILE_SIZE", "TESSERA_CAVE_BATCH_SIZE"):
        monkeypatch.delenv(name, raising=False)


def test_cave_then_info(tmp_path, capsys):
    out = tmp_path / "cave.json"
    rc = main(["cave", "--out", str(out), "--width", "20", "--height", "15", "--seed", "7"])
    assert rc == 0
    assert "Wrote 20x15 cave to" in capsys.readouterr().out

    portable = load_map(out)
    assert portable.name == "cave"
    assert portable.grid.count(Layer.GROUND) == 20 * 15
    assert portable.grid.count(Layer.DECORATION) == 0
    assert portable.grid.get(Layer.GROUND, 0, 0).frame == 1  # border is wall

    assert main(["info", str(out)]) == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["width"] == 20 and summary["height"] == 15
    assert summary["tilesets"] == ["ts_0"]
    assert summary["cells"] == {"ground": 300, "decoration": 0}


def test_same_seed_writes_identical_maps(tmp_path):
    a, b = tmp_path / "a.json", tmp_path / "b.json"
    main(["cave", "--out", str(a), "--width", "12", "--height", "9", "--seed", "level-3"])
    main(["cave", "--out", str(b), "--width", "12", "--height", "9", "--seed", "level-3"])
    assert a.read_text(encoding="utf-8") == b.read_text(encoding="utf-8")


def test_preview_prints_ascii(tmp_path, capsys):
    main(["cave", "--out", str(tmp_path / "p.json"), "--width", "6", "--height", "4", "--seed", "1", "--preview"])
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "######"
    assert len(lines) == 5


def test_config_file_supplies_map_size(tmp_path, capsys):
    cfg = tmp_path / "tessera.yaml"
    cfg.write_text("map_width: 8\nmap_height: 5\n", encoding="utf-8")
    out = tmp_path / "sized.json"
    assert main(["--config", str(cfg), "cave", "--out", str(out), "--seed", "2"]) == 0
    assert load_map(out).grid.width == 8


def test_info_on_missing_file_fails(tmp_path, capsys):
    assert main(["info", str(tmp_path / "missing.json")]) == 1
    assert "error:" in capsys.readouterr().err


def test_info_on_wrong_version_fails(tmp_path, capsys):
    path = tmp_path / "old.json"
    path.write_text(json.dumps({"version": "0.1"}), encoding="utf-8")
    assert main(["info", str(path)]) == 1
    assert "version" in capsys.readouterr().err


def test_info_on_float_cell_fails_cleanly(tmp_path, capsys):
    out = tmp_path / "cave.json"
    main(["cave", "--out", str(out), "--width", "5", "--height", "4", "--seed", "3"])
    doc = json.loads(out.read_text(encoding="utf-8"))
    doc["layers"]["ground"][0][0] = [0.0, 1]
    out.write_text(json.dumps(doc), encoding="utf-8")
    capsys.readouterr()
    assert main(["info", str(out)]) == 1
    assert "schema validation" in capsys.readouterr().err
