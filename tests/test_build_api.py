import hashlib
import json
import os
from datetime import datetime

import pytest

from blorbgen.api import BuildOptions, build_blorb, plan_build, validate_blorb
from blorbgen.packing.errors import UnreadableControlFile, UnreadableResourceFile

WHEN = datetime(2024, 1, 2, 3, 4, 5)

ZCODE_GAME = [
    "; sample game",
    "exec story.z5",
    "pict title title.png",
    "pict map.jpg",
    "snd theme.ogg",
]
ZCODE_FILES = ["story.z5", "title.png", "map.jpg", "theme.ogg"]


def test_build_zcode_game(make_control, tmp_path):
    control = make_control(ZCODE_GAME, resources=ZCODE_FILES)
    res = build_blorb(BuildOptions(control_file=tmp_path / "game", timestamp=WHEN))
    assert res.control_file == control
    assert res.output_file == tmp_path / "game.zblorb"
    assert res.declarations_file == tmp_path / "game.bli"
    data = res.output_file.read_bytes()
    assert res.bytes_written == len(data)
    assert res.chunk_count == 5
    assert res.index_entries == 4
    assert validate_blorb(res.output_file) == []
    bli = res.declarations_file.read_text(encoding="utf-8")
    assert "Constant title 3;\t! Pict: 'title.png'" in bli
    assert "Constant picMap 4;\t! Pict: 'map.jpg'" in bli
    assert "Constant sndTheme 3;\t! Snd: 'theme.ogg'" in bli
    assert "story" not in bli


def test_extension_follows_metadata_and_executable(make_control, tmp_path):
    make_control(["exec story.ulx"], resources=["story.ulx"], name="plain.res")
    make_control(
        ["exec story.ulx", "meta info.ifiction"],
        resources=["info.ifiction"],
        name="meta.res",
    )
    plain = build_blorb(BuildOptions(control_file=tmp_path / "plain.res"))
    meta = build_blorb(BuildOptions(control_file=tmp_path / "meta.res"))
    assert plain.output_file.name == "plain.blb"
    assert meta.output_file.name == "meta.gblorb"


def test_explicit_output_and_short_extension(make_control, tmp_path):
    make_control(ZCODE_GAME, resources=ZCODE_FILES)
    out = tmp_path / "out" / "custom.bin"
    out.parent.mkdir()
    res = build_blorb(
        BuildOptions(control_file=tmp_path / "game", output_path=out, short_extension=True)
    )
    assert res.output_file == out
    short = build_blorb(
        BuildOptions(control_file=tmp_path / "game", short_extension=True, emit_declarations=False)
    )
    assert short.output_file == tmp_path / "game.blb"
    assert short.declarations_file is None
    assert out.read_bytes() == short.output_file.read_bytes()


def test_cover_produces_frontispiece(make_control, tmp_path):
    make_control(
        ["exec story.z5", "cover front.png", "biblio info.ifiction"],
        resources=["story.z5", "front.png", "info.ifiction"],
    )
    catalog, plan = plan_build(tmp_path / "game")
    assert catalog.cover.resource_number == 3
    fspc = plan.chunks[-1]
    assert fspc.type == "Fspc"
    assert fspc.data == (3).to_bytes(4, "big")
    assert fspc.resource_number == 2
    res = build_blorb(BuildOptions(control_file=tmp_path / "game", timestamp=WHEN))
    assert res.output_file.suffix == ".zblorb"
    assert "front" not in res.declarations_file.read_text(encoding="utf-8")


def test_missing_resource_fails_build(make_control, tmp_path):
    make_control(["pict gone.png"])
    with pytest.raises(UnreadableResourceFile):
        build_blorb(BuildOptions(control_file=tmp_path / "game"))
    assert not (tmp_path / "game.zblorb").exists()


def test_index_only_build(make_control, tmp_path):
    make_control(["pict gone.png", "snd theme.ogg"], resources=["theme.ogg"])
    res = build_blorb(
        BuildOptions(control_file=tmp_path / "game", index_only=True, timestamp=WHEN)
    )
    assert res.output_file is None
    assert res.bytes_written == 0
    assert len(res.warnings) == 1
    bli = res.declarations_file.read_text(encoding="utf-8")
    assert "Constant picGone 3;" in bli
    assert "Constant sndTheme 3;" in bli
    assert not list(tmp_path.glob("game.*blorb"))


def test_missing_control_file(tmp_path):
    with pytest.raises(UnreadableControlFile):
        build_blorb(BuildOptions(control_file=tmp_path / "nothing"))


def test_builds_are_identical(make_control, tmp_path):
    make_control(ZCODE_GAME, resources=ZCODE_FILES)
    first = build_blorb(
        BuildOptions(control_file=tmp_path / "game", output_path=tmp_path / "a.blb", timestamp=WHEN)
    )
    second = build_blorb(
        BuildOptions(control_file=tmp_path / "game", output_path=tmp_path / "b.blb", timestamp=WHEN)
    )
    assert first.output_file.read_bytes() == second.output_file.read_bytes()


def test_manifest_not_emitted_by_default(make_control, tmp_path):
    make_control(ZCODE_GAME, resources=ZCODE_FILES)
    build_blorb(BuildOptions(control_file=tmp_path / "game"))
    assert not list(tmp_path.glob("*.json"))


def test_manifest_emitted_when_requested(make_control, tmp_path):
    make_control(ZCODE_GAME, resources=ZCODE_FILES)
    manifest_path = tmp_path / "game.manifest.json"
    res = build_blorb(
        BuildOptions(control_file=tmp_path / "game", manifest_path=manifest_path)
    )
    data = json.loads(manifest_path.read_text())
    blob = res.output_file.read_bytes()
    assert data["file_size"] == len(blob)
    assert data["sha256"] == hashlib.sha256(blob).hexdigest()
    assert data["index_entries"] == 4
    assert data["counts"] == {"Exec": 1, "Pict": 2, "Snd": 1}
    assert data["control_file"] == "game.res"
    chunks = data["chunks"]
    assert chunks[0]["type"] == "RIdx"
    assert chunks[0]["offset"] == 12
    for c in chunks[1:]:
        assert blob[c["offset"] : c["offset"] + 4] == c["type"].encode("ascii")
    assert "warnings" not in data


def test_named_resources_and_total_size(make_control, tmp_path):
    make_control(
        ["pict myPic cover.png", "snd mySound theme.ogg", "exec story.z8"],
        resources=["cover.png", "theme.ogg", "story.z8"],
    )
    catalog, plan = plan_build(tmp_path / "game")
    assert [c.resource_number for c in catalog.chunks] == [3, 3, 0]
    assert [d.name for d in catalog.declarations] == ["myPic", "mySound"]
    res = build_blorb(BuildOptions(control_file=tmp_path / "game", timestamp=WHEN))
    data = res.output_file.read_bytes()
    size_field = int.from_bytes(data[4:8], "big")
    assert size_field == 4 + sum(c.stored_size for c in plan.chunks)
    assert size_field == len(data) - 8


def test_non_utf8_control_list_round_trips_names(tmp_path):
    # Latin-1 control list naming a Latin-1 file name.
    (tmp_path / os.fsdecode(b"caf\xe9.png")).write_bytes(b"png!")
    (tmp_path / "game.res").write_bytes(b"pict caf\xe9.png\n")
    res = build_blorb(BuildOptions(control_file=tmp_path / "game", timestamp=WHEN))
    assert validate_blorb(res.output_file) == []
    bli = res.declarations_file.read_bytes()
    assert b"Constant picCaf\xe9 3;\t! Pict: 'caf\xe9.png'\n" in bli
